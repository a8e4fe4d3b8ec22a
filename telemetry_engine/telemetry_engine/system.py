"""Assemble a ready-to-use telemetry scheduler from settings."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from telemetry_engine.config import TelemetrySettings
from telemetry_engine.metrics.catalog import GAMEPLAY
from telemetry_engine.metrics.gameplay import GamePlayMetric
from telemetry_engine.metrics.registry import MetricRegistry
from telemetry_engine.telemetry.consent import ConsentStore
from telemetry_engine.telemetry.dispatcher import MetricDispatcher
from telemetry_engine.telemetry.scheduler import TelemetryScheduler
from telemetry_engine.telemetry.sinks import EventSink, build_sink
from telemetry_engine.telemetry.stats import FileStatsStore, InMemoryStatsStore, StatsStore

logger = logging.getLogger(__name__)


def build_telemetry_system(
    settings: TelemetrySettings,
    registry: MetricRegistry,
    stats_store: StatsStore | None = None,
    sink: EventSink | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> TelemetryScheduler:
    """Wire a :class:`TelemetryScheduler` from *settings*.

    Consent bindings are loaded from ``settings.consent_file`` when set.
    The stats store defaults to ``settings.stats_file`` (or memory) and the
    sink to :func:`build_sink`.  A :class:`GamePlayMetric` is registered if
    the registry does not already provide a gameplay metric.
    """
    if settings.consent_file is not None:
        consent = ConsentStore.load(settings.consent_file)
    else:
        consent = ConsentStore()

    if stats_store is None:
        if settings.stats_file is not None:
            stats_store = FileStatsStore(settings.stats_file)
        else:
            stats_store = InMemoryStatsStore()

    if GAMEPLAY not in registry:
        registry.register(GamePlayMetric(stats_store))

    dispatcher = MetricDispatcher(sink if sink is not None else build_sink(settings), settings.namespace)
    logger.debug("Built telemetry system with %d metric(s)", len(registry))

    return TelemetryScheduler(
        registry=registry,
        consent=consent,
        dispatcher=dispatcher,
        stats_store=stats_store,
        settings=settings,
        clock=clock,
    )
