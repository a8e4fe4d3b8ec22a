"""Host-driven telemetry scheduler.

The :class:`TelemetryScheduler` is driven entirely by the host's lifecycle
callbacks and per-frame :meth:`~TelemetryScheduler.tick`.  It owns:

1. **Gameplay aggregation**: distance traveled and play time accumulated
   from per-tick player state, persisted through a :class:`StatsStore`.
2. **Periodic refresh**: every ``refresh_interval_seconds`` it recomputes
   all metrics and reconciles consent so metrics loaded mid-session pick up
   the user's current global preference.
3. **Lifecycle dispatch**: bootstrap metrics on :meth:`start`, terminal
   metrics on :meth:`shutdown`, both only when telemetry is enabled.

All state is mutated from the host thread only.  None of the lifecycle
methods raise to the host.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Sequence
from enum import Enum

from telemetry_engine.config import TelemetrySettings
from telemetry_engine.metrics.catalog import BOOTSTRAP_METRICS, SHUTDOWN_METRICS
from telemetry_engine.metrics.registry import MetricRegistry
from telemetry_engine.models.telemetry import GamePlayStats
from telemetry_engine.telemetry.consent import ConsentStore
from telemetry_engine.telemetry.dispatcher import MetricDispatcher
from telemetry_engine.telemetry.stats import StatsStore

logger = logging.getLogger(__name__)

Position = tuple[float, float, float]


class SchedulerState(str, Enum):
    """Lifecycle state of the scheduler."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINAL = "terminal"


class TelemetryScheduler:
    """Orchestrates metric refresh, consent reconciliation and dispatch.

    Parameters
    ----------
    registry:
        Active metrics.
    consent:
        The session's consent bindings.  Saved after each reconciliation.
    dispatcher:
        Sends consented snapshots to the event sink.
    stats_store:
        Persistence for the gameplay aggregate.
    settings:
        Source of the global telemetry flag and refresh interval.  The flag
        is read at each use, so a change mid-session applies to the next
        reconciliation or dispatch.
    clock:
        Monotonic clock in seconds.  Defaults to :func:`time.monotonic`.
    bootstrap_metrics:
        Metric identifiers dispatched once by :meth:`start`.
    shutdown_metrics:
        Metric identifiers dispatched once by :meth:`shutdown`.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        consent: ConsentStore,
        dispatcher: MetricDispatcher,
        stats_store: StatsStore,
        settings: TelemetrySettings,
        clock: Callable[[], float] = time.monotonic,
        bootstrap_metrics: Sequence[str] = BOOTSTRAP_METRICS,
        shutdown_metrics: Sequence[str] = SHUTDOWN_METRICS,
    ) -> None:
        self._registry = registry
        self._consent = consent
        self._dispatcher = dispatcher
        self._stats_store = stats_store
        self._settings = settings
        self._clock = clock
        self._bootstrap_metrics = tuple(bootstrap_metrics)
        self._shutdown_metrics = tuple(shutdown_metrics)

        self._state = SchedulerState.UNINITIALIZED
        self._stats: GamePlayStats | None = None
        self._previous_position: Position | None = None
        self._last_refresh: float = 0.0
        self._last_play_time_sample: float = 0.0

    # -- Read-only state -----------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def stats(self) -> GamePlayStats | None:
        """The gameplay aggregate, once the player has been valid."""
        return self._stats

    @property
    def telemetry_enabled(self) -> bool:
        return self._settings.enabled

    # -- Lifecycle -----------------------------------------------------------

    def initialise(self) -> None:
        """Reconcile consent against the registry and arm the refresh timer."""
        if not self._expect_state("initialise", SchedulerState.UNINITIALIZED):
            return
        self._reconcile_consent()
        self._last_refresh = self._clock()
        self._state = SchedulerState.READY
        logger.info(
            "Telemetry initialised: %d metric(s), %d consent binding(s), enabled=%s",
            len(self._registry),
            len(self._consent),
            self.telemetry_enabled,
        )

    def start(self) -> None:
        """Send the bootstrap metrics and begin play-time tracking."""
        if not self._expect_state("start", SchedulerState.READY):
            return
        self._state = SchedulerState.RUNNING
        if self.telemetry_enabled:
            self._dispatch_all(self._bootstrap_metrics)
        self._last_play_time_sample = self._clock()

    def tick(self, delta: float, player_valid: bool, player_position: Sequence[float] | None = None) -> None:
        """Advance aggregates and run the periodic refresh.

        Parameters
        ----------
        delta:
            Seconds since the previous frame, as reported by the host.
            Aggregates use the injected clock rather than this value.
        player_valid:
            Whether the local player currently exists in the world.
        player_position:
            The player's ``(x, y, z)`` position when valid.
        """
        if self._state is not SchedulerState.RUNNING:
            logger.debug("Ignoring tick in state %s", self._state.value)
            return

        if player_valid and player_position is not None:
            position: Position = (
                float(player_position[0]),
                float(player_position[1]),
                float(player_position[2]),
            )
            if not all(math.isfinite(coordinate) for coordinate in position):
                logger.debug("Ignoring non-finite player position %s", position)
            elif self._stats is None or self._previous_position is None:
                # First valid frame: there is no baseline to measure from.
                self._stats = self._load_stats()
                self._previous_position = position
            else:
                self._record_distance_traveled(self._stats, self._previous_position, position)
                self._record_play_time(self._stats)

        self._refresh_metrics_periodic()

    def shutdown(self) -> None:
        """Send the terminal metrics, drain the sink and persist consent."""
        if not self._expect_state("shutdown", SchedulerState.RUNNING, SchedulerState.READY):
            return
        self._state = SchedulerState.SHUTTING_DOWN
        if self.telemetry_enabled:
            self._dispatch_all(self._shutdown_metrics)
        self._dispatcher.close()
        self._save_consent()
        self._state = SchedulerState.TERMINAL
        logger.info("Telemetry shut down")

    # -- Internals -----------------------------------------------------------

    def _expect_state(self, operation: str, *allowed: SchedulerState) -> bool:
        if self._state in allowed:
            return True
        logger.warning("Ignoring %s() in state %s", operation, self._state.value)
        return False

    def _load_stats(self) -> GamePlayStats:
        stats = self._stats_store.load()
        if stats is None:
            stats = GamePlayStats()
            self._save_stats(stats)
        return stats

    def _record_distance_traveled(self, stats: GamePlayStats, previous: Position, position: Position) -> None:
        stats.distance_traveled += math.dist(position, previous)
        self._previous_position = position
        self._save_stats(stats)

    def _record_play_time(self, stats: GamePlayStats) -> None:
        now = self._clock()
        stats.play_time_minutes += max(now - self._last_play_time_sample, 0.0) / 60.0
        self._last_play_time_sample = now
        self._save_stats(stats)

    def _save_stats(self, stats: GamePlayStats) -> None:
        try:
            self._stats_store.save(stats)
        except OSError:
            logger.warning("Failed to persist gameplay stats", exc_info=True)

    def _refresh_metrics_periodic(self) -> None:
        now = self._clock()
        if now - self._last_refresh <= self._settings.refresh_interval_seconds:
            return
        self._registry.refresh_all()
        self._last_refresh = now
        self._reconcile_consent()

    def _reconcile_consent(self) -> None:
        self._consent.reconcile(self._registry.get_all(), default=self.telemetry_enabled)
        self._save_consent()

    def _save_consent(self) -> None:
        try:
            self._consent.save()
        except OSError:
            logger.warning("Failed to save consent bindings to %s", self._consent.path, exc_info=True)

    def _dispatch_all(self, identifiers: Sequence[str]) -> None:
        for identifier in identifiers:
            metric = self._registry.get(identifier)
            if metric is None:
                logger.debug("Metric %s not registered; skipping dispatch", identifier)
                continue
            self._dispatcher.dispatch(metric, self._consent)
