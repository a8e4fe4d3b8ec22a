"""Consent-gated dispatch of metric snapshots to an event sink.

Category consent decides whether a metric is sent at all; field consent
decides which values populate the payload.  A category that is disabled or
not yet decided produces no send.  Within an enabled category, fields
without an explicit grant are left out of the payload.
"""

from __future__ import annotations

import logging

from telemetry_engine.metrics.base import Metric
from telemetry_engine.models.telemetry import MetricEvent
from telemetry_engine.telemetry.consent import ConsentStore
from telemetry_engine.telemetry.sinks import EventSink

logger = logging.getLogger(__name__)


def filter_event(event: MetricEvent, consent: ConsentStore) -> MetricEvent:
    """Return a copy of *event* holding only explicitly granted fields."""
    return event.only_fields(name for name in event.payload if consent.is_allowed(name))


class MetricDispatcher:
    """Send consented metric snapshots to a sink.

    Parameters
    ----------
    sink:
        Destination for outbound events.  Treated as fire-and-forget.
    namespace:
        Tracker namespace passed with every event.
    """

    def __init__(self, sink: EventSink, namespace: str) -> None:
        self._sink = sink
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def dispatch(self, metric: Metric, consent: ConsentStore) -> bool:
        """Send *metric*'s current snapshot if its category is consented.

        Exactly one send attempt is made when the category is granted, none
        otherwise.  Sink errors are logged and not propagated.

        Returns
        -------
        bool
            True if a send was attempted.
        """
        if not consent.is_allowed(metric.category_id):
            logger.debug(
                "Skipping metric %s: category %s not consented (%s)",
                metric.identifier,
                metric.category_id,
                consent.get(metric.category_id),
            )
            return False

        try:
            snapshot = metric.snapshot()
        except Exception:
            logger.warning("Failed to snapshot metric %s", metric.identifier, exc_info=True)
            return False

        event = filter_event(snapshot, consent)
        try:
            self._sink.send(self._namespace, event)
        except Exception:
            logger.warning(
                "Event sink failed for metric %s",
                metric.identifier,
                exc_info=True,
                extra={"metric_id": metric.identifier},
            )
        else:
            logger.debug("Dispatched metric %s with %d field(s)", metric.identifier, len(event.payload))
        return True

    def close(self) -> None:
        """Drain and stop the sink, if it supports closing."""
        close = getattr(self._sink, "close", None)
        if close is None:
            return
        try:
            close()
        except Exception:
            logger.warning("Failed to close event sink", exc_info=True)
