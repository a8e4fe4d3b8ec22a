"""Metric registry for managing the active set of metrics.

Metrics are registered explicitly by their producers and looked up by
identifier.  A missing identifier is a routine condition (the metric may
simply not be loaded in the current configuration), so lookups return
``None`` rather than raising.
"""

from __future__ import annotations

import logging

from telemetry_engine.metrics.base import Metric

logger = logging.getLogger(__name__)


class MetricRegistry:
    """Registry of metric implementations keyed by identifier.

    Registration order is preserved so that :meth:`get_all` and consent
    reconciliation visit metrics deterministically.
    """

    def __init__(self) -> None:
        self._metrics: dict[str, Metric] = {}

    def register(self, metric: Metric) -> None:
        """Register a metric.

        Parameters
        ----------
        metric:
            The metric instance to register.  Its ``identifier`` determines
            the key under which it is stored.

        Raises
        ------
        ValueError
            If a metric with the same identifier is already registered.
        """
        if metric.identifier in self._metrics:
            raise ValueError(f"Metric {metric.identifier} is already registered.")
        self._metrics[metric.identifier] = metric
        logger.debug("Registered metric: %s (category=%s)", metric.identifier, metric.category_id)

    def get(self, identifier: str) -> Metric | None:
        """Look up a metric by identifier.

        Returns ``None`` if the identifier is not registered.
        """
        return self._metrics.get(identifier)

    def get_all(self) -> list[Metric]:
        """Return all registered metrics in registration order."""
        return list(self._metrics.values())

    def refresh_all(self) -> int:
        """Recompute every registered metric.

        A metric whose refresh raises is logged and skipped; the remaining
        metrics are still refreshed.

        Returns
        -------
        int
            Number of metrics refreshed successfully.
        """
        refreshed = 0
        for metric in self._metrics.values():
            try:
                metric.refresh()
            except Exception:
                logger.warning("Failed to refresh metric %s", metric.identifier, exc_info=True)
                continue
            refreshed += 1
        logger.debug("Refreshed %d/%d metrics", refreshed, len(self._metrics))
        return refreshed

    def __len__(self) -> int:
        return len(self._metrics)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._metrics
