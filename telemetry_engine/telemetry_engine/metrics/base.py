"""Abstract base classes for metric implementations.

Every metric exposes a stable identifier, the consent category it belongs
to, the ordered list of fields it can report, and a way to recompute and
snapshot its current value.  The category is part of the metric's own
contract rather than looked up from external metadata.
"""

from __future__ import annotations

import abc
from collections.abc import Mapping
from typing import Any, ClassVar

from telemetry_engine.models.telemetry import MetricEvent


class Metric(abc.ABC):
    """Abstract base for all metrics.

    Subclasses must implement :attr:`identifier`, :attr:`category_id`,
    :attr:`field_names`, :meth:`refresh` and :meth:`snapshot`.  A metric's
    identity never changes after registration; only its value does.
    """

    @property
    @abc.abstractmethod
    def identifier(self) -> str:
        """Stable identifier used for registry lookup."""

    @property
    @abc.abstractmethod
    def category_id(self) -> str:
        """Consent category that gates whether this metric is sent at all."""

    @property
    @abc.abstractmethod
    def field_names(self) -> list[str]:
        """Ordered names of the fields this metric can report."""

    @abc.abstractmethod
    def refresh(self) -> None:
        """Recompute the metric's internal value."""

    @abc.abstractmethod
    def snapshot(self) -> MetricEvent:
        """Return an immutable snapshot of the current value."""


class FieldMetric(Metric):
    """Metric declared through class attributes.

    Subclasses set ``metric_id``, ``category`` and ``fields`` and implement
    :meth:`collect`.  :meth:`refresh` caches the collected values and
    :meth:`snapshot` reports only the declared fields.  ``category`` defaults
    to ``metric_id`` when left empty.

    Example::

        class ModulesMetric(FieldMetric):
            metric_id = "modules"
            fields = ("modules",)

            def collect(self):
                return {"modules": sorted(loaded_modules())}
    """

    metric_id: ClassVar[str] = ""
    category: ClassVar[str] = ""
    fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self) -> None:
        if not self.metric_id:
            raise ValueError(f"{type(self).__name__} must declare a metric_id")
        self._values: dict[str, Any] = {}

    @property
    def identifier(self) -> str:
        return self.metric_id

    @property
    def category_id(self) -> str:
        return self.category or self.metric_id

    @property
    def field_names(self) -> list[str]:
        return list(self.fields)

    @abc.abstractmethod
    def collect(self) -> Mapping[str, Any]:
        """Measure and return the current field values."""

    def refresh(self) -> None:
        collected = self.collect()
        self._values = {name: collected[name] for name in self.fields if name in collected}

    def snapshot(self) -> MetricEvent:
        return MetricEvent(
            metric_id=self.identifier,
            category=self.category_id,
            payload=dict(self._values),
        )
