"""Metric capability interface, registry, and built-in gameplay metric.

Quick start::

    from telemetry_engine.metrics import FieldMetric, MetricRegistry

    class ModulesMetric(FieldMetric):
        metric_id = "modules"
        fields = ("modules",)

        def collect(self):
            return {"modules": ["core", "climate"]}

    registry = MetricRegistry()
    registry.register(ModulesMetric())
    registry.refresh_all()
"""

from telemetry_engine.metrics.base import FieldMetric, Metric
from telemetry_engine.metrics.catalog import BOOTSTRAP_METRICS, SHUTDOWN_METRICS
from telemetry_engine.metrics.gameplay import GamePlayMetric
from telemetry_engine.metrics.registry import MetricRegistry

__all__ = [
    "BOOTSTRAP_METRICS",
    "FieldMetric",
    "GamePlayMetric",
    "Metric",
    "MetricRegistry",
    "SHUTDOWN_METRICS",
]
