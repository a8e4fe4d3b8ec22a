"""Domain models for the telemetry engine."""

from telemetry_engine.models.telemetry import GamePlayStats, MetricEvent

__all__ = [
    "GamePlayStats",
    "MetricEvent",
]
