"""Gameplay metric reporting the scheduler's running aggregates."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from telemetry_engine.metrics.base import FieldMetric
from telemetry_engine.metrics.catalog import GAMEPLAY
from telemetry_engine.models.telemetry import GamePlayStats
from telemetry_engine.telemetry.stats import StatsStore


class GamePlayMetric(FieldMetric):
    """Distance traveled and play time, read from the stats store."""

    metric_id = GAMEPLAY
    category = GAMEPLAY
    fields = ("distance_traveled", "play_time_minutes")

    def __init__(self, stats_store: StatsStore) -> None:
        super().__init__()
        self._stats_store = stats_store

    def collect(self) -> Mapping[str, Any]:
        stats = self._stats_store.load() or GamePlayStats()
        return {
            "distance_traveled": stats.distance_traveled,
            "play_time_minutes": stats.play_time_minutes,
        }
