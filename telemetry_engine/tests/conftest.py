"""Shared fixtures for telemetry engine tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from telemetry_engine.config import TelemetrySettings
from telemetry_engine.metrics.base import Metric
from telemetry_engine.models.telemetry import MetricEvent


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSink:
    """Event sink that keeps every event it receives."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, MetricEvent]] = []

    def send(self, namespace: str, event: MetricEvent) -> None:
        self.sent.append((namespace, event))

    @property
    def metric_ids(self) -> list[str]:
        return [event.metric_id for _, event in self.sent]


class StaticMetric(Metric):
    """Metric with fixed values that counts refreshes."""

    def __init__(self, identifier: str, category: str | None = None, values: dict[str, Any] | None = None) -> None:
        self._identifier = identifier
        self._category = category or identifier
        self._values = dict(values or {})
        self.refresh_count = 0

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def category_id(self) -> str:
        return self._category

    @property
    def field_names(self) -> list[str]:
        return list(self._values)

    def refresh(self) -> None:
        self.refresh_count += 1

    def snapshot(self) -> MetricEvent:
        return MetricEvent(metric_id=self._identifier, category=self._category, payload=dict(self._values))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_metric() -> Callable[..., StaticMetric]:
    return StaticMetric


@pytest.fixture
def settings() -> TelemetrySettings:
    return TelemetrySettings(enabled=True, _env_file=None)  # type: ignore[call-arg]
