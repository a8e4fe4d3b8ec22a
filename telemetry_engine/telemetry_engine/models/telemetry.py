"""Telemetry models for metric snapshots and gameplay aggregates.

``MetricEvent`` is the immutable snapshot a metric produces at refresh time
and the envelope handed to event sinks.  ``GamePlayStats`` holds the running
per-player totals the scheduler accumulates tick by tick.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MetricEvent(BaseModel):
    """Timestamped snapshot of a single metric's field values.

    Instances are frozen.  Consent filtering produces a new event via
    :meth:`only_fields` rather than editing the snapshot in place.
    """

    model_config = ConfigDict(frozen=True)

    metric_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the metric that produced this snapshot.",
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Consent category the metric belongs to.",
    )
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Field name to value mapping captured at refresh time.",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="UTC timestamp when the snapshot was taken.",
    )

    def only_fields(self, names: Iterable[str]) -> MetricEvent:
        """Return a copy of this event restricted to *names*."""
        keep = set(names)
        return self.model_copy(update={"payload": {k: v for k, v in self.payload.items() if k in keep}})


class GamePlayStats(BaseModel):
    """Running gameplay totals for the local player.

    Both totals only ever grow.  The scheduler is the sole writer; the host's
    stats store persists the model after every change.
    """

    model_config = ConfigDict(validate_assignment=True)

    distance_traveled: float = Field(
        default=0.0,
        ge=0.0,
        description="Total distance moved by the player, in world units.",
    )
    play_time_minutes: float = Field(
        default=0.0,
        ge=0.0,
        description="Total play time, in minutes.",
    )
