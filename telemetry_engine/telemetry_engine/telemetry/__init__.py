"""Consent tracking, metric dispatch, event sinks, and the tick scheduler."""

from __future__ import annotations

from telemetry_engine.telemetry.consent import ConsentStore
from telemetry_engine.telemetry.dispatcher import MetricDispatcher, filter_event
from telemetry_engine.telemetry.scheduler import SchedulerState, TelemetryScheduler
from telemetry_engine.telemetry.sinks import (
    EventSink,
    HttpEventSink,
    JsonlEventSink,
    LoggingEventSink,
    build_sink,
)
from telemetry_engine.telemetry.stats import FileStatsStore, InMemoryStatsStore, StatsStore

__all__ = [
    "ConsentStore",
    "EventSink",
    "FileStatsStore",
    "HttpEventSink",
    "InMemoryStatsStore",
    "JsonlEventSink",
    "LoggingEventSink",
    "MetricDispatcher",
    "SchedulerState",
    "StatsStore",
    "TelemetryScheduler",
    "build_sink",
    "filter_event",
]
