"""Tests for event sinks."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

import httpx
import pytest

from telemetry_engine.config import TelemetrySettings
from telemetry_engine.models.telemetry import MetricEvent
from telemetry_engine.telemetry.sinks import (
    HttpEventSink,
    JsonlEventSink,
    LoggingEventSink,
    build_sink,
)


def _event(metric_id: str = "env", **payload) -> MetricEvent:
    return MetricEvent(metric_id=metric_id, category=metric_id, payload=payload)


# ---------------------------------------------------------------------------
# JsonlEventSink
# ---------------------------------------------------------------------------


class TestJsonlEventSink:
    """Verify file-based event sink."""

    def test_writes_jsonl(self, tmp_path: Path) -> None:
        sink = JsonlEventSink(tmp_path / "events.jsonl")
        sink.send("game", _event("env", os="linux"))
        sink.send("game", _event("gameplay", distance_traveled=5.0))

        lines = (tmp_path / "events.jsonl").read_text(encoding="utf-8").strip().split("\n")
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["namespace"] == "game"
        assert first["event"]["metric_id"] == "env"
        assert first["event"]["payload"] == {"os": "linux"}
        assert json.loads(lines[1])["event"]["payload"]["distance_traveled"] == 5.0

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        path = tmp_path / "a" / "b" / "events.jsonl"
        JsonlEventSink(path).send("game", _event())
        assert path.exists()

    def test_concurrent_sends(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        sink = JsonlEventSink(path)

        def _send(i: int) -> None:
            for _ in range(20):
                sink.send("game", _event(f"m{i}"))

        threads = [threading.Thread(target=_send, args=(i,)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lines = path.read_text(encoding="utf-8").strip().split("\n")
        assert len(lines) == 100
        for line in lines:
            json.loads(line)


# ---------------------------------------------------------------------------
# LoggingEventSink
# ---------------------------------------------------------------------------


class TestLoggingEventSink:
    def test_logs_event(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="telemetry_engine.telemetry.sinks"):
            LoggingEventSink().send("game", _event("env", os="linux"))
        assert "[game] env" in caplog.text
        assert '"os": "linux"' in caplog.text


# ---------------------------------------------------------------------------
# HttpEventSink
# ---------------------------------------------------------------------------


class TestHttpEventSink:
    """Verify the background HTTP sink with a mock transport."""

    def test_posts_events(self) -> None:
        received: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(json.loads(request.content))
            return httpx.Response(204)

        sink = HttpEventSink(
            "https://collector.example.com/events",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        sink.send("game", _event("env", os="linux"))
        sink.send("game", _event("gameplay", distance_traveled=1.5))
        sink.close()

        assert [r["event"]["metric_id"] for r in received] == ["env", "gameplay"]
        assert received[0]["namespace"] == "game"
        assert sink.delivered_count == 2
        assert sink.failed_count == 0

    def test_server_error_is_counted_not_raised(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        sink = HttpEventSink(
            "https://collector.example.com/events",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        sink.send("game", _event())
        sink.close()

        assert sink.delivered_count == 0
        assert sink.failed_count == 1

    def test_connection_error_is_counted(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        sink = HttpEventSink(
            "https://collector.example.com/events",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        sink.send("game", _event())
        sink.close()

        assert sink.failed_count == 1

    def test_unexpected_error_does_not_stop_worker(self) -> None:
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                raise RuntimeError("malformed response")
            return httpx.Response(200)

        sink = HttpEventSink(
            "https://collector.example.com/events",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        sink.send("game", _event("env"))
        sink.send("game", _event("gameplay"))
        sink.close()

        assert sink.failed_count == 1
        assert sink.delivered_count == 1

    def test_send_does_not_block_and_drops_when_full(self) -> None:
        release = threading.Event()

        def handler(request: httpx.Request) -> httpx.Response:
            release.wait(timeout=5.0)
            return httpx.Response(200)

        sink = HttpEventSink(
            "https://collector.example.com/events",
            max_queue_size=1,
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        for _ in range(10):
            sink.send("game", _event())

        assert sink.dropped_count >= 8
        release.set()
        sink.close()
        assert sink.delivered_count + sink.dropped_count == 10

    def test_close_is_idempotent(self) -> None:
        sink = HttpEventSink(
            "https://collector.example.com/events",
            client=httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200))),
        )
        sink.close()
        sink.close()


# ---------------------------------------------------------------------------
# build_sink
# ---------------------------------------------------------------------------


class TestBuildSink:
    def test_defaults_to_logging(self) -> None:
        settings = TelemetrySettings(_env_file=None)  # type: ignore[call-arg]
        assert isinstance(build_sink(settings), LoggingEventSink)

    def test_events_file_selects_jsonl(self, tmp_path: Path) -> None:
        settings = TelemetrySettings(events_file=tmp_path / "events.jsonl", _env_file=None)  # type: ignore[call-arg]
        assert isinstance(build_sink(settings), JsonlEventSink)

    def test_endpoint_takes_precedence(self, tmp_path: Path) -> None:
        settings = TelemetrySettings(
            endpoint_url="https://collector.example.com/events",
            events_file=tmp_path / "events.jsonl",
            _env_file=None,  # type: ignore[call-arg]
        )
        sink = build_sink(settings)
        try:
            assert isinstance(sink, HttpEventSink)
        finally:
            sink.close()  # type: ignore[union-attr]
