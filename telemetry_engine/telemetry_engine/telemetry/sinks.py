"""Event sinks that receive consent-filtered metric events.

A sink's :meth:`~EventSink.send` must return as soon as the event has been
handed off; delivery outcome is never reported back to the caller.

Three sinks are provided:

* :class:`JsonlEventSink` -- appends events as JSON lines to a local file.
* :class:`LoggingEventSink` -- writes events to the application log.
* :class:`HttpEventSink` -- queues events and POSTs them to a collector
  endpoint from a background thread.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
from pathlib import Path
from typing import Any, Protocol

import httpx

from telemetry_engine.config import TelemetrySettings
from telemetry_engine.models.telemetry import MetricEvent

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Protocol for outbound telemetry delivery.

    Sinks that buffer may also define ``close()``; it is called once at
    shutdown to deliver whatever is still queued.
    """

    def send(self, namespace: str, event: MetricEvent) -> None:
        """Hand *event* off for delivery under *namespace*."""
        ...


def _envelope(namespace: str, event: MetricEvent) -> dict[str, Any]:
    return {"namespace": namespace, "event": event.model_dump(mode="json")}


class JsonlEventSink:
    """Appends events as JSON lines to a local file.

    Parameters
    ----------
    path:
        Path to the JSON lines file.  Parent directories are created
        automatically.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def send(self, namespace: str, event: MetricEvent) -> None:
        line = json.dumps(_envelope(namespace, event), ensure_ascii=False)
        with self._lock, self._path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")
        logger.debug("Wrote event %s to %s", event.metric_id, self._path)


class LoggingEventSink:
    """Writes events to the ``telemetry_engine.telemetry.sinks`` logger."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def send(self, namespace: str, event: MetricEvent) -> None:
        logger.log(
            self._level,
            "[%s] %s %s",
            namespace,
            event.metric_id,
            json.dumps(event.payload, default=str, sort_keys=True),
        )


_STOP = object()


class HttpEventSink:
    """Non-blocking HTTP sink backed by a background delivery thread.

    :meth:`send` only enqueues.  A daemon thread POSTs each event as JSON to
    *endpoint_url*.  Failed deliveries are logged and dropped; there is no
    retry.

    Parameters
    ----------
    endpoint_url:
        Collector URL events are POSTed to.
    timeout:
        Per-request timeout in seconds.
    max_queue_size:
        Maximum number of undelivered events.  Events sent while the queue
        is full are dropped.
    client:
        Optional pre-configured :class:`httpx.Client`, mainly for tests.
    """

    def __init__(
        self,
        endpoint_url: str,
        timeout: float = 5.0,
        max_queue_size: int = 1000,
        client: httpx.Client | None = None,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._client = client or httpx.Client(timeout=timeout)
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=max_queue_size)
        self._delivered = 0
        self._failed = 0
        self._dropped = 0
        self._thread = threading.Thread(target=self._run, name="telemetry-http-sink", daemon=True)
        self._thread.start()
        logger.info("HTTP telemetry sink started (endpoint=%s)", endpoint_url)

    def send(self, namespace: str, event: MetricEvent) -> None:
        try:
            self._queue.put_nowait(_envelope(namespace, event))
        except queue.Full:
            self._dropped += 1
            logger.warning("Telemetry queue full; dropped event %s", event.metric_id)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._post(item)
            finally:
                self._queue.task_done()

    def _post(self, envelope: dict[str, Any]) -> None:
        try:
            response = self._client.post(self._endpoint_url, json=envelope)
            response.raise_for_status()
        except Exception:
            self._failed += 1
            logger.warning(
                "Telemetry delivery to %s failed for %s",
                self._endpoint_url,
                envelope["event"]["metric_id"],
                exc_info=True,
            )
            return
        self._delivered += 1

    def close(self, timeout: float = 5.0) -> None:
        """Deliver queued events, then stop the background thread."""
        if not self._thread.is_alive():
            return
        self._queue.put(_STOP)
        self._thread.join(timeout=timeout)
        self._client.close()
        logger.info(
            "HTTP telemetry sink stopped (delivered=%d, failed=%d, dropped=%d)",
            self._delivered,
            self._failed,
            self._dropped,
        )

    @property
    def delivered_count(self) -> int:
        return self._delivered

    @property
    def failed_count(self) -> int:
        return self._failed

    @property
    def dropped_count(self) -> int:
        return self._dropped


def build_sink(settings: TelemetrySettings) -> EventSink:
    """Pick a sink from *settings*: HTTP, then JSONL file, then logging."""
    if settings.endpoint_url is not None:
        return HttpEventSink(
            settings.endpoint_url,
            timeout=settings.endpoint_timeout,
            max_queue_size=settings.max_queue_size,
        )
    if settings.events_file is not None:
        return JsonlEventSink(settings.events_file)
    return LoggingEventSink()
