"""Persistence for the local player's gameplay aggregate.

The scheduler loads the aggregate on the first tick the player is valid and
saves it after every mutation.  Two stores are provided:

* :class:`InMemoryStatsStore` -- keeps the aggregate for the process lifetime.
* :class:`FileStatsStore` -- persists it as a JSON document so totals carry
  over between sessions.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from telemetry_engine.models.telemetry import GamePlayStats

logger = logging.getLogger(__name__)


class StatsStore(Protocol):
    """Protocol for gameplay aggregate persistence."""

    def load(self) -> GamePlayStats | None:
        """Return the stored aggregate, or ``None`` if none exists yet."""
        ...

    def save(self, stats: GamePlayStats) -> None:
        """Persist *stats*."""
        ...


class InMemoryStatsStore:
    """Holds the aggregate in memory."""

    def __init__(self, stats: GamePlayStats | None = None) -> None:
        self._stats = stats

    def load(self) -> GamePlayStats | None:
        return self._stats

    def save(self, stats: GamePlayStats) -> None:
        self._stats = stats


class FileStatsStore:
    """Persists the aggregate as JSON.

    Parameters
    ----------
    path:
        Path to the JSON document.  Parent directories are created on the
        first save.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._cached: GamePlayStats | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> GamePlayStats | None:
        """Read the aggregate; an unreadable document is treated as absent."""
        if self._cached is not None:
            return self._cached
        if not self._path.exists():
            return None
        try:
            self._cached = GamePlayStats.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError):
            logger.warning("Ignoring unreadable gameplay stats at %s", self._path, exc_info=True)
            return None
        return self._cached

    def save(self, stats: GamePlayStats) -> None:
        self._cached = stats
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(stats.model_dump_json(), encoding="utf-8")
