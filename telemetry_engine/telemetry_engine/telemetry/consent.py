"""Per-category and per-field telemetry consent bindings.

The :class:`ConsentStore` maps a category id or field name to the user's
decision.  Keys are only ever added: reconciliation inserts keys it has not
seen before with the user's current global preference and never touches a
key already on record.  Only :meth:`ConsentStore.update`, which represents an
explicit user choice, changes an existing value.

A lookup for an unknown key returns ``None`` ("not yet decided"), which is
distinct from an explicit ``False``.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from telemetry_engine.metrics.base import Metric

logger = logging.getLogger(__name__)


class ConsentStore:
    """Append-only consent binding map with optional JSON persistence.

    Parameters
    ----------
    bindings:
        Existing decisions, e.g. loaded from the host's configuration.
    path:
        Optional JSON file the bindings are saved to by :meth:`save`.
    """

    def __init__(
        self,
        bindings: Mapping[str, bool] | None = None,
        path: Path | None = None,
    ) -> None:
        self._bindings: dict[str, bool] = dict(bindings or {})
        self._path = path
        self._dirty = False

    @classmethod
    def load(cls, path: Path | str) -> ConsentStore:
        """Load bindings from *path*.

        A missing file yields an empty store bound to *path*.  A file that is
        not a JSON object of booleans is logged and ignored.
        """
        path = Path(path)
        if not path.exists():
            return cls(path=path)

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Could not read consent bindings from %s; starting empty", path, exc_info=True)
            return cls(path=path)

        if not isinstance(raw, dict):
            logger.warning("Consent bindings in %s are not a JSON object; starting empty", path)
            return cls(path=path)

        bindings = {str(k): v for k, v in raw.items() if isinstance(v, bool)}
        skipped = len(raw) - len(bindings)
        if skipped:
            logger.warning("Skipped %d non-boolean consent bindings in %s", skipped, path)
        return cls(bindings, path=path)

    # -- Lookups -------------------------------------------------------------

    def get(self, key: str) -> bool | None:
        """Return the recorded decision for *key*, or ``None`` if undecided."""
        return self._bindings.get(key)

    def is_allowed(self, key: str) -> bool:
        """Return True only when *key* has been explicitly granted."""
        return self._bindings.get(key) is True

    @property
    def bindings(self) -> dict[str, bool]:
        """A copy of all recorded decisions."""
        return dict(self._bindings)

    @property
    def path(self) -> Path | None:
        return self._path

    # -- Mutation ------------------------------------------------------------

    def ensure_default(self, key: str, fallback: bool) -> bool:
        """Insert ``key -> fallback`` if *key* is absent.

        Returns
        -------
        bool
            True if the key was inserted, False if it already existed.
        """
        if key in self._bindings:
            return False
        self._bindings[key] = fallback
        self._dirty = True
        return True

    def update(self, key: str, allowed: bool) -> None:
        """Record an explicit user decision for *key*."""
        previous = self._bindings.get(key)
        self._bindings[key] = allowed
        self._dirty = True
        logger.info("Consent for %s changed: %s -> %s", key, previous, allowed)

    def reconcile(self, metrics: Iterable[Metric], default: bool) -> list[str]:
        """Ensure every category and field of *metrics* has a binding.

        Keys seen for the first time take *default*, which callers pass as
        the global telemetry flag at the moment of reconciliation.

        Returns
        -------
        list[str]
            Keys that were added, in discovery order.
        """
        added: list[str] = []
        for metric in metrics:
            for key in (metric.category_id, *metric.field_names):
                if self.ensure_default(key, default):
                    added.append(key)
        if added:
            logger.debug("Added %d consent bindings (default=%s): %s", len(added), default, ", ".join(added))
        return added

    # -- Persistence ---------------------------------------------------------

    def save(self) -> bool:
        """Write the bindings to :attr:`path` if there are unsaved changes.

        Returns
        -------
        bool
            True if the file was written.
        """
        if self._path is None or not self._dirty:
            return False
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._bindings, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self._path)
        self._dirty = False
        logger.debug("Saved %d consent bindings to %s", len(self._bindings), self._path)
        return True

    def __contains__(self, key: str) -> bool:
        return key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
