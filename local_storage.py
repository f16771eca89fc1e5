"""File-backed key/value storage shared by the client-side stores.

Mirrors the browser localStorage contract: string keys, string values,
synchronous reads and writes. Everything lives in a single JSON file
(data/local-storage.json by default); each store owns disjoint keys.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalStorage:
    """Synchronous string key/value store persisted to one JSON file."""

    def __init__(self, path: str | Path):
        self._file = Path(path)
        self._file.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._file

    def get_item(self, key: str) -> str | None:
        """Get the value stored under key, or None."""
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a string value under key."""
        data = self._load()
        data[key] = str(value)
        self._save(data)

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def keys(self) -> list[str]:
        """All stored keys."""
        return list(self._load().keys())

    def clear(self) -> None:
        """Remove every key."""
        self._save({})

    # =========================================================================
    # JSON helpers
    # =========================================================================

    def get_json(self, key: str) -> dict | list | None:
        """Get a JSON-encoded value, or None if missing or unreadable."""
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    def set_json(self, key: str, value: dict | list) -> None:
        """Store a value JSON-encoded."""
        self.set_item(key, json.dumps(value))

    # =========================================================================
    # Internal
    # =========================================================================

    def _load(self) -> dict[str, str]:
        """Load all entries from disk.

        An unreadable file is treated as empty; the next write replaces it.
        """
        if not self._file.exists():
            return {}

        try:
            with open(self._file) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self._file, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self._file)
            return {}
        return data

    def _save(self, data: dict[str, str]) -> None:
        """Write all entries to disk."""
        with open(self._file, "w") as f:
            json.dump(data, f, indent=2)
