"""Persisted key/value storage for the client.

Plays the role browser local storage plays for a web front end: string keys,
string values, survives restarts. ``LocalStorage`` keeps everything in one
JSON file and rewrites it atomically on each change; ``MemoryStorage`` has the
same surface and nothing on disk.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"
LOCATION_STATUS_KEY = "locationStatusChanged"


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._items.clear()
        self._flush()

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def _flush(self) -> None:
        """Persist the current items; a no-op in memory."""


class LocalStorage(MemoryStorage):
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable storage file %s", self.path)
            return {}
        if not isinstance(decoded, dict):
            return {}
        return {str(k): str(v) for k, v in decoded.items() if v is not None}

    def reload(self) -> None:
        """Pick up writes made by another process since this one started."""

        self._items = self._load()

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".storage-", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._items, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        # The file holds a bearer token.
        try:
            os.chmod(self.path, 0o600)
        except OSError as exc:
            logger.warning("Could not restrict permissions on %s: %s", self.path, exc)


__all__ = ["MemoryStorage", "LocalStorage", "TOKEN_KEY", "USER_KEY", "LOCATION_STATUS_KEY"]
