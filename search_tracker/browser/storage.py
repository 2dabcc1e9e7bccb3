"""
Key/value persistence for session and anonymous identity state.

``MemoryStorage`` lives as long as the process, like
``sessionStorage``.  ``JsonFileStorage`` survives restarts, like
``localStorage``; it rewrites a single JSON object file on every
mutation.

Storage errors are deliberately not caught here: identity derivation
cannot work without a functioning store.
"""

from __future__ import annotations

import json
import pathlib
from typing import Protocol

from search_tracker.utils import logger

log = logger.create_logger("Storage")

SESSION_ID_KEY = "tracker_session_id"
SESSION_TIMESTAMP_KEY = "tracker_session_timestamp"
COLOR_IDENTIFIER_KEY = "colorschema_identifier"


class Storage(Protocol):
    """String key/value store with the Web Storage method names."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-lifetime storage backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of all stored items."""
        return dict(self._items)


class JsonFileStorage:
    """Durable storage persisted as one JSON object on disk.

    The file is created on first write.  A file that exists but does
    not contain a JSON object raises ``ValueError`` on construction.
    """

    def __init__(self, path: pathlib.Path | str) -> None:
        self._path = pathlib.Path(path)
        self._items: dict[str, str] = {}
        if self._path.exists():
            data = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"Storage file {self._path} does not contain a JSON object")
            self._items = {str(k): str(v) for k, v in data.items()}
            log.debug("Storage loaded", {"path": str(self._path), "keys": len(self._items)})

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._write()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._write()

    def _write(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._items, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self._path)
