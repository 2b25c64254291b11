"""Timestamped key/value cache used for the catalog and repository lists."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Protocol

from .errors import StorageError

LOGGER = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class KeyValueStorage(Protocol):
    """String storage keyed by name, like the browser's ``localStorage``."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage; handy for tests and one-shot renders."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """Stores each key as its own JSON file inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Unable to read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=self._directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Unable to write {path}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Unable to remove cache entry {key}: {exc}") from exc


class CacheStore:
    """Persist whole lists under a key together with the time they were saved.

    Entries are stored as ``{"ts": <epoch seconds>, "items": [...]}``. Expiry is
    evaluated when reading; nothing is evicted in the background.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._ttl = ttl_seconds
        self._clock = clock

    def load(self, key: str) -> list[Any] | None:
        try:
            raw = self._storage.get_item(key)
        except StorageError as exc:
            LOGGER.debug("Cache read for %s failed: %s", key, exc)
            return None
        if not raw:
            return None

        try:
            parsed = json.loads(raw)
        except ValueError:
            LOGGER.debug("Ignoring unparseable cache entry %s", key)
            return None

        if not isinstance(parsed, dict):
            return None
        ts = parsed.get("ts")
        items = parsed.get("items")
        if isinstance(ts, bool) or not isinstance(ts, (int, float)) or ts <= 0 or not isinstance(items, list):
            LOGGER.debug("Ignoring cache entry %s with unexpected shape", key)
            return None
        if self._clock() - ts > self._ttl:
            LOGGER.debug("Cache entry %s expired", key)
            return None
        return items

    def save(self, key: str, items: list[Any]) -> None:
        """Best effort write; storage failures are logged and swallowed."""

        try:
            payload = json.dumps({"ts": self._clock(), "items": items})
            self._storage.set_item(key, payload)
        except (StorageError, TypeError, ValueError) as exc:
            LOGGER.debug("Cache write for %s failed: %s", key, exc)


__all__ = ["CacheStore", "FileStorage", "KeyValueStorage", "MemoryStorage"]
