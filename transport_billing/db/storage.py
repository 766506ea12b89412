"""
transport_billing/db/storage.py

Purpose: Persistent key-value storage (local storage counterpart)

- MemoryStore for tests and throwaway sessions
- JsonFileStore persisting string values to a JSON file
- Synchronous reads/writes, single writer, no cross-process invalidation
- Global store lifecycle (open on startup, close on shutdown)
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

from transport_billing.core.config import settings
from transport_billing.core.exceptions import StorageError
from transport_billing.core.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """String key-value store with local-storage semantics."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """
    In-process store. Nothing survives the process.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class JsonFileStore:
    """
    Store backed by a single JSON object on disk.

    The whole file is rewritten on every mutation through a temporary
    file and ``os.replace`` so a crash never leaves half a document.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage file {self.path}: not a JSON object")
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _flush(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write storage file {self.path}: {e}")
            raise StorageError(f"Could not write {self.path}") from e

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        previous = self._data.get(key)
        self._data[key] = str(value)
        try:
            self._flush()
        except StorageError:
            if previous is None:
                self._data.pop(key, None)
            else:
                self._data[key] = previous
            raise

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        previous = self._data.pop(key)
        try:
            self._flush()
        except StorageError:
            self._data[key] = previous
            raise

    def keys(self):
        return list(self._data)


# Global store
_store: Optional[KeyValueStore] = None


def open_store(path: Optional[str] = None) -> KeyValueStore:
    """
    Opens the persistent store. Called during application startup.
    """
    global _store

    if _store is not None:
        logger.warning("Storage already opened")
        return _store

    storage_path = path or settings.STORAGE_PATH
    _store = JsonFileStore(storage_path)
    logger.info(f"Local storage opened: {storage_path}")
    return _store


def close_store():
    """
    Drops the global store reference. Called during application shutdown.
    """
    global _store
    if _store is not None:
        logger.info("Local storage closed")
        _store = None
