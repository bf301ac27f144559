"""Key-value persistence for extraction results and chatbot sessions.

Keys are namespaced strings such as ``chatbot:model:<id>``; values are
JSON-compatible dicts. Services depend on :class:`KeyValueStore` only, so the
backend (memory or disk) can be swapped without touching call sites.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)


def make_key(namespace: str, *parts: str) -> str:
    """Join *namespace* and *parts* into a store key: ``make_key("chatbot", "model", id)``."""
    return ":".join((namespace, *parts))


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the value stored under *key*, or None."""

    @abstractmethod
    def set(self, key: str, value: Dict[str, Any]) -> None:
        """Store *value* under *key*, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove *key*; return True when something was deleted."""


class MemoryStore(KeyValueStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            value = self._data.get(key)
        return json.loads(json.dumps(value)) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        # Round-trip through JSON so callers never share mutable state with the store
        snapshot = json.loads(json.dumps(value, default=str))
        with self._lock:
            self._data[key] = snapshot

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None


class FileStore(KeyValueStore):
    """One JSON file per key under *base_dir*.

    Directory structure::

        {base_dir}/{percent-encoded key}.json
    """

    def __init__(self, base_dir: str) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def set(self, key: str, value: Dict[str, Any]) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(value, f, ensure_ascii=False, indent=2, default=str)
        tmp.replace(path)
        logger.debug("Stored %s at %s", key, path)

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True


def create_store(storage_dir: str = "") -> KeyValueStore:
    """Return a :class:`FileStore` rooted at *storage_dir*, or a :class:`MemoryStore` when it is empty."""
    if storage_dir:
        logger.info("Using file store at %s", storage_dir)
        return FileStore(storage_dir)
    return MemoryStore()
