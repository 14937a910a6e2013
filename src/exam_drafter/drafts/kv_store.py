"""
Module: drafts.kv_store

Purpose:
    String-keyed local key-value storage used by the draft store and the
    editor snapshot cache. Values are JSON-serializable objects.

Key Classes:
    - KeyValueStore: Abstract get/set/remove interface
    - MemoryKeyValueStore: Process-local dict store
    - JsonFileKeyValueStore: Single JSON file with locked writes

Dependencies:
    - utils.file_locking: Locked JSON read/write (portalocker)

Used By:
    - drafts.store: DraftStore, PreviewCache, EditorSnapshotCache
"""

from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from exam_drafter.utils.file_locking import (
    locked_read_json,
    locked_read_modify_write_json,
)

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract string-keyed store of JSON values."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Value for ``key``, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` (overwrites)."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; no-op when absent."""

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryKeyValueStore(KeyValueStore):
    """In-memory store. Values are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Optional[Any]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store persisted as one JSON object on disk.

    Reads take a shared lock, writes an exclusive read-modify-write lock.
    An unreadable file reads as empty (logged) and is rewritten on the
    next ``set``.

    Example:
        >>> store = JsonFileKeyValueStore(Path("~/.exam_drafter/local.json").expanduser())
        >>> store.set("criar-prova-draft", {"savedAt": 1.0})
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read_all(self) -> Dict[str, Any]:
        try:
            data = locked_read_json(self.path)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Local store {self.path} unreadable, treating as empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Local store {self.path} is not a JSON object, treating as empty")
            return {}
        return data

    def get(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def _modify(self, modifier: Callable[[Dict[str, Any]], Dict[str, Any]]) -> None:
        try:
            locked_read_modify_write_json(self.path, modifier)
        except json.JSONDecodeError as e:
            logger.warning(f"Local store {self.path} corrupt, resetting: {e}")
            self.path.write_text("{}", encoding="utf-8")
            locked_read_modify_write_json(self.path, modifier)

    def set(self, key: str, value: Any) -> None:
        def _put(existing: Dict[str, Any]) -> Dict[str, Any]:
            existing = existing if isinstance(existing, dict) else {}
            existing[key] = value
            return existing

        self._modify(_put)

    def remove(self, key: str) -> None:
        if not self.path.exists():
            return

        def _drop(existing: Dict[str, Any]) -> Dict[str, Any]:
            existing = existing if isinstance(existing, dict) else {}
            existing.pop(key, None)
            return existing

        self._modify(_drop)
