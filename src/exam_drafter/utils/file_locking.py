"""
Module: utils.file_locking

Purpose:
    Cross-platform locked access to small JSON files, so two editor
    windows (or a window and a background auto-save) never interleave a
    read-modify-write on the same store file.

Key Functions:
    - locked_read_json: Read JSON under a shared lock
    - locked_read_modify_write_json: Read-modify-write JSON under an exclusive lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - drafts.kv_store: JsonFileKeyValueStore
    - session.records: JsonFileRecordStore
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict

import portalocker

logger = logging.getLogger(__name__)


def locked_read_json(
    path: Path,
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read a JSON object with a shared lock held.

    Args:
        path: Path to JSON file.
        default: Factory used when the file is missing or empty.

    Returns:
        Parsed JSON object.

    Raises:
        json.JSONDecodeError: If the file holds invalid JSON.
    """
    if not path.exists():
        return default()

    with open(path, "r", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_SH)
        try:
            content = f.read()
        finally:
            portalocker.unlock(f)

    return json.loads(content) if content.strip() else default()


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Dict[str, Any]], Dict[str, Any]],
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read JSON, apply modifier, write back - all with exclusive lock.

    Args:
        path: Path to JSON file.
        modifier: Function that takes existing data, returns modified data.
        default: Factory for default data if file doesn't exist.

    Returns:
        The modified data that was written.

    Example:
        >>> def put(existing):
        ...     existing["criar-prova-draft"] = payload
        ...     return existing
        >>> locked_read_modify_write_json(store_path, put)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if not path.exists():
        path.write_text(json.dumps(default(), indent=2), encoding="utf-8")

    with open(path, "r+", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_EX)
        try:
            f.seek(0)
            content = f.read()
            existing = json.loads(content) if content.strip() else default()

            modified = modifier(existing)

            f.seek(0)
            f.truncate()
            json.dump(modified, f, indent=2, ensure_ascii=False)

            return modified
        finally:
            portalocker.unlock(f)
