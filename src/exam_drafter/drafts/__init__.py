"""
Module: drafts

Purpose:
    Local draft persistence and auto-save.

Key Classes:
    - DraftStore / DraftRecord: Single-slot recoverable draft
    - PreviewCache / EditorSnapshotCache: Secondary recovery caches
    - AutoSaver: Periodic, blur and debounced saves
    - KeyValueStore, MemoryKeyValueStore, JsonFileKeyValueStore: Storage backends
"""

from .autosave import AutoSaver
from .kv_store import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .store import (
    DRAFT_KEY,
    DRAFT_MAX_AGE,
    EDITOR_SNAPSHOT_KEY,
    PREVIEW_KEY,
    DraftRecord,
    DraftStore,
    EditorSnapshot,
    EditorSnapshotCache,
    PreviewCache,
    PreviewEntry,
    format_saved_label,
)

__all__ = [
    "AutoSaver",
    "DRAFT_KEY",
    "DRAFT_MAX_AGE",
    "DraftRecord",
    "DraftStore",
    "EDITOR_SNAPSHOT_KEY",
    "EditorSnapshot",
    "EditorSnapshotCache",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "PREVIEW_KEY",
    "PreviewCache",
    "PreviewEntry",
    "format_saved_label",
]
