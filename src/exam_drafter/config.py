"""
Module: config

Purpose:
    Editor configuration and its JSON-backed persistence.

    Any malformed settings data results in a graceful fallback to
    defaults, never a crash at startup.

Key Classes:
    - EditorConfig: Timers, draft expiry, storage keys, export prefix
    - SettingsStore: JSON settings file -> EditorConfig

Dependencies:
    - drafts.store: Default storage keys and draft max age

Used By:
    - session.reconciliation: Storage keys
    - session.controller: Timer intervals, export prefix
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from exam_drafter.drafts.autosave import AUTO_SAVE_INTERVAL, FORM_DEBOUNCE
from exam_drafter.drafts.store import (
    DRAFT_KEY,
    DRAFT_MAX_AGE,
    EDITOR_SNAPSHOT_KEY,
    PREVIEW_KEY,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_PREFIX = "prova-wordwise"


@dataclass(frozen=True)
class EditorConfig:
    """
    Immutable editor configuration.

    Attributes:
        auto_save_interval: Seconds between periodic auto-save ticks
        form_debounce: Seconds of quiet before a form edit is saved
        draft_max_age_days: Drafts older than this are discarded on load
        draft_key: Storage key of the draft slot
        preview_key: Storage key of the generation preview cache
        editor_snapshot_key: Storage key of the last editor snapshot
        export_prefix: File name prefix for exported files
    """

    auto_save_interval: float = AUTO_SAVE_INTERVAL
    form_debounce: float = FORM_DEBOUNCE
    draft_max_age_days: float = float(DRAFT_MAX_AGE.days)
    draft_key: str = DRAFT_KEY
    preview_key: str = PREVIEW_KEY
    editor_snapshot_key: str = EDITOR_SNAPSHOT_KEY
    export_prefix: str = DEFAULT_EXPORT_PREFIX

    def __post_init__(self) -> None:
        if self.auto_save_interval <= 0:
            raise ValueError(f"auto_save_interval must be positive, got {self.auto_save_interval}")
        if self.form_debounce < 0:
            raise ValueError(f"form_debounce must be non-negative, got {self.form_debounce}")
        if self.draft_max_age_days <= 0:
            raise ValueError(f"draft_max_age_days must be positive, got {self.draft_max_age_days}")
        keys = (self.draft_key, self.preview_key, self.editor_snapshot_key)
        if not all(keys):
            raise ValueError("Storage keys must be non-empty")
        if len(set(keys)) != len(keys):
            raise ValueError(f"Storage keys must be distinct, got {keys}")
        if not self.export_prefix:
            raise ValueError("export_prefix must be non-empty")


class SettingsStore:
    """Lightweight JSON-backed store for persisting editor preferences."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.data: Dict[str, Any] = {}
        self.load_error: Optional[str] = None

        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(loaded, dict):
                    self.data = loaded
                else:
                    self.load_error = "Settings file does not contain an object"
            except json.JSONDecodeError as e:
                self.load_error = f"Settings file is corrupted: {e}"
            except OSError as e:
                self.load_error = f"Failed to read settings: {e}"

        if self.load_error:
            logger.warning(f"{self.load_error} ({self.path}), using defaults")

    def load_config(self) -> EditorConfig:
        """
        Build an EditorConfig from stored values.

        Unknown keys are ignored. Values of the wrong type, and values
        that fail EditorConfig validation, are logged and replaced by
        their defaults.
        """
        defaults = EditorConfig()
        values: Dict[str, Any] = {}
        for f in fields(EditorConfig):
            if f.name not in self.data:
                continue
            raw = self.data[f.name]
            default = getattr(defaults, f.name)
            coerced = _coerce(raw, default)
            if coerced is None:
                logger.warning(f"Ignoring setting {f.name}={raw!r}, using {default!r}")
                continue
            values[f.name] = coerced

        try:
            return EditorConfig(**values)
        except ValueError as e:
            logger.warning(f"Invalid editor settings ({e}), using defaults")
            return defaults

    def save_config(self, config: EditorConfig) -> None:
        self.data.update(asdict(config))
        self._save()

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")


def _coerce(value: Any, default: Any) -> Any:
    """Coerce a stored value to the type of its default, or None."""
    if isinstance(default, str):
        return value if isinstance(value, str) else None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return type(default)(value)


def load_config(path: Optional[Path] = None) -> EditorConfig:
    """Convenience: defaults when no path, else read through SettingsStore."""
    if path is None:
        return EditorConfig()
    return SettingsStore(path).load_config()
