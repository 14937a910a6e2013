"""
Module: drafts.store

Purpose:
    Local persistence of in-progress authoring state. One well-known slot
    per authoring surface holds the draft (form + document). Two side
    caches keep the last generated preview and the last editor snapshot
    for best-effort recovery when the structured draft is stale.

Key Classes:
    - DraftRecord: Stored draft (form, document, saved_at, step, record id)
    - DraftStore: Single-slot draft persistence with expiry
    - PreviewEntry / PreviewCache: Last generated questions + form
    - EditorSnapshot / EditorSnapshotCache: Last editor html + timestamp

Guarantees:
    - At most one draft exists per store key; ``save`` is last-write-wins.
    - ``load`` never raises on bad data: corrupt payloads are logged and
      treated as absent, expired drafts are removed and treated as absent.

Dependencies:
    - drafts.kv_store: KeyValueStore
    - core.schemas: validate_draft_payload (jsonschema)

Used By:
    - drafts.autosave: AutoSaver save callback
    - session.reconciliation: Draft precedence on mount
    - session.controller: Save/clear on edit, publish and discard
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Sequence

from exam_drafter.core.errors import ValidationError
from exam_drafter.core.models import Document, FormSnapshot, Question
from exam_drafter.core.schemas import DRAFT_SCHEMA_VERSION, validate_draft_payload

from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

DRAFT_KEY = "criar-prova-draft"
PREVIEW_KEY = "criar-prova-5-preview"
EDITOR_SNAPSHOT_KEY = "editor-prova-5-latest"
DRAFT_MAX_AGE = timedelta(days=7)

LABEL_FORMAT = "%d/%m/%Y %H:%M:%S"


def format_saved_label(saved_at: float) -> str:
    """Local-time label shown next to "last saved" (dd/mm/yyyy HH:MM:SS)."""
    return datetime.fromtimestamp(saved_at).strftime(LABEL_FORMAT)


# ─────────────────────────────────────────────────────────────────────────────
# Draft slot
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DraftRecord:
    """
    Recoverable snapshot of in-progress authoring state.

    Attributes:
        form_snapshot: Configuration form values
        document_snapshot: Document being edited (None before generation)
        saved_at: Epoch seconds of the last save
        current_step: Wizard step the user was on
        record_id: Persisted record the draft was started from, if any
    """

    form_snapshot: FormSnapshot
    document_snapshot: Optional[Document]
    saved_at: float
    current_step: int = 1
    record_id: Optional[str] = None

    @property
    def last_saved_label(self) -> str:
        return format_saved_label(self.saved_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaVersion": DRAFT_SCHEMA_VERSION,
            "formSnapshot": self.form_snapshot.to_dict(),
            "documentSnapshot": (
                self.document_snapshot.to_dict()
                if self.document_snapshot is not None else None
            ),
            "savedAt": self.saved_at,
            "currentStep": self.current_step,
            "recordId": self.record_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DraftRecord:
        """
        Parse a stored payload.

        Raises:
            ValidationError: If the payload fails schema validation
        """
        validate_draft_payload(data)
        raw_doc = data.get("documentSnapshot")
        return cls(
            form_snapshot=FormSnapshot.from_dict(data["formSnapshot"]),
            document_snapshot=Document.from_dict(raw_doc) if raw_doc is not None else None,
            saved_at=float(data["savedAt"]),
            current_step=int(data.get("currentStep") or 1),
            record_id=data.get("recordId"),
        )


class DraftStore:
    """
    Single-slot draft persistence.

    Example:
        >>> drafts = DraftStore(MemoryKeyValueStore())
        >>> drafts.save(form, doc)
        >>> drafts.load().form_snapshot == form
        True
    """

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = DRAFT_KEY,
        max_age: timedelta = DRAFT_MAX_AGE,
        clock: Clock = time.time,
    ) -> None:
        self._kv = kv
        self._key = key
        self._max_age = max_age
        self._clock = clock
        self._write_count = 0
        self._expired_on_last_load = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def write_count(self) -> int:
        """Number of successful saves made through this instance."""
        return self._write_count

    @property
    def expired_on_last_load(self) -> bool:
        """True when the last ``load()`` found an expired draft and removed it."""
        return self._expired_on_last_load

    def save(
        self,
        form: FormSnapshot,
        document: Optional[Document],
        *,
        current_step: int = 1,
        record_id: Optional[str] = None,
    ) -> DraftRecord:
        """Upsert the draft slot, stamping ``saved_at`` with the clock."""
        record = DraftRecord(
            form_snapshot=form,
            document_snapshot=document,
            saved_at=self._clock(),
            current_step=current_step,
            record_id=record_id,
        )
        self._kv.set(self._key, record.to_dict())
        self._write_count += 1
        logger.debug(f"Draft saved to '{self._key}' at {record.last_saved_label}")
        return record

    def load(self) -> Optional[DraftRecord]:
        """
        Return the stored draft, or None.

        Corrupt drafts are ignored. Drafts older than ``max_age`` are
        removed from storage.
        """
        self._expired_on_last_load = False
        raw = self._kv.get(self._key)
        if raw is None:
            return None

        try:
            record = DraftRecord.from_dict(raw)
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupt draft in '{self._key}': {e}")
            return None

        age = self._clock() - record.saved_at
        if age > self._max_age.total_seconds():
            logger.info(
                f"Draft in '{self._key}' expired ({age / 86400:.1f} days old), removing"
            )
            self._kv.remove(self._key)
            self._expired_on_last_load = True
            return None

        return record

    def clear(self) -> None:
        self._kv.remove(self._key)
        logger.debug(f"Draft '{self._key}' cleared")

    def has_draft(self) -> bool:
        return self.load() is not None


# ─────────────────────────────────────────────────────────────────────────────
# Side caches
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PreviewEntry:
    """Last generated question set together with the form that produced it."""

    form: FormSnapshot
    questions: tuple[Question, ...] = field(default_factory=tuple)
    saved_at: float = 0.0


class PreviewCache:
    """Cache of the last generation result, keyed independently of the draft."""

    def __init__(self, kv: KeyValueStore, key: str = PREVIEW_KEY, clock: Clock = time.time) -> None:
        self._kv = kv
        self._key = key
        self._clock = clock

    def save(self, form: FormSnapshot, questions: Sequence[Question]) -> PreviewEntry:
        entry = PreviewEntry(form=form, questions=tuple(questions), saved_at=self._clock())
        self._kv.set(self._key, {
            "formData": form.to_dict(),
            "generatedQuestions": [q.to_dict() for q in entry.questions],
            "timestamp": entry.saved_at,
        })
        return entry

    def load(self) -> Optional[PreviewEntry]:
        raw = self._kv.get(self._key)
        if not isinstance(raw, dict):
            return None
        try:
            questions = tuple(
                Question.from_dict(q, fallback_id=str(i + 1))
                for i, q in enumerate(raw.get("generatedQuestions") or [])
            )
            return PreviewEntry(
                form=FormSnapshot.from_dict(raw.get("formData") or {}),
                questions=questions,
                saved_at=float(raw.get("timestamp") or 0.0),
            )
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupt preview cache '{self._key}': {e}")
            return None

    def clear(self) -> None:
        self._kv.remove(self._key)


@dataclass(frozen=True)
class EditorSnapshot:
    """Last serialized editor content."""

    content: str
    saved_at: float
    form: Optional[FormSnapshot] = None
    questions: tuple[Question, ...] = field(default_factory=tuple)

    @property
    def has_content(self) -> bool:
        return bool(self.content.strip())


class EditorSnapshotCache:
    """
    Best-effort cache of the latest editor html.

    Written on generation, on manual save and on every auto-save while the
    editor is visible. Read during reconciliation, where a non-empty
    snapshot overrides the draft's canonical html.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = EDITOR_SNAPSHOT_KEY,
        clock: Clock = time.time,
    ) -> None:
        self._kv = kv
        self._key = key
        self._clock = clock

    def save(
        self,
        content: str,
        form: Optional[FormSnapshot] = None,
        questions: Sequence[Question] = (),
    ) -> EditorSnapshot:
        snapshot = EditorSnapshot(
            content=content,
            saved_at=self._clock(),
            form=form,
            questions=tuple(questions),
        )
        self._kv.set(self._key, {
            "content": content,
            "timestamp": snapshot.saved_at,
            "formData": form.to_dict() if form is not None else None,
            "questions": [q.to_dict() for q in snapshot.questions],
        })
        return snapshot

    def load(self) -> Optional[EditorSnapshot]:
        raw = self._kv.get(self._key)
        if not isinstance(raw, dict) or not isinstance(raw.get("content"), str):
            return None
        try:
            raw_form = raw.get("formData")
            return EditorSnapshot(
                content=raw["content"],
                saved_at=float(raw.get("timestamp") or 0.0),
                form=FormSnapshot.from_dict(raw_form) if isinstance(raw_form, dict) else None,
                questions=tuple(
                    Question.from_dict(q, fallback_id=str(i + 1))
                    for i, q in enumerate(raw.get("questions") or [])
                ),
            )
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupt editor snapshot '{self._key}': {e}")
            return None

    def clear(self) -> None:
        self._kv.remove(self._key)
