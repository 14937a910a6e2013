"""
Module: session.reconciliation

Purpose:
    Decide the starting state of an authoring session from the local
    draft, the persisted record being edited (if any) and the secondary
    caches. Runs once per mount.

Key Classes:
    - ReconciliationState: State machine states
    - SessionMode: NEW or EDIT
    - ReconciliationResult: Final (form, document) pair + UI flags
    - ReconciliationController: The state machine

Precedence:
    1. A stored draft wins, in NEW and in EDIT mode alike. An unsaved
       draft is never discarded by following an edit link. When a target
       record was also requested, the result carries an informational
       ReconciliationAmbiguity.
    2. No draft and a target record: load and map the record.
    3. Neither: fresh default form and empty document.

    An expired draft is removed together with its preview and editor
    snapshot caches, so they cannot resurface under a later draft.

    Editor visibility: the editor is shown (and the configuration form
    collapsed) exactly when the resulting document has html content.

Dependencies:
    - drafts.store: DraftStore, PreviewCache, EditorSnapshotCache
    - session.records: RecordStore, session_from_record

Used By:
    - session.controller: AuthoringSession.mount
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import List, Optional

from exam_drafter.config import EditorConfig
from exam_drafter.core.errors import ReconciliationAmbiguity
from exam_drafter.core.models import Document, FormSnapshot
from exam_drafter.document import apply_external_edit, build_document
from exam_drafter.drafts import (
    DraftRecord,
    DraftStore,
    EditorSnapshotCache,
    KeyValueStore,
    PreviewCache,
)

from .notices import Notice
from .records import RecordStore, session_from_record

logger = logging.getLogger(__name__)


class ReconciliationState(str, Enum):
    IDLE = "idle"
    CHECKING_DRAFT = "checking_draft"
    RESTORING_DRAFT = "restoring_draft"
    LOADING_RECORD = "loading_record"
    FRESH = "fresh"
    READY = "ready"


class SessionMode(str, Enum):
    NEW = "new"
    EDIT = "edit"


class ResultSource(str, Enum):
    DRAFT = "draft"
    RECORD = "record"
    FRESH = "fresh"


_TRANSITIONS = {
    ReconciliationState.IDLE: {ReconciliationState.CHECKING_DRAFT},
    ReconciliationState.CHECKING_DRAFT: {
        ReconciliationState.RESTORING_DRAFT,
        ReconciliationState.LOADING_RECORD,
        ReconciliationState.FRESH,
    },
    ReconciliationState.RESTORING_DRAFT: {ReconciliationState.READY},
    # A failed record load falls back to a fresh session
    ReconciliationState.LOADING_RECORD: {ReconciliationState.READY, ReconciliationState.FRESH},
    ReconciliationState.FRESH: {ReconciliationState.READY},
    ReconciliationState.READY: set(),
}


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Authoritative starting state of a session.

    Attributes:
        form: Configuration form values
        document: Document to show
        source: Where the state came from
        show_editor: Whether the editor is visible
        config_open: Whether the configuration form is expanded
        record_id: Record a later publish updates (None = create)
        current_step: Wizard step to resume at
        draft: The restored draft, if any
        ambiguity: Set when a draft was chosen over a requested record
        notices: Notices to show the user
    """

    form: FormSnapshot
    document: Document
    source: ResultSource
    show_editor: bool
    config_open: bool
    record_id: Optional[str] = None
    current_step: int = 1
    draft: Optional[DraftRecord] = None
    ambiguity: Optional[ReconciliationAmbiguity] = None
    notices: tuple[Notice, ...] = field(default_factory=tuple)


def _visibility(document: Document) -> tuple[bool, bool]:
    show_editor = not document.is_empty
    return show_editor, not show_editor


class ReconciliationController:
    """
    One-shot reconciliation state machine.

    Example:
        >>> controller = ReconciliationController(drafts, records, snapshots, previews)
        >>> result = controller.run(SessionMode.EDIT, record_id="...")
        >>> result.source
        <ResultSource.DRAFT: 'draft'>
    """

    def __init__(
        self,
        draft_store: DraftStore,
        record_store: Optional[RecordStore] = None,
        editor_snapshots: Optional[EditorSnapshotCache] = None,
        preview_cache: Optional[PreviewCache] = None,
    ) -> None:
        self._drafts = draft_store
        self._records = record_store
        self._snapshots = editor_snapshots
        self._previews = preview_cache
        self._state = ReconciliationState.IDLE
        self.history: List[ReconciliationState] = [ReconciliationState.IDLE]

    @classmethod
    def from_storage(
        cls,
        kv: KeyValueStore,
        record_store: Optional[RecordStore],
        config: EditorConfig,
    ) -> ReconciliationController:
        """Build the controller over one key-value store using configured keys."""
        return cls(
            DraftStore(kv, config.draft_key, timedelta(days=config.draft_max_age_days)),
            record_store,
            EditorSnapshotCache(kv, config.editor_snapshot_key),
            PreviewCache(kv, config.preview_key),
        )

    @property
    def state(self) -> ReconciliationState:
        return self._state

    def _transition(self, new_state: ReconciliationState) -> None:
        if new_state not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Invalid transition {self._state.value} -> {new_state.value}")
        logger.debug(f"Reconciliation: {self._state.value} -> {new_state.value}")
        self._state = new_state
        self.history.append(new_state)

    # ─────────────────────────────────────────────────────────────────────────
    # Entry point
    # ─────────────────────────────────────────────────────────────────────────

    def run(
        self,
        mode: SessionMode = SessionMode.NEW,
        record_id: Optional[str] = None,
    ) -> ReconciliationResult:
        """
        Reconcile once and return the starting state.

        Args:
            mode: NEW or EDIT
            record_id: Record to edit (EDIT mode only)

        Raises:
            RuntimeError: If called more than once
            ValueError: If EDIT mode is requested without a record id
        """
        if self._state is not ReconciliationState.IDLE:
            raise RuntimeError("Reconciliation already ran for this session")
        if mode is SessionMode.EDIT and not record_id:
            raise ValueError("EDIT mode requires a record id")
        target = record_id if mode is SessionMode.EDIT else None
        if mode is SessionMode.NEW and record_id:
            logger.debug(f"Ignoring record id {record_id} in NEW mode")

        self._transition(ReconciliationState.CHECKING_DRAFT)
        draft = self._drafts.load()
        if draft is None and self._drafts.expired_on_last_load:
            self._clear_side_caches()

        if draft is not None:
            result = self._restore_draft(draft, target)
        elif target is not None:
            result = self._load_record(target)
        else:
            result = self._fresh()

        self._transition(ReconciliationState.READY)
        logger.info(
            f"Session ready from {result.source.value} "
            f"(editor {'shown' if result.show_editor else 'hidden'})"
        )
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Branches
    # ─────────────────────────────────────────────────────────────────────────

    def _restore_draft(self, draft: DraftRecord, target: Optional[str]) -> ReconciliationResult:
        self._transition(ReconciliationState.RESTORING_DRAFT)
        form = draft.form_snapshot
        document = draft.document_snapshot

        if document is None or document.is_empty:
            preview = self._previews.load() if self._previews is not None else None
            if preview is not None and preview.questions:
                document = build_document(form.to_metadata(), preview.questions)
                logger.debug(f"Draft document rebuilt from {len(preview.questions)} preview question(s)")
            elif document is None:
                document = Document.empty(form.to_metadata())

        snapshot = self._snapshots.load() if self._snapshots is not None else None
        if snapshot is not None and snapshot.has_content:
            # Freshest freeform edits win over the draft's html
            document = apply_external_edit(document, snapshot.content)

        notices = [Notice.info(
            "Rascunho recuperado",
            f"Seus dados foram restaurados do último salvamento ({draft.last_saved_label}).",
        )]
        ambiguity = None
        if target is not None:
            ambiguity = ReconciliationAmbiguity(target, draft.record_id)
            if not ambiguity.same_record:
                notices.append(Notice.info(
                    "Rascunho pendente",
                    "Um rascunho não salvo foi aberto no lugar do registro solicitado. "
                    "Publique ou descarte o rascunho para editar o registro.",
                ))
            logger.info(str(ambiguity))

        show_editor, config_open = _visibility(document)
        return ReconciliationResult(
            form=form,
            document=document,
            source=ResultSource.DRAFT,
            show_editor=show_editor,
            config_open=config_open,
            record_id=draft.record_id,
            current_step=draft.current_step,
            draft=draft,
            ambiguity=ambiguity,
            notices=tuple(notices),
        )

    def _load_record(self, record_id: str) -> ReconciliationResult:
        self._transition(ReconciliationState.LOADING_RECORD)
        if self._records is None:
            logger.error(f"No record store configured, cannot load {record_id}")
            return self._fresh(notices=(Notice.error(
                "Erro", "Não foi possível carregar a prova.", retryable=True,
            ),))

        try:
            fields = self._records.load(record_id)
            form, document = session_from_record(fields)
        except Exception as e:
            logger.error(f"Failed to load record {record_id}: {e}")
            return self._fresh(notices=(Notice.error(
                "Erro", f"Não foi possível carregar a prova: {e}", retryable=True,
            ),))

        show_editor, config_open = _visibility(document)
        return ReconciliationResult(
            form=form,
            document=document,
            source=ResultSource.RECORD,
            show_editor=show_editor,
            config_open=config_open,
            record_id=record_id,
            current_step=2 if show_editor else 1,
        )

    def _fresh(self, notices: tuple[Notice, ...] = ()) -> ReconciliationResult:
        self._transition(ReconciliationState.FRESH)
        form = FormSnapshot()
        return ReconciliationResult(
            form=form,
            document=Document.empty(form.to_metadata()),
            source=ResultSource.FRESH,
            show_editor=False,
            config_open=True,
            notices=notices,
        )

    def _clear_side_caches(self) -> None:
        # Caches of an expired draft belong to a different exam
        if self._previews is not None:
            self._previews.clear()
        if self._snapshots is not None:
            self._snapshots.clear()
        logger.info("Draft expired, preview and editor snapshot caches cleared")
