"""
Module: session.controller

Purpose:
    One authoring surface, end to end: reconcile on mount, keep the form
    and editor auto-saved, generate and switch versions, publish to the
    record store, and export.

Key Classes:
    - AuthoringSession: Session controller for one editor surface

Error surfacing:
    - ValidationError: raised to the caller (shown inline)
    - GenerationFailure / ExportFailure: retryable notice, nothing mutated
    - PublishFailure: raised to the caller (blocks navigation)
    - Auto-save errors: logged and swallowed by AutoSaver

Dependencies:
    - session.reconciliation, session.generator, session.records
    - drafts: DraftStore, caches, AutoSaver
    - sync / versions: editor mirroring and variants
    - export: PDF and DOCX exporters

Used By:
    - Host UIs (one instance per mounted authoring screen)
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, List, Optional

from exam_drafter.config import EditorConfig, load_config
from exam_drafter.core.errors import (
    ExportFailure,
    GenerationFailure,
    PublishFailure,
    ValidationError,
)
from exam_drafter.core.models import Document, FormSnapshot
from exam_drafter.core.schemas import validate_form
from exam_drafter.drafts import (
    AutoSaver,
    DraftStore,
    EditorSnapshot,
    EditorSnapshotCache,
    KeyValueStore,
    PreviewCache,
)
from exam_drafter.export import ExportConfig, ExportResult, export_docx, export_pdf
from exam_drafter.sync import ContentSynchronizer, EditableSurface
from exam_drafter.versions import VersionSetManager

from .generator import GenerationRequest, GeneratorService
from .notices import Notice, NoticeQueue
from .reconciliation import ReconciliationController, ReconciliationResult, SessionMode
from .records import RecordStore, record_fields_from

logger = logging.getLogger(__name__)

STEP_CONFIG = 1
STEP_EDITOR = 2


class AuthoringSession:
    """
    Controller for one authoring surface.

    Editor settings come from ``config`` when given, else from the JSON
    file at ``settings_path``, else the defaults.

    Example:
        >>> session = AuthoringSession(surface, kv, records, generator)
        >>> session.mount(SessionMode.NEW)
        >>> session.update_form(title="Simulado", language="english", difficulty="b1")
        >>> session.generate()
        >>> session.publish()
    """

    def __init__(
        self,
        surface: EditableSurface,
        kv: KeyValueStore,
        record_store: RecordStore,
        generator: GeneratorService,
        *,
        config: Optional[EditorConfig] = None,
        settings_path: Optional[Path] = None,
        export_config: Optional[ExportConfig] = None,
        notices: Optional[NoticeQueue] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or load_config(settings_path)
        self.export_config = export_config or ExportConfig()
        self.records = record_store
        self.generator = generator
        self.notices = notices or NoticeQueue()
        self._clock = clock

        self.drafts = DraftStore(
            kv,
            self.config.draft_key,
            timedelta(days=self.config.draft_max_age_days),
            clock,
        )
        self.previews = PreviewCache(kv, self.config.preview_key, clock)
        self.snapshots = EditorSnapshotCache(kv, self.config.editor_snapshot_key, clock)

        self.synchronizer = ContentSynchronizer(surface)
        self.versions = VersionSetManager(self.synchronizer, on_change=self._on_version_change)
        self.autosaver = AutoSaver(
            self.save_draft,
            interval=self.config.auto_save_interval,
            debounce=self.config.form_debounce,
            loop=loop,
        )
        self.synchronizer.set_on_user_edit(self.autosaver.mark_dirty)

        self.form = FormSnapshot()
        self.mode = SessionMode.NEW
        self.record_id: Optional[str] = None
        self.current_step = STEP_CONFIG
        self.show_editor = False
        self.config_open = True
        self.last_saved_label = ""
        self._mounted = False

    @property
    def document(self) -> Document:
        return self.synchronizer.document

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def mount(
        self,
        mode: SessionMode = SessionMode.NEW,
        record_id: Optional[str] = None,
    ) -> ReconciliationResult:
        """Reconcile the starting state, show it and start auto-save."""
        if self._mounted:
            raise RuntimeError("Session already mounted")

        controller = ReconciliationController(
            self.drafts, self.records, self.snapshots, self.previews
        )
        result = controller.run(mode, record_id)

        self.mode = mode
        self.form = result.form
        self.record_id = result.record_id
        self.current_step = result.current_step
        self.show_editor = result.show_editor
        self.config_open = result.config_open
        if result.draft is not None:
            self.last_saved_label = result.draft.last_saved_label

        self.synchronizer.attach(result.document)
        self.notices.extend(list(result.notices))
        self.autosaver.start()
        self._mounted = True
        return result

    def close(self) -> None:
        """Navigation away: stop timers and detach from the surface."""
        self.autosaver.stop()
        self.synchronizer.detach()
        self._mounted = False

    # ─────────────────────────────────────────────────────────────────────────
    # Form
    # ─────────────────────────────────────────────────────────────────────────

    def update_form(self, **changes: Any) -> FormSnapshot:
        """
        Apply form field changes.

        Meaningful forms schedule a debounced draft save.

        Raises:
            TypeError: If a field name is unknown
        """
        self.form = replace(self.form, **changes)
        if self.form.is_meaningful():
            self.autosaver.schedule_debounced()
        return self.form

    def back_to_config(self) -> None:
        """Reopen the configuration form, keeping the document."""
        self.show_editor = False
        self.config_open = True
        self.current_step = STEP_CONFIG
        self.autosaver.mark_dirty()

    # ─────────────────────────────────────────────────────────────────────────
    # Saving
    # ─────────────────────────────────────────────────────────────────────────

    def save_draft(self) -> None:
        """Write the draft slot (and the editor snapshot while editing)."""
        document = self.document
        record = self.drafts.save(
            self.form,
            None if document.is_empty and not document.questions else document,
            current_step=self.current_step,
            record_id=self.record_id,
        )
        if self.show_editor and not document.is_empty:
            self.snapshots.save(document.canonical_html, self.form, document.questions)
        self.last_saved_label = record.last_saved_label

    def on_blur(self) -> bool:
        return self.autosaver.on_blur()

    def save_editor_snapshot(self) -> EditorSnapshot:
        """Explicit save from the editor (Ctrl+S)."""
        document = self.document
        snapshot = self.snapshots.save(document.canonical_html, self.form, document.questions)
        self.autosaver.flush()
        self.notices.push(Notice.success("Documento salvo", "Suas alterações foram salvas com sucesso."))
        return snapshot

    def discard_draft(self) -> None:
        """Drop the draft and both recovery caches."""
        self.drafts.clear()
        self.previews.clear()
        self.snapshots.clear()
        self.autosaver.mark_clean()
        self.last_saved_label = ""
        logger.info("Draft discarded")

    # ─────────────────────────────────────────────────────────────────────────
    # Generation and versions
    # ─────────────────────────────────────────────────────────────────────────

    def generate(self) -> Optional[List[Document]]:
        """
        Generate questions for the current form.

        Returns:
            The generated variants, or None when the generator failed
            (a retryable notice is queued and no state changes)

        Raises:
            ValidationError: If required form fields are missing
        """
        validate_form(self.form)
        date = datetime.fromtimestamp(self._clock()).strftime("%d/%m/%Y")
        request = GenerationRequest.from_form(self.form, date=date)

        try:
            documents = self.generator.generate(request)
        except GenerationFailure as e:
            logger.error(f"Generation failed: {e}")
            self.notices.push(Notice.error(
                "Erro na geração", f"Não foi possível gerar as questões: {e}", retryable=True,
            ))
            return None
        if not documents:
            self.notices.push(Notice.error(
                "Erro na geração", "O gerador não retornou questões.", retryable=True,
            ))
            return None

        self.versions.set_versions(documents)
        self.show_editor = True
        self.config_open = False
        self.current_step = STEP_EDITOR

        current = self.document
        self.previews.save(self.form, current.questions)
        self.snapshots.save(current.canonical_html, self.form, current.questions)
        self.autosaver.mark_dirty()

        self.notices.push(Notice.success(
            "Prova gerada",
            f"{current.question_count} questões geradas em {len(documents)} versão(ões).",
        ))
        return documents

    def select_version(self, index: int) -> Document:
        """
        Show variant ``index`` and queue it for the next draft save.

        Raises:
            IndexOutOfRange: If index is not a valid version
        """
        return self.versions.select_version(index)

    def _on_version_change(self, document: Document, index: int) -> None:
        if self.show_editor:
            self.snapshots.save(document.canonical_html, self.form, document.questions)
        self.autosaver.mark_dirty()
        logger.debug(f"Active version {index + 1}: {document.question_count} question(s)")

    # ─────────────────────────────────────────────────────────────────────────
    # Publish
    # ─────────────────────────────────────────────────────────────────────────

    def publish(self) -> str:
        """
        Save the exam to the record store.

        Creates a record unless the session is bound to one, in which case
        it is updated. On success the draft, preview and editor snapshot
        are cleared so they cannot resurrect on the next visit.

        Returns:
            The record id

        Raises:
            ValidationError: If the title is missing or nothing was generated
            PublishFailure: If the record store rejected the write
        """
        if not self.form.title.strip():
            raise ValidationError("Por favor, adicione um título para a prova.", path="title")
        document = self.document
        if document.is_empty and not document.questions:
            raise ValidationError("Por favor, gere as questões antes de salvar.", path="document")

        fields = record_fields_from(self.form, document)
        try:
            if self.record_id:
                self.records.update(self.record_id, fields)
                record_id = self.record_id
            else:
                record_id = self.records.create(fields)
        except Exception as e:
            logger.error(f"Publish failed: {e}")
            raise PublishFailure(f"Erro ao salvar a prova: {e}") from e

        self.record_id = record_id
        self.mode = SessionMode.EDIT
        self.discard_draft()
        self.notices.push(Notice.success("Sucesso!", "Prova salva com sucesso!"))
        logger.info(f"Published record {record_id}")
        return record_id

    # ─────────────────────────────────────────────────────────────────────────
    # Export
    # ─────────────────────────────────────────────────────────────────────────

    def export_pdf(self, output_dir: Path) -> Optional[ExportResult]:
        """Export the editor content as PDF; None (plus a notice) on failure."""
        return self._export(export_pdf, "PDF", output_dir)

    def export_docx(self, output_dir: Path) -> Optional[ExportResult]:
        """Export the editor content as DOCX; None (plus a notice) on failure."""
        return self._export(export_docx, "Word", output_dir)

    def _export(
        self,
        exporter: Callable[..., ExportResult],
        label: str,
        output_dir: Path,
    ) -> Optional[ExportResult]:
        try:
            result = exporter(
                self.document.canonical_html,
                output_dir,
                self.export_config,
                self.config.export_prefix,
            )
        except ExportFailure as e:
            self.notices.push(Notice.error(
                "Erro na exportação",
                f"Ocorreu um erro ao gerar o {label}. Tente novamente.",
                retryable=True,
            ))
            logger.error(f"{label} export failed: {e}")
            return None

        self.notices.push(Notice.success("Download concluído", f'Arquivo "{result.path.name}" foi baixado.'))
        return result
