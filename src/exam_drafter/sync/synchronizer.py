"""
Module: sync.synchronizer

Purpose:
    Bidirectional bridge between the live editable surface and the
    Document model. Pushes externally produced content (generation,
    version switch, draft restore) into the editor without losing the
    user's position, and turns user edits into Document updates without
    echo loops.

Key Classes:
    - ContentSynchronizer: Surface <-> Document mirror

Guarantees:
    - A push only touches the surface when the content actually differs.
    - The selection captured before a push is restored by offset after it,
      collapsing to the end of the document when out of range.
    - Change events fired while a push is applied are ignored. The
      "applying update" flag is cleared in a ``finally`` block, so a
      surface that raises cannot leave sync permanently disabled.
    - The pushed document only becomes current once the surface accepted
      it. A failed push leaves the previous document in place.
    - A push followed by no user input never reaches ``on_user_edit``,
      so it produces no draft writes.

Dependencies:
    - sync.surface: EditableSurface, Selection
    - document.renderer: apply_external_edit

Used By:
    - versions.manager: Pushes the active variant
    - session.controller: Wires user edits to the auto-saver
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from exam_drafter.core.models import Document
from exam_drafter.document import apply_external_edit

from .surface import EditableSurface

logger = logging.getLogger(__name__)

EditCallback = Callable[[Document], None]


class ContentSynchronizer:
    """
    Mirror Document.canonical_html into/from an EditableSurface.

    Attributes:
        document: Latest Document (includes user edits)
        last_synced_html: Content last known to be on the surface
        user_edit_count: Number of user edits forwarded to on_user_edit

    Example:
        >>> sync = ContentSynchronizer(MarkupSurface(), on_user_edit=autosaver.mark_dirty)
        >>> sync.push_to_surface(doc)
        True
        >>> sync.push_to_surface(doc)  # Same content, surface untouched
        False
    """

    def __init__(
        self,
        surface: EditableSurface,
        document: Optional[Document] = None,
        on_user_edit: Optional[EditCallback] = None,
    ) -> None:
        self._surface = surface
        self._document = document or Document.empty()
        self._on_user_edit = on_user_edit
        self._applying_update = False
        self._last_synced_html = surface.get_html()
        self.user_edit_count = 0
        surface.add_change_listener(self.on_surface_change)

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def document(self) -> Document:
        return self._document

    @property
    def surface(self) -> EditableSurface:
        return self._surface

    @property
    def last_synced_html(self) -> str:
        return self._last_synced_html

    @property
    def is_applying_update(self) -> bool:
        return self._applying_update

    def set_on_user_edit(self, callback: Optional[EditCallback]) -> None:
        self._on_user_edit = callback

    # ─────────────────────────────────────────────────────────────────────────
    # Model -> surface
    # ─────────────────────────────────────────────────────────────────────────

    @contextmanager
    def applying_external_update(self) -> Iterator[None]:
        """Suppress change handling for the duration of the block."""
        self._applying_update = True
        try:
            yield
        finally:
            self._applying_update = False

    def push_to_surface(self, document: Document) -> bool:
        """
        Make ``document`` current and mirror its html onto the surface.

        Args:
            document: Document to show

        Returns:
            True if the surface content was replaced, False if it already
            matched (surface and selection left untouched)

        Raises:
            Exception: Whatever the surface raises. The suppression flag is
                cleared and the current document is left unchanged
        """
        target = document.canonical_html

        if target == self._surface.get_html():
            self._document = document
            self._last_synced_html = target
            logger.debug("Surface already up to date, skipping push")
            return False

        selection = self._surface.get_selection()
        with self.applying_external_update():
            self._surface.set_html(target)
            self._last_synced_html = self._surface.get_html()
        self._document = document

        restored = selection.clamp(self._surface.content_size())
        self._surface.set_selection(restored)
        if restored != selection:
            logger.debug(
                f"Selection {selection.start}-{selection.end} out of range, "
                f"cursor moved to end ({restored.start})"
            )
        logger.debug(f"Pushed {len(target)} chars to surface")
        return True

    def attach(self, document: Document) -> None:
        """Adopt a document as current and show it."""
        self.push_to_surface(document)

    # ─────────────────────────────────────────────────────────────────────────
    # Surface -> model
    # ─────────────────────────────────────────────────────────────────────────

    def on_surface_change(self, html: str) -> None:
        """
        Handle a surface change event.

        Ignored while an external update is being applied and when the
        content equals what was last synced. Otherwise the Document is
        updated (structured data left stale) and ``on_user_edit`` fires
        exactly once.
        """
        if self._applying_update:
            return
        if html == self._last_synced_html:
            return

        self._last_synced_html = html
        self._document = apply_external_edit(self._document, html)
        self.user_edit_count += 1

        if self._on_user_edit is not None:
            self._on_user_edit(self._document)

    def detach(self) -> None:
        """Stop listening to the surface (navigation away)."""
        self._surface.remove_change_listener(self.on_surface_change)
