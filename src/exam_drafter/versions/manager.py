"""
Module: versions.manager

Purpose:
    Hold N independently generated variants of an exam and keep the
    editor consistent when the active variant changes.

Key Classes:
    - VersionSetManager: Variant set + active index

Guarantees:
    - Variants are immutable; switching never mutates any stored variant.
    - A switch is a full content replacement. Freeform editor edits made
      on the previous variant are not carried over.
    - A rejected switch (IndexOutOfRange) leaves all state unchanged.
    - A switch whose surface push raises leaves the active index and the
      synchronizer's document on the previous variant.

Dependencies:
    - document.renderer: build_document (re-derive html for the variant)
    - sync.synchronizer: ContentSynchronizer (push to the editor)

Used By:
    - session.controller: After generation and on version tab clicks
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Sequence

from exam_drafter.core.errors import IndexOutOfRange
from exam_drafter.core.models import Document
from exam_drafter.document import build_document
from exam_drafter.sync import ContentSynchronizer

logger = logging.getLogger(__name__)

VersionChangeCallback = Callable[[Document, int], None]


class VersionSetManager:
    """
    Ordered set of document variants with exactly one active variant.

    Example:
        >>> versions = VersionSetManager(sync)
        >>> versions.set_versions([doc_a, doc_b])
        >>> versions.select_version(1)
        >>> versions.active_index
        1
    """

    def __init__(
        self,
        synchronizer: ContentSynchronizer,
        on_change: Optional[VersionChangeCallback] = None,
    ) -> None:
        self._sync = synchronizer
        self._on_change = on_change
        self._variants: tuple[Document, ...] = ()
        self._active_index = 0

    @property
    def variants(self) -> tuple[Document, ...]:
        return self._variants

    @property
    def count(self) -> int:
        return len(self._variants)

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def active_variant(self) -> Optional[Document]:
        if not self._variants:
            return None
        return self._variants[self._active_index]

    def set_versions(self, variants: Sequence[Document]) -> Document:
        """
        Replace the whole set and make variant 0 current.

        Args:
            variants: One document per generated variant (single-version
                generation is the one-element case)

        Returns:
            The document now shown in the editor

        Raises:
            ValueError: If variants is empty
        """
        if not variants:
            raise ValueError("A version set needs at least one variant")

        self._variants = tuple(variants)
        self._active_index = 0
        first = self._variants[0]
        if first.metadata.version_index != 0:
            first = replace(first, metadata=replace(first.metadata, version_index=0))

        self._sync.push_to_surface(first)
        logger.info(f"Version set initialized with {len(self._variants)} variant(s)")
        if self._on_change is not None:
            self._on_change(first, 0)
        return first

    def select_version(self, index: int) -> Document:
        """
        Switch the editor to variant ``index``.

        The current document metadata (title, class, ...) is kept with its
        version index updated. Html is re-derived from the variant's
        questions and answer key and pushed through the synchronizer.

        Raises:
            IndexOutOfRange: If index is not in [0, count)
        """
        if not 0 <= index < len(self._variants):
            raise IndexOutOfRange(index, len(self._variants))

        variant = self._variants[index]
        metadata = replace(self._sync.document.metadata, version_index=index)
        document = build_document(metadata, variant.questions, variant.answer_key)

        self._sync.push_to_surface(document)
        self._active_index = index
        logger.debug(f"Switched to version {index + 1} of {len(self._variants)}")
        if self._on_change is not None:
            self._on_change(document, index)
        return document

    def clear(self) -> None:
        """Forget all variants (regeneration or navigation away)."""
        self._variants = ()
        self._active_index = 0
