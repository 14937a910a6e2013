"""
Module: sync.surface

Purpose:
    Abstract interface for a live editable surface (the rich-text editor)
    plus a headless in-memory implementation.

Key Classes:
    - Selection: Selection range as (start, end) offsets
    - EditableSurface: Abstract editor surface
    - MarkupSurface: Headless surface over a markup string

Dependencies:
    - abc (std)

Used By:
    - sync.synchronizer: ContentSynchronizer
    - Host UIs wrap their real editor widget in an EditableSurface
"""

from __future__ import annotations

import html
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str], None]


@dataclass(frozen=True)
class Selection:
    """
    Selection range in surface offsets.

    A collapsed selection (start == end) is a plain cursor.
    """

    start: int
    end: int

    @classmethod
    def cursor(cls, offset: int) -> Selection:
        return cls(offset, offset)

    @property
    def is_collapsed(self) -> bool:
        return self.start == self.end

    def clamp(self, size: int) -> Selection:
        """
        Clamp to a document of ``size`` positions.

        If either end falls past the document, the selection collapses to
        a cursor at the end of the document.
        """
        if self.start > size or self.end > size:
            return Selection.cursor(size)
        return self


class EditableSurface(ABC):
    """
    Abstract interface for an editable surface.

    Implementations must call every registered change listener with the
    serialized content whenever the content changes, including changes
    made through ``set_html`` (real editors do this, and the synchronizer
    is built to cope with it).
    """

    def __init__(self) -> None:
        self._listeners: List[ChangeListener] = []

    def add_change_listener(self, listener: ChangeListener) -> None:
        """Register a callback fired with the new html on every change."""
        self._listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit_change(self) -> None:
        content = self.get_html()
        for listener in list(self._listeners):
            listener(content)

    @abstractmethod
    def get_html(self) -> str:
        """Serialized content of the surface."""

    @abstractmethod
    def set_html(self, content: str) -> None:
        """Replace the whole content."""

    @abstractmethod
    def get_selection(self) -> Selection:
        """Current selection."""

    @abstractmethod
    def set_selection(self, selection: Selection) -> None:
        """Move the selection. Offsets are assumed to be in range."""

    @abstractmethod
    def content_size(self) -> int:
        """Number of addressable positions in the current content."""


class MarkupSurface(EditableSurface):
    """
    Headless editable surface backed by a markup string.

    Offsets index directly into the markup. Useful for tests, batch
    tooling and as a reference for adapting a real editor widget.

    Example:
        >>> surface = MarkupSurface("<p>ab</p>")
        >>> surface.set_selection(Selection.cursor(5))
        >>> surface.type_text("X")
        >>> surface.get_html()
        '<p>abX</p>'
    """

    def __init__(self, content: str = "") -> None:
        super().__init__()
        self._content = content
        self._selection = Selection.cursor(len(content))

    def get_html(self) -> str:
        return self._content

    def set_html(self, content: str) -> None:
        self._content = content
        # Real editors reset the selection on a full content replacement
        self._selection = Selection.cursor(0)
        self._emit_change()

    def get_selection(self) -> Selection:
        return self._selection

    def set_selection(self, selection: Selection) -> None:
        self._selection = selection.clamp(self.content_size())

    def content_size(self) -> int:
        return len(self._content)

    def type_text(self, text: str) -> None:
        """Simulate a user keystroke: replace the selection with ``text``."""
        start, end = sorted((self._selection.start, self._selection.end))
        escaped = html.escape(text, quote=False)
        self._content = self._content[:start] + escaped + self._content[end:]
        self._selection = Selection.cursor(start + len(escaped))
        self._emit_change()
