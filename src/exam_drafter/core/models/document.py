"""
Module: core.models.document

Purpose:
    Canonical in-memory representation of an editable exam document.

    A Document carries two representations of the same exam:
    the structured questions (typed, re-editable) and the canonical HTML
    (what the editor shows and what both exporters consume). Derivation is
    one-way: structured -> html. Once the editor mutates the html the
    structured form is stale and is never re-derived from the html.

Key Classes:
    - DocumentMetadata: Title, language, level, class and version index
    - Document: Canonical html + structured questions + answer key

Dependencies:
    - dataclasses (std)
    - .questions: Question, AnswerEntry

Used By:
    - document.renderer: derive_html / apply_external_edit
    - sync.synchronizer: Editor mirroring
    - versions.manager: Variant switching
    - drafts.store: Draft snapshots
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .questions import AnswerEntry, Question


@dataclass(frozen=True)
class DocumentMetadata:
    """
    Metadata shared by every variant of a document.

    Attributes:
        title: Exam title
        language: Language/subject code (e.g. "english")
        difficulty_level: Level code (e.g. "b1")
        class_ref: Class (turma) label or id, None when unassigned
        version_index: Index of this variant within its version set
        date: Exam date as printed (dd/mm/yyyy); blank line when None
    """

    title: str = ""
    language: str = ""
    difficulty_level: str = ""
    class_ref: Optional[str] = None
    version_index: int = 0
    date: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "language": self.language,
            "difficultyLevel": self.difficulty_level,
            "classRef": self.class_ref,
            "versionIndex": self.version_index,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentMetadata:
        return cls(
            title=str(data.get("title") or ""),
            language=str(data.get("language") or ""),
            difficulty_level=str(data.get("difficultyLevel") or ""),
            class_ref=data.get("classRef"),
            version_index=int(data.get("versionIndex") or 0),
            date=data.get("date"),
        )


@dataclass(frozen=True)
class Document:
    """
    Editable exam document (immutable, copy-on-write).

    Attributes:
        canonical_html: Rendered markup, source of truth for display/export
        questions: Structured questions in display order
        answer_key: Optional answer key entries
        metadata: Shared document metadata

    Example:
        >>> doc = Document.empty()
        >>> doc.is_empty
        True
    """

    canonical_html: str
    questions: tuple[Question, ...] = field(default_factory=tuple)
    answer_key: Optional[tuple[AnswerEntry, ...]] = None
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    @classmethod
    def empty(cls, metadata: Optional[DocumentMetadata] = None) -> Document:
        """Document with no content (fresh authoring session)."""
        return cls(canonical_html="", metadata=metadata or DocumentMetadata())

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to show in the editor."""
        return not self.canonical_html.strip()

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def with_html(self, html: str) -> Document:
        """Copy with new canonical html; structured fields untouched."""
        return replace(self, canonical_html=html)

    def to_dict(self) -> dict[str, Any]:
        return {
            "canonicalHtml": self.canonical_html,
            "questions": [q.to_dict() for q in self.questions],
            "answerKey": (
                [a.to_dict() for a in self.answer_key]
                if self.answer_key is not None else None
            ),
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Document:
        questions = tuple(
            Question.from_dict(q, fallback_id=str(i + 1))
            for i, q in enumerate(data.get("questions") or [])
        )
        raw_key = data.get("answerKey")
        answer_key = (
            tuple(AnswerEntry.from_dict(a) for a in raw_key)
            if raw_key is not None else None
        )
        return cls(
            canonical_html=str(data.get("canonicalHtml") or ""),
            questions=questions,
            answer_key=answer_key,
            metadata=DocumentMetadata.from_dict(data.get("metadata") or {}),
        )
