"""
Module: core.models.form

Purpose:
    Snapshot of the exam configuration form. Stored inside drafts,
    mapped to/from persisted records, and used to build generation
    requests.

Key Classes:
    - FormSnapshot: Configuration form values

Dependencies:
    - dataclasses (std)

Used By:
    - drafts.store: DraftRecord.form_snapshot
    - session.reconciliation: Restored/loaded form state
    - session.generator: GenerationRequest construction
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .document import DocumentMetadata
from .questions import QuestionType

logger = logging.getLogger(__name__)


def _default_question_types() -> Dict[str, bool]:
    return {
        QuestionType.MULTIPLE_CHOICE.value: True,
        QuestionType.FILL_BLANKS.value: False,
        QuestionType.TRUE_FALSE.value: False,
        QuestionType.OPEN_ENDED.value: False,
    }


@dataclass(frozen=True)
class FormSnapshot:
    """
    Configuration form values (immutable).

    Attributes:
        title: Exam title
        language: Language code
        difficulty: Level code
        class_ref: Class id/label ("none" when unassigned)
        topics: Free-text topics
        selected_material: Material id ("none" when unset)
        questions_count: Requested question count
        generate_multiple_versions: Whether several variants are requested
        versions_count: Requested variant count
        question_types: Enabled flag per QuestionType value
    """

    title: str = ""
    language: str = ""
    difficulty: str = ""
    class_ref: str = ""
    topics: str = ""
    selected_material: str = ""
    questions_count: int = 10
    generate_multiple_versions: bool = False
    versions_count: int = 2
    question_types: Dict[str, bool] = field(default_factory=_default_question_types)

    def is_meaningful(self) -> bool:
        """True once the user has typed something worth keeping as a draft."""
        return bool(
            self.title.strip()
            or self.language
            or self.difficulty
            or self.topics.strip()
        )

    @property
    def enabled_types(self) -> tuple[QuestionType, ...]:
        """Enabled question types in canonical order."""
        return tuple(
            qtype for qtype in QuestionType
            if self.question_types.get(qtype.value)
        )

    @property
    def requested_versions(self) -> int:
        """Variant count actually requested (1 unless multi-version is on)."""
        return max(1, self.versions_count) if self.generate_multiple_versions else 1

    def to_metadata(self, *, date: Optional[str] = None) -> DocumentMetadata:
        """Document metadata for a document generated from this form."""
        class_ref = self.class_ref if self.class_ref and self.class_ref != "none" else None
        return DocumentMetadata(
            title=self.title,
            language=self.language,
            difficulty_level=self.difficulty,
            class_ref=class_ref,
            version_index=0,
            date=date,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "language": self.language,
            "difficulty": self.difficulty,
            "turma": self.class_ref,
            "topics": self.topics,
            "selectedMaterial": self.selected_material,
            "questionsCount": self.questions_count,
            "generateMultipleVersions": self.generate_multiple_versions,
            "versionsCount": self.versions_count,
            "questionTypes": dict(self.question_types),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> FormSnapshot:
        """
        Parse form values leniently.

        Malformed individual values fall back to their defaults; this is
        used on data read back from local storage, which may have been
        written by an older version.
        """
        types = _default_question_types()
        raw_types = raw.get("questionTypes")
        if isinstance(raw_types, dict):
            for key, enabled in raw_types.items():
                # Older drafts use "openQuestions" for open-ended questions
                name = QuestionType.OPEN_ENDED.value if key == "openQuestions" else key
                if name in types:
                    types[name] = bool(enabled)

        return cls(
            title=str(raw.get("title") or ""),
            language=str(raw.get("language") or ""),
            difficulty=str(raw.get("difficulty") or ""),
            class_ref=str(raw.get("turma") or ""),
            topics=str(raw.get("topics") or ""),
            selected_material=str(raw.get("selectedMaterial") or ""),
            questions_count=_safe_int(raw.get("questionsCount"), 10),
            generate_multiple_versions=bool(raw.get("generateMultipleVersions", False)),
            versions_count=_safe_int(raw.get("versionsCount"), 2),
            question_types=types,
        )


def _safe_int(value: Any, default: int) -> int:
    """Safely convert a value to int, returning default on failure."""
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        logger.debug(f"Replacing malformed integer {value!r} with {default}")
        return default
