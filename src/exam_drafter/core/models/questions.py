"""
Module: core.models.questions

Purpose:
    Structured exam question representation. A Question is the typed,
    re-editable form of one exam item, independent of how it is rendered.
    Questions are immutable once generated and only replaced wholesale
    by regeneration or a version switch.

Key Classes:
    - QuestionType: The four supported question kinds
    - Question: One generated exam item
    - AnswerEntry: One line of the answer key (gabarito)

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.models.document.Document
    - document.renderer: HTML derivation
    - session.generator: Response parsing
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from ..errors import ValidationError


AnswerValue = Union[str, int]


class QuestionType(str, Enum):
    """Kinds of generated question."""

    MULTIPLE_CHOICE = "multipleChoice"
    FILL_BLANKS = "fillBlanks"
    TRUE_FALSE = "trueFalse"
    OPEN_ENDED = "openEnded"

    @classmethod
    def parse(cls, value: str) -> QuestionType:
        """
        Parse a wire value into a QuestionType.

        Accepts the legacy ``openQuestions`` alias used by older
        generator responses and stored records.

        Raises:
            ValidationError: If the value is not a known type
        """
        if value == "openQuestions":
            return cls.OPEN_ENDED
        try:
            return cls(value)
        except ValueError as e:
            raise ValidationError(
                f"Unknown question type: {value!r}", path="type"
            ) from e


@dataclass(frozen=True)
class Question:
    """
    One generated exam question (immutable).

    Attributes:
        id: Identifier unique within its document
        type: Question kind
        prompt: Question text (may contain ``[blank]`` markers for fillBlanks)
        options: Answer options, only for multipleChoice
        correct_answer: Correct answer text, or option index for multipleChoice

    Invariants:
        - options is non-empty only for multipleChoice questions
    """

    id: str
    type: QuestionType
    prompt: str
    options: tuple[str, ...] = field(default_factory=tuple)
    correct_answer: Optional[AnswerValue] = None

    def __post_init__(self) -> None:
        if self.options and self.type is not QuestionType.MULTIPLE_CHOICE:
            raise ValidationError(
                f"Question {self.id}: options are only allowed for multipleChoice",
                path="options",
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the generator's wire field names."""
        return {
            "id": self.id,
            "type": self.type.value,
            "question": self.prompt,
            "options": list(self.options) if self.options else None,
            "correctAnswer": self.correct_answer,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, fallback_id: str = "") -> Question:
        """
        Build a Question from a wire dictionary.

        Args:
            data: Dictionary with ``type``, ``question`` and optional
                ``id``, ``options``, ``correctAnswer`` keys
            fallback_id: Used when the payload has no id

        Raises:
            ValidationError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ValidationError("Question payload must be an object")
        missing = [key for key in ("type", "question") if key not in data]
        if missing:
            raise ValidationError(
                f"Missing required fields: {missing}",
                errors=[f"Missing field: {key}" for key in missing],
            )

        qtype = QuestionType.parse(str(data["type"]))
        raw_options = data.get("options") or []
        if not isinstance(raw_options, list):
            raise ValidationError("options must be a list", path="options")
        # Generators occasionally send options for non-choice types; drop them.
        options = tuple(str(o) for o in raw_options) if qtype is QuestionType.MULTIPLE_CHOICE else ()

        answer = data.get("correctAnswer")
        if answer is not None and not isinstance(answer, (str, int)):
            answer = str(answer)

        return cls(
            id=str(data.get("id") or fallback_id),
            type=qtype,
            prompt=str(data["question"]),
            options=options,
            correct_answer=answer,
        )


@dataclass(frozen=True)
class AnswerEntry:
    """
    One numbered answer in the answer key.

    Attributes:
        number: 1-based question number
        answer: Answer text as printed in the key
    """

    number: int
    answer: str

    def to_dict(self) -> dict[str, Any]:
        return {"number": self.number, "answer": self.answer}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnswerEntry:
        return cls(number=int(data["number"]), answer=str(data["answer"]))
