"""
Module: session.generator

Purpose:
    Client side of the remote question generator. The generator itself
    (prompting, models) is an opaque service; this module builds the
    request body and normalizes its responses into Documents.

Key Classes:
    - GenerationRequest: Request built from the configuration form
    - GeneratorService: Abstract generator
    - HttpGeneratorService: JSON-over-HTTP generator (requests)

Key Functions:
    - parse_generation_response(): Response payload -> list of Documents

Response shapes accepted:
    {"questions": [...]}                                  single version
    {"versions": [{"questions": [...], "answerKey": ...}]} several variants

Dependencies:
    - requests: HTTP transport
    - document.renderer: build_document

Used By:
    - session.controller: AuthoringSession.generate
"""

from __future__ import annotations

import logging
import random
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional

import requests

from exam_drafter.core.errors import GenerationFailure, ValidationError
from exam_drafter.core.models import (
    AnswerEntry,
    Document,
    DocumentMetadata,
    FormSnapshot,
    Question,
    QuestionType,
)
from exam_drafter.document import build_document

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60

# Wire name of each question type in the request body
_REQUEST_TYPE_KEYS = {
    QuestionType.MULTIPLE_CHOICE: "multipleChoice",
    QuestionType.FILL_BLANKS: "fillBlanks",
    QuestionType.TRUE_FALSE: "trueFalse",
    QuestionType.OPEN_ENDED: "openQuestions",
}


@dataclass(frozen=True)
class GenerationRequest:
    """
    One generation call.

    Attributes:
        metadata: Metadata shared by every generated variant
        topics: Free-text topics
        question_types: Requested mix of question types
        count: Questions per variant
        versions_count: Number of variants (1 = single version)
        random_seed: Seed echoed to the service so reruns vary
        session_id: Correlation id for the service logs
        timestamp_ms: Request creation time (epoch ms)
    """

    metadata: DocumentMetadata
    topics: str
    question_types: tuple[QuestionType, ...]
    count: int
    versions_count: int = 1
    random_seed: float = field(default_factory=random.random)
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp_ms: int = field(default_factory=lambda: int(time.time() * 1000))

    def __post_init__(self) -> None:
        if self.count <= 0:
            raise ValidationError(f"count must be positive: {self.count}", path="questionsCount")
        if self.versions_count <= 0:
            raise ValidationError(
                f"versions_count must be positive: {self.versions_count}", path="versionsCount"
            )
        if not self.question_types:
            raise ValidationError("At least one question type is required", path="questionTypes")

    @classmethod
    def from_form(cls, form: FormSnapshot, *, date: Optional[str] = None) -> GenerationRequest:
        return cls(
            metadata=form.to_metadata(date=date),
            topics=form.topics,
            question_types=form.enabled_types,
            count=form.questions_count,
            versions_count=form.requested_versions,
        )

    def to_payload(self) -> dict[str, Any]:
        """JSON body sent to the generator."""
        return {
            "title": self.metadata.title,
            "language": self.metadata.language,
            "difficulty": self.metadata.difficulty_level,
            "questionsCount": self.count,
            "questionTypes": {
                key: qtype in self.question_types
                for qtype, key in _REQUEST_TYPE_KEYS.items()
            },
            "topics": self.topics,
            "generateMultipleVersions": self.versions_count > 1,
            "versionsCount": self.versions_count,
            "timestamp": self.timestamp_ms,
            "randomSeed": self.random_seed,
            "sessionId": self.session_id,
        }


class GeneratorService(ABC):
    """Abstract question generator."""

    @abstractmethod
    def generate(self, request: GenerationRequest) -> List[Document]:
        """
        Generate one Document per requested variant.

        Raises:
            GenerationFailure: On any transport or payload error
        """


class HttpGeneratorService(GeneratorService):
    """
    Generator reached over HTTP.

    Example:
        >>> service = HttpGeneratorService(
        ...     "https://example.supabase.co/functions/v1/generate-questions",
        ...     token=api_key,
        ... )
        >>> docs = service.generate(GenerationRequest.from_form(form))
    """

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.token = token
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def generate(self, request: GenerationRequest) -> List[Document]:
        payload = request.to_payload()
        logger.info(
            f"Requesting {request.versions_count} variant(s) x {request.count} question(s) "
            f"(session {request.session_id})"
        )
        try:
            response = self._session.post(
                self.url, json=payload, headers=self._headers(), timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise GenerationFailure(f"Generator request failed: {e}") from e
        except ValueError as e:
            raise GenerationFailure(f"Generator returned invalid JSON: {e}") from e

        if isinstance(data, dict) and data.get("error"):
            raise GenerationFailure(f"Generator error: {data['error']}")
        return parse_generation_response(data, request.metadata)


# ─────────────────────────────────────────────────────────────────────────────
# Response parsing
# ─────────────────────────────────────────────────────────────────────────────

def parse_generation_response(data: Any, metadata: DocumentMetadata) -> List[Document]:
    """
    Normalize a generator response into Documents (one per variant).

    A single-version response yields a one-element list without answer
    key. Variants carry their own answer key when the service sends one.

    Raises:
        GenerationFailure: If the payload has no usable questions
    """
    if not isinstance(data, dict):
        raise GenerationFailure("Generator response must be a JSON object")

    if isinstance(data.get("versions"), list) and data["versions"]:
        raw_variants = data["versions"]
    elif isinstance(data.get("questions"), list):
        raw_variants = [{"questions": data["questions"], "answerKey": None}]
    else:
        raise GenerationFailure("Generator response has neither 'questions' nor 'versions'")

    documents: List[Document] = []
    for index, raw in enumerate(raw_variants):
        if not isinstance(raw, dict):
            raise GenerationFailure(f"Version {index + 1} is not an object")
        try:
            questions = _parse_questions(raw.get("questions"))
            answer_key = _parse_answer_key(raw.get("answerKey"))
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            raise GenerationFailure(f"Version {index + 1} is malformed: {e}") from e
        if not questions:
            raise GenerationFailure(f"Version {index + 1} has no questions")

        variant_meta = replace(metadata, version_index=index)
        documents.append(build_document(variant_meta, questions, answer_key))

    logger.info(
        f"Parsed {len(documents)} variant(s) with "
        f"{[d.question_count for d in documents]} question(s)"
    )
    return documents


def _parse_questions(raw: Any) -> tuple[Question, ...]:
    if not isinstance(raw, list):
        raise ValidationError("questions must be a list", path="questions")
    return tuple(
        Question.from_dict(item, fallback_id=str(i + 1))
        for i, item in enumerate(raw)
    )


def _parse_answer_key(raw: Any) -> Optional[tuple[AnswerEntry, ...]]:
    """
    Accept the answer key shapes seen from the service.

    - list of strings: position i is question i + 1
    - list of {"number", "answer"} objects
    - object mapping question number -> answer
    """
    if raw is None:
        return None
    if isinstance(raw, dict):
        return tuple(
            AnswerEntry(number=int(k), answer=str(v))
            for k, v in sorted(raw.items(), key=lambda kv: int(kv[0]))
        )
    if isinstance(raw, list):
        entries: List[AnswerEntry] = []
        for i, item in enumerate(raw):
            if isinstance(item, dict):
                entries.append(AnswerEntry.from_dict(item))
            else:
                entries.append(AnswerEntry(number=i + 1, answer=str(item)))
        return tuple(entries)
    raise ValidationError("answerKey must be a list or object", path="answerKey")
