"""
Module: session.records

Purpose:
    Persisted exam records: an abstract record store, two local
    implementations, and the mapping between authoring state
    (form + document) and the record's columns.

Key Classes:
    - RecordStore: Abstract load/create/update
    - InMemoryRecordStore: Dict-backed store
    - JsonFileRecordStore: Locked JSON file store

Key Functions:
    - record_fields_from(): FormSnapshot + Document -> column dict
    - session_from_record(): Column dict -> (FormSnapshot, Document)

Dependencies:
    - utils.file_locking: Locked JSON read/write (portalocker)
    - core.schemas: validate_record_fields (jsonschema)

Used By:
    - session.reconciliation: Loading a record for editing
    - session.controller: Publish (create/update)
"""

from __future__ import annotations

import copy
import logging
import re
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from exam_drafter.core.errors import RecordNotFound, ValidationError
from exam_drafter.core.models import (
    Document,
    DocumentMetadata,
    FormSnapshot,
    Question,
    QuestionType,
)
from exam_drafter.core.schemas import validate_record_fields
from exam_drafter.utils.file_locking import (
    locked_read_json,
    locked_read_modify_write_json,
)

logger = logging.getLogger(__name__)

RecordFields = Dict[str, Any]

_UUID_RE = re.compile(r"^[0-9a-fA-F-]{36}$")

# QuestionType -> persisted question type
RECORD_TYPE_NAMES = {
    QuestionType.MULTIPLE_CHOICE: "multipla_escolha",
    QuestionType.TRUE_FALSE: "verdadeiro_falso",
    QuestionType.FILL_BLANKS: "dissertativa",
    QuestionType.OPEN_ENDED: "dissertativa",
}

_RECORD_TYPE_LOOKUP = {
    "multipla_escolha": QuestionType.MULTIPLE_CHOICE,
    "verdadeiro_falso": QuestionType.TRUE_FALSE,
    "dissertativa": QuestionType.OPEN_ENDED,
}


# ─────────────────────────────────────────────────────────────────────────────
# Stores
# ─────────────────────────────────────────────────────────────────────────────

class RecordStore(ABC):
    """Abstract store of persisted exam records."""

    @abstractmethod
    def load(self, record_id: str) -> RecordFields:
        """
        Raises:
            RecordNotFound: If no record has this id
        """

    @abstractmethod
    def create(self, fields: RecordFields) -> str:
        """Persist a new record and return its id."""

    @abstractmethod
    def update(self, record_id: str, fields: RecordFields) -> None:
        """
        Overwrite the given columns of an existing record.

        Raises:
            RecordNotFound: If no record has this id
        """


class InMemoryRecordStore(RecordStore):
    """Dict-backed record store."""

    def __init__(self) -> None:
        self.records: Dict[str, RecordFields] = {}

    def load(self, record_id: str) -> RecordFields:
        if record_id not in self.records:
            raise RecordNotFound(record_id)
        return copy.deepcopy(self.records[record_id])

    def create(self, fields: RecordFields) -> str:
        validate_record_fields(fields)
        record_id = str(uuid.uuid4())
        self.records[record_id] = copy.deepcopy(fields)
        return record_id

    def update(self, record_id: str, fields: RecordFields) -> None:
        if record_id not in self.records:
            raise RecordNotFound(record_id)
        validate_record_fields(fields)
        self.records[record_id].update(copy.deepcopy(fields))


class JsonFileRecordStore(RecordStore):
    """
    Records kept in one JSON file: ``{"records": {id: fields}}``.

    Writes use an exclusive read-modify-write lock so concurrent
    processes never lose each other's records.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _records(self) -> Dict[str, RecordFields]:
        data = locked_read_json(self.path)
        records = data.get("records") if isinstance(data, dict) else None
        return records if isinstance(records, dict) else {}

    def load(self, record_id: str) -> RecordFields:
        records = self._records()
        if record_id not in records:
            raise RecordNotFound(record_id)
        return records[record_id]

    def create(self, fields: RecordFields) -> str:
        validate_record_fields(fields)
        record_id = str(uuid.uuid4())

        def _insert(existing: Dict[str, Any]) -> Dict[str, Any]:
            existing.setdefault("records", {})[record_id] = fields
            return existing

        locked_read_modify_write_json(self.path, _insert)
        logger.info(f"Created record {record_id} in {self.path}")
        return record_id

    def update(self, record_id: str, fields: RecordFields) -> None:
        validate_record_fields(fields)

        def _merge(existing: Dict[str, Any]) -> Dict[str, Any]:
            records = existing.setdefault("records", {})
            if record_id not in records:
                raise RecordNotFound(record_id)
            records[record_id].update(fields)
            return existing

        locked_read_modify_write_json(self.path, _merge)
        logger.info(f"Updated record {record_id} in {self.path}")


# ─────────────────────────────────────────────────────────────────────────────
# Mapping
# ─────────────────────────────────────────────────────────────────────────────

def _uuid_or_none(value: Optional[str]) -> Optional[str]:
    return value if isinstance(value, str) and _UUID_RE.match(value) else None


def _record_question(question: Question) -> dict[str, Any]:
    answer = question.correct_answer
    return {
        "enunciado": question.prompt,
        "tipo": RECORD_TYPE_NAMES[question.type],
        "opcoes": {"options": list(question.options)} if question.options else None,
        "resposta_correta": "" if answer is None else str(answer),
    }


def record_fields_from(form: FormSnapshot, document: Document) -> RecordFields:
    """
    Map authoring state to record columns.

    Class and material references are only kept when they look like
    record ids (UUIDs); placeholder values such as "none" become None.
    """
    return {
        "title": form.title,
        "description": form.topics or None,
        "language": form.language or None,
        "difficulty": form.difficulty or None,
        "topics": form.topics or None,
        "questions_count": document.question_count or form.questions_count,
        "generate_multiple_versions": form.generate_multiple_versions,
        "versions_count": form.versions_count if form.generate_multiple_versions else 1,
        "question_types": dict(form.question_types),
        "turma_id": _uuid_or_none(form.class_ref),
        "material_id": _uuid_or_none(form.selected_material),
        "instructions_text": f"Prova de {form.language} - Nível {form.difficulty}",
        "content_html": document.canonical_html,
        "content_json": {
            "questions": [_record_question(q) for q in document.questions],
        },
    }


def _question_from_record(raw: dict[str, Any], index: int) -> Question:
    # Records written by this module use enunciado/tipo; older ones hold
    # the generator's wire format.
    if "enunciado" not in raw:
        return Question.from_dict(raw, fallback_id=str(index + 1))

    qtype = _RECORD_TYPE_LOOKUP.get(str(raw.get("tipo")), QuestionType.OPEN_ENDED)
    raw_options = raw.get("opcoes")
    options: tuple[str, ...] = ()
    if qtype is QuestionType.MULTIPLE_CHOICE and isinstance(raw_options, dict):
        options = tuple(str(o) for o in raw_options.get("options") or [])
    answer = raw.get("resposta_correta")
    return Question(
        id=str(raw.get("id") or index + 1),
        type=qtype,
        prompt=str(raw["enunciado"]),
        options=options,
        correct_answer=answer if answer not in (None, "") else None,
    )


def session_from_record(fields: RecordFields) -> tuple[FormSnapshot, Document]:
    """
    Map record columns back to authoring state.

    Raises:
        ValidationError: If stored questions cannot be parsed
    """
    raw_types = fields.get("question_types")
    form = FormSnapshot.from_dict({
        "title": fields.get("title"),
        "language": fields.get("language"),
        "difficulty": fields.get("difficulty"),
        "turma": fields.get("turma_id") or "",
        "topics": fields.get("topics") or fields.get("description"),
        "selectedMaterial": fields.get("material_id") or "",
        "questionsCount": fields.get("questions_count"),
        "generateMultipleVersions": bool(fields.get("generate_multiple_versions")),
        "versionsCount": fields.get("versions_count"),
        "questionTypes": raw_types if isinstance(raw_types, dict) else None,
    })

    content_json = fields.get("content_json") or {}
    raw_questions = content_json.get("questions") if isinstance(content_json, dict) else None
    if raw_questions is not None and not isinstance(raw_questions, list):
        raise ValidationError("content_json.questions must be a list", path="content_json")

    questions = tuple(
        _question_from_record(raw, i)
        for i, raw in enumerate(raw_questions or [])
        if isinstance(raw, dict)
    )
    metadata: DocumentMetadata = form.to_metadata()
    document = Document(
        canonical_html=str(fields.get("content_html") or ""),
        questions=questions,
        metadata=metadata,
    )
    return form, document
