"""
Schema Validation Utilities

Validates form state and JSON payloads before they enter the engine.

- ``validate_form()`` guards generation: missing required configuration
  fields block the generator call and are reported inline.
- ``validate_draft_payload()`` and ``validate_record_fields()`` check
  JSON read back from local storage / written to the record store against
  the bundled JSON Schema files. Fail fast on any schema violation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from ..errors import ValidationError
from ..models.form import FormSnapshot


DRAFT_SCHEMA_VERSION = 1

# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


def _validate_against(name: str, data: Any) -> None:
    schema = _load_schema(name)
    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        first = errors[0]
        raise ValidationError(
            f"{name} payload invalid: {first.message}",
            path="/".join(str(p) for p in first.absolute_path),
            errors=[e.message for e in errors],
        )


def validate_form(form: FormSnapshot) -> None:
    """
    Check that the form has everything generation needs.

    Required: title, language, difficulty and at least one question type.
    Topics, class and material are optional.

    Raises:
        ValidationError: With one entry per missing field in ``errors``
    """
    missing: list[str] = []
    if not form.title.strip():
        missing.append("title")
    if not form.language:
        missing.append("language")
    if not form.difficulty:
        missing.append("difficulty")
    if not form.enabled_types:
        missing.append("questionTypes")
    if form.questions_count <= 0:
        missing.append("questionsCount")

    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path=missing[0],
            errors=[f"Missing field: {name}" for name in missing],
        )


def validate_draft_payload(data: dict[str, Any]) -> None:
    """
    Validate a stored draft payload.

    Raises:
        ValidationError: If data is invalid or has an unsupported version
    """
    if not isinstance(data, dict):
        raise ValidationError("Draft payload must be an object")
    version = data.get("schemaVersion")
    if version != DRAFT_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported draft schema version: {version} (expected {DRAFT_SCHEMA_VERSION})",
            path="schemaVersion",
        )
    _validate_against("draft", data)


def validate_record_fields(fields: dict[str, Any]) -> None:
    """
    Validate persisted record fields before create/update.

    Raises:
        ValidationError: If a column has the wrong type or title is missing
    """
    _validate_against("record", fields)
