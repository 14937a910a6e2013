"""JSON Schema definitions and validation helpers."""

from .validator import (
    DRAFT_SCHEMA_VERSION,
    validate_draft_payload,
    validate_form,
    validate_record_fields,
)

__all__ = [
    "DRAFT_SCHEMA_VERSION",
    "validate_draft_payload",
    "validate_form",
    "validate_record_fields",
]
