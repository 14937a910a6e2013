"""
Core package: immutable models, schema validation and the error taxonomy.
"""

from .errors import (
    ExamDrafterError,
    ExportFailure,
    GenerationFailure,
    IndexOutOfRange,
    PublishFailure,
    ReconciliationAmbiguity,
    RecordNotFound,
    ValidationError,
)

__all__ = [
    "ExamDrafterError",
    "ExportFailure",
    "GenerationFailure",
    "IndexOutOfRange",
    "PublishFailure",
    "ReconciliationAmbiguity",
    "RecordNotFound",
    "ValidationError",
]
