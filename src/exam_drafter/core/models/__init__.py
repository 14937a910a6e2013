"""
Core Models Package

Immutable data models that serve as the single source of truth for the
authoring engine.

All models in this package are frozen dataclasses. Mutation always goes
through ``dataclasses.replace`` (copy-on-write), so a Document handed to
the editor, the draft store and an exporter can never be changed behind
their backs.
"""

from .questions import AnswerEntry, Question, QuestionType
from .document import Document, DocumentMetadata
from .form import FormSnapshot

__all__ = [
    "AnswerEntry",
    "Question",
    "QuestionType",
    "Document",
    "DocumentMetadata",
    "FormSnapshot",
]
