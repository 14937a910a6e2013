"""
Module: session

Purpose:
    Session-level orchestration: reconciliation on mount, the generator
    and record store adapters, user notices and the AuthoringSession
    controller.
"""

from .controller import AuthoringSession
from .generator import (
    GenerationRequest,
    GeneratorService,
    HttpGeneratorService,
    parse_generation_response,
)
from .notices import Notice, NoticeLevel, NoticeQueue
from .reconciliation import (
    ReconciliationController,
    ReconciliationResult,
    ReconciliationState,
    ResultSource,
    SessionMode,
)
from .records import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStore,
    record_fields_from,
    session_from_record,
)

__all__ = [
    "AuthoringSession",
    "GenerationRequest",
    "GeneratorService",
    "HttpGeneratorService",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "Notice",
    "NoticeLevel",
    "NoticeQueue",
    "ReconciliationController",
    "ReconciliationResult",
    "ReconciliationState",
    "RecordStore",
    "ResultSource",
    "SessionMode",
    "parse_generation_response",
    "record_fields_from",
    "session_from_record",
]
