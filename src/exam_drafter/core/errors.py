"""
Module: core.errors

Purpose:
    Error taxonomy shared by every subsystem. Each error maps to one
    surfacing policy in the host UI (inline message, retryable notice,
    blocking dialog or informational notice).

Key Classes:
    - ExamDrafterError: Base class
    - ValidationError: Missing/invalid configuration or payload fields
    - GenerationFailure: Remote generator error
    - ExportFailure: Rasterization/serialization failed
    - IndexOutOfRange: Version index outside the version set
    - PublishFailure: Explicit save/publish failed
    - ReconciliationAmbiguity: Draft and target record both present
    - RecordNotFound: Unknown record id in the record store

Used By:
    - All exam_drafter subpackages
"""

from __future__ import annotations

from typing import Optional


class ExamDrafterError(Exception):
    """Base class for all exam_drafter errors."""
    pass


class ValidationError(ExamDrafterError):
    """Raised when configuration or payload data fails validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


class GenerationFailure(ExamDrafterError):
    """Remote question generator failed or returned an unusable payload."""
    retryable = True


class ExportFailure(ExamDrafterError):
    """An export (PDF or DOCX) could not be produced."""
    retryable = True

    def __init__(self, message: str, fmt: str = ""):
        super().__init__(message)
        self.fmt = fmt


class IndexOutOfRange(ExamDrafterError, IndexError):
    """Requested version index is not in [0, len)."""

    def __init__(self, index: int, size: int):
        super().__init__(f"Version index {index} out of range for {size} version(s)")
        self.index = index
        self.size = size


class PublishFailure(ExamDrafterError):
    """Explicit save/publish to the record store failed."""
    pass


class ReconciliationAmbiguity(ExamDrafterError):
    """
    A local draft and a target remote record were both available.

    Never raised. Reconciliation always picks the draft and attaches an
    instance of this class to its result so the UI can show an
    informational "draft recovered" notice.

    Attributes:
        record_id: The record the session was opened for
        draft_record_id: The record the draft was started from (None for a new exam)
    """

    def __init__(self, record_id: str, draft_record_id: Optional[str] = None):
        super().__init__(
            f"Unsaved draft restored instead of record {record_id}"
        )
        self.record_id = record_id
        self.draft_record_id = draft_record_id

    @property
    def same_record(self) -> bool:
        """True when the draft was started from the record being opened."""
        return self.draft_record_id == self.record_id


class RecordNotFound(ExamDrafterError, KeyError):
    """Record store has no record with the requested id."""

    def __init__(self, record_id: str):
        super().__init__(f"Record not found: {record_id}")
        self.record_id = record_id

    def __str__(self) -> str:
        return self.args[0]
