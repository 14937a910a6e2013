"""
Module: export.files

Purpose:
    Output naming and the result type shared by both exporters.

Key Functions:
    - export_filename(): ``<prefix>-<YYYY-MM-DDTHH-MM-SS>.<ext>`` (UTC)
    - unique_output_path(): Avoid overwriting an export from the same second
    - write_atomically(): Write bytes via a temp file + rename

Key Classes:
    - ExportResult: Path, format and page count of a finished export
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"


@dataclass(frozen=True)
class ExportResult:
    """
    Finished export.

    Attributes:
        path: Written file
        fmt: "pdf" or "docx"
        page_count: PDF pages written (None for docx, which reflows)
        size_bytes: File size
    """

    path: Path
    fmt: str
    page_count: Optional[int] = None
    size_bytes: int = 0


def export_filename(prefix: str, ext: str, now: Optional[datetime] = None) -> str:
    """
    Timestamped export file name.

    Aware datetimes are converted to UTC; naive datetimes are used as-is.

    Example:
        >>> export_filename("prova-wordwise", "pdf", datetime(2024, 3, 5, 14, 7, 9))
        'prova-wordwise-2024-03-05T14-07-09.pdf'
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return f"{prefix}-{now.strftime(TIMESTAMP_FORMAT)}.{ext.lstrip('.')}"


def unique_output_path(output_dir: Path, filename: str) -> Path:
    """Return output_dir/filename, suffixed -2, -3, ... if it already exists."""
    candidate = output_dir / filename
    stem, suffix = candidate.stem, candidate.suffix
    counter = 2
    while candidate.exists():
        candidate = output_dir / f"{stem}-{counter}{suffix}"
        counter += 1
    return candidate


def write_atomically(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` so a failure never leaves a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".part")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
