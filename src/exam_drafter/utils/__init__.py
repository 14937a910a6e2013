"""Shared utilities: file locking and logging setup."""

from .file_locking import locked_read_json, locked_read_modify_write_json
from .logging_utils import configure_logging

__all__ = [
    "configure_logging",
    "locked_read_json",
    "locked_read_modify_write_json",
]
