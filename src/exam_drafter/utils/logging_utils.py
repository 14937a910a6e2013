"""
Logging setup for the ``exam_drafter`` package logger: console output plus
an optional log file.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure the ``exam_drafter`` logger with a console handler and an
    optional file handler.

    Calling it again replaces the handlers installed by a previous call.

    Args:
        level: Logging level (name or number).
        log_file: Optional path; parent directories are created.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("exam_drafter")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_exam_drafter_owned", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console._exam_drafter_owned = True  # type: ignore[attr-defined]
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler._exam_drafter_owned = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    return logger
