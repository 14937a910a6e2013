"""
Tests for package logging setup.
"""

import logging

import pytest

from exam_drafter.utils import configure_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("exam_drafter")
    saved = (list(logger.handlers), logger.level)
    yield logger
    for handler in list(logger.handlers):
        if handler not in saved[0]:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(saved[1])


def test_configure_logging_writes_file(tmp_path, package_logger):
    log_file = tmp_path / "logs" / "exam_drafter.log"

    configure_logging("INFO", log_file)
    logging.getLogger("exam_drafter.export").info("Exported 2 page(s)")
    for handler in package_logger.handlers:
        handler.flush()

    assert "Exported 2 page(s)" in log_file.read_text(encoding="utf-8")


def test_configure_logging_twice_does_not_duplicate_handlers(package_logger):
    configure_logging(logging.INFO)
    first = len(package_logger.handlers)

    configure_logging(logging.DEBUG)

    assert len(package_logger.handlers) == first
    assert package_logger.level == logging.DEBUG


def test_child_logger_records_reach_package_handlers(tmp_path, package_logger):
    log_file = tmp_path / "engine.log"
    configure_logging(logging.WARNING, log_file)

    logging.getLogger("exam_drafter.drafts.autosave").warning("Auto-save failed")
    logging.getLogger("exam_drafter.drafts.autosave").info("not shown")
    for handler in package_logger.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "WARNING exam_drafter.drafts.autosave: Auto-save failed" in text
    assert "not shown" not in text
