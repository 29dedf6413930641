"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest

from docshelf.config.logging import APP_LOGGER, configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    app = logging.getLogger(APP_LOGGER)
    app_level = app.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    app.setLevel(app_level)


class TestLevels:
    def test_verbose(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger(APP_LOGGER).level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_default(self) -> None:
        configure_logging()
        assert logging.getLogger(APP_LOGGER).level == logging.WARNING

    def test_quiet(self) -> None:
        configure_logging(quiet=True)
        assert logging.getLogger(APP_LOGGER).level == logging.ERROR

    def test_verbose_wins_over_quiet(self) -> None:
        configure_logging(verbose=True, quiet=True)
        assert logging.getLogger(APP_LOGGER).level == logging.DEBUG

    def test_single_handler_after_reconfigure(self) -> None:
        configure_logging()
        configure_logging(log_json=True)
        assert len(logging.getLogger().handlers) == 1


class TestJsonOutput:
    def test_structlog_event(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        get_logger("docshelf.services.editor").info("content.deleted", path="guide/intro")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "content.deleted"
        assert parsed["path"] == "guide/intro"
        assert parsed["level"] == "info"
        assert parsed["logger"] == "docshelf.services.editor"
        assert "timestamp" in parsed

    def test_stdlib_records_get_same_fields(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("docshelf.infrastructure.filesystem").info("Deleted %s", "a.md")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Deleted a.md"
        assert parsed["logger"] == "docshelf.infrastructure.filesystem"

    def test_info_hidden_by_default(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        logging.getLogger("docshelf.infrastructure.filesystem").info("Deleted a.md")
        assert capfd.readouterr().err == ""
