"""Tests for structlog configuration."""

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from app.core.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None, None, None]:
    """Restore logger and structlog state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    app_logger = logging.getLogger("app")
    app_level = app_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    app_logger.setLevel(app_level)
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_app_logger_level(self) -> None:
        configure_logging("debug")
        assert logging.getLogger("app").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_default_level_is_info(self) -> None:
        configure_logging()
        assert logging.getLogger("app").level == logging.INFO

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO", log_json=True)
        log = structlog.get_logger("app.core.utils")
        log.warning("settlement.residual", group_id=7)
        captured = capfd.readouterr()
        parsed = json.loads(captured.err.strip())
        assert parsed["event"] == "settlement.residual"
        assert parsed["group_id"] == 7
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "app.core.utils"
        assert "timestamp" in parsed

    def test_below_level_is_dropped(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging("WARNING", log_json=True)
        structlog.get_logger("app.services").info("settlement.recomputed")
        assert capfd.readouterr().err == ""

    def test_stdlib_records_share_format(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO", log_json=True)
        logging.getLogger("app.db").warning("plain stdlib")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "plain stdlib"
        assert parsed["logger"] == "app.db"
