"""Unit tests for structured logging configuration."""

import io
import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from layerconf.observability import logging as logging_module
from layerconf.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    parse_level,
)


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    clear_run_context()
    structlog.reset_defaults()


class TestParseLevel:
    """Tests for parse_level."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("warn", logging.WARNING),
            ("Warning", logging.WARNING),
            ("ERROR", logging.ERROR),
            (logging.ERROR, logging.ERROR),
        ],
    )
    def test_known_levels(self, name: str | int, expected: int) -> None:
        """Test level names, aliases and numbers."""
        assert parse_level(name) == expected

    @pytest.mark.unit
    def test_unknown_level(self) -> None:
        """Test that unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown log level"):
            parse_level("chatty")


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.unit
    def test_json_output(self) -> None:
        """Test that records are rendered as JSON with run context."""
        output = io.StringIO()
        configure_logging(level="INFO", output=output, json_format=True)
        bind_run_context("run-123")

        structlog.get_logger().info("config_file_loaded", key_count=3)

        record = json.loads(output.getvalue().strip().splitlines()[-1])
        assert record["event"] == "config_file_loaded"
        assert record["key_count"] == 3
        assert record["run_id"] == "run-123"
        assert record["level"] == "info"
        assert "timestamp" in record

    @pytest.mark.unit
    def test_level_filtering(self) -> None:
        """Test that records below the level are dropped."""
        output = io.StringIO()
        configure_logging(level="WARN", output=output)

        log = structlog.get_logger()
        log.info("hidden")
        log.warning("shown")

        assert "hidden" not in output.getvalue()
        assert "shown" in output.getvalue()

    @pytest.mark.unit
    def test_log_file_and_quiet(self, tmp_path: Path) -> None:
        """Test that quiet mode keeps the file sink only."""
        output = io.StringIO()
        log_file = tmp_path / "logs" / "run.log"
        configure_logging(output=output, log_file=log_file, quiet=True)

        structlog.get_logger().error("fatal_error", message="boom")

        assert output.getvalue() == ""
        assert "fatal_error" in log_file.read_text(encoding="utf-8")

    @pytest.mark.unit
    def test_reconfigure_closes_previous_log_file(self, tmp_path: Path) -> None:
        """Test that reconfiguring closes the earlier log file handle."""
        log_file = tmp_path / "run.log"
        configure_logging(output=io.StringIO(), log_file=log_file, quiet=True)
        first = logging_module._log_file_handle
        assert first is not None

        configure_logging(output=io.StringIO(), log_file=log_file, quiet=True)
        second = logging_module._log_file_handle

        assert first.closed
        assert second is not None
        assert not second.closed

        configure_logging(output=io.StringIO())
        assert second.closed
        assert logging_module._log_file_handle is None

    @pytest.mark.unit
    def test_console_renderer(self) -> None:
        """Test the human-readable renderer."""
        output = io.StringIO()
        configure_logging(output=output, json_format=False)

        structlog.get_logger().info("config_env_loaded", key_count=2)

        assert "config_env_loaded" in output.getvalue()
        assert "key_count" in output.getvalue()
