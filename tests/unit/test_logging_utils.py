#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for logging configuration."""

import logging

import pytest

from mdpipe.logging_utils import PARSER_LOGGERS, configure_logging, resolve_log_level


@pytest.mark.unit
@pytest.mark.usefixtures("restore_logging")
class TestConfigureLogging:
    """Test root logger setup."""

    def test_level_by_name(self) -> None:
        """Test resolving level names."""
        root = configure_logging("debug")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_unknown_level_defaults_to_info(self) -> None:
        """Test the fallback level."""
        assert configure_logging("loud").level == logging.INFO

    def test_trace_format(self) -> None:
        """Test the detailed trace format."""
        root = configure_logging(logging.WARNING, trace_mode=True)
        assert "%(name)s" in root.handlers[0].formatter._fmt

    def test_log_file(self, tmp_path) -> None:
        """Test teeing log output to a file."""
        log_file = tmp_path / "mdpipe.log"
        root = configure_logging("INFO", log_file=str(log_file))

        logging.getLogger("mdpipe.test").info("hello file")
        for handler in root.handlers:
            handler.flush()

        assert len(root.handlers) == 2
        assert "hello file" in log_file.read_text(encoding="utf-8")

    def test_unwritable_log_file(self, tmp_path) -> None:
        """Test that a bad log path keeps console logging."""
        root = configure_logging("INFO", log_file=str(tmp_path / "missing" / "dir" / "x.log"))
        assert len(root.handlers) == 1

    def test_parser_loggers_held_at_info(self) -> None:
        """Test that debug output from the parser libraries is suppressed by default."""
        configure_logging("DEBUG")
        assert [logging.getLogger(name).level for name in PARSER_LOGGERS] == [logging.INFO, logging.INFO]

    def test_trace_lets_parsers_through(self) -> None:
        """Test that trace mode passes parser debug output through."""
        configure_logging("DEBUG", trace_mode=True)
        assert logging.getLogger("mistune").level == logging.DEBUG
        assert "%(threadName)s" in logging.getLogger().handlers[0].formatter._fmt

    def test_explicit_parser_level(self) -> None:
        """Test overriding the parser logger level."""
        configure_logging("INFO", parser_level="error")
        assert logging.getLogger("markdown_it").level == logging.ERROR


@pytest.mark.unit
class TestResolveLogLevel:
    """Test level name and number resolution."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (logging.DEBUG, logging.DEBUG),
            ("warning", logging.WARNING),
            (" Error ", logging.ERROR),
            ("15", 15),
            ("loud", logging.INFO),
        ],
    )
    def test_resolve(self, value, expected) -> None:
        """Test each accepted form."""
        assert resolve_log_level(value) == expected
