"""
Tests for structured logging.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from quotacache.logging import (
    JSONFormatter,
    get_logger,
    get_namespace,
    get_operation,
    log_context,
    setup_logging,
)


class TestLogContext:
    """Tests for scoped logging context."""

    def test_context_is_scoped(self) -> None:
        """Test that context variables are restored on exit."""
        assert get_namespace() is None
        with log_context(namespace="sessions", operation="set"):
            assert get_namespace() == "sessions"
            assert get_operation() == "set"
        assert get_namespace() is None
        assert get_operation() is None

    def test_default_namespace_label(self) -> None:
        """Test that the default bucket gets a readable label."""
        with log_context(namespace=""):
            assert get_namespace() == "<default>"


class TestJSONFormatter:
    """Tests for JSON lines output."""

    def test_includes_context(self) -> None:
        """Test that context variables are written to the record."""
        record = logging.LogRecord(
            "quotacache.test", logging.WARNING, __file__, 1, "evicted", None, None
        )
        with log_context(namespace="a", operation="set"):
            payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "evicted"
        assert payload["level"] == "WARNING"
        assert payload["namespace"] == "a"
        assert payload["operation"] == "set"

    def test_file_logging(self, tmp_path: Path) -> None:
        """Test that setup_logging writes JSON lines to the log file."""
        log_file = tmp_path / "logs" / "cache.jsonl"
        setup_logging("DEBUG", log_file=log_file, console_output=False)
        try:
            get_logger("tests").debug("store ready", store="memory")
        finally:
            setup_logging()

        line = json.loads(log_file.read_text().splitlines()[-1])
        assert line["logger"] == "quotacache.tests"
        assert line["fields"]["store"] == "memory"

    def test_setup_replaces_file_handler(self, tmp_path: Path) -> None:
        """Test that a second setup closes the previous log file."""
        first = tmp_path / "first.jsonl"
        setup_logging("DEBUG", log_file=first, console_output=False)
        handler = logging.getLogger("quotacache").handlers[0]
        try:
            setup_logging("DEBUG", log_file=tmp_path / "second.jsonl", console_output=False)
            assert handler not in logging.getLogger("quotacache").handlers
            assert handler.stream is None
        finally:
            setup_logging()
