"""
Structured logging for quotacache.

Every record can carry the bucket namespace and cache operation it was
emitted under, set with log_context(). Records go to a rich console handler
and, when a log file is configured (QUOTACACHE_LOG_FILE), to a JSON-lines
file as well.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

import orjson
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

ROOT_LOGGER = "quotacache"

_namespace_var: ContextVar[str | None] = ContextVar("namespace", default=None)
_operation_var: ContextVar[str | None] = ContextVar("operation", default=None)


def get_namespace() -> str | None:
    """Get the current bucket namespace from context."""
    return _namespace_var.get()


def get_operation() -> str | None:
    """Get the current cache operation from context."""
    return _operation_var.get()


@contextmanager
def log_context(
    namespace: str | None = None,
    operation: str | None = None,
) -> Generator[None, None, None]:
    """Scope the namespace and operation attached to log records.

    Args:
        namespace: Bucket namespace. The default bucket is logged as "<default>".
        operation: Cache operation name (get, set, flush, ...).
    """
    namespace_token = (
        _namespace_var.set(namespace or "<default>") if namespace is not None else None
    )
    operation_token = _operation_var.set(operation) if operation is not None else None
    try:
        yield
    finally:
        if operation_token is not None:
            _operation_var.reset(operation_token)
        if namespace_token is not None:
            _namespace_var.reset(namespace_token)


def _context_fields() -> dict[str, str]:
    fields: dict[str, str] = {}
    namespace = get_namespace()
    operation = get_operation()
    if namespace:
        fields["namespace"] = namespace
    if operation:
        fields["operation"] = operation
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with the cache context as top-level fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context_fields(),
        }
        fields = getattr(record, "fields", None)
        if fields:
            entry["fields"] = fields
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str).decode("utf-8")


class ContextRichHandler(RichHandler):
    """Rich handler that prefixes the level with the cache context."""

    def get_level_text(self, record: logging.LogRecord) -> Text:
        level_text = super().get_level_text(record)
        parts = [f"[cyan]{get_namespace()}[/cyan]"] if get_namespace() else []
        if get_operation():
            parts.append(f"[magenta]{get_operation()}[/magenta]")
        if not parts:
            return level_text
        return Text.from_markup(f"{level_text} {' '.join(parts)}")


class ContextLogger:
    """Logger wrapper whose keyword arguments become structured fields."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, exc_info: bool = False, **fields: Any) -> None:
        self._logger.log(level, msg, exc_info=exc_info, extra={"fields": fields})

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=exc_info, **fields)


_console: Console | None = None
_setup_done: bool = False


def get_console() -> Console:
    """Get the global rich console (stderr)."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def setup_logging(
    log_level: str = "WARNING",
    log_file: Path | None = None,
    console_output: bool = True,
) -> None:
    """Install the console and optional JSON-lines file handlers.

    Calling it again replaces (and closes) the handlers of a previous call.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: JSON-lines log file. If None, only console logging is enabled.
        console_output: Whether to log to the console.
    """
    global _setup_done

    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    if console_output:
        rich_handler = ContextRichHandler(
            console=get_console(),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        rich_handler.setLevel(level)
        root_logger.addHandler(rich_handler)

    root_logger.propagate = False
    _setup_done = True


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger under the quotacache hierarchy."""
    if not _setup_done:
        setup_logging()

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return ContextLogger(logging.getLogger(name))
