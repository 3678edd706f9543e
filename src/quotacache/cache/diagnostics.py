"""
Diagnostics sink for cache warnings.

Warnings are purely observational: they go to the quotacache logger and to
an optional user callback, only while warnings are enabled, and never raise.
"""

from __future__ import annotations

from typing import Callable

from quotacache.config import ConfigView
from quotacache.logging import get_logger

logger = get_logger(__name__)

WarningSink = Callable[[str, BaseException | None], None]


class Diagnostics:
    """Emits cache warnings when enabled in the configuration."""

    def __init__(self, config: ConfigView, sink: WarningSink | None = None) -> None:
        self._config = config
        self._sink = sink

    @property
    def enabled(self) -> bool:
        return self._config.warnings_enabled

    def warn(self, message: str, error: BaseException | None = None) -> None:
        if not self.enabled:
            return

        logger.warning(f"quotacache - {message}")
        if error is not None:
            logger.warning(f"quotacache - The error was: {error}")

        if self._sink is None:
            return
        try:
            self._sink(message, error)
        except Exception as e:
            logger.error(f"Diagnostics sink failed: {e}", exc_info=True)
