"""
Custom exception hierarchy for quotacache.

All exceptions inherit from QuotaCacheError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class QuotaCacheError(Exception):
    """Base exception for all quotacache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(QuotaCacheError):
    """Raised when configuration is invalid.

    Examples:
        - Non-positive time-unit duration
        - Non-positive store capacity
    """

    pass


class InvalidNamespaceError(QuotaCacheError):
    """Raised when a bucket namespace is malformed.

    Context should include:
        - namespace: The rejected namespace
        - reason: Why it was rejected
    """

    pass


class InvalidKeyError(QuotaCacheError):
    """Raised when a key cannot be stored in the default namespace.

    Context should include:
        - key: The rejected key
        - reason: Why it was rejected
    """

    pass


class SerializationError(QuotaCacheError):
    """Raised when a value cannot be encoded for the host store.

    Context should include:
        - value_type: The type name of the rejected value
    """

    pass


class StoreError(QuotaCacheError):
    """Raised when a host store operation fails.

    Context should include:
        - operation: The store operation (get, set, remove, keys)
        - key: The physical key involved, if any
    """

    pass


class QuotaExceededError(StoreError):
    """Raised when a write would exceed the host store's capacity.

    Context should include:
        - key: The physical key being written
        - required: Characters the write needs
        - capacity: The store's capacity
    """

    pass


class UnsupportedStoreError(StoreError):
    """Raised when the host store cannot be used at all."""

    pass
