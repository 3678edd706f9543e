"""
Physical key layout for cache entries.

Every logical entry (namespace, key) maps to two host store keys:
    <prefix><namespace>/<key>             value record
    <prefix><namespace>/<key><suffix>     expiration record
The default namespace drops the "<namespace>/" segment. This layout is the
persisted format and must stay stable across releases.
"""

from __future__ import annotations

import re

from quotacache.config import ConfigView
from quotacache.exceptions import InvalidKeyError, InvalidNamespaceError

NAMESPACE_SEPARATOR = "/"


def validate_namespace(namespace: str) -> str:
    """Return the namespace unchanged, or raise if it is malformed."""
    if not isinstance(namespace, str):
        raise InvalidNamespaceError(
            "Bucket namespace must be a string",
            context={"namespace": namespace, "reason": "type"},
        )
    if NAMESPACE_SEPARATOR in namespace:
        raise InvalidNamespaceError(
            f"Bucket namespace must not contain {NAMESPACE_SEPARATOR!r}",
            context={"namespace": namespace, "reason": "separator"},
        )
    return namespace


class KeyCodec:
    """Builds and recognizes physical keys for one namespace.

    Keys of the default namespace may not contain the separator: such a key
    would land in the key space of a named bucket.
    """

    def __init__(self, config: ConfigView, namespace: str = "") -> None:
        self._config = config
        self.namespace = validate_namespace(namespace)
        self._segment = f"{namespace}{NAMESPACE_SEPARATOR}" if namespace else ""
        self._pattern = self.key_pattern()

    def value_key(self, key: str) -> str:
        """Physical key of the value record.

        Raises:
            InvalidKeyError: If the default namespace is given a key
                containing "/".
        """
        if not self.namespace and NAMESPACE_SEPARATOR in key:
            raise InvalidKeyError(
                f"Keys of the default bucket must not contain {NAMESPACE_SEPARATOR!r}",
                context={"key": key, "reason": "separator"},
            )
        return f"{self._config.cache_prefix}{self._segment}{key}"

    def expiration_key(self, key: str) -> str:
        """Physical key of the expiration record."""
        return f"{self.value_key(key)}{self._config.expiration_suffix}"

    def key_pattern(self) -> re.Pattern[str]:
        """Pattern whose group 1 is the logical key of a value record in this namespace.

        Regex-special characters in the prefix and namespace are escaped. The
        default namespace only matches remainders without a separator, since
        those would belong to a named bucket.
        """
        prefix = re.escape(self._config.cache_prefix)
        if self.namespace:
            return re.compile(f"^{prefix}{re.escape(self._segment)}(.*)$", re.DOTALL)
        return re.compile(f"^{prefix}([^{re.escape(NAMESPACE_SEPARATOR)}]*)$", re.DOTALL)

    def logical_key(self, physical_key: str | None) -> str | None:
        """Extract the logical key from a physical key, if it is a value record here."""
        if not physical_key:
            return None
        match = self._pattern.match(physical_key)
        if match is None:
            return None
        key = match.group(1)
        if key.endswith(self._config.expiration_suffix):
            return None
        return key
