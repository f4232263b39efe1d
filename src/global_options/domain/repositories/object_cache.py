"""Object cache protocol."""

from __future__ import annotations

from typing import Any, Protocol

OPTIONS_GROUP = "global-options"
TRANSIENT_GROUP = "global-transient"


class ObjectCache(Protocol):
    """Best-effort key/value cache partitioned into groups.

    ``is_external`` is True when entries outlive the current process, which
    lets transients live in the cache instead of the durable store.
    """

    is_external: bool

    def get(self, key: str, group: str) -> tuple[bool, Any]:
        """Return ``(found, value)``."""
        ...

    def set(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        """Store ``value``; ``ttl`` of 0 means no expiry."""
        ...

    def add(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        """Store ``value`` only when ``key`` is not already cached."""
        ...

    def delete(self, key: str, group: str) -> bool:
        """Drop ``key`` from ``group``."""
        ...

    def flush(self) -> bool:
        """Drop every entry."""
        ...
