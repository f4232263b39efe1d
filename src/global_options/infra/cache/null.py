"""Cache stand-in for deployments without any cache tier."""

from __future__ import annotations

from typing import Any


class NullObjectCache:
    """Remembers nothing; every read is a miss."""

    is_external = False

    def get(self, key: str, group: str) -> tuple[bool, Any]:
        return False, None

    def set(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        return False

    def add(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        return False

    def delete(self, key: str, group: str) -> bool:
        return False

    def flush(self) -> bool:
        return True
