"""Per-process object cache."""

from __future__ import annotations

import copy
import time
from typing import Any, Callable, Optional


class MemoryObjectCache:
    """Dictionary-backed cache local to one process.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the cache. Entries with a TTL expire against ``clock``.
    """

    is_external = False

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._groups: dict[str, dict[str, tuple[Any, Optional[float]]]] = {}
        self.hits = 0
        self.misses = 0

    def _lookup(self, key: str, group: str) -> tuple[bool, Any]:
        bucket = self._groups.get(group)
        if not bucket or key not in bucket:
            return False, None
        value, expires_at = bucket[key]
        if expires_at is not None and expires_at <= self._clock():
            del bucket[key]
            return False, None
        return True, value

    def get(self, key: str, group: str) -> tuple[bool, Any]:
        found, value = self._lookup(key, group)
        if not found:
            self.misses += 1
            return False, None
        self.hits += 1
        return True, copy.deepcopy(value)

    def set(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        expires_at = self._clock() + ttl if ttl and ttl > 0 else None
        self._groups.setdefault(group, {})[key] = (copy.deepcopy(value), expires_at)
        return True

    def add(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        found, _ = self._lookup(key, group)
        if found:
            return False
        return self.set(key, value, group, ttl)

    def delete(self, key: str, group: str) -> bool:
        found, _ = self._lookup(key, group)
        if not found:
            return False
        del self._groups[group][key]
        return True

    def flush(self) -> bool:
        self._groups.clear()
        return True
