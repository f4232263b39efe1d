"""Read and patch values nested inside structured option values."""

from __future__ import annotations

import copy
from typing import Any, Sequence, Union

from ..errors import TraversalError

Key = Union[str, int]


def parse_key_path(segments: Sequence[str]) -> list[Key]:
    """Turn CLI path segments into keys; integer strings address list items."""
    keys: list[Key] = []
    for segment in segments:
        if segment.lstrip("-").isdigit() and str(int(segment)) == segment:
            keys.append(int(segment))
        else:
            keys.append(segment)
    return keys


class DataTraverser:
    """Walks dicts and lists by key path. Works on a private copy of ``data``."""

    def __init__(self, data: Any):
        self.data = copy.deepcopy(data)

    def value(self) -> Any:
        return self.data

    @staticmethod
    def _resolve(container: Any, key: Key) -> Key:
        """Map ``key`` onto ``container``; dict keys are always strings."""
        if isinstance(container, dict) and isinstance(key, int):
            return str(key)
        return key

    @classmethod
    def _exists(cls, container: Any, key: Key) -> bool:
        if isinstance(container, dict):
            return cls._resolve(container, key) in container
        if isinstance(container, list) and isinstance(key, int):
            return -len(container) <= key < len(container)
        return False

    def _parent(self, key_path: Sequence[Key]) -> Any:
        node = self.data
        for key in key_path:
            if not self._exists(node, key):
                raise TraversalError(f'No data exists for key "{key}"')
            node = node[self._resolve(node, key)]
        if not isinstance(node, (dict, list)):
            raise TraversalError(f"Cannot traverse into a {type(node).__name__} value")
        return node

    def get(self, key_path: Sequence[Key]) -> Any:
        if not key_path:
            return self.data
        parent = self._parent(key_path[:-1])
        key = key_path[-1]
        if not self._exists(parent, key):
            raise TraversalError(f'No data exists for key "{key}"')
        return parent[self._resolve(parent, key)]

    def insert(self, key_path: Sequence[Key], value: Any) -> None:
        if not key_path:
            raise TraversalError("A key path is required")
        parent = self._parent(key_path[:-1])
        key = key_path[-1]
        if isinstance(parent, list):
            if not isinstance(key, int) or key != len(parent):
                if self._exists(parent, key):
                    raise TraversalError(f'Cannot create key "{key}", key already exists.')
                raise TraversalError(f'Cannot create key "{key}" in a list of {len(parent)} items')
            parent.append(value)
            return
        if self._exists(parent, key):
            raise TraversalError(f'Cannot create key "{key}", key already exists.')
        parent[self._resolve(parent, key)] = value

    def update(self, key_path: Sequence[Key], value: Any) -> None:
        if not key_path:
            self.data = value
            return
        parent = self._parent(key_path[:-1])
        key = key_path[-1]
        if not self._exists(parent, key):
            raise TraversalError(f'No data exists for key "{key}"')
        parent[self._resolve(parent, key)] = value

    def delete(self, key_path: Sequence[Key], value: Any = None) -> None:
        if not key_path:
            raise TraversalError("A key path is required")
        parent = self._parent(key_path[:-1])
        key = key_path[-1]
        if not self._exists(parent, key):
            raise TraversalError(f'No data exists for key "{key}"')
        del parent[self._resolve(parent, key)]


__all__ = ["DataTraverser", "parse_key_path"]
