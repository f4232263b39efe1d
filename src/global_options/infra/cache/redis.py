"""Redis-backed object cache shared by every worker process."""

from __future__ import annotations

from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from ...errors import OptionValueError
from ...logging_config import get_logger
from ...serialization import maybe_serialize, maybe_unserialize

logger = get_logger(__name__)


class RedisObjectCache:
    """External cache tier on top of a redis client.

    Keys are ``<prefix>:<group>:<key>``. The cache is advisory, so every
    ``RedisError`` is logged and reported as a miss or a failed write.
    """

    is_external = True

    def __init__(self, client: "redis.Redis", prefix: str = "global-options"):
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "global-options", **kwargs: Any) -> "RedisObjectCache":
        kwargs.setdefault("decode_responses", True)
        kwargs.setdefault("socket_timeout", 2.0)
        return cls(redis.Redis.from_url(url, **kwargs), prefix=prefix)

    def _key(self, key: str, group: str) -> str:
        return f"{self._prefix}:{group}:{key}"

    def get(self, key: str, group: str) -> tuple[bool, Any]:
        try:
            raw: Optional[str] = self._client.get(self._key(key, group))
        except RedisError as exc:
            logger.warning(f"Cache read failed: {exc}", extra={"cache_key": key, "group": group})
            return False, None
        if raw is None:
            return False, None
        return True, maybe_unserialize(raw)

    def _write(self, key: str, value: Any, group: str, ttl: int, only_new: bool) -> bool:
        try:
            payload = maybe_serialize(value)
        except OptionValueError as exc:
            logger.warning(f"Cache write skipped: {exc}", extra={"cache_key": key, "group": group})
            return False
        try:
            result = self._client.set(
                self._key(key, group),
                payload,
                ex=ttl if ttl and ttl > 0 else None,
                nx=only_new,
            )
        except RedisError as exc:
            logger.warning(f"Cache write failed: {exc}", extra={"cache_key": key, "group": group})
            return False
        return bool(result)

    def set(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        return self._write(key, value, group, ttl, only_new=False)

    def add(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        return self._write(key, value, group, ttl, only_new=True)

    def delete(self, key: str, group: str) -> bool:
        try:
            return bool(self._client.delete(self._key(key, group)))
        except RedisError as exc:
            logger.warning(f"Cache delete failed: {exc}", extra={"cache_key": key, "group": group})
            return False

    def flush(self) -> bool:
        try:
            keys = list(self._client.scan_iter(match=f"{self._prefix}:*"))
            if keys:
                self._client.delete(*keys)
        except RedisError as exc:
            logger.warning(f"Cache flush failed: {exc}")
            return False
        return True
