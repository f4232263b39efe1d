"""Transients: option-backed values with an optional expiry.

With an external object cache the value lives only in the cache, which
enforces the TTL. Otherwise a transient is two options: ``_transient_<name>``
holds the value and ``_transient_timeout_<name>`` the absolute expiry time.
Values without an expiry are autoloaded; values with one are not, so a value
missing from the autoload map is the signal to check its timeout. Expired
records are removed when they are read.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from ..domain.repositories.object_cache import TRANSIENT_GROUP, ObjectCache
from ..domain.repositories.option import TRANSIENT_PREFIX
from ..logging_config import get_logger
from ..models.option import AUTOLOAD_NO, AUTOLOAD_YES
from .hooks import Hook, HookRegistry
from .options import UNSET, OptionStore

logger = get_logger(__name__)

TIMEOUT_PREFIX = f"{TRANSIENT_PREFIX}timeout_"
# Leaves room for the timeout prefix inside the 191 character name column.
MAX_TRANSIENT_NAME_LENGTH = 172


def transient_option_name(transient: str) -> str:
    return f"{TRANSIENT_PREFIX}{transient}"


def transient_timeout_name(transient: str) -> str:
    return f"{TIMEOUT_PREFIX}{transient}"


def valid_transient_name(transient: Any) -> bool:
    return isinstance(transient, str) and 0 < len(transient) <= MAX_TRANSIENT_NAME_LENGTH


def coerce_expiration(expiration: Any) -> int:
    """Seconds until expiry; anything unusable or negative means none."""
    try:
        return max(int(expiration), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


class TransientStore:
    def __init__(
        self,
        options: OptionStore,
        cache: ObjectCache,
        hooks: HookRegistry,
        clock: Callable[[], float] = time.time,
    ):
        self.options = options
        self.cache = cache
        self.hooks = hooks
        self.clock = clock

    def _now(self) -> int:
        return int(self.clock())

    def _is_expired(self, timeout: Any) -> bool:
        if timeout is False or isinstance(timeout, bool):
            return False
        try:
            return float(timeout) < self._now()
        except (TypeError, ValueError):
            return False

    def get(self, transient: str) -> Any:
        """Return the transient's value, or False when absent or expired."""
        if not valid_transient_name(transient):
            return False
        pre = self.hooks.short_circuit(Hook.PRE_TRANSIENT, transient, transient)
        if pre is not False:
            return pre

        if self.cache.is_external:
            found, value = self.cache.get(transient, TRANSIENT_GROUP)
            if not found:
                value = False
        else:
            option = transient_option_name(transient)
            value = UNSET
            if option not in self.options.load_alloptions():
                timeout_option = transient_timeout_name(transient)
                if self._is_expired(self.options.get(timeout_option)):
                    self.options.delete(option)
                    self.options.delete(timeout_option)
                    logger.debug("Transient expired", extra={"transient": transient})
                    value = False
            if value is UNSET:
                value = self.options.get(option)

        return self.hooks.apply_filters(Hook.TRANSIENT, transient, value, transient)

    def set(self, transient: str, value: Any, expiration: int = 0) -> bool:
        """Store ``value``; ``expiration`` is in seconds, 0 for none."""
        if not valid_transient_name(transient):
            return False
        expiration = coerce_expiration(expiration)

        value = self.hooks.apply_filters(Hook.PRE_SET_TRANSIENT, transient, value, expiration, transient)
        expiration = coerce_expiration(
            self.hooks.apply_filters(Hook.TRANSIENT_EXPIRATION, transient, expiration, value, transient)
        )

        if self.cache.is_external:
            result = self.cache.set(transient, value, TRANSIENT_GROUP, expiration)
        else:
            option = transient_option_name(transient)
            timeout_option = transient_timeout_name(transient)
            if self.options.get(option) is False:
                autoload = AUTOLOAD_YES
                if expiration:
                    autoload = AUTOLOAD_NO
                    self.options.update(timeout_option, self._now() + expiration, AUTOLOAD_NO)
                result = self.options.add(option, value, autoload)
            else:
                update = True
                if expiration:
                    if self.options.get(timeout_option) is False:
                        # Recreate instead of updating: an autoloaded value
                        # would never have its new timeout checked.
                        self.options.delete(option)
                        self.options.add(timeout_option, self._now() + expiration, AUTOLOAD_NO)
                        result = self.options.add(option, value, AUTOLOAD_NO)
                        update = False
                    else:
                        self.options.update(timeout_option, self._now() + expiration)
                if update:
                    result = self.options.update(option, value)

        if result:
            self.hooks.do_action(Hook.SET_TRANSIENT, transient, transient, value, expiration)
            self.hooks.do_action(Hook.SET_TRANSIENT, None, transient, value, expiration)
        return result

    def delete(self, transient: str) -> bool:
        if not valid_transient_name(transient):
            return False
        self.hooks.do_action(Hook.DELETE_TRANSIENT, transient, transient)

        if self.cache.is_external:
            result = self.cache.delete(transient, TRANSIENT_GROUP)
        else:
            result = self.options.delete(transient_option_name(transient))
            if result:
                self.options.delete(transient_timeout_name(transient))

        if result:
            self.hooks.do_action(Hook.DELETED_TRANSIENT, None, transient)
        return result


__all__ = [
    "MAX_TRANSIENT_NAME_LENGTH",
    "TransientStore",
    "coerce_expiration",
    "transient_option_name",
    "transient_timeout_name",
    "valid_transient_name",
]
