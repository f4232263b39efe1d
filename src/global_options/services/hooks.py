"""Interception points around option and transient operations.

Callbacks are stored in an explicit dispatch table keyed by ``(Hook, name)``.
``name`` is the option or transient name a callback is scoped to, or None for
callbacks that see every name. Callbacks run in ascending priority, then in
registration order.

Call signatures by hook (``value`` hooks are filters and must return the
possibly changed value; the rest are actions whose return value is ignored):

=====================  ==============================================
PRE_OPTION             ``(pre, name) -> value | False``
DEFAULT_OPTION         ``(default, name, passed_default) -> value``
OPTION                 ``(value, name) -> value``
PRE_UPDATE_OPTION      ``(value, old_value, name) -> value`` scoped to a name
                       ``(value, name, old_value) -> value`` global
UPDATE_OPTION          ``(name, old_value, value)``
UPDATED_OPTION         ``(name, old_value, value)``
ADD_OPTION             ``(name, value)``
ADDED_OPTION           ``(name, value)``
PRE_DELETE_OPTION      ``(name)``
DELETED_OPTION         ``(name)``
VALIDATE_OPTION        ``(errors, value, name) -> errors``
SANITIZE_OPTION        ``(value, name, original_value) -> value``
PRE_TRANSIENT          ``(pre, transient) -> value | False``
TRANSIENT              ``(value, transient) -> value``
PRE_SET_TRANSIENT      ``(value, expiration, transient) -> value``
TRANSIENT_EXPIRATION   ``(expiration, value, transient) -> int``
SET_TRANSIENT          ``(transient, value, expiration)``
DELETE_TRANSIENT       ``(transient)``
DELETED_TRANSIENT      ``(transient)``
REGISTER_SETTING_ARGS  ``(args, defaults, group, name) -> args``
=====================  ==============================================
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PRIORITY = 10


class Hook(str, Enum):
    PRE_OPTION = "pre_option"
    DEFAULT_OPTION = "default_option"
    OPTION = "option"
    PRE_UPDATE_OPTION = "pre_update_option"
    UPDATE_OPTION = "update_option"
    UPDATED_OPTION = "updated_option"
    ADD_OPTION = "add_option"
    ADDED_OPTION = "added_option"
    PRE_DELETE_OPTION = "pre_delete_option"
    DELETED_OPTION = "deleted_option"
    VALIDATE_OPTION = "validate_option"
    SANITIZE_OPTION = "sanitize_option"
    PRE_TRANSIENT = "pre_transient"
    TRANSIENT = "transient"
    PRE_SET_TRANSIENT = "pre_set_transient"
    TRANSIENT_EXPIRATION = "transient_expiration"
    SET_TRANSIENT = "set_transient"
    DELETE_TRANSIENT = "delete_transient"
    DELETED_TRANSIENT = "deleted_transient"
    REGISTER_SETTING_ARGS = "register_setting_args"


@dataclass(frozen=True)
class HookHandle:
    """Identifies one registered callback so it can be removed later."""

    hook: Hook
    name: Optional[str]
    callback: Callable[..., Any]
    priority: int = DEFAULT_PRIORITY
    seq: int = field(default=0, compare=False)


class HookRegistry:
    """Dispatch table of callbacks keyed by ``(Hook, name)``."""

    def __init__(self) -> None:
        self._table: dict[tuple[Hook, Optional[str]], list[HookHandle]] = {}
        self._counter = itertools.count()

    def add_filter(
        self,
        hook: Hook,
        callback: Callable[..., Any],
        name: Optional[str] = None,
        priority: int = DEFAULT_PRIORITY,
    ) -> HookHandle:
        """Register ``callback`` on ``hook``, optionally scoped to ``name``."""
        handle = HookHandle(hook, name, callback, priority, next(self._counter))
        entries = self._table.setdefault((hook, name), [])
        entries.append(handle)
        entries.sort(key=lambda h: (h.priority, h.seq))
        return handle

    add_action = add_filter

    def remove(
        self,
        hook: Hook,
        callback: Callable[..., Any],
        name: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> bool:
        """Remove the first matching registration of ``callback``."""
        entries = self._table.get((hook, name), [])
        for handle in entries:
            if handle.callback == callback and (priority is None or handle.priority == priority):
                return self.remove_handle(handle)
        return False

    def remove_handle(self, handle: HookHandle) -> bool:
        entries = self._table.get((handle.hook, handle.name))
        if not entries:
            return False
        for index, entry in enumerate(entries):
            if entry.seq == handle.seq and entry.callback == handle.callback:
                del entries[index]
                if not entries:
                    del self._table[(handle.hook, handle.name)]
                return True
        return False

    def has(self, hook: Hook, name: Optional[str] = None, callback: Optional[Callable[..., Any]] = None) -> bool:
        entries = self._table.get((hook, name), [])
        if callback is None:
            return bool(entries)
        return any(handle.callback == callback for handle in entries)

    def callbacks(self, hook: Hook, name: Optional[str] = None) -> list[Callable[..., Any]]:
        return [handle.callback for handle in self._table.get((hook, name), [])]

    def apply_filters(self, hook: Hook, name: Optional[str], value: Any, *args: Any) -> Any:
        """Thread ``value`` through every callback scoped to ``(hook, name)``."""
        for handle in list(self._table.get((hook, name), [])):
            value = handle.callback(value, *args)
        return value

    def short_circuit(self, hook: Hook, name: Optional[str], *args: Any) -> Any:
        """Return the first result that is not False, or False when none is."""
        for handle in list(self._table.get((hook, name), [])):
            result = handle.callback(False, *args)
            if result is not False:
                logger.debug("Short-circuited by hook", extra={"hook": hook.value, "hook_name": name})
                return result
        return False

    def do_action(self, hook: Hook, name: Optional[str], *args: Any) -> None:
        """Run every callback scoped to ``(hook, name)`` for its side effects."""
        for handle in list(self._table.get((hook, name), [])):
            handle.callback(*args)

    def clear(self) -> None:
        self._table.clear()


__all__ = ["DEFAULT_PRIORITY", "Hook", "HookHandle", "HookRegistry"]
