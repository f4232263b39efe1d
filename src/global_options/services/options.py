"""Option store: two-tier reads and writes over the durable table and cache.

Reads consult, in order, the pre-read override hook, the ``notoptions``
negative cache, the ``alloptions`` bulk map of autoloaded values, the per-key
cache entry and finally the durable store. Every write updates the durable
store first and then patches or invalidates the cache entries that mirror it.

Public methods keep the boolean contract (False covers both "nothing to do"
and "failed"); the ``*_outcome`` variants report a :class:`WriteOutcome`.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Iterable, Optional

from ..domain.repositories.object_cache import OPTIONS_GROUP, ObjectCache
from ..domain.repositories.option import OptionRepository
from ..errors import ProtectedOptionError
from ..logging_config import get_logger
from ..models.option import AUTOLOAD_NO, AUTOLOAD_YES
from ..serialization import maybe_serialize, maybe_unserialize, same_value
from .hooks import Hook, HookRegistry
from .sanitization import SanitizationPipeline, SettingsErrors

logger = get_logger(__name__)

ALLOPTIONS_KEY = "alloptions"
NOTOPTIONS_KEY = "notoptions"
PROTECTED_OPTIONS = frozenset({ALLOPTIONS_KEY, NOTOPTIONS_KEY})


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class WriteOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    UNCHANGED = "unchanged"
    REJECTED = "rejected"
    NOT_FOUND = "not_found"
    FAILED = "failed"

    @property
    def succeeded(self) -> bool:
        return self in (WriteOutcome.CREATED, WriteOutcome.UPDATED, WriteOutcome.DELETED)


def normalize_name(name: Any) -> str:
    if name is None:
        return ""
    return str(name).strip()


def normalize_autoload(autoload: Any) -> str:
    """Map 'yes'/'no'/True/False onto the stored flag."""
    if autoload is False or autoload == AUTOLOAD_NO:
        return AUTOLOAD_NO
    return AUTOLOAD_YES


class OptionStore:
    def __init__(
        self,
        repository: OptionRepository,
        cache: ObjectCache,
        hooks: HookRegistry,
        *,
        settings_errors: Optional[SettingsErrors] = None,
        protected_names: Iterable[str] = PROTECTED_OPTIONS,
    ):
        self.repository = repository
        self.cache = cache
        self.hooks = hooks
        self.protected_names = frozenset(protected_names)
        self.pipeline = SanitizationPipeline(hooks, self.get, settings_errors)

    # -- cache helpers -----------------------------------------------------

    def load_alloptions(self) -> dict[str, str]:
        """Return name -> encoded value for autoloaded options.

        Populated with one scan of the durable store when the cache has no map.
        """
        found, alloptions = self.cache.get(ALLOPTIONS_KEY, OPTIONS_GROUP)
        if not found or not isinstance(alloptions, dict):
            alloptions = self.repository.load_autoloaded()
            self.cache.add(ALLOPTIONS_KEY, alloptions, OPTIONS_GROUP)
            logger.debug("Loaded autoloaded options", extra={"count": len(alloptions)})
        return dict(alloptions)

    def _notoptions(self) -> dict[str, bool]:
        found, notoptions = self.cache.get(NOTOPTIONS_KEY, OPTIONS_GROUP)
        if not found or not isinstance(notoptions, dict):
            return {}
        return notoptions

    def _forget_absence(self, name: str) -> None:
        notoptions = self._notoptions()
        if name in notoptions:
            del notoptions[name]
            self.cache.set(NOTOPTIONS_KEY, notoptions, OPTIONS_GROUP)

    def _default_for(self, name: str, default: Any, passed_default: bool) -> Any:
        return self.hooks.apply_filters(Hook.DEFAULT_OPTION, name, default, name, passed_default)

    def _protect(self, name: str) -> None:
        if name in self.protected_names:
            raise ProtectedOptionError(name)

    # -- reads ---------------------------------------------------------------

    def get(self, name: str, default: Any = UNSET) -> Any:
        """Return the decoded value of ``name``.

        Falls back to ``default`` (False when omitted, or a registered setting
        default) when the option does not exist. An empty name returns False.
        """
        name = normalize_name(name)
        if not name:
            return False

        passed_default = default is not UNSET
        if not passed_default:
            default = False

        pre = self.hooks.short_circuit(Hook.PRE_OPTION, name, name)
        if pre is not False:
            return pre

        notoptions = self._notoptions()
        if name in notoptions:
            return self._default_for(name, default, passed_default)

        alloptions = self.load_alloptions()
        if name in alloptions:
            raw = alloptions[name]
        else:
            found, raw = self.cache.get(name, OPTIONS_GROUP)
            if not found:
                row = self.repository.get_row(name)
                if row is None:
                    notoptions[name] = True
                    self.cache.set(NOTOPTIONS_KEY, notoptions, OPTIONS_GROUP)
                    return self._default_for(name, default, passed_default)
                raw = row.value
                self.cache.add(name, raw, OPTIONS_GROUP)

        return self.hooks.apply_filters(Hook.OPTION, name, maybe_unserialize(raw), name)

    def exists(self, name: str) -> bool:
        """True when a durable row is stored under ``name``."""
        name = normalize_name(name)
        return bool(name) and self.repository.get_row(name) is not None

    def sanitize(self, name: str, value: Any) -> Any:
        """Run the validate/sanitize pipeline for ``name`` without writing."""
        return self.pipeline.sanitize(normalize_name(name), value)

    # -- writes ----------------------------------------------------------------

    def add_outcome(self, name: str, value: Any = "", autoload: Any = AUTOLOAD_NO) -> WriteOutcome:
        name = normalize_name(name)
        if not name:
            return WriteOutcome.REJECTED
        self._protect(name)

        value = self.pipeline.sanitize(name, copy.deepcopy(value))
        return self._insert(name, value, autoload)

    def _insert(self, name: str, value: Any, autoload: Any) -> WriteOutcome:
        # The negative cache answers "absent" without a query.
        if name not in self._notoptions():
            if not same_value(self._default_for(name, False, False), self.get(name)):
                logger.debug("Add skipped, option exists", extra={"option": name})
                return WriteOutcome.REJECTED

        serialized = maybe_serialize(value)
        autoload = normalize_autoload(autoload)

        self.hooks.do_action(Hook.ADD_OPTION, None, name, value)

        if not self.repository.upsert(name, serialized, autoload):
            logger.warning("Could not add option", extra={"option": name})
            return WriteOutcome.FAILED

        alloptions = self.load_alloptions()
        if autoload == AUTOLOAD_YES:
            alloptions[name] = serialized
            self.cache.set(ALLOPTIONS_KEY, alloptions, OPTIONS_GROUP)
            self.cache.delete(name, OPTIONS_GROUP)
        else:
            if name in alloptions:
                del alloptions[name]
                self.cache.set(ALLOPTIONS_KEY, alloptions, OPTIONS_GROUP)
            self.cache.set(name, serialized, OPTIONS_GROUP)

        self._forget_absence(name)

        self.hooks.do_action(Hook.ADDED_OPTION, name, name, value)
        self.hooks.do_action(Hook.ADDED_OPTION, None, name, value)
        logger.debug("Option added", extra={"option": name, "autoload": autoload})
        return WriteOutcome.CREATED

    def update_outcome(self, name: str, value: Any, autoload: Any = None) -> WriteOutcome:
        name = normalize_name(name)
        if not name:
            return WriteOutcome.REJECTED
        self._protect(name)

        value = self.pipeline.sanitize(name, copy.deepcopy(value))
        old_value = self.get(name)

        value = self.hooks.apply_filters(Hook.PRE_UPDATE_OPTION, name, value, old_value, name)
        value = self.hooks.apply_filters(Hook.PRE_UPDATE_OPTION, None, value, name, old_value)
        serialized = maybe_serialize(value)

        unchanged = same_value(value, old_value)
        if unchanged and autoload is None:
            return WriteOutcome.UNCHANGED

        if same_value(self._default_for(name, False, False), old_value):
            return self._insert(name, value, AUTOLOAD_NO if autoload is None else autoload)

        flag = None if autoload is None else normalize_autoload(autoload)
        if unchanged:
            # Only the autoload flag can change; cached values stay correct.
            row = self.repository.get_row(name)
            if row is None or row.autoload == flag:
                return WriteOutcome.UNCHANGED
            if not self.repository.update(name, autoload=flag):
                return WriteOutcome.FAILED
            logger.debug("Option autoload changed", extra={"option": name, "autoload": flag})
            return WriteOutcome.UPDATED

        self.hooks.do_action(Hook.UPDATE_OPTION, None, name, old_value, value)

        if not self.repository.update(name, serialized, flag):
            logger.warning("Could not update option", extra={"option": name})
            return WriteOutcome.FAILED

        self._forget_absence(name)

        # A changed autoload flag patches the entry where it already lives.
        alloptions = self.load_alloptions()
        if name in alloptions:
            alloptions[name] = serialized
            self.cache.set(ALLOPTIONS_KEY, alloptions, OPTIONS_GROUP)
        else:
            self.cache.set(name, serialized, OPTIONS_GROUP)

        self.hooks.do_action(Hook.UPDATED_OPTION, name, name, old_value, value)
        self.hooks.do_action(Hook.UPDATED_OPTION, None, name, old_value, value)
        logger.debug("Option updated", extra={"option": name})
        return WriteOutcome.UPDATED

    def delete_outcome(self, name: str) -> WriteOutcome:
        name = normalize_name(name)
        if not name:
            return WriteOutcome.REJECTED
        self._protect(name)

        row = self.repository.get_row(name)
        if row is None:
            return WriteOutcome.NOT_FOUND

        self.hooks.do_action(Hook.PRE_DELETE_OPTION, name, name)

        result = self.repository.delete(name)

        alloptions = self.load_alloptions()
        if name in alloptions:
            del alloptions[name]
            self.cache.set(ALLOPTIONS_KEY, alloptions, OPTIONS_GROUP)
        self.cache.delete(name, OPTIONS_GROUP)

        if not result:
            logger.warning("Could not delete option", extra={"option": name})
            return WriteOutcome.FAILED

        self.hooks.do_action(Hook.DELETED_OPTION, name, name)
        self.hooks.do_action(Hook.DELETED_OPTION, None, name)
        logger.debug("Option deleted", extra={"option": name, "autoload": row.autoload})
        return WriteOutcome.DELETED

    def add(self, name: str, value: Any = "", autoload: Any = AUTOLOAD_NO) -> bool:
        """Add a new option; False when it already exists or the write failed."""
        return self.add_outcome(name, value, autoload).succeeded

    def update(self, name: str, value: Any, autoload: Any = None) -> bool:
        """Update ``name``, adding it when absent; False when nothing changed."""
        return self.update_outcome(name, value, autoload).succeeded

    def delete(self, name: str) -> bool:
        """Delete ``name``; False when there is no such row."""
        return self.delete_outcome(name).succeeded


__all__ = [
    "ALLOPTIONS_KEY",
    "NOTOPTIONS_KEY",
    "PROTECTED_OPTIONS",
    "UNSET",
    "OptionStore",
    "WriteOutcome",
    "normalize_autoload",
    "normalize_name",
]
