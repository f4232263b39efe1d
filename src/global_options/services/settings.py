"""Registry of known settings and the hooks each registration installs."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Mapping, Optional

from ..logging_config import get_logger
from .hooks import Hook, HookHandle, HookRegistry

logger = get_logger(__name__)

SETTING_TYPES = ("string", "boolean", "integer", "number", "array", "object")

# Short spellings accepted in registration args.
_ARG_ALIASES = {"sanitize": "sanitize_callback", "validate": "validate_callback"}


@dataclass(frozen=True)
class SettingArgs:
    """Data describing one registered setting."""

    type: str = "string"
    group: str = ""
    description: str = ""
    sanitize_callback: Optional[Callable[..., Any]] = None
    validate_callback: Optional[Callable[..., Any]] = None
    show_in_rest: bool = False
    default: Any = None
    has_default: bool = False

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if not self.has_default:
            data.pop("default")
        data.pop("has_default")
        return data


@dataclass
class _Registration:
    args: SettingArgs
    handles: list[HookHandle] = field(default_factory=list)


class SettingsRegistry:
    """Maps option names to their registered settings.

    Registering installs the setting's validate and sanitize callbacks and,
    when a default is given, a hook that answers reads of the absent option
    with that default. Unregistering removes exactly those hooks.
    """

    def __init__(self, hooks: HookRegistry):
        self.hooks = hooks
        self._registered: dict[str, _Registration] = {}
        self._whitelist: dict[str, list[str]] = {}

    def register(self, group: str, name: str, args: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> SettingArgs:
        """Register ``name`` under ``group``; replaces an earlier registration."""
        raw: dict[str, Any] = dict(args or {})
        raw.update(kwargs)
        for alias, canonical in _ARG_ALIASES.items():
            if alias in raw:
                raw.setdefault(canonical, raw.pop(alias))

        defaults = SettingArgs(group=group).as_dict()
        raw = self.hooks.apply_filters(Hook.REGISTER_SETTING_ARGS, None, raw, defaults, group, name)

        unknown = set(raw) - set(defaults) - {"default"}
        if unknown:
            raise TypeError(f"Unknown setting arguments: {', '.join(sorted(unknown))}")

        has_default = "default" in raw
        setting = replace(SettingArgs(group=group), **raw, has_default=has_default)
        if setting.type not in SETTING_TYPES:
            logger.warning("Unrecognised setting type", extra={"option": name, "type": setting.type})

        if name in self._registered:
            self._teardown(name)

        members = self._whitelist.setdefault(group, [])
        if name not in members:
            members.append(name)

        registration = _Registration(setting)
        if setting.sanitize_callback:
            registration.handles.append(
                self.hooks.add_filter(Hook.SANITIZE_OPTION, setting.sanitize_callback, name)
            )
        if setting.validate_callback:
            registration.handles.append(
                self.hooks.add_filter(Hook.VALIDATE_OPTION, setting.validate_callback, name)
            )
        if has_default:
            registration.handles.append(
                self.hooks.add_filter(Hook.DEFAULT_OPTION, self._default_filter(name), name)
            )
        self._registered[name] = registration
        logger.debug("Setting registered", extra={"option": name, "group": group})
        return setting

    def _default_filter(self, name: str) -> Callable[[Any, str, bool], Any]:
        def filter_default(default: Any, option: str, passed_default: bool) -> Any:
            if passed_default:
                return default
            registration = self._registered.get(name)
            if registration is None or not registration.args.has_default:
                return default
            return registration.args.default

        return filter_default

    def _teardown(self, name: str) -> None:
        registration = self._registered.pop(name)
        for handle in registration.handles:
            self.hooks.remove_handle(handle)

    def unregister(self, group: str, name: str) -> None:
        """Remove ``name`` from ``group`` and drop its hooks. Safe to repeat."""
        members = self._whitelist.get(group)
        if members and name in members:
            members.remove(name)
        if name in self._registered:
            self._teardown(name)
            logger.debug("Setting unregistered", extra={"option": name, "group": group})

    def get(self, name: str) -> Optional[SettingArgs]:
        registration = self._registered.get(name)
        return registration.args if registration else None

    def list(self) -> dict[str, SettingArgs]:
        """Snapshot of every registered setting, keyed by option name."""
        return {name: registration.args for name, registration in self._registered.items()}

    def whitelist(self) -> dict[str, list[str]]:
        """Group -> option names registered under it."""
        return {group: list(names) for group, names in self._whitelist.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._registered


__all__ = ["SETTING_TYPES", "SettingArgs", "SettingsRegistry"]
