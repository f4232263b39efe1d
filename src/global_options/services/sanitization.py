"""Validate-then-sanitize pipeline run on every option write."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..logging_config import get_logger
from .hooks import Hook, HookRegistry

logger = get_logger(__name__)


class ValidationErrors:
    """Error collector handed to validate callbacks.

    Callbacks record problems with :meth:`add` and return the collector.
    """

    def __init__(self) -> None:
        self.errors: dict[str, list[str]] = {}

    def add(self, code: str, message: str) -> None:
        self.errors.setdefault(code, []).append(message)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def get_error_codes(self) -> list[str]:
        return list(self.errors)

    def get_error_message(self, code: Optional[str] = None) -> str:
        """Return the first message for ``code`` (or the first code)."""
        if code is None:
            if not self.errors:
                return ""
            code = next(iter(self.errors))
        messages = self.errors.get(code) or [""]
        return messages[0]

    def __bool__(self) -> bool:
        return self.has_errors


@dataclass(frozen=True)
class SettingsError:
    setting: str
    code: str
    message: str
    type: str = "error"


class SettingsErrors:
    """Out-of-band collection of validation failures for display to users."""

    def __init__(self) -> None:
        self._errors: list[SettingsError] = []

    def add(self, setting: str, code: str, message: str, type: str = "error") -> None:
        self._errors.append(SettingsError(setting, code, message, type))

    def get(self, setting: Optional[str] = None) -> list[SettingsError]:
        if setting is None:
            return list(self._errors)
        return [error for error in self._errors if error.setting == setting]

    def clear(self) -> None:
        self._errors.clear()


class SanitizationPipeline:
    """Runs the validate hook, then the sanitize hook, for one option name.

    A value that fails validation is replaced with the currently stored value
    (read through ``read_current``); the failure is recorded in
    ``settings_errors`` and never raised.
    """

    def __init__(
        self,
        hooks: HookRegistry,
        read_current: Callable[[str], Any],
        settings_errors: Optional[SettingsErrors] = None,
    ):
        self.hooks = hooks
        self.read_current = read_current
        self.settings_errors = settings_errors if settings_errors is not None else SettingsErrors()

    def sanitize(self, name: str, value: Any) -> Any:
        original_value = value

        errors = ValidationErrors()
        result = self.hooks.apply_filters(Hook.VALIDATE_OPTION, name, errors, value, name)
        # Callbacks that only mutate the collector may return None.
        if result is None:
            result = errors

        if result:
            value = self.read_current(name)
            message = result.get_error_message() if isinstance(result, ValidationErrors) else str(result)
            self.settings_errors.add(name, f"invalid_{name}", message)
            logger.info("Rejected invalid value", extra={"option": name, "reason": message})

        return self.hooks.apply_filters(Hook.SANITIZE_OPTION, name, value, name, original_value)


__all__ = ["SanitizationPipeline", "SettingsError", "SettingsErrors", "ValidationErrors"]
