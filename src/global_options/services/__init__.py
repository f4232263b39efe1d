"""Option, transient and settings services."""

from .hooks import Hook, HookHandle, HookRegistry
from .options import OptionStore, WriteOutcome
from .sanitization import SanitizationPipeline, SettingsErrors, ValidationErrors
from .settings import SettingArgs, SettingsRegistry
from .transients import TransientStore

__all__ = [
    "Hook",
    "HookHandle",
    "HookRegistry",
    "OptionStore",
    "SanitizationPipeline",
    "SettingArgs",
    "SettingsErrors",
    "SettingsRegistry",
    "TransientStore",
    "ValidationErrors",
    "WriteOutcome",
]
