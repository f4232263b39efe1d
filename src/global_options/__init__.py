"""Shared, cached key/value store for global options and transients."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestConfig
from .context import OptionsContext, create_options_context
from .errors import GlobalOptionsError, OptionValueError, ProtectedOptionError

__all__ = [
    "BaseConfig",
    "DevConfig",
    "GlobalOptionsError",
    "OptionValueError",
    "OptionsContext",
    "ProtectedOptionError",
    "TestConfig",
    "create_options_context",
]
