"""Exceptions raised by the global options store.

Most outcomes are reported through boolean results. Exceptions are reserved
for usage errors a caller must not ignore.
"""

from __future__ import annotations


class GlobalOptionsError(Exception):
    """Base class for errors raised by this package."""


class ProtectedOptionError(GlobalOptionsError):
    """Raised when a reserved option name is passed to a mutating call."""

    def __init__(self, name: str):
        super().__init__(f"{name} is a protected option and may not be modified")
        self.name = name


class OptionValueError(GlobalOptionsError, ValueError):
    """Raised when a value cannot be encoded for the durable store."""


class TraversalError(GlobalOptionsError, KeyError):
    """Raised when a key path does not resolve inside a structured value."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


__all__ = ["GlobalOptionsError", "OptionValueError", "ProtectedOptionError", "TraversalError"]
