"""Option repository protocol and the value objects it exchanges."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

TRANSIENT_PREFIX = "_transient_"


@dataclass(frozen=True)
class OptionRow:
    """A detached durable record, value still encoded."""

    name: str
    value: str
    autoload: str
    id: Optional[int] = None

    @property
    def size_bytes(self) -> int:
        return len(self.value.encode("utf-8"))


@dataclass(frozen=True)
class OptionQuery:
    """Predicate for scanning the durable store.

    ``search`` and ``exclude`` are glob patterns where ``*`` matches any run of
    characters and ``?`` a single character. ``autoload`` is ``"on"``,
    ``"off"`` or None. ``transients`` is True to keep only transient records,
    False to drop them and None to skip the check.
    """

    search: Optional[str] = None
    exclude: Optional[str] = None
    autoload: Optional[str] = None
    transients: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.autoload not in (None, "on", "off"):
            raise ValueError("autoload must be 'on', 'off' or None")


class OptionRepository(Protocol):
    """Durable table of uniquely named option records."""

    def get_row(self, name: str) -> Optional[OptionRow]:
        """Return the row stored under ``name``."""
        ...

    def upsert(self, name: str, value: str, autoload: str) -> bool:
        """Insert a row, overwriting value and autoload on a name conflict."""
        ...

    def update(self, name: str, value: Optional[str] = None, autoload: Optional[str] = None) -> bool:
        """Change an existing row; False when nothing was written."""
        ...

    def delete(self, name: str) -> bool:
        """Remove the row stored under ``name``."""
        ...

    def scan(self, query: OptionQuery) -> list[OptionRow]:
        """Return rows matching ``query`` in insertion order."""
        ...

    def load_autoloaded(self) -> dict[str, str]:
        """Return name -> encoded value for every autoloaded row."""
        ...
