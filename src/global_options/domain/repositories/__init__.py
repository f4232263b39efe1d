"""Repository protocol definitions for domain layer."""

from .object_cache import OPTIONS_GROUP, TRANSIENT_GROUP, ObjectCache
from .option import TRANSIENT_PREFIX, OptionQuery, OptionRepository, OptionRow

__all__ = [
    "OPTIONS_GROUP",
    "TRANSIENT_GROUP",
    "TRANSIENT_PREFIX",
    "ObjectCache",
    "OptionQuery",
    "OptionRepository",
    "OptionRow",
]
