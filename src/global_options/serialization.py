"""Canonical durable encoding for option values.

Values are stored as JSON text. ``bytes`` are wrapped in a tagged object so
opaque blobs survive the trip; tuples come back as lists. Text that is not
valid JSON (rows written by other tools) is returned unchanged on decode.
"""

from __future__ import annotations

import base64
import json
from typing import Any

from .errors import OptionValueError

BYTES_TAG = "__bytes__"
# Wraps user dicts whose only key is a reserved tag so they decode as dicts.
ESCAPE_TAG = "__dict__"
RESERVED_TAGS = frozenset({BYTES_TAG, ESCAPE_TAG})


def _encode(value: Any) -> Any:
    if isinstance(value, dict):
        encoded = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise OptionValueError(f"Cannot store dict key {key!r} of type {type(key).__name__}; keys must be str")
            encoded[key] = _encode(item)
        if len(encoded) == 1 and next(iter(encoded)) in RESERVED_TAGS:
            return {ESCAPE_TAG: encoded}
        return encoded
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {BYTES_TAG: base64.b64encode(bytes(value)).decode("ascii")}
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, list):
        return [_decode(item) for item in value]
    if not isinstance(value, dict):
        return value
    if len(value) == 1:
        key, inner = next(iter(value.items()))
        if key == ESCAPE_TAG and isinstance(inner, dict):
            return {k: _decode(v) for k, v in inner.items()}
        if key == BYTES_TAG and isinstance(inner, str):
            try:
                return base64.b64decode(inner.encode("ascii"), validate=True)
            except ValueError:
                pass
    return {k: _decode(v) for k, v in value.items()}


def maybe_serialize(value: Any) -> str:
    """Encode ``value`` for the durable store.

    Raises :class:`OptionValueError` for anything that would not decode back
    to an equal value, such as sets or dicts with non-string keys.
    """
    try:
        return json.dumps(_encode(value), ensure_ascii=False, allow_nan=False)
    except OptionValueError:
        raise
    except (TypeError, ValueError) as exc:
        raise OptionValueError(f"Cannot store value of type {type(value).__name__}: {exc}") from exc


def maybe_unserialize(data: Any) -> Any:
    """Decode a stored value; non-JSON text is returned as is."""
    if not isinstance(data, str):
        return data
    try:
        decoded = json.loads(data)
    except ValueError:
        return data
    return _decode(decoded)


def same_value(left: Any, right: Any) -> bool:
    """Strict equality: both values must share one canonical encoding."""
    if left is right:
        return True
    try:
        return maybe_serialize(left) == maybe_serialize(right)
    except OptionValueError:
        return False


__all__ = ["maybe_serialize", "maybe_unserialize", "same_value"]
