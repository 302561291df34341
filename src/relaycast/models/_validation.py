"""Field checks shared by the model dataclasses.

Called from ``__post_init__``; wrong types raise ``TypeError`` and bad values
raise ``ValueError``, matching what callers of the models catch.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any


_HEX64 = re.compile(r"[0-9a-f]{64}")
_HEX128 = re.compile(r"[0-9a-f]{128}")


def validate_timestamp(value: Any, name: str) -> None:
    """Raise if *value* is not a non-negative ``int`` (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def validate_str_no_null(value: Any, name: str) -> None:
    """Raise if *value* is not a ``str`` or contains null bytes."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    if "\x00" in value:
        raise ValueError(f"{name} contains null bytes")


def validate_hex64(value: Any, name: str) -> None:
    """Raise if *value* is not a 64-character lower-case hex string."""
    validate_str_no_null(value, name)
    if not _HEX64.fullmatch(value):
        raise ValueError(f"{name} must be 64 lower-case hex characters")


def validate_hex128(value: Any, name: str) -> None:
    """Raise if *value* is not a 128-character lower-case hex string."""
    validate_str_no_null(value, name)
    if not _HEX128.fullmatch(value):
        raise ValueError(f"{name} must be 128 lower-case hex characters")


def freeze_str_tuple(values: Iterable[Any], name: str) -> tuple[str, ...]:
    """Validate every item as a null-free ``str`` and return them as a tuple."""
    if isinstance(values, str):
        raise TypeError(f"{name} must be a sequence of str, not a str")
    result = tuple(values)
    for item in result:
        validate_str_no_null(item, name)
    return result
