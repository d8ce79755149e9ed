"""Shared value predicates and formatting used by nodes and helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sized
from numbers import Number
from typing import Any


# ---------------------------------------------------------------------------
# Type predicates
# ---------------------------------------------------------------------------

def is_iterable(value: Any) -> bool:
    """
    Values a section iterates over.

    Strings and mappings are iterable in Python but behave as scalars and
    objects in templates, so they are excluded.
    """
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(value, Iterable)


def is_empty(value: Any, include_zero: bool = False) -> bool:
    """
    Template truthiness.

    None, False, empty strings and empty collections are empty; zero is empty
    unless `include_zero` is set.
    """
    if value is None or value is False:
        return True
    if value is True:
        return False
    if isinstance(value, Number):
        return not include_zero and value == 0
    if isinstance(value, Sized):
        return len(value) == 0
    return False


# ---------------------------------------------------------------------------
# Output formatting
# ---------------------------------------------------------------------------

def format_value(value: Any) -> str:
    """Text form of a resolved value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if is_iterable(value):
        return ",".join(format_value(item) for item in value)
    return str(value)


__all__ = ["is_iterable", "is_empty", "format_value"]
