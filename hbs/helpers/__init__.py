"""Helper protocol, registry and built-in helpers."""

from __future__ import annotations

from .base import Helper, FunctionHelper, SafeString, as_helper
from .builtins import EACH, IF, UNLESS, WITH, LOOKUP, LOG, register_builtins
from .registry import HelperRegistry, HELPER_MISSING


def default_registry(*, strict: bool = False) -> HelperRegistry:
    """A fresh registry with the built-in helpers installed."""
    return register_builtins(HelperRegistry(), strict=strict)


__all__ = [
    "Helper",
    "FunctionHelper",
    "SafeString",
    "as_helper",
    "HelperRegistry",
    "HELPER_MISSING",
    "EACH", "IF", "UNLESS", "WITH", "LOOKUP", "LOG",
    "register_builtins",
    "default_registry",
]
