"""
Helper registry.

An explicitly constructed name -> helper table owned by the host and handed
to both the compiler (which binds explicit helpers into Block and Variable
nodes at construction time) and the renderer (which looks up the implicit
section helpers by name).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from .base import Helper, as_helper

logger = logging.getLogger(__name__)

# Invoked when a referenced name resolves to nothing, if registered.
HELPER_MISSING = "helperMissing"


class HelperRegistry:
    """
    Case-sensitive helper table.

    Re-registering a name replaces the previous binding. Nodes compiled
    before the replacement keep the helper they were built with.
    """

    def __init__(self) -> None:
        self._helpers: Dict[str, Helper] = {}

    def register(self, name: str, helper: Any) -> HelperRegistry:
        """
        Bind `helper` (a Helper or a `fn(context, options)` callable) to `name`.

        Raises:
            ValueError: If the name is empty
            TypeError: If the helper is neither a Helper nor callable
        """
        if not name:
            raise ValueError("Helper name is required")
        if name in self._helpers:
            logger.info("Helper '%s' replaces an existing binding", name)
        self._helpers[name] = as_helper(helper)
        return self

    def helper(self, name: Optional[str] = None) -> Callable[[Callable], Callable]:
        """Decorator form of `register`; defaults to the function's name."""
        def decorator(fn: Callable) -> Callable:
            self.register(name or fn.__name__, fn)
            return fn
        return decorator

    def lookup(self, name: str) -> Optional[Helper]:
        return self._helpers.get(name)

    def names(self) -> List[str]:
        return sorted(self._helpers)

    def copy(self) -> HelperRegistry:
        clone = HelperRegistry()
        clone._helpers = dict(self._helpers)
        return clone

    def __contains__(self, name: object) -> bool:
        return name in self._helpers

    def __iter__(self) -> Iterator[str]:
        return iter(self._helpers)

    def __len__(self) -> int:
        return len(self._helpers)


__all__ = ["HelperRegistry", "HELPER_MISSING"]
