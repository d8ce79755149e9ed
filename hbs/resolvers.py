"""
Value resolvers.

A resolver knows how to read one named member out of a data value: a key of a
mapping, an index of a sequence, or a public attribute of an object. The scope
chain asks each configured resolver in turn until one answers.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, List


class _Unresolved:
    """Marker for "this resolver has no such member" (distinct from None)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESOLVED"

    def __bool__(self) -> bool:
        return False


UNRESOLVED = _Unresolved()


class ValueResolver(ABC):
    """Reads a named member of a value or returns UNRESOLVED."""

    @abstractmethod
    def resolve(self, value: Any, name: str) -> Any:
        pass


class MapValueResolver(ValueResolver):
    """Mapping keys."""

    def resolve(self, value: Any, name: str) -> Any:
        if isinstance(value, Mapping) and name in value:
            return value[name]
        return UNRESOLVED


class SequenceValueResolver(ValueResolver):
    """Numeric indexes and `length` of sequences (strings excluded)."""

    def resolve(self, value: Any, name: str) -> Any:
        if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
            return UNRESOLVED
        if name == "length":
            return len(value)
        if name.isdigit():
            index = int(name)
            if index < len(value):
                return value[index]
        return UNRESOLVED


class AttributeValueResolver(ValueResolver):
    """
    Public attributes and properties of plain objects.

    Names starting with an underscore and bound methods are never exposed;
    templates read state, they do not invoke behaviour.
    """

    def resolve(self, value: Any, name: str) -> Any:
        if value is None or name.startswith("_") or isinstance(value, (Mapping, str, bytes)):
            return UNRESOLVED
        try:
            attr = getattr(value, name)
        except AttributeError:
            return UNRESOLVED
        if inspect.ismethod(attr) or inspect.isbuiltin(attr):
            return UNRESOLVED
        return attr


DEFAULT_RESOLVERS: List[ValueResolver] = [
    MapValueResolver(),
    SequenceValueResolver(),
    AttributeValueResolver(),
]


def resolve_member(resolvers: List[ValueResolver], value: Any, name: str) -> Any:
    """First non-UNRESOLVED answer from the resolver list."""
    for resolver in resolvers:
        result = resolver.resolve(value, name)
        if result is not UNRESOLVED:
            return result
    return UNRESOLVED


__all__ = [
    "UNRESOLVED",
    "ValueResolver",
    "MapValueResolver",
    "SequenceValueResolver",
    "AttributeValueResolver",
    "DEFAULT_RESOLVERS",
    "resolve_member",
]
