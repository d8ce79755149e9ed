"""
Parameter and hash resolution.

Declared parameters are kept in their source form on the node and resolved
against a scope at every evaluation: literals yield their value, references
are looked up through the scope chain, sub-expressions call their helper.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, List, Mapping, Tuple

from ..context import Context

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


class ParamType(enum.Enum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    REFERENCE = "REFERENCE"
    SUB_EXPRESSION = "SUB_EXPRESSION"


@dataclass(frozen=True)
class Param:
    """
    One declared parameter.

    `raw` is the exact source text (quotes included for strings) so the tag
    can be serialized back; `value` holds the literal value, or the
    sub-expression node for SUB_EXPRESSION.
    """
    type: ParamType
    raw: str
    value: Any = None

    @classmethod
    def from_literal(cls, raw: str) -> Param:
        """Classify a bare token from a tag: string, number, boolean, null or reference."""
        if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
            return cls(ParamType.STRING, raw, _unquote(raw))
        if raw in ("true", "false"):
            return cls(ParamType.BOOLEAN, raw, raw == "true")
        if raw in ("null", "undefined"):
            return cls(ParamType.NULL, raw, None)
        if _NUMBER.fullmatch(raw):
            return cls(ParamType.NUMBER, raw, float(raw) if "." in raw else int(raw))
        return cls(ParamType.REFERENCE, raw, None)

    @property
    def is_reference(self) -> bool:
        return self.type is ParamType.REFERENCE

    def text(self) -> str:
        if self.type is ParamType.SUB_EXPRESSION:
            return self.value.text()
        return self.raw


# Hash pairs in declaration order
HashItems = Tuple[Tuple[str, Param], ...]


def _unquote(raw: str) -> str:
    quote = raw[0]
    body = raw[1:-1]
    return body.replace("\\" + quote, quote).replace("\\\\", "\\")


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_param(param: Param, context: Context) -> Any:
    if param.type is ParamType.REFERENCE:
        return context.get(param.raw)
    if param.type is ParamType.SUB_EXPRESSION:
        return param.value.evaluate(context)
    return param.value


def resolve_params(params: Tuple[Param, ...], context: Context) -> Tuple[Any, ...]:
    return tuple(resolve_param(p, context) for p in params)


def resolve_hash(hash_items: HashItems, context: Context) -> Mapping[str, Any]:
    return MappingProxyType({key: resolve_param(p, context) for key, p in hash_items})


def determine_context(params: Tuple[Param, ...], context: Context) -> Any:
    """Context value for an explicit helper: first param, or the scope's own `self`."""
    if not params:
        return context.model
    return resolve_param(params[0], context)


# ---------------------------------------------------------------------------
# Serialization and introspection
# ---------------------------------------------------------------------------

def params_to_text(params: Tuple[Param, ...]) -> str:
    return " ".join(p.text() for p in params)


def hash_to_text(hash_items: HashItems) -> str:
    return " ".join(f"{key}={p.text()}" for key, p in hash_items)


def reference_names(params: Tuple[Param, ...], hash_items: HashItems) -> List[str]:
    """Bare-name references among params and hash values, in declaration order."""
    names = [p.raw for p in params if p.is_reference]
    names.extend(p.raw for _, p in hash_items if p.is_reference)
    return names


__all__ = [
    "ParamType",
    "Param",
    "HashItems",
    "resolve_param",
    "resolve_params",
    "resolve_hash",
    "determine_context",
    "params_to_text",
    "hash_to_text",
    "reference_names",
]
