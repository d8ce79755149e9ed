"""
Scope chain for template evaluation.

A Context holds the data value a template fragment is rendered against, a
back-reference to the enclosing scope (for `../` navigation and fall-through
lookup), per-scope local bindings (iteration variables such as `@index` and
block parameters) and a side-channel store shared by the whole render.

The side channel is kept apart from the data namespace: a model field named
`inline_partials` never collides with the engine's own bookkeeping.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .errors import ScopeResolutionError
from .resolvers import DEFAULT_RESOLVERS, UNRESOLVED, ValueResolver, resolve_member

# Side-channel keys reserved for the engine; never visible through `@name`.
INLINE_PARTIALS = "inline_partials"
PARAM_SIZE = "param_size"
RESERVED_DATA_KEYS = frozenset({INLINE_PARTIALS, PARAM_SIZE})

_EMPTY_LOCALS: Mapping[str, Any] = MappingProxyType({})

_SEGMENT = re.compile(r"\[([^\]]*)\]|([^./\[\]]+)")


@dataclass(frozen=True)
class PathExpression:
    """A parsed reference such as `../user.name`, `this.id` or `@root.title`."""
    raw: str
    parents: int = 0
    local: bool = False
    data: bool = False
    segments: Tuple[str, ...] = ()


@lru_cache(maxsize=1024)
def parse_path(raw: str) -> PathExpression:
    """Split a reference into parent hops, a locality flag and name segments."""
    text = raw.strip()
    data = text.startswith("@")
    if data:
        text = text[1:]

    parents = 0
    while text.startswith("../"):
        parents += 1
        text = text[3:]
    if text == "..":
        parents += 1
        text = ""

    if text in ("", "this", "."):
        return PathExpression(raw, parents, True, data, ())

    local = False
    if text.startswith(("this.", "this/")):
        local = True
        text = text[5:]
    elif text.startswith("./"):
        local = True
        text = text[2:]

    segments = tuple(
        bracketed if bracketed else plain
        for bracketed, plain in _SEGMENT.findall(text)
    )
    return PathExpression(raw, parents, local, data, segments)


class Context:
    """
    One link of the scope chain.

    Contexts are created, never edited: derived scopes come from `child()`
    and `with_locals()`. The only mutable part is the shared side channel,
    and within it only the inline-partial stack is pushed and popped during
    evaluation.
    """

    def __init__(
        self,
        model: Any,
        parent: Optional[Context] = None,
        *,
        locals: Optional[Mapping[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        resolvers: Optional[List[ValueResolver]] = None,
    ):
        self.model = model
        self.parent = parent
        self._locals: Mapping[str, Any] = MappingProxyType(dict(locals)) if locals else _EMPTY_LOCALS

        if parent is not None:
            self._data = parent._data
            self.resolvers = parent.resolvers
        else:
            self._data = data if data is not None else {}
            self._data.setdefault(INLINE_PARTIALS, [{}])
            self.resolvers = list(resolvers) if resolvers is not None else list(DEFAULT_RESOLVERS)

    # ---------------------------- construction ---------------------------- #

    @classmethod
    def new_context(
        cls,
        model: Any,
        *,
        data: Optional[Mapping[str, Any]] = None,
        resolvers: Optional[List[ValueResolver]] = None,
    ) -> Context:
        """Root scope for one render. An existing Context is returned as is."""
        if isinstance(model, Context):
            return model
        return cls(model, data=dict(data) if data else None, resolvers=resolvers)

    def child(self, model: Any, locals: Optional[Mapping[str, Any]] = None) -> Context:
        """A nested scope whose `self` is `model`."""
        return Context(model, self, locals=locals)

    def with_locals(self, bindings: Mapping[str, Any]) -> Context:
        """
        Same scope level with extra local bindings layered on top.

        Used for block parameters and partial hash arguments: the new scope
        keeps this scope's parent so `../` hops are unaffected.
        """
        merged = dict(self._locals)
        merged.update(bindings)
        if self.parent is not None:
            return Context(self.model, self.parent, locals=merged)
        return Context(self.model, locals=merged, data=self._data, resolvers=self.resolvers)

    # ------------------------------ lookup ------------------------------- #

    @property
    def root(self) -> Context:
        scope = self
        while scope.parent is not None:
            scope = scope.parent
        return scope

    @property
    def locals(self) -> Mapping[str, Any]:
        return self._locals

    def get(self, path: str) -> Any:
        """
        Resolve a reference against this scope.

        Leading `../` segments walk up exactly that many scopes (raising
        ScopeResolutionError past the root). The first name is then looked up
        in local bindings and the model of each scope from here upwards,
        unless the path is scope-local (`this.x`, `./x`). Remaining segments
        are read from the value found. Absent references yield None.
        """
        expr = parse_path(path)

        scope: Context = self
        for _ in range(expr.parents):
            if scope.parent is None:
                raise ScopeResolutionError(path, expr.parents)
            scope = scope.parent

        if expr.data:
            return scope._resolve_data(expr.segments)

        if not expr.segments:
            return scope.model

        head, rest = expr.segments[0], expr.segments[1:]
        current: Optional[Context] = scope
        while current is not None:
            value = current._lookup_local(head)
            if value is not UNRESOLVED:
                return current._resolve_tail(value, rest)
            if expr.local:
                break
            current = current.parent
        return None

    def _lookup_local(self, name: str) -> Any:
        if name in self._locals:
            return self._locals[name]
        return resolve_member(self.resolvers, self.model, name)

    def _resolve_tail(self, value: Any, segments: Tuple[str, ...]) -> Any:
        for name in segments:
            if value is None:
                return None
            value = resolve_member(self.resolvers, value, name)
            if value is UNRESOLVED:
                return None
        return value

    def _resolve_data(self, segments: Tuple[str, ...]) -> Any:
        if not segments:
            return None
        head, rest = segments[0], segments[1:]
        if head == "root":
            return self._resolve_tail(self.root.model, rest)

        key = f"@{head}"
        current: Optional[Context] = self
        while current is not None:
            if key in current._locals:
                return self._resolve_tail(current._locals[key], rest)
            current = current.parent

        if head in self._data and head not in RESERVED_DATA_KEYS:
            return self._resolve_tail(self._data[head], rest)
        return None

    # --------------------------- side channel ---------------------------- #

    def data(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set_data(self, key: str, value: Any) -> None:
        self._data[key] = value

    def inline_partials(self) -> Dict[str, Any]:
        """Inline partials visible at the current nesting level."""
        return self._data[INLINE_PARTIALS][-1]

    def push_inline_partials(self) -> None:
        stack = self._data[INLINE_PARTIALS]
        stack.append(dict(stack[-1]))

    def pop_inline_partials(self) -> None:
        stack = self._data[INLINE_PARTIALS]
        if len(stack) <= 1:
            raise RuntimeError("Inline partial stack underflow")
        stack.pop()

    @contextmanager
    def inline_partial_scope(self) -> Iterator[Dict[str, Any]]:
        """Push a copy of the visible inline partials; pop it on every exit path."""
        self.push_inline_partials()
        try:
            yield self.inline_partials()
        finally:
            self.pop_inline_partials()

    def __repr__(self) -> str:
        return f"Context({self.model!r})"


__all__ = [
    "Context",
    "PathExpression",
    "parse_path",
    "INLINE_PARTIALS",
    "PARAM_SIZE",
    "RESERVED_DATA_KEYS",
]
