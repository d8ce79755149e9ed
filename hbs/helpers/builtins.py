"""
Built-in helpers.

`each`, `if`, `unless` and `with` double as the implicit helpers a section
picks when no explicit helper is bound to its name: iterate, branch on a
boolean, negate, or enter a nested scope.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, List

from ..errors import MissingValueError
from ..options import Options
from ..resolvers import UNRESOLVED, resolve_member
from ..utils import format_value, is_iterable
from .registry import HELPER_MISSING, HelperRegistry

logger = logging.getLogger(__name__)

EACH = "each"
IF = "if"
UNLESS = "unless"
WITH = "with"
LOOKUP = "lookup"
LOG = "log"


class EachHelper:
    """
    Iterate a sequence or a mapping.

    Each item is rendered in a child scope with `@index`, `@first`, `@last`,
    `@odd`, `@even` and `@key` bound; block params receive `item index` for
    sequences and `value key` for mappings. Nothing to iterate renders the
    inverse.
    """

    def apply(self, context: Any, options: Options) -> Any:
        if is_iterable(context):
            return self._render(list(enumerate(context)), options, keyed=False)
        if isinstance(context, Mapping):
            return self._render(list(context.items()), options, keyed=True)
        return options.inverse()

    @staticmethod
    def _render(entries: List[tuple], options: Options, *, keyed: bool) -> str:
        if not entries:
            return options.inverse()
        parent = options.context
        last = len(entries) - 1
        parts: List[str] = []
        for index, (key, item) in enumerate(entries):
            scope = parent.child(item, locals={
                "@index": index,
                "@key": key,
                "@first": index == 0,
                "@last": index == last,
                "@odd": index % 2 == 1,
                "@even": index % 2 == 0,
            })
            parts.append(options.fn(scope, [item, key] if keyed else [item, index]))
        return "".join(parts)


class IfHelper:
    """Body when the value is truthy, inverse otherwise; the scope is unchanged."""

    def apply(self, context: Any, options: Options) -> Any:
        if options.is_falsy(context):
            return options.inverse()
        return options.fn()


class UnlessHelper:
    """Negated `if`. Inverted sections (`{{^name}}`) always resolve to this helper."""

    def apply(self, context: Any, options: Options) -> Any:
        if options.is_falsy(context):
            return options.fn()
        return options.inverse()


class WithHelper:
    """Render the body in a scope whose `self` is the value."""

    def apply(self, context: Any, options: Options) -> Any:
        if options.is_falsy(context):
            return options.inverse()
        return options.fn(context)


class LookupHelper:
    """`(lookup obj key)`: member access with a computed key."""

    def apply(self, context: Any, options: Options) -> Any:
        if options.param_size < 2:
            raise ValueError("lookup expects an object and a key")
        if context is None:
            return None
        key = options.param(0)
        value = resolve_member(options.context.resolvers, context, format_value(key))
        return None if value is UNRESOLVED else value


class LogHelper:
    """
    `{{log a b level="warn"}}` sends its arguments to the `hbs.template`
    logger; a bare `{{log}}` logs the current scope.
    """

    def apply(self, context: Any, options: Options) -> Any:
        level_name = str(options.hash.get("level", "info")).upper()
        if level_name == "WARN":
            level_name = "WARNING"
        level = getattr(logging, level_name, logging.INFO)
        if not isinstance(level, int):
            level = logging.INFO

        if options.param_size == 0:
            values = [options.context.model]
        else:
            values = [context, *options.params]
        logging.getLogger("hbs.template").log(level, " ".join(format_value(v) for v in values))
        return None


class StrictMissingHelper:
    """`helperMissing` for strict mode: any unresolved reference is an error."""

    def apply(self, context: Any, options: Options) -> Any:
        raise MissingValueError(options.helper_name)


def register_builtins(registry: HelperRegistry, *, strict: bool = False) -> HelperRegistry:
    registry.register(EACH, EachHelper())
    registry.register(IF, IfHelper())
    registry.register(UNLESS, UnlessHelper())
    registry.register(WITH, WithHelper())
    registry.register(LOOKUP, LookupHelper())
    registry.register(LOG, LogHelper())
    if strict:
        registry.register(HELPER_MISSING, StrictMissingHelper())
    return registry


__all__ = [
    "EACH", "IF", "UNLESS", "WITH", "LOOKUP", "LOG",
    "EachHelper",
    "IfHelper",
    "UnlessHelper",
    "WithHelper",
    "LookupHelper",
    "LogHelper",
    "StrictMissingHelper",
    "register_builtins",
]
