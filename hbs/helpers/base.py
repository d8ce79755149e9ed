"""
Helper capability.

Helpers are host-extensible, so they are an open protocol rather than a closed
set: anything with `apply(context, options)` is a helper, and plain functions
with the same signature are adapted on registration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..options import Options


@runtime_checkable
class Helper(Protocol):
    """
    A named, stateless capability invoked for sections and helper tags.

    `context` is the resolved context value (first param, or the value a
    section name resolved to). The return value is written to the output
    unless it is None; a helper may also write through `options.write()`.
    """

    def apply(self, context: Any, options: Options) -> Any:
        ...


class FunctionHelper:
    """Adapts a `fn(context, options)` callable to the Helper protocol."""

    def __init__(self, fn: Callable[[Any, Options], Any]):
        self.fn = fn

    def apply(self, context: Any, options: Options) -> Any:
        return self.fn(context, options)

    def __repr__(self) -> str:
        return f"FunctionHelper({getattr(self.fn, '__name__', self.fn)!r})"


def as_helper(obj: Any) -> Helper:
    """Return `obj` as a Helper, wrapping plain callables."""
    if isinstance(obj, Helper):
        return obj
    if callable(obj):
        return FunctionHelper(obj)
    raise TypeError(f"Not a helper: {obj!r}")


class SafeString(str):
    """Text that is already escaped and must be written verbatim."""
    pass


__all__ = ["Helper", "FunctionHelper", "as_helper", "SafeString"]
