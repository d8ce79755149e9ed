"""
Lambda capability and the value-transform hook.

A lambda is a data value that produces template markup instead of data: its
output is compiled with the surrounding delimiters and rendered, so it takes
part in template evaluation rather than being inserted as raw text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .context import Context
    from .template.nodes import TemplateNode


class Lambda(ABC):
    """
    `apply` receives the current scope and the unrendered section body
    (None for a variable tag) and returns new template source.
    """

    @abstractmethod
    def apply(self, context: Context, template: Optional[TemplateNode]) -> Any:
        pass


class FunctionLambda(Lambda):
    """
    Plain callable as a lambda: called with the raw section text, or with no
    arguments when used as a variable.
    """

    def __init__(self, fn: Callable[..., Any]):
        self.fn = fn

    def apply(self, context: Context, template: Optional[TemplateNode]) -> Any:
        if template is None:
            return self.fn()
        return self.fn(template.text())

    def __repr__(self) -> str:
        return f"FunctionLambda({getattr(self.fn, '__name__', self.fn)!r})"


@runtime_checkable
class ValueTransformer(Protocol):
    """Rewrites a resolved value before a node decides how to render it."""

    def transform(self, value: Any) -> Any:
        ...


class DefaultTransformer:
    """Wraps callables found in the data as lambdas; other values pass through."""

    def transform(self, value: Any) -> Any:
        if value is None or isinstance(value, (Lambda, type)):
            return value
        if callable(value):
            return FunctionLambda(value)
        return value


class IdentityTransformer:
    def transform(self, value: Any) -> Any:
        return value


__all__ = [
    "Lambda",
    "FunctionLambda",
    "ValueTransformer",
    "DefaultTransformer",
    "IdentityTransformer",
]
