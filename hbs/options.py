"""
Invocation bundle passed to helpers.

Built once per helper call from the calling node and discarded when the call
returns. Helpers use it to render the bound body or inverse against derived
scopes, read resolved parameters and write to the output.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, TextIO, Tuple

from .context import PARAM_SIZE, Context
from .utils import is_empty

if TYPE_CHECKING:
    from .template.nodes import TemplateNode
    from .template.types import TagType


class _Current:
    def __repr__(self) -> str:
        return "CURRENT"


# Default for `fn()`/`inverse()`: render against the bundle's own scope.
CURRENT = _Current()


@dataclass(frozen=True, eq=False)
class Options:
    engine: Any
    helper_name: str
    tag_type: TagType
    context: Context
    body: TemplateNode
    inverse_body: TemplateNode
    params: Tuple[Any, ...] = ()
    hash: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    block_params: Tuple[str, ...] = ()
    writer: Optional[TextIO] = None
    param_size: int = 0

    # ----------------------------- rendering ----------------------------- #

    def fn(self, context: Any = CURRENT, block_params: Optional[Sequence[Any]] = None) -> str:
        """Render the body. A non-Context value becomes a child scope."""
        return self.apply(self.body, context, block_params)

    def inverse(self, context: Any = CURRENT, block_params: Optional[Sequence[Any]] = None) -> str:
        """Render the inverse (`else`) clause."""
        return self.apply(self.inverse_body, context, block_params)

    def apply(
        self,
        template: TemplateNode,
        context: Any = CURRENT,
        block_params: Optional[Sequence[Any]] = None,
    ) -> str:
        """
        Render any template against a scope derived from this bundle.

        Block parameter values are bound positionally to the names declared
        with `as |a b|`; extra values are ignored.
        """
        scope = self._wrap(context)
        if block_params and self.block_params:
            scope = scope.with_locals(dict(zip(self.block_params, block_params)))
        buffer = io.StringIO()
        template.apply(scope, buffer)
        return buffer.getvalue()

    def _wrap(self, model: Any) -> Context:
        if model is CURRENT or model is self.context or model is self.context.model:
            return self.context
        if isinstance(model, Context):
            return model
        return self.context.child(model)

    # ------------------------------ access ------------------------------- #

    def param(self, index: int, default: Any = None) -> Any:
        if 0 <= index < len(self.params):
            return self.params[index]
        return default

    def data(self, key: str, default: Any = None) -> Any:
        """
        Side-channel lookup. The declared positional parameter count is
        carried here so `{{#each}}` and `{{#each list}}` can be told apart.
        It lives on this bundle only: `self.context.data(PARAM_SIZE)` is None,
        so nested or concurrent helper calls never see each other's count.
        """
        if key == PARAM_SIZE:
            return self.param_size
        return self.context.data(key, default)

    def get(self, path: str, default: Any = None) -> Any:
        value = self.context.get(path)
        return default if value is None else value

    def is_falsy(self, value: Any) -> bool:
        include_zero = bool(self.hash.get("includeZero", False))
        return is_empty(value, include_zero=include_zero)

    def write(self, text: str) -> None:
        if self.writer is None:
            raise RuntimeError(f"Helper '{self.helper_name}' has no output sink")
        self.writer.write(text)


__all__ = ["Options", "CURRENT"]
