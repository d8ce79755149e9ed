"""
Node tree.

A compiled template is an immutable tree of nodes. Every node evaluates through
the same lifecycle, `before` -> `merge` -> `after`, writing to an output sink;
`after` runs on every exit path once `before` has succeeded. Trees are created
once by the parser and can be rendered concurrently: all per-render state lives
in the Context and the sink.

Node kinds: text, comment, variable, sub-expression, block (section), partial,
inline partial definition, node list and the root Template.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Sequence, TextIO, Tuple

from ..context import Context
from ..errors import HbsUserError, HelperError, HelperNotFoundError, TemplateRenderError
from ..helpers.base import Helper, SafeString
from ..helpers.builtins import EACH, IF, UNLESS, WITH
from ..helpers.registry import HELPER_MISSING
from ..lambdas import Lambda
from ..options import Options
from ..utils import format_value, is_iterable
from .params import (
    HashItems,
    Param,
    ParamType,
    determine_context,
    hash_to_text,
    params_to_text,
    reference_names,
    resolve_hash,
    resolve_param,
    resolve_params,
)
from .types import TagType

if TYPE_CHECKING:
    from ..engine import Handlebars


@dataclass(frozen=True)
class TemplateNode:
    """Base class of all nodes. Location fields serve diagnostics only."""
    filename: str = field(default="", compare=False, repr=False, kw_only=True)
    line: int = field(default=0, compare=False, repr=False, kw_only=True)
    column: int = field(default=0, compare=False, repr=False, kw_only=True)

    def apply(self, context: Context, writer: TextIO) -> None:
        """Run the full lifecycle against `context`, writing to `writer`."""
        self.before(context, writer)
        try:
            self.merge(context, writer)
        except TemplateRenderError as e:
            if self.line:
                e.locate(self.filename, self.line, self.column)
            raise
        finally:
            self.after(context, writer)

    def before(self, context: Context, writer: TextIO) -> None:
        pass

    def merge(self, context: Context, writer: TextIO) -> None:
        raise NotImplementedError

    def after(self, context: Context, writer: TextIO) -> None:
        pass

    def text(self) -> str:
        """Source form of the node."""
        raise NotImplementedError

    # ---------------------------- introspection ---------------------------- #

    def collect(self, *tag_types: TagType) -> List[str]:
        """Tag names of the given kinds, first-seen order, without duplicates."""
        result: List[str] = []
        self._collect(result, tag_types)
        return list(dict.fromkeys(result))

    def collect_reference_parameters(self) -> List[str]:
        """Every parameter or hash value written as a bare reference."""
        result: List[str] = []
        self._collect_references(result)
        return list(dict.fromkeys(result))

    def _collect(self, result: List[str], tag_types: Sequence[TagType]) -> None:
        pass

    def _collect_references(self, result: List[str]) -> None:
        pass


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextNode(TemplateNode):
    """Literal text, written as is."""
    text_value: str

    def merge(self, context: Context, writer: TextIO) -> None:
        writer.write(self.text_value)

    def text(self) -> str:
        return self.text_value


@dataclass(frozen=True)
class CommentNode(TemplateNode):
    """`{{! ... }}`; renders nothing."""
    comment: str
    start_delimiter: str = "{{"
    end_delimiter: str = "}}"

    def merge(self, context: Context, writer: TextIO) -> None:
        pass

    def text(self) -> str:
        return f"{self.start_delimiter}!{self.comment}{self.end_delimiter}"


@dataclass(frozen=True)
class TemplateList(TemplateNode):
    """An ordered run of sibling nodes."""
    nodes: Tuple[TemplateNode, ...] = ()

    def before(self, context: Context, writer: TextIO) -> None:
        # Inline partials are visible to the whole list, including tags that
        # precede their definition.
        for node in self.nodes:
            if isinstance(node, InlinePartialNode):
                node.register(context)

    def merge(self, context: Context, writer: TextIO) -> None:
        for node in self.nodes:
            node.apply(context, writer)

    def text(self) -> str:
        return "".join(node.text() for node in self.nodes)

    def _collect(self, result: List[str], tag_types: Sequence[TagType]) -> None:
        for node in self.nodes:
            node._collect(result, tag_types)

    def _collect_references(self, result: List[str]) -> None:
        for node in self.nodes:
            node._collect_references(result)

    def __iter__(self) -> Iterator[TemplateNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)


# Shared "no inverse" sentinel; compared by identity.
EMPTY = TemplateList(())


# ---------------------------------------------------------------------------
# Helper plumbing
# ---------------------------------------------------------------------------

def invoke_helper(helper: Helper, name: str, context_value: Any, options: Options) -> Any:
    """Call a helper; foreign exceptions become HelperError."""
    try:
        return helper.apply(context_value, options)
    except HbsUserError:
        raise
    except Exception as exc:
        raise HelperError(name, exc) from exc


LAMBDA_FILENAME = "<lambda>"


def compile_lambda(
    engine: Handlebars,
    lambda_: Lambda,
    context: Context,
    template: Optional[TemplateNode],
    start_delimiter: str,
    end_delimiter: str,
) -> TemplateNode:
    """Run a lambda and compile the markup it returns with the tag's delimiters."""
    value = lambda_.apply(context, template)
    if isinstance(value, str) and not isinstance(value, SafeString):
        # Lambda output is not a named source, so it never enters the cache.
        return engine.parser_for(start_delimiter, end_delimiter).parse_text(value, LAMBDA_FILENAME)
    return TextNode(format_value(value))


def _params_text(params: Tuple[Param, ...], hash_items: HashItems) -> str:
    parts = [text for text in (params_to_text(params), hash_to_text(hash_items)) if text]
    return "".join(f" {text}" for text in parts)


def _collect_sub_expressions(
    params: Tuple[Param, ...],
    hash_items: HashItems,
) -> List[SubExpression]:
    values = list(params) + [p for _, p in hash_items]
    return [p.value for p in values if p.type is ParamType.SUB_EXPRESSION]


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SubExpression(TemplateNode):
    """`(helper arg key=value)` used as a parameter; yields the helper's return value."""
    name: str
    params: Tuple[Param, ...] = ()
    hash: HashItems = ()
    helper: Optional[Helper] = field(default=None, compare=False, repr=False)
    engine: Any = field(default=None, compare=False, repr=False)

    tag_type = TagType.SUB_EXPRESSION

    def evaluate(self, context: Context) -> Any:
        helper = self.helper
        if helper is None:
            helper = self.engine.registry.lookup(HELPER_MISSING)
            if helper is None:
                raise HelperNotFoundError(self.name)
        it = self.engine.transformer.transform(determine_context(self.params, context))
        options = Options(
            engine=self.engine,
            helper_name=self.name,
            tag_type=TagType.SUB_EXPRESSION,
            context=context,
            body=EMPTY,
            inverse_body=EMPTY,
            params=resolve_params(self.params[1:], context),
            hash=resolve_hash(self.hash, context),
            writer=None,
            param_size=len(self.params),
        )
        return invoke_helper(helper, self.name, it, options)

    def merge(self, context: Context, writer: TextIO) -> None:
        writer.write(format_value(self.evaluate(context)))

    def text(self) -> str:
        return f"({self.name}{_params_text(self.params, self.hash)})"

    def _collect(self, result: List[str], tag_types: Sequence[TagType]) -> None:
        if self.tag_type in tag_types:
            result.append(self.name)
        for sub in _collect_sub_expressions(self.params, self.hash):
            sub._collect(result, tag_types)

    def _collect_references(self, result: List[str]) -> None:
        result.extend(reference_names(self.params, self.hash))
        for sub in _collect_sub_expressions(self.params, self.hash):
            sub._collect_references(result)


@dataclass(frozen=True)
class VariableNode(TemplateNode):
    """
    `{{name}}`, `{{&name}}`, `{{{name}}}` or an inline helper call
    `{{helper arg key=value}}`.
    """
    name: str
    tag_type: TagType = TagType.VAR
    params: Tuple[Param, ...] = ()
    hash: HashItems = ()
    start_delimiter: str = "{{"
    end_delimiter: str = "}}"
    helper: Optional[Helper] = field(default=None, compare=False, repr=False)
    engine: Any = field(default=None, compare=False, repr=False)

    def merge(self, context: Context, writer: TextIO) -> None:
        value = self._evaluate(context, writer)
        if value is None:
            return
        text = format_value(value)
        if self.tag_type.escaped and not isinstance(value, SafeString):
            text = self.engine.escaping.escape(text)
        writer.write(text)

    def _evaluate(self, context: Context, writer: TextIO) -> Any:
        registry = self.engine.registry
        transformer = self.engine.transformer

        if self.helper is not None:
            it = transformer.transform(determine_context(self.params, context))
            return invoke_helper(self.helper, self.name, it, self._options(context, writer))

        if self.params or self.hash:
            missing = registry.lookup(HELPER_MISSING)
            if missing is None:
                raise HelperNotFoundError(self.name)
            return invoke_helper(missing, self.name, None, self._options(context, writer))

        value = transformer.transform(context.get(self.name))
        if value is None:
            missing = registry.lookup(HELPER_MISSING)
            if missing is not None:
                return invoke_helper(missing, self.name, None, self._options(context, writer))
            return None

        if isinstance(value, Lambda):
            template = compile_lambda(
                self.engine, value, context, None, self.start_delimiter, self.end_delimiter
            )
            buffer = io.StringIO()
            template.apply(context, buffer)
            return buffer.getvalue()

        return value

    def _options(self, context: Context, writer: TextIO) -> Options:
        return Options(
            engine=self.engine,
            helper_name=self.name,
            tag_type=self.tag_type,
            context=context,
            body=EMPTY,
            inverse_body=EMPTY,
            params=resolve_params(self.params[1:], context),
            hash=resolve_hash(self.hash, context),
            writer=writer,
            param_size=len(self.params),
        )

    def text(self) -> str:
        inner = f"{self.name}{_params_text(self.params, self.hash)}"
        if self.tag_type is TagType.TRIPLE_VAR:
            inner = "{" + inner + "}"
        elif self.tag_type is TagType.AMP_VAR:
            inner = "&" + inner
        return f"{self.start_delimiter}{inner}{self.end_delimiter}"

    def _collect(self, result: List[str], tag_types: Sequence[TagType]) -> None:
        if self.tag_type in tag_types:
            result.append(self.name)
        for sub in _collect_sub_expressions(self.params, self.hash):
            sub._collect(result, tag_types)

    def _collect_references(self, result: List[str]) -> None:
        result.extend(reference_names(self.params, self.hash))
        for sub in _collect_sub_expressions(self.params, self.hash):
            sub._collect_references(result)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BlockNode(TemplateNode):
    """
    `{{#name ...}}body{{else}}inverse{{/name}}` or `{{^name}}...{{/name}}`.

    `helper` is the explicit helper registered under `name` when the node was
    built; it is not looked up again at render time. Without one, the helper
    is inferred from the value `name` resolves to (see `merge`).
    """
    name: str
    inverted: bool = False
    params: Tuple[Param, ...] = ()
    hash: HashItems = ()
    block_params: Tuple[str, ...] = ()
    body: Optional[TemplateNode] = None
    inverse: TemplateNode = EMPTY
    inverse_label: str = "else"
    start_delimiter: str = "{{"
    end_delimiter: str = "}}"
    helper: Optional[Helper] = field(default=None, compare=False, repr=False)
    engine: Any = field(default=None, compare=False, repr=False)

    tag_type = TagType.SECTION

    def __post_init__(self) -> None:
        if self.inverse_label not in ("else", "^"):
            raise ValueError(f"inverse_label must be 'else' or '^', got {self.inverse_label!r}")

    @property
    def marker(self) -> str:
        return "^" if self.inverted else "#"

    # ----------------------------- lifecycle ------------------------------ #

    def apply(self, context: Context, writer: TextIO) -> None:
        """
        Run the lifecycle inside a fresh inline-partial scope, so partials
        defined in the body are dropped on every exit path.
        """
        if self.body is None:
            return
        with context.inline_partial_scope():
            super().apply(context, writer)

    def before(self, context: Context, writer: TextIO) -> None:
        self.body.before(context, writer)

    def merge(self, context: Context, writer: TextIO) -> None:
        """
        Decide which helper governs the body and invoke it.

        1. A bound explicit helper wins; its context value is the first param
           resolved against the calling scope.
        2. Otherwise the resolved value picks an implicit helper: `unless` for
           inverted sections, `each` for iterables, `if` for booleans, `with`
           for lambdas (whose output becomes the body) and for anything else,
           the latter rendered in a child scope bound to the value. An absent
           value switches to `helperMissing` when one is registered.
        """
        if self.body is None:
            return

        engine = self.engine
        transformer = engine.transformer
        helper = self.helper
        template: TemplateNode = self.body
        scope = context

        if helper is not None:
            helper_name = self.name
            it = transformer.transform(determine_context(self.params, context))
        else:
            it = transformer.transform(context.get(self.name))
            if self.inverted:
                helper_name = UNLESS
            elif is_iterable(it):
                helper_name = EACH
            elif isinstance(it, bool):
                helper_name = IF
            elif isinstance(it, Lambda):
                helper_name = WITH
                template = compile_lambda(
                    engine, it, context, self.body, self.start_delimiter, self.end_delimiter
                )
            else:
                helper_name = WITH
                scope = context.child(it)

            helper = engine.registry.lookup(helper_name)
            if it is None:
                missing = engine.registry.lookup(HELPER_MISSING)
                if missing is not None:
                    helper, helper_name = missing, self.name
            if helper is None:
                raise HelperNotFoundError(helper_name)

        options = Options(
            engine=engine,
            helper_name=helper_name,
            tag_type=TagType.SECTION,
            context=scope,
            body=template,
            inverse_body=self.inverse,
            params=resolve_params(self.params[1:], scope),
            hash=resolve_hash(self.hash, scope),
            block_params=self.block_params,
            writer=writer,
            param_size=len(self.params),
        )
        result = invoke_helper(helper, helper_name, it, options)
        if result is not None:
            text = format_value(result)
            if text:
                writer.write(text)

    # --------------------------- serialization ---------------------------- #

    def text(self, complete: bool = True) -> str:
        parts = [self.start_delimiter, self.marker, self.name, _params_text(self.params, self.hash)]
        if self.block_params:
            parts.append(f" as |{' '.join(self.block_params)}|")
        parts.append(self.end_delimiter)
        if complete:
            parts.append(self.body.text() if self.body is not None else "")
            if self.inverse is not EMPTY:
                parts.append(f"{self.start_delimiter}{self.inverse_label}{self.end_delimiter}")
                parts.append(self.inverse.text())
        else:
            parts.append("\n...\n")
        parts.append(f"{self.start_delimiter}/{self.name}{self.end_delimiter}")
        return "".join(parts)

    # ---------------------------- introspection --------------------------- #

    def _collect(self, result: List[str], tag_types: Sequence[TagType]) -> None:
        if self.tag_type in tag_types:
            result.append(self.name)
        for sub in _collect_sub_expressions(self.params, self.hash):
            sub._collect(result, tag_types)
        if self.body is not None:
            self.body._collect(result, tag_types)
        self.inverse._collect(result, tag_types)

    def _collect_references(self, result: List[str]) -> None:
        result.extend(reference_names(self.params, self.hash))
        for sub in _collect_sub_expressions(self.params, self.hash):
            sub._collect_references(result)
        if self.body is not None:
            self.body._collect_references(result)
        self.inverse._collect_references(result)


# ---------------------------------------------------------------------------
# Partials
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InlinePartialNode(TemplateNode):
    """`{{#*inline "name"}}...{{/inline}}`: defines a partial for the enclosing block."""
    name: str
    body: TemplateNode = EMPTY
    start_delimiter: str = "{{"
    end_delimiter: str = "}}"

    def register(self, context: Context) -> None:
        context.inline_partials()[self.name] = self.body

    def merge(self, context: Context, writer: TextIO) -> None:
        pass

    def text(self) -> str:
        start, end = self.start_delimiter, self.end_delimiter
        return f'{start}#*inline "{self.name}"{end}{self.body.text()}{start}/inline{end}'

    def _collect(self, result: List[str], tag_types: Sequence[TagType]) -> None:
        self.body._collect(result, tag_types)

    def _collect_references(self, result: List[str]) -> None:
        self.body._collect_references(result)


@dataclass(frozen=True)
class PartialNode(TemplateNode):
    """
    `{{> name [context] [key=value ...]}}`.

    Inline partials visible at this point shadow templates of the same name
    from the loader.
    """
    name: str
    params: Tuple[Param, ...] = ()
    hash: HashItems = ()
    start_delimiter: str = "{{"
    end_delimiter: str = "}}"
    engine: Any = field(default=None, compare=False, repr=False)

    def merge(self, context: Context, writer: TextIO) -> None:
        template = context.inline_partials().get(self.name)
        if template is None:
            template = self.engine.compile(self.name)

        scope = context
        if self.params:
            scope = context.child(resolve_param(self.params[0], context))
        if self.hash:
            scope = scope.with_locals(resolve_hash(self.hash, context))
        template.apply(scope, writer)

    def text(self) -> str:
        return f"{self.start_delimiter}> {self.name}{_params_text(self.params, self.hash)}{self.end_delimiter}"

    def _collect(self, result: List[str], tag_types: Sequence[TagType]) -> None:
        for sub in _collect_sub_expressions(self.params, self.hash):
            sub._collect(result, tag_types)

    def _collect_references(self, result: List[str]) -> None:
        result.extend(reference_names(self.params, self.hash))
        for sub in _collect_sub_expressions(self.params, self.hash):
            sub._collect_references(result)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Template(TemplateNode):
    """A compiled template: the root node list plus the name it was compiled from."""
    name: str
    root: TemplateList = EMPTY

    def merge(self, context: Context, writer: TextIO) -> None:
        self.root.apply(context, writer)

    def render(self, model: Any = None, *, data: Optional[dict] = None) -> str:
        """Render against `model` (or an existing Context) and return the text."""
        context = Context.new_context(model, data=data)
        buffer = io.StringIO()
        self.apply(context, buffer)
        return buffer.getvalue()

    def text(self) -> str:
        return self.root.text()

    def _collect(self, result: List[str], tag_types: Sequence[TagType]) -> None:
        self.root._collect(result, tag_types)

    def _collect_references(self, result: List[str]) -> None:
        self.root._collect_references(result)

    def __str__(self) -> str:
        return self.name


__all__ = [
    "TemplateNode",
    "TextNode",
    "CommentNode",
    "TemplateList",
    "EMPTY",
    "SubExpression",
    "VariableNode",
    "BlockNode",
    "InlinePartialNode",
    "PartialNode",
    "Template",
    "invoke_helper",
    "compile_lambda",
]
