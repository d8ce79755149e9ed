"""
Template parser.

Builds the node tree from the token stream by recursive descent. Explicit
helpers are looked up in the engine's registry while nodes are built and
bound into them; later registrations do not affect templates already compiled.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, List, Optional, Tuple

from ..errors import ParserError
from .lexer import TemplateLexer
from .nodes import (
    EMPTY,
    BlockNode,
    CommentNode,
    InlinePartialNode,
    PartialNode,
    SubExpression,
    Template,
    TemplateList,
    TemplateNode,
    TextNode,
    VariableNode,
)
from .params import HashItems, Param, ParamType
from .tokens import Token, TokenType
from .types import TagType

if TYPE_CHECKING:
    from ..engine import Handlebars
    from ..io.sources import TemplateSource

logger = logging.getLogger(__name__)

_EXPRESSION = re.compile(
    r"""
    \s*(?:
        (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
      | (?P<lparen>\()
      | (?P<rparen>\))
      | (?P<pipe>\|)
      | (?P<equals>=)
      | (?P<id>(?:\[[^\]]*\]|[^\s()=|"'\[\]])+)
    )
    """,
    re.VERBOSE,
)

_VARIABLE_TYPES = {
    TokenType.VARIABLE: TagType.VAR,
    TokenType.AMPERSAND: TagType.AMP_VAR,
    TokenType.TRIPLE: TagType.TRIPLE_VAR,
}

# Expression item: (kind, text, offset within the tag)
_Item = Tuple[str, str, int]


class ParsingContext:
    """Cursor over the token list."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.position = 0

    def current(self) -> Token:
        return self.tokens[min(self.position, len(self.tokens) - 1)]

    def advance(self) -> Token:
        current = self.current()
        if self.position < len(self.tokens) - 1:
            self.position += 1
        return current

    def match(self, *token_types: TokenType) -> bool:
        return self.current().type in token_types

    def is_at_end(self) -> bool:
        return self.current().type is TokenType.EOF


class _Expression:
    """Cursor over the items of one tag expression."""

    def __init__(self, items: List[_Item]):
        self.items = items
        self.position = 0

    def peek(self, offset: int = 0) -> Optional[_Item]:
        pos = self.position + offset
        return self.items[pos] if pos < len(self.items) else None

    def advance(self) -> Optional[_Item]:
        item = self.peek()
        self.position += 1
        return item

    def at_kind(self, kind: str, offset: int = 0) -> bool:
        item = self.peek(offset)
        return item is not None and item[0] == kind


class TemplateParser:
    """
    Compiles template sources into Template trees.

    Args:
        engine: Owning engine; supplies the helper registry and is stored on
                nodes that need it at render time
        start: Opening delimiter in effect at the beginning of each source
        end: Closing delimiter in effect at the beginning of each source
    """

    def __init__(self, engine: Handlebars, start: str = "{{", end: str = "}}"):
        self.engine = engine
        self.start = start
        self.end = end
        self.filename = ""

    def parse(self, source: TemplateSource) -> Template:
        """
        Compile one source.

        Raises:
            LexerError: On tag scanning failure
            ParserError: On an unterminated or mismatched section
        """
        return self.parse_text(source.content(), source.filename)

    def parse_text(self, text: str, filename: str = "") -> Template:
        self.filename = filename
        tokens = TemplateLexer(text, self.start, self.end, filename).tokenize()
        ctx = ParsingContext(tokens)

        nodes = self._parse_nodes(ctx)
        if not ctx.is_at_end():
            token = ctx.current()
            if token.type is TokenType.CLOSE:
                raise self._error(f"Unexpected close tag '{token.value}'", token)
            raise self._error("'else' outside of a section", token)

        logger.debug("Parsed %s: %d token(s), %d top-level node(s)", filename or "<inline>", len(tokens), len(nodes))
        return Template(filename, TemplateList(tuple(nodes)), filename=filename, line=1, column=1)

    # ------------------------------- nodes -------------------------------- #

    def _parse_nodes(self, ctx: ParsingContext) -> List[TemplateNode]:
        """Parse siblings until a close tag, an else tag or the end of input."""
        nodes: List[TemplateNode] = []
        while not ctx.match(TokenType.CLOSE, TokenType.ELSE, TokenType.EOF):
            token = ctx.current()
            if token.type is TokenType.TEXT:
                ctx.advance()
                nodes.append(TextNode(token.value, **self._location(token)))
            elif token.type is TokenType.COMMENT:
                ctx.advance()
                nodes.append(CommentNode(
                    token.value, token.start_delimiter, token.end_delimiter, **self._location(token)
                ))
            elif token.type is TokenType.DELIMITERS:
                ctx.advance()
            elif token.type in _VARIABLE_TYPES:
                ctx.advance()
                nodes.append(self._parse_variable(token))
            elif token.type in (TokenType.SECTION, TokenType.INVERTED):
                nodes.append(self._parse_block(ctx))
            elif token.type is TokenType.INLINE:
                nodes.append(self._parse_inline(ctx))
            elif token.type is TokenType.PARTIAL:
                ctx.advance()
                nodes.append(self._parse_partial(token))
            else:
                raise self._error(f"Unexpected token {token.type.name}", token)
        return nodes

    def _parse_variable(self, token: Token) -> VariableNode:
        name, params, hash_items, block_params = self._parse_tag(token.value, token)
        if block_params:
            raise self._error("Block parameters are only allowed on sections", token)
        return VariableNode(
            name,
            _VARIABLE_TYPES[token.type],
            params,
            hash_items,
            token.start_delimiter,
            token.end_delimiter,
            helper=self.engine.registry.lookup(name),
            engine=self.engine,
            **self._location(token),
        )

    def _parse_block(self, ctx: ParsingContext) -> BlockNode:
        open_token = ctx.advance()
        block = self._parse_section(ctx, open_token, open_token.value, open_token.type is TokenType.INVERTED)
        self._consume_close(ctx, open_token, block.name)
        return block

    def _parse_section(self, ctx: ParsingContext, open_token: Token, expression: str, inverted: bool) -> BlockNode:
        """
        Parse a section's body and its else clause, stopping before the close tag.

        `{{else name ...}}` opens a nested section that fills the inverse and
        shares the enclosing close tag.
        """
        name, params, hash_items, block_params = self._parse_tag(expression, open_token)
        body = TemplateList(tuple(self._parse_nodes(ctx)))

        inverse: TemplateNode = EMPTY
        label = "else"
        if ctx.match(TokenType.ELSE):
            else_token = ctx.advance()
            label = else_token.sigil
            if else_token.value:
                nested = self._parse_section(ctx, else_token, else_token.value, inverted=False)
                inverse = TemplateList((nested,), **self._location(else_token))
            else:
                inverse = TemplateList(tuple(self._parse_nodes(ctx)), **self._location(else_token))
                if ctx.match(TokenType.ELSE):
                    raise self._error(f"Section '{name}' has more than one else clause", ctx.current())

        return BlockNode(
            name,
            inverted,
            params,
            hash_items,
            block_params,
            body,
            inverse,
            label,
            open_token.start_delimiter,
            open_token.end_delimiter,
            helper=self.engine.registry.lookup(name),
            engine=self.engine,
            **self._location(open_token),
        )

    def _parse_inline(self, ctx: ParsingContext) -> InlinePartialNode:
        open_token = ctx.advance()
        decorator, params, _, _ = self._parse_tag(open_token.value, open_token)
        if decorator != "inline":
            raise self._error(f"Unsupported decorator '{decorator}'", open_token)
        if len(params) != 1 or params[0].type is not ParamType.STRING:
            raise self._error("Inline partial requires a quoted name", open_token)

        body = TemplateList(tuple(self._parse_nodes(ctx)))
        if ctx.match(TokenType.ELSE):
            raise self._error("'else' inside an inline partial", ctx.current())
        self._consume_close(ctx, open_token, "inline")
        return InlinePartialNode(
            params[0].value,
            body,
            open_token.start_delimiter,
            open_token.end_delimiter,
            **self._location(open_token),
        )

    def _parse_partial(self, token: Token) -> PartialNode:
        items = self._scan(token.value, token)
        if not items or items[0][0] not in ("id", "string"):
            raise self._error("Partial name expected", token)
        kind, raw, _ = items[0]
        name = Param.from_literal(raw).value if kind == "string" else raw

        expr = _Expression(items[1:])
        params, hash_items, block_params = self._parse_arguments(expr, token)
        if block_params or len(params) > 1:
            raise self._error("A partial takes at most one context argument", token)
        return PartialNode(
            name,
            params,
            hash_items,
            token.start_delimiter,
            token.end_delimiter,
            engine=self.engine,
            **self._location(token),
        )

    def _consume_close(self, ctx: ParsingContext, open_token: Token, name: str) -> None:
        token = ctx.current()
        if token.type is not TokenType.CLOSE:
            raise self._error(f"Unterminated section '{name}'", open_token)
        if token.value != name:
            raise self._error(f"Expected close tag for '{name}', found '{token.value}'", token)
        ctx.advance()

    # ---------------------------- expressions ----------------------------- #

    def _parse_tag(self, expression: str, token: Token) -> Tuple[str, Tuple[Param, ...], HashItems, Tuple[str, ...]]:
        """Split `name arg key=value as |a b|` into its parts."""
        expr = _Expression(self._scan(expression, token))
        first = expr.advance()
        if first is None or first[0] != "id":
            raise self._error(f"Expected a name in '{expression}'", token)
        params, hash_items, block_params = self._parse_arguments(expr, token)
        return first[1], params, hash_items, block_params

    def _parse_arguments(
        self,
        expr: _Expression,
        token: Token,
        closing: Optional[str] = None,
    ) -> Tuple[Tuple[Param, ...], HashItems, Tuple[str, ...]]:
        params: List[Param] = []
        hash_items: List[Tuple[str, Param]] = []
        block_params: Tuple[str, ...] = ()

        while expr.peek() is not None and not expr.at_kind(closing or ""):
            kind, text, _ = expr.peek()
            if kind == "id" and expr.at_kind("equals", 1):
                expr.advance()
                expr.advance()
                hash_items.append((text, self._parse_param(expr, token)))
            elif kind == "id" and text == "as" and expr.at_kind("pipe", 1) and closing is None:
                expr.advance()
                expr.advance()
                block_params = self._parse_block_params(expr, token)
            elif hash_items:
                raise self._error("Positional parameters must precede hash arguments", token)
            else:
                params.append(self._parse_param(expr, token))

        return tuple(params), tuple(hash_items), block_params

    def _parse_param(self, expr: _Expression, token: Token) -> Param:
        item = expr.advance()
        if item is None:
            raise self._error("Unexpected end of expression", token)
        kind, text, _ = item
        if kind in ("string", "id"):
            return Param.from_literal(text)
        if kind == "lparen":
            return self._parse_sub_expression(expr, token)
        raise self._error(f"Unexpected '{text}'", token)

    def _parse_sub_expression(self, expr: _Expression, token: Token) -> Param:
        head = expr.advance()
        if head is None or head[0] != "id":
            raise self._error("Sub-expression must start with a helper name", token)
        params, hash_items, _ = self._parse_arguments(expr, token, closing="rparen")
        if expr.advance() is None:
            raise self._error("Unclosed sub-expression", token)

        node = SubExpression(
            head[1],
            params,
            hash_items,
            helper=self.engine.registry.lookup(head[1]),
            engine=self.engine,
            **self._location(token),
        )
        return Param(ParamType.SUB_EXPRESSION, node.text(), node)

    def _parse_block_params(self, expr: _Expression, token: Token) -> Tuple[str, ...]:
        names: List[str] = []
        while True:
            item = expr.advance()
            if item is None:
                raise self._error("Unclosed block parameter list", token)
            kind, text, _ = item
            if kind == "pipe":
                break
            if kind != "id":
                raise self._error(f"Invalid block parameter '{text}'", token)
            names.append(text)
        if not names:
            raise self._error("Empty block parameter list", token)
        if expr.peek() is not None:
            raise self._error("Block parameters must come last", token)
        return tuple(names)

    def _scan(self, expression: str, token: Token) -> List[_Item]:
        items: List[_Item] = []
        pos = 0
        while pos < len(expression):
            if expression[pos:].strip() == "":
                break
            match = _EXPRESSION.match(expression, pos)
            if match is None:
                raise self._error(f"Unexpected character {expression[pos:].lstrip()[:1]!r}", token)
            kind = match.lastgroup
            items.append((kind, match.group(kind), match.start(kind)))
            pos = match.end()
        return items

    # ------------------------------ helpers ------------------------------- #

    def _location(self, token: Token) -> dict:
        return {"filename": self.filename, "line": token.line, "column": token.column}

    def _error(self, message: str, token: Token) -> ParserError:
        return ParserError(message, self.filename, token.line, token.column)


__all__ = ["TemplateParser", "ParsingContext"]
