"""
Template compilation: lexer, parser and the node tree they produce.
"""

from __future__ import annotations

from .lexer import TemplateLexer, tokenize_template
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
from .params import Param, ParamType
from .parser import TemplateParser
from .tokens import Token, TokenType
from .types import TagType

__all__ = [
    "TemplateLexer",
    "tokenize_template",
    "TemplateParser",
    "Token",
    "TokenType",
    "TagType",
    "Param",
    "ParamType",
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
]
