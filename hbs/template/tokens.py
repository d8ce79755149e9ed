"""
Lexical types.

The lexer splits template source into literal text runs and tags. A tag token
carries its inner expression, the delimiters in effect when it was read and
whitespace-control flags.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenType(enum.Enum):
    TEXT = "TEXT"
    VARIABLE = "VARIABLE"        # {{name}}
    TRIPLE = "TRIPLE"            # {{{name}}}
    AMPERSAND = "AMPERSAND"      # {{&name}}
    SECTION = "SECTION"          # {{#name}}
    INVERTED = "INVERTED"        # {{^name}}
    CLOSE = "CLOSE"              # {{/name}}
    ELSE = "ELSE"                # {{else}}, {{^}}, {{else if x}}
    PARTIAL = "PARTIAL"          # {{> name}}
    COMMENT = "COMMENT"          # {{! ...}}, {{!-- ... --}}
    INLINE = "INLINE"            # {{#*inline "name"}}
    DELIMITERS = "DELIMITERS"    # {{=<% %>=}}
    EOF = "EOF"


# Tags that vanish together with their line when nothing else is on it.
STANDALONE_TYPES = frozenset({
    TokenType.SECTION,
    TokenType.INVERTED,
    TokenType.CLOSE,
    TokenType.ELSE,
    TokenType.PARTIAL,
    TokenType.COMMENT,
    TokenType.INLINE,
    TokenType.DELIMITERS,
})


@dataclass(frozen=True)
class Token:
    """
    Token with position information for precise diagnostics.
    """
    type: TokenType
    value: str
    position: int        # offset in the source text
    line: int            # 1-based
    column: int          # 1-based
    start_delimiter: str = "{{"
    end_delimiter: str = "}}"
    trim_left: bool = False
    trim_right: bool = False
    sigil: str = ""      # "else" or "^" for ELSE tokens

    @property
    def is_tag(self) -> bool:
        return self.type not in (TokenType.TEXT, TokenType.EOF)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


__all__ = ["TokenType", "Token", "STANDALONE_TYPES"]
