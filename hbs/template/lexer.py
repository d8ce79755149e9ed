"""
Template lexer.

Splits template source into text runs and tags, honouring delimiter switches
(`{{=<% %>=}}`), then applies whitespace control:

- standalone lines: a block, close, else, partial, comment or delimiter tag
  that is alone on its line takes the whole line with it;
- `~` markers: `{{~` strips all whitespace before the tag, `~}}` after it.
"""

from __future__ import annotations

import bisect
import re
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from ..errors import LexerError
from .tokens import STANDALONE_TYPES, Token, TokenType

_ELSE = re.compile(r"else(?:\s+(.*))?", re.DOTALL)

_SIGILS = {
    "#": TokenType.SECTION,
    "^": TokenType.INVERTED,
    "/": TokenType.CLOSE,
    ">": TokenType.PARTIAL,
    "!": TokenType.COMMENT,
    "&": TokenType.AMPERSAND,
}


class TemplateLexer:
    """
    Template tokenizer.

    Args:
        text: Template source
        start: Opening delimiter in effect at the beginning
        end: Closing delimiter in effect at the beginning
        filename: Used in error messages only
    """

    def __init__(self, text: str, start: str = "{{", end: str = "}}", filename: str = ""):
        self.text = text
        self.start = start
        self.end = end
        self.filename = filename
        self._newlines = [i for i, ch in enumerate(text) if ch == "\n"]

    def tokenize(self) -> List[Token]:
        """Tokenize the whole source; the list always ends with an EOF token."""
        tokens = self._scan()
        tokens = self._strip_whitespace(tokens)
        line, column = self._locate(len(self.text))
        tokens.append(Token(TokenType.EOF, "", len(self.text), line, column))
        return tokens

    # ------------------------------ scanning ------------------------------ #

    def _scan(self) -> List[Token]:
        text = self.text
        tokens: List[Token] = []
        pos = 0

        while pos < len(text):
            index = text.find(self.start, pos)
            if index < 0:
                tokens.append(self._token(TokenType.TEXT, text[pos:], pos))
                break
            if index > pos:
                tokens.append(self._token(TokenType.TEXT, text[pos:index], pos))
            token, pos = self._scan_tag(index)
            tokens.append(token)
            if token.type is TokenType.DELIMITERS:
                self.start, self.end = self._parse_delimiters(token)

        return tokens

    def _scan_tag(self, index: int) -> Tuple[Token, int]:
        start, end, text = self.start, self.end, self.text
        body = index + len(start)
        trim_left = text.startswith("~", body)
        if trim_left:
            body += 1

        def emit(token_type: TokenType, value: str, close_at: int, close: str, **extra) -> Tuple[Token, int]:
            token = self._token(
                token_type,
                value,
                index,
                trim_left=trim_left,
                trim_right=close[:len(close) - len(end)].endswith("~"),
                **extra,
            )
            return token, close_at + len(close)

        if start == "{{" and text.startswith("{", body):
            close_at, close = self._find_close(index, body + 1, ["}~" + end, "}" + end])
            return emit(TokenType.TRIPLE, text[body + 1:close_at].strip(), close_at, close)

        if text.startswith("!--", body):
            close_at, close = self._find_close(index, body + 3, ["--~" + end, "--" + end])
            return emit(TokenType.COMMENT, text[body + 1:close_at + 2], close_at, close)

        if text.startswith("=", body):
            close_at, close = self._find_close(index, body + 1, ["=" + end])
            return emit(TokenType.DELIMITERS, text[body + 1:close_at].strip(), close_at, close)

        close_at, close = self._find_close(index, body, ["~" + end, end])
        content = text[body:close_at]
        stripped = content.strip()
        if not stripped:
            raise self._error("Empty tag", index)

        if stripped.startswith("#*"):
            return emit(TokenType.INLINE, stripped[2:].strip(), close_at, close)

        sigil = stripped[0]
        if sigil == "!":
            return emit(TokenType.COMMENT, content.lstrip()[1:], close_at, close)
        if sigil == "^" and not stripped[1:].strip():
            return emit(TokenType.ELSE, "", close_at, close, sigil="^")
        if sigil in _SIGILS:
            value = stripped[1:].strip()
            if not value:
                raise self._error(f"Missing name after '{sigil}'", index)
            return emit(_SIGILS[sigil], value, close_at, close)

        match = _ELSE.fullmatch(stripped)
        if match:
            return emit(TokenType.ELSE, (match.group(1) or "").strip(), close_at, close, sigil="else")

        return emit(TokenType.VARIABLE, stripped, close_at, close)

    def _find_close(self, index: int, pos: int, suffixes: Sequence[str]) -> Tuple[int, str]:
        """Earliest occurrence of any suffix; earlier entries win ties."""
        best: Optional[Tuple[int, str]] = None
        for suffix in suffixes:
            found = self.text.find(suffix, pos)
            if found >= 0 and (best is None or found < best[0]):
                best = (found, suffix)
        if best is None:
            raise self._error(f"Unclosed tag, expected '{suffixes[-1]}'", index)
        return best

    def _parse_delimiters(self, token: Token) -> Tuple[str, str]:
        parts = token.value.split()
        if len(parts) != 2 or any("=" in part for part in parts):
            raise self._error(f"Invalid delimiter switch: {token.value!r}", token.position)
        return parts[0], parts[1]

    # ------------------------- whitespace control ------------------------- #

    def _strip_whitespace(self, tokens: List[Token]) -> List[Token]:
        values = [token.value for token in tokens]
        heads = [0] * len(tokens)
        tails = [len(value) for value in values]

        # Standalone flags are computed on the original text for every tag
        # before any cut is applied.
        standalone = [self._is_standalone(tokens, i) for i in range(len(tokens))]
        for i, flag in enumerate(standalone):
            if not flag:
                continue
            if i > 0:
                prev = values[i - 1]
                tails[i - 1] = min(tails[i - 1], prev.rfind("\n") + 1)
            if i + 1 < len(tokens):
                nxt = values[i + 1]
                newline = nxt.find("\n")
                heads[i + 1] = max(heads[i + 1], newline + 1 if newline >= 0 else len(nxt))

        texts = [
            value[heads[i]:tails[i]] if heads[i] <= tails[i] else ""
            for i, value in enumerate(values)
        ]

        for i, token in enumerate(tokens):
            if token.trim_left and i > 0 and tokens[i - 1].type is TokenType.TEXT:
                texts[i - 1] = texts[i - 1].rstrip()
            if token.trim_right and i + 1 < len(tokens) and tokens[i + 1].type is TokenType.TEXT:
                texts[i + 1] = texts[i + 1].lstrip()

        result: List[Token] = []
        for token, text in zip(tokens, texts):
            if token.type is TokenType.TEXT:
                if text:
                    result.append(replace(token, value=text) if text != token.value else token)
            else:
                result.append(token)
        return result

    @staticmethod
    def _is_standalone(tokens: List[Token], i: int) -> bool:
        token = tokens[i]
        if token.type not in STANDALONE_TYPES:
            return False

        if i > 0:
            prev = tokens[i - 1]
            if prev.type is not TokenType.TEXT:
                return False
            newline = prev.value.rfind("\n")
            if newline < 0 and i - 1 > 0:
                return False
            if prev.value[newline + 1:].strip(" \t"):
                return False

        if i + 1 < len(tokens):
            nxt = tokens[i + 1]
            if nxt.type is not TokenType.TEXT:
                return False
            newline = nxt.value.find("\n")
            if newline < 0:
                return i + 2 == len(tokens) and not nxt.value.strip(" \t\r")
            if nxt.value[:newline].strip(" \t\r"):
                return False

        return True

    # ------------------------------ helpers ------------------------------- #

    def _locate(self, position: int) -> Tuple[int, int]:
        line = bisect.bisect_left(self._newlines, position) + 1
        line_start = self._newlines[line - 2] + 1 if line > 1 else 0
        return line, position - line_start + 1

    def _token(self, token_type: TokenType, value: str, position: int, **extra) -> Token:
        line, column = self._locate(position)
        return Token(
            token_type,
            value,
            position,
            line,
            column,
            start_delimiter=self.start,
            end_delimiter=self.end,
            **extra,
        )

    def _error(self, message: str, position: int) -> LexerError:
        line, column = self._locate(position)
        return LexerError(message, self.filename, line, column)


def tokenize_template(text: str, start: str = "{{", end: str = "}}", filename: str = "") -> List[Token]:
    """
    Convenience wrapper around TemplateLexer.

    Raises:
        LexerError: On an unclosed tag or a malformed delimiter switch
    """
    return TemplateLexer(text, start, end, filename).tokenize()


__all__ = ["TemplateLexer", "tokenize_template"]
