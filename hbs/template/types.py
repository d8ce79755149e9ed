"""Tag classification shared by the lexer, the parser and the node tree."""

from __future__ import annotations

import enum


class TagType(enum.Enum):
    """How a tag was written in the source."""

    VAR = "VAR"                        # {{var}}
    AMP_VAR = "AMP_VAR"                # {{&var}}
    TRIPLE_VAR = "TRIPLE_VAR"          # {{{var}}}
    SUB_EXPRESSION = "SUB_EXPRESSION"  # (helper arg)
    SECTION = "SECTION"                # {{#name}}...{{/name}}

    @property
    def inline(self) -> bool:
        return self is not TagType.SECTION

    @property
    def escaped(self) -> bool:
        return self is TagType.VAR


__all__ = ["TagType"]
