"""
Cache that stores nothing: every `get` compiles the source again.

It defines the behaviour any other cache must reproduce, apart from speed
and the identity of the returned trees.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from .base import Parser, TemplateCache

if TYPE_CHECKING:
    from ..io.sources import TemplateSource
    from ..template.nodes import Template


class NullTemplateCache(TemplateCache):
    INSTANCE: ClassVar[NullTemplateCache]

    def get(self, source: TemplateSource, parser: Parser) -> Template:
        return parser.parse(source)

    def evict(self, source: TemplateSource) -> None:
        pass

    def clear(self) -> None:
        pass

    def set_reload(self, reload: bool) -> NullTemplateCache:
        return self

    def __repr__(self) -> str:
        return "NullTemplateCache.INSTANCE"


NullTemplateCache.INSTANCE = NullTemplateCache()


__all__ = ["NullTemplateCache"]
