"""
Template cache contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..io.sources import TemplateSource
    from ..template.nodes import Template


class Parser(Protocol):
    """Anything that compiles a source into a Template."""

    def parse(self, source: TemplateSource) -> Template:
        ...


class TemplateCache(ABC):
    """
    Compiled-template store keyed by source identity.

    `get` returns a stored tree when one exists and is still fresh (or reload
    checking is off), otherwise it compiles through `parser`. Compile errors
    propagate and leave the cache as it was.
    """

    @abstractmethod
    def get(self, source: TemplateSource, parser: Parser) -> Template:
        pass

    @abstractmethod
    def evict(self, source: TemplateSource) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def set_reload(self, reload: bool) -> TemplateCache:
        """Toggle freshness checking in `get`; returns the cache itself."""
        pass


__all__ = ["TemplateCache", "Parser"]
