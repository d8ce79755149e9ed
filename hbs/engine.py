"""
Engine facade.

Ties together the loader, cache, parser and helper registry behind a small API:
compile a named template or an inline string, and render it against a model.
"""

from __future__ import annotations

import hashlib
import io
import logging
from typing import Any, Iterable, Mapping, Optional, TextIO

from .cache import ConcurrentMapTemplateCache, NullTemplateCache, TemplateCache
from .config.model import EngineConfig
from .context import Context
from .escaping import HTML_ESCAPING, NO_ESCAPING, EscapingStrategy
from .helpers import HELPER_MISSING, HelperRegistry, default_registry
from .helpers.base import Helper
from .helpers.builtins import StrictMissingHelper
from .io import FileTemplateLoader, MapTemplateLoader, StringTemplateSource, TemplateLoader
from .lambdas import DefaultTransformer, ValueTransformer
from .resolvers import DEFAULT_RESOLVERS, ValueResolver
from .template.nodes import Template
from .template.parser import TemplateParser

logger = logging.getLogger(__name__)


class Handlebars:
    """
    Template engine.

    Args:
        loader: Where named templates and partials come from (in-memory by default)
        cache: Compiled-template cache (NullTemplateCache.INSTANCE by default)
        registry: Helper table; a fresh one with the built-ins by default
        escaping: Applied to `{{var}}` output
        transformer: Rewrites resolved values (callables become lambdas by default)
        start_delimiter: Opening tag delimiter for every compile
        end_delimiter: Closing tag delimiter for every compile
        strict: Register a `helperMissing` that raises on unresolved names
        resolvers: Member access strategies for the scope chain
    """

    def __init__(
        self,
        loader: Optional[TemplateLoader] = None,
        *,
        cache: Optional[TemplateCache] = None,
        registry: Optional[HelperRegistry] = None,
        escaping: EscapingStrategy = HTML_ESCAPING,
        transformer: Optional[ValueTransformer] = None,
        start_delimiter: str = "{{",
        end_delimiter: str = "}}",
        strict: bool = False,
        resolvers: Optional[Iterable[ValueResolver]] = None,
    ):
        self.loader = loader if loader is not None else MapTemplateLoader()
        self.cache = cache if cache is not None else NullTemplateCache.INSTANCE
        if registry is None:
            registry = default_registry(strict=strict)
        elif strict:
            # A caller-supplied registry is never mutated.
            registry = registry.copy().register(HELPER_MISSING, StrictMissingHelper())
        self.registry = registry
        self.escaping = escaping
        self.transformer = transformer if transformer is not None else DefaultTransformer()
        self.start_delimiter = start_delimiter
        self.end_delimiter = end_delimiter
        self.resolvers = list(resolvers) if resolvers is not None else list(DEFAULT_RESOLVERS)

    @classmethod
    def from_config(cls, cfg: EngineConfig, **overrides: Any) -> Handlebars:
        """Engine with a file loader and cache set up from `cfg`."""
        templates = cfg.templates
        kwargs: dict[str, Any] = {
            "loader": FileTemplateLoader(
                templates.base_dir, templates.prefix, templates.suffix, templates.exclude
            ),
            "cache": (
                ConcurrentMapTemplateCache(reload=cfg.cache.reload)
                if cfg.cache.enabled
                else NullTemplateCache.INSTANCE
            ),
            "escaping": HTML_ESCAPING if cfg.escape_html else NO_ESCAPING,
            "start_delimiter": cfg.delimiters.start,
            "end_delimiter": cfg.delimiters.end,
            "strict": cfg.strict,
        }
        kwargs.update(overrides)
        logger.debug(
            "Engine from config: base_dir=%s, cache=%s, strict=%s",
            templates.base_dir, type(kwargs["cache"]).__name__, kwargs["strict"],
        )
        return cls(**kwargs)

    # ------------------------------ helpers ------------------------------- #

    def register_helper(self, name: str, helper: Any) -> Handlebars:
        self.registry.register(name, helper)
        return self

    def helper(self, name: str) -> Optional[Helper]:
        return self.registry.lookup(name)

    # ----------------------------- compilation ---------------------------- #

    def parser_for(self, start: Optional[str] = None, end: Optional[str] = None) -> TemplateParser:
        """A new parser; parser instances are single-threaded."""
        return TemplateParser(self, start or self.start_delimiter, end or self.end_delimiter)

    def compile(self, location: str) -> Template:
        """
        Compile the template the loader finds at `location`, through the cache.

        Raises:
            TemplateNotFoundError: If the loader has no such template
            TemplateCompileError: On malformed template syntax
        """
        source = self.loader.source_at(location)
        return self.cache.get(source, self.parser_for())

    def compile_inline(self, text: str, start: Optional[str] = None, end: Optional[str] = None) -> Template:
        """Compile template text directly, keyed in the cache by content and delimiters."""
        start = start or self.start_delimiter
        end = end or self.end_delimiter
        digest = hashlib.sha1(f"{start}\0{end}\0{text}".encode("utf-8")).hexdigest()[:16]
        source = StringTemplateSource(f"inline@{digest}", text)
        return self.cache.get(source, self.parser_for(start, end))

    # ------------------------------ rendering ----------------------------- #

    def render(
        self,
        template: Template | str,
        model: Any = None,
        writer: Optional[TextIO] = None,
        *,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Optional[str]:
        """
        Render a compiled template, or the named one, against `model`.

        With a `writer` the output goes there and None is returned; otherwise
        the output is returned. `data` seeds the `@name` variables.
        """
        if isinstance(template, str):
            template = self.compile(template)

        context = Context.new_context(model, data=data, resolvers=self.resolvers)
        if writer is not None:
            template.apply(context, writer)
            return None

        buffer = io.StringIO()
        template.apply(context, buffer)
        return buffer.getvalue()

    def __repr__(self) -> str:
        return f"Handlebars(loader={self.loader!r}, cache={self.cache!r})"


__all__ = ["Handlebars"]
