"""
hbs: a Handlebars-style template engine.

    >>> from hbs import Handlebars
    >>> Handlebars().render(Handlebars().compile_inline("Hi {{name}}!"), {"name": "Ann"})
    'Hi Ann!'
"""

from __future__ import annotations

from .cache import ConcurrentMapTemplateCache, NullTemplateCache, TemplateCache
from .config import ConfigLoadError, EngineConfig, load_config
from .context import Context
from .engine import Handlebars
from .errors import (
    HbsUserError,
    HelperError,
    HelperNotFoundError,
    LexerError,
    MissingValueError,
    ParserError,
    ScopeResolutionError,
    TemplateCompileError,
    TemplateNotFoundError,
    TemplateRenderError,
)
from .escaping import HTML_ESCAPING, NO_ESCAPING
from .helpers import Helper, HelperRegistry, SafeString, default_registry
from .io import FileTemplateLoader, MapTemplateLoader, StringTemplateSource, TemplateSource
from .lambdas import Lambda
from .options import Options
from .template import Template, TemplateParser, TagType

__all__ = [
    "Handlebars",
    "Template",
    "TemplateParser",
    "TagType",
    "Context",
    "Options",
    "Helper",
    "HelperRegistry",
    "SafeString",
    "Lambda",
    "default_registry",
    "TemplateSource",
    "StringTemplateSource",
    "FileTemplateLoader",
    "MapTemplateLoader",
    "TemplateCache",
    "NullTemplateCache",
    "ConcurrentMapTemplateCache",
    "EngineConfig",
    "load_config",
    "ConfigLoadError",
    "HTML_ESCAPING",
    "NO_ESCAPING",
    "HbsUserError",
    "TemplateNotFoundError",
    "TemplateCompileError",
    "LexerError",
    "ParserError",
    "TemplateRenderError",
    "ScopeResolutionError",
    "HelperNotFoundError",
    "MissingValueError",
    "HelperError",
]
