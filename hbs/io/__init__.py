from .loaders import DEFAULT_SUFFIX, FileTemplateLoader, MapTemplateLoader, TemplateLoader
from .sources import FileTemplateSource, StringTemplateSource, TemplateSource

__all__ = [
    "TemplateSource",
    "StringTemplateSource",
    "FileTemplateSource",
    "TemplateLoader",
    "FileTemplateLoader",
    "MapTemplateLoader",
    "DEFAULT_SUFFIX",
]
