from .base import Parser, TemplateCache
from .concurrent import ConcurrentMapTemplateCache
from .null_cache import NullTemplateCache

__all__ = ["TemplateCache", "Parser", "NullTemplateCache", "ConcurrentMapTemplateCache"]
