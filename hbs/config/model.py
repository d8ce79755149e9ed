from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class DelimitersCfg:
    start: str = "{{"
    end: str = "}}"


@dataclass
class CacheCfg:
    # False selects NullTemplateCache
    enabled: bool = True
    reload: bool = False


@dataclass
class TemplatesCfg:
    base_dir: str = "."
    prefix: str = ""
    suffix: str = ".hbs"
    exclude: List[str] = field(default_factory=list)


@dataclass
class EngineConfig:
    """Engine settings as read from `hbs.yaml`."""
    delimiters: DelimitersCfg = field(default_factory=DelimitersCfg)
    escape_html: bool = True
    strict: bool = False
    cache: CacheCfg = field(default_factory=CacheCfg)
    templates: TemplatesCfg = field(default_factory=TemplatesCfg)


__all__ = ["EngineConfig", "DelimitersCfg", "CacheCfg", "TemplatesCfg"]
