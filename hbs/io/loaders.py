"""
Template loaders: map a template location (`layouts/main`) to a source.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pathspec

from ..errors import TemplateNotFoundError
from .sources import FileTemplateSource, StringTemplateSource, TemplateSource

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".hbs"
IGNORE_FILE = ".hbsignore"


class TemplateLoader(ABC):
    """
    Resolves locations to sources. `prefix` and `suffix` are applied to every
    location: `main` -> `<prefix>main<suffix>`.
    """

    def __init__(self, prefix: str = "", suffix: str = DEFAULT_SUFFIX):
        self.prefix = prefix.strip("/")
        self.suffix = suffix

    def resolve(self, location: str) -> str:
        name = location.strip().lstrip("/")
        if self.suffix and not name.endswith(self.suffix):
            name += self.suffix
        if self.prefix:
            name = f"{self.prefix}/{name}"
        return name

    @abstractmethod
    def source_at(self, location: str) -> TemplateSource:
        """
        Raises:
            TemplateNotFoundError: If nothing exists at the location
        """
        pass


class FileTemplateLoader(TemplateLoader):
    """Templates stored as files below `base_dir`."""

    def __init__(
        self,
        base_dir: Path | str,
        prefix: str = "",
        suffix: str = DEFAULT_SUFFIX,
        exclude: Iterable[str] = (),
    ):
        super().__init__(prefix, suffix)
        self.base_dir = Path(base_dir).resolve()
        self.exclude = list(exclude)

    def source_at(self, location: str) -> TemplateSource:
        name = self.resolve(location)
        path = (self.base_dir / name).resolve()
        if self.base_dir not in path.parents or not path.is_file():
            raise TemplateNotFoundError(location, str(path))
        return FileTemplateSource(path, name)

    def list_templates(self, exclude: Optional[Iterable[str]] = None) -> List[str]:
        """
        Locations of every template under the loader root, sorted.

        Paths matching the configured or given gitwildmatch patterns, or the
        patterns of a `.hbsignore` file in `base_dir`, are skipped.
        """
        root = self.base_dir / self.prefix if self.prefix else self.base_dir
        if not root.is_dir():
            return []

        spec = self._build_pathspec(list(exclude or ()))
        names: List[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for fn in filenames:
                if self.suffix and not fn.endswith(self.suffix):
                    continue
                rel = Path(dirpath, fn).relative_to(root).as_posix()
                if spec.match_file(rel):
                    continue
                names.append(rel[: len(rel) - len(self.suffix)] if self.suffix else rel)

        logger.debug("Found %d template(s) under %s", len(names), root)
        return sorted(names)

    def _build_pathspec(self, extra_patterns: List[str]) -> pathspec.PathSpec:
        patterns: List[str] = list(self.exclude)

        ignore_file = self.base_dir / IGNORE_FILE
        if ignore_file.is_file():
            for ln in ignore_file.read_text(encoding="utf-8", errors="ignore").splitlines():
                ln = ln.strip()
                if ln and not ln.startswith("#"):
                    patterns.append(ln)

        patterns.extend(extra_patterns)
        return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, patterns)


class MapTemplateLoader(TemplateLoader):
    """In-memory templates keyed by location; useful for tests and embedding."""

    def __init__(self, templates: Optional[Dict[str, str]] = None, prefix: str = "", suffix: str = ""):
        super().__init__(prefix, suffix)
        self._templates: Dict[str, str] = {}
        for location, text in (templates or {}).items():
            self.put(location, text)

    def put(self, location: str, text: str) -> MapTemplateLoader:
        self._templates[self.resolve(location)] = text
        return self

    def source_at(self, location: str) -> TemplateSource:
        name = self.resolve(location)
        if name not in self._templates:
            raise TemplateNotFoundError(location, name)
        return StringTemplateSource(name, self._templates[name])

    def list_templates(self) -> List[str]:
        return sorted(self._templates)


__all__ = [
    "TemplateLoader",
    "FileTemplateLoader",
    "MapTemplateLoader",
    "DEFAULT_SUFFIX",
]
