"""
Template sources.

A source names a template (its filename doubles as the cache key), yields its
text and reports a freshness signal that changes whenever the text may have
changed.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Tuple

from ..errors import TemplateNotFoundError


def _sha1_text(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


class TemplateSource(ABC):
    """Identity is the filename: two sources with the same name are one cache entry."""

    def __init__(self, filename: str):
        self.filename = filename

    @abstractmethod
    def content(self) -> str:
        pass

    @abstractmethod
    def last_modified(self) -> Any:
        """Opaque freshness value; compared for equality only."""
        pass

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TemplateSource) and other.filename == self.filename

    def __hash__(self) -> int:
        return hash(self.filename)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.filename!r})"


class StringTemplateSource(TemplateSource):
    """In-memory text; freshness is the content hash."""

    def __init__(self, filename: str, text: str):
        super().__init__(filename)
        self._text = text
        self._digest = _sha1_text(text)

    def content(self) -> str:
        return self._text

    def last_modified(self) -> str:
        return self._digest


class FileTemplateSource(TemplateSource):
    """
    A template file on disk.

    Freshness is `(st_mtime_ns, st_size)`, so a rewrite within the same
    mtime tick that changes the size is still noticed.
    """

    def __init__(self, path: Path, filename: str | None = None):
        super().__init__(filename or path.as_posix())
        self.path = path

    def content(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise TemplateNotFoundError(self.filename, str(self.path)) from e

    def last_modified(self) -> Tuple[int, int]:
        try:
            st = self.path.stat()
        except FileNotFoundError as e:
            raise TemplateNotFoundError(self.filename, str(self.path)) from e
        return st.st_mtime_ns, st.st_size


__all__ = ["TemplateSource", "StringTemplateSource", "FileTemplateSource"]
