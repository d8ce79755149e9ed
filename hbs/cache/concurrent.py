"""
Thread-safe in-memory template cache.

Entries are keyed by source filename and hold the compiled tree together with
the freshness value read just before compiling. At most one compile per key is
in flight: concurrent requesters of the same key wait for it and reuse its
result, while different keys compile in parallel.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from .base import Parser, TemplateCache

if TYPE_CHECKING:
    from ..io.sources import TemplateSource
    from ..template.nodes import Template

logger = logging.getLogger(__name__)


class ConcurrentMapTemplateCache(TemplateCache):

    def __init__(self, *, reload: bool = False):
        self._reload = bool(reload)
        self._entries: Dict[str, Tuple[Template, Any]] = {}
        self._key_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    @property
    def reload(self) -> bool:
        return self._reload

    def get(self, source: TemplateSource, parser: Parser) -> Template:
        key = source.filename
        template = self._lookup(source)
        if template is not None:
            logger.debug("Template cache hit: %s", key)
            return template

        with self._key_lock(key):
            # Another thread may have compiled it while we waited.
            template = self._lookup(source)
            if template is not None:
                return template

            freshness = source.last_modified()
            logger.debug("Compiling template: %s", key)
            template = parser.parse(source)
            with self._lock:
                self._entries[key] = (template, freshness)
            return template

    def evict(self, source: TemplateSource) -> None:
        with self._lock:
            removed = self._entries.pop(source.filename, None)
            self._key_locks.pop(source.filename, None)
        if removed is not None:
            logger.debug("Evicted template: %s", source.filename)

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._key_locks.clear()
        logger.debug("Cleared %d cached template(s)", count)

    def set_reload(self, reload: bool) -> ConcurrentMapTemplateCache:
        self._reload = bool(reload)
        return self

    def _lookup(self, source: TemplateSource) -> Optional[Template]:
        with self._lock:
            entry = self._entries.get(source.filename)
        if entry is None:
            return None
        template, stored = entry
        if self._reload and source.last_modified() != stored:
            logger.debug("Template changed, recompiling: %s", source.filename)
            return None
        return template

    def _key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, source: object) -> bool:
        filename = getattr(source, "filename", source)
        with self._lock:
            return filename in self._entries


__all__ = ["ConcurrentMapTemplateCache"]
