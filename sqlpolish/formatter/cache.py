"""Content-addressed LRU cache of formatted output.

The cache is an explicit object owned by the caller. Keys hash the source
text together with the serialized configuration, so entries never go
stale and only need size-bounded eviction.
"""

import hashlib
import threading
from collections import OrderedDict
from typing import Optional

from sqlpolish.formatter.config import FormatterConfig
from sqlpolish.logging import get_logger

logger = get_logger(__name__)


def cache_key(source: str, config: FormatterConfig) -> str:
    """Hash of the source and the serialized configuration."""
    payload = source + "\0" + config.serialize()
    return hashlib.sha256(payload.encode("utf-8", "surrogatepass")).hexdigest()


class FormatCache:
    """Least-recently-used cache for ``FormatterEngine.format``."""

    def __init__(self, max_entries: int = 256):
        if max_entries < 1:
            raise ValueError(f"Cache size must be at least 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, str]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, source: str, config: FormatterConfig) -> Optional[str]:
        """Return the cached output, or None on a miss."""
        key = cache_key(source, config)
        with self._lock:
            output = self._entries.get(key)
            if output is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
        logger.debug(f"Format cache hit for {key[:12]}")
        return output

    def put(self, source: str, config: FormatterConfig, output: str) -> None:
        key = cache_key(source, config)
        with self._lock:
            self._entries[key] = output
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Format cache evicted {evicted[:12]}")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
