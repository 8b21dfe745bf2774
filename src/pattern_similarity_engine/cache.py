# Pattern Similarity Engine - Find duplicated code patterns across projects
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
In-memory analysis caches for pattern-similarity-engine.

Two tiers share one LRU + TTL implementation:

- results:  whole AnalysisResult objects keyed by project-set hash
- patterns: per-file pattern lists keyed by a SHA-256 of the content

Caches are plain objects: build one AnalysisCache and hand it to the
orchestrator. Entries are only ever inserted or evicted.
"""

import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

from .models import AnalysisResult, Pattern

T = TypeVar("T")

CACHE_DIR = ".pse_cache"

DEFAULT_RESULT_CACHE_SIZE = 100
DEFAULT_RESULT_TTL = 30 * 60  # seconds
DEFAULT_PATTERN_CACHE_SIZE = 1000
DEFAULT_PATTERN_TTL = 60 * 60  # seconds


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value with its insertion time and lifetime (seconds)."""

    data: T
    timestamp: float
    ttl: float

    def is_expired(self, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.timestamp > self.ttl


class LRUCache(Generic[T]):
    """
    Thread-safe LRU cache with TTL support.

    Args:
        max_size: Maximum number of entries
        ttl: Default time to live in seconds
    """

    def __init__(self, max_size: int = 1000, ttl: float = 3600):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.ttl = ttl
        self._entries: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._lock = threading.RLock()

        # Statistics
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: str) -> Optional[T]:
        """Get a live value, refreshing its recency; None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            if entry.is_expired():
                del self._entries[key]
                self.evictions += 1
                self.misses += 1
                return None

            self._entries.move_to_end(key)
            self.hits += 1
            return entry.data

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Insert or replace a value, evicting least recently used entries."""
        with self._lock:
            if key in self._entries:
                del self._entries[key]

            self._evict_expired()
            while len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
                self.evictions += 1

            self._entries[key] = CacheEntry(
                data=value,
                timestamp=time.monotonic(),
                ttl=self.ttl if ttl is None else ttl,
            )

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict_expired(self) -> None:
        now = time.monotonic()
        expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        self.evictions += len(expired)

    def stats(self) -> Dict[str, Any]:
        """Read-only statistics for monitoring."""
        with self._lock:
            total = self.hits + self.misses
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
                "hit_rate": round(self.hits / total, 3) if total else 0.0,
                "ttl": self.ttl,
            }


class AnalysisCache:
    """
    The two cache tiers used by one orchestrator.

    Args:
        result_size: Max cached analysis results
        result_ttl: Lifetime of an analysis result in seconds
        pattern_size: Max cached per-file pattern lists
        pattern_ttl: Lifetime of a pattern list in seconds
    """

    def __init__(
        self,
        result_size: int = DEFAULT_RESULT_CACHE_SIZE,
        result_ttl: float = DEFAULT_RESULT_TTL,
        pattern_size: int = DEFAULT_PATTERN_CACHE_SIZE,
        pattern_ttl: float = DEFAULT_PATTERN_TTL,
    ):
        self.results: LRUCache[AnalysisResult] = LRUCache(result_size, result_ttl)
        self.patterns: LRUCache[Tuple[Pattern, ...]] = LRUCache(pattern_size, pattern_ttl)

    @classmethod
    def from_config(cls, config) -> "AnalysisCache":
        return cls(
            result_size=config.result_cache_size,
            result_ttl=config.result_cache_ttl,
            pattern_size=config.pattern_cache_size,
            pattern_ttl=config.pattern_cache_ttl,
        )

    def stats(self) -> Dict[str, Dict[str, Any]]:
        return {
            "results": self.results.stats(),
            "patterns": self.patterns.stats(),
        }


def get_content_hash(content: str) -> str:
    """
    Hash file content for the pattern cache key using SHA-256.

    Args:
        content: Full text of the file.

    Returns:
        Hexadecimal SHA-256 hash string.
    """
    return hashlib.sha256(content.encode("utf-8", errors="surrogatepass")).hexdigest()


def pattern_cache_key(content: str, extension: str = "") -> str:
    """Key for a file's pattern list; the extension names its structure pattern."""
    digest = get_content_hash(content)
    if extension:
        return f"patterns_{extension}_{digest}"
    return f"patterns_{digest}"
