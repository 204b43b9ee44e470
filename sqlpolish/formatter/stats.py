"""Timing statistics for format calls.

Recording is observational only: nothing in the pipeline reads these
numbers back.
"""

import math
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict


@dataclass
class StatsSummary:
    """Snapshot of recorded format timings."""

    count: int = 0
    mean_ms: float = 0.0
    min_ms: float = 0.0
    max_ms: float = 0.0
    p95_ms: float = 0.0
    cache_hits: int = 0
    cache_misses: int = 0

    @property
    def cache_hit_rate(self) -> float:
        lookups = self.cache_hits + self.cache_misses
        return self.cache_hits / lookups if lookups else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for display and logging."""
        return {
            "count": self.count,
            "mean_ms": round(self.mean_ms, 3),
            "min_ms": round(self.min_ms, 3),
            "max_ms": round(self.max_ms, 3),
            "p95_ms": round(self.p95_ms, 3),
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "cache_hit_rate": round(self.cache_hit_rate, 3),
        }


class FormatStats:
    """Rolling window of format durations plus cache counters."""

    def __init__(self, window: int = 1000):
        if window < 1:
            raise ValueError(f"Stats window must be at least 1, got {window}")
        self.window = window
        self._durations: Deque[float] = deque(maxlen=window)
        self._cache_hits = 0
        self._cache_misses = 0
        self._lock = threading.Lock()

    def record(self, duration_seconds: float) -> None:
        """Record one format call duration."""
        with self._lock:
            self._durations.append(duration_seconds * 1000.0)

    def record_cache(self, hit: bool) -> None:
        with self._lock:
            if hit:
                self._cache_hits += 1
            else:
                self._cache_misses += 1

    def reset(self) -> None:
        with self._lock:
            self._durations.clear()
            self._cache_hits = 0
            self._cache_misses = 0

    def __len__(self) -> int:
        return len(self._durations)

    def summary(self) -> StatsSummary:
        """Summarize the current window.

        Returns:
            StatsSummary with durations in milliseconds
        """
        with self._lock:
            durations = sorted(self._durations)
            hits, misses = self._cache_hits, self._cache_misses

        if not durations:
            return StatsSummary(cache_hits=hits, cache_misses=misses)

        # Nearest-rank percentile
        rank = math.ceil(0.95 * len(durations)) - 1
        return StatsSummary(
            count=len(durations),
            mean_ms=sum(durations) / len(durations),
            min_ms=durations[0],
            max_ms=durations[-1],
            p95_ms=durations[rank],
            cache_hits=hits,
            cache_misses=misses,
        )
