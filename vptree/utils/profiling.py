"""
Lightweight profiling utilities for VP-tree builds and searches.
"""

import time
from typing import Dict

from .. import config as vp_config


class _NullTimer:
    __slots__ = ()

    def __enter__(self) -> "_NullTimer":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False


_NULL_TIMER = _NullTimer()


class _Timer:
    __slots__ = ("_profiler", "_key", "_start")

    def __init__(self, profiler: "Profiler", key: str) -> None:
        self._profiler = profiler
        self._key = key
        self._start = 0.0

    def __enter__(self) -> "_Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        elapsed = time.perf_counter() - self._start
        self._profiler._add_time(self._key, elapsed)
        return False


class Profiler:
    """
    Aggregates timing stats by category.

    Enable via VPTREE_PROFILE=1.
    """

    def __init__(self, enabled: bool) -> None:
        self.enabled = enabled
        self._timings: Dict[str, float] = {}
        self._counts: Dict[str, int] = {}

    @classmethod
    def from_env(cls) -> "Profiler":
        return cls(vp_config.runtime_config().profile)

    def time(self, key: str):
        if not self.enabled:
            return _NULL_TIMER
        return _Timer(self, key)

    def count(self, key: str, value: int = 1) -> None:
        if not self.enabled:
            return
        self._counts[key] = self._counts.get(key, 0) + value

    def _add_time(self, key: str, elapsed: float) -> None:
        self._timings[key] = self._timings.get(key, 0.0) + elapsed
        self._counts[key] = self._counts.get(key, 0) + 1

    def _keys(self):
        return sorted(set(self._timings) | set(self._counts))

    def summary(self) -> Dict[str, Dict[str, float]]:
        # Pure counters (no timer) report total_s=0.0
        return {
            key: {
                "count": self._counts.get(key, 0),
                "total_s": self._timings.get(key, 0.0),
            }
            for key in self._keys()
        }

    def format_summary(self) -> str:
        lines = ["VP-tree profile summary:"]
        for key in self._keys():
            count = self._counts.get(key, 0)
            if key in self._timings:
                lines.append(f"{key}: count={count} total_s={self._timings[key]:.6f}")
            else:
                lines.append(f"{key}: count={count}")
        return "\n".join(lines)
