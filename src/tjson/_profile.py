"""
Hot-path profiling for encode and decode.

Disabled by default. Set TJSON_PROFILE in the environment (debug builds
only) or call enable_profiling() to start recording per-path statistics.
"""

import os
import threading
import time
from dataclasses import dataclass
from typing import Any

_enabled = __debug__ and "TJSON_PROFILE" in os.environ
_stats_lock = threading.Lock()


@dataclass
class HotPathStats:
    """Statistics for one profiled hot path."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    chars_processed: int = 0

    def record_call(self, duration_ns: int, chars: int = 0) -> None:
        """Records a call with timing and character processing info."""
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.chars_processed += chars


_hot_path_stats: dict[str, HotPathStats] = {}


class ProfileContext:
    """Context manager timing a hot path while profiling is enabled."""

    __slots__ = ("active", "chars", "func_name", "start_time")

    def __init__(self, func_name: str, chars_to_process: int = 0) -> None:
        self.func_name = func_name
        self.chars = chars_to_process
        self.active = _enabled
        self.start_time = 0

    def __enter__(self) -> "ProfileContext":
        if self.active:
            self.start_time = time.perf_counter_ns()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if not self.active:
            return
        duration = time.perf_counter_ns() - self.start_time
        with _stats_lock:
            stats = _hot_path_stats.get(self.func_name)
            if stats is None:
                stats = _hot_path_stats[self.func_name] = HotPathStats(
                    self.func_name
                )
            stats.record_call(duration, self.chars)


def enable_profiling() -> None:
    global _enabled
    _enabled = True


def disable_profiling() -> None:
    global _enabled
    _enabled = False


def profiling_enabled() -> bool:
    return _enabled


def get_hot_path_stats() -> dict[str, HotPathStats]:
    """Returns a snapshot of the current profiling statistics."""
    with _stats_lock:
        return dict(_hot_path_stats)


def clear_hot_path_stats() -> None:
    """Clears profiling statistics."""
    with _stats_lock:
        _hot_path_stats.clear()
