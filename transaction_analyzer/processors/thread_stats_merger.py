"""
Thread statistics merging.
"""

from typing import Iterable, Optional

from ..core.types import ThreadStats


def _null_aware_add(x: Optional[int], y: Optional[int]) -> Optional[int]:
    if x is None:
        return y
    if y is None:
        return x
    return x + y


class ThreadStatsMerger:
    """Sums thread counters, keeping "never available" distinct from zero."""

    @staticmethod
    def merge(thread_stats: Iterable[Optional[ThreadStats]]) -> ThreadStats:
        total_cpu_micros = None
        total_blocked_micros = None
        total_waited_micros = None
        total_allocated_kbytes = None
        for stats in thread_stats:
            if stats is None:
                continue
            total_cpu_micros = _null_aware_add(total_cpu_micros, stats.total_cpu_micros)
            total_blocked_micros = _null_aware_add(total_blocked_micros, stats.total_blocked_micros)
            total_waited_micros = _null_aware_add(total_waited_micros, stats.total_waited_micros)
            total_allocated_kbytes = _null_aware_add(total_allocated_kbytes,
                                                     stats.total_allocated_kbytes)
        return ThreadStats(
            total_cpu_micros=total_cpu_micros,
            total_blocked_micros=total_blocked_micros,
            total_waited_micros=total_waited_micros,
            total_allocated_kbytes=total_allocated_kbytes,
        )
