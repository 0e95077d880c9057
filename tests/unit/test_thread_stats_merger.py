"""
Unit tests for transaction_analyzer.processors.thread_stats_merger module.
"""
import pytest
from transaction_analyzer.core.types import ThreadStats
from transaction_analyzer.processors.thread_stats_merger import ThreadStatsMerger


class TestThreadStatsMerger:
    """Tests for null-aware thread counter merging."""

    def test_sums_available_counters(self):
        merged = ThreadStatsMerger.merge([
            ThreadStats(100, 10, 1, 64),
            ThreadStats(50, 5, 2, 32),
        ])
        assert merged == ThreadStats(150, 15, 3, 96)

    def test_unavailable_counter_stays_none(self):
        """A counter never reported is None, not zero."""
        merged = ThreadStatsMerger.merge([
            ThreadStats(total_cpu_micros=100),
            ThreadStats(total_cpu_micros=20),
        ])
        assert merged.total_cpu_micros == 120
        assert merged.total_blocked_micros is None
        assert merged.total_allocated_kbytes is None

    def test_partially_available_counter(self):
        """Samples missing a counter do not erase it from the others."""
        merged = ThreadStatsMerger.merge([
            ThreadStats(total_waited_micros=None),
            ThreadStats(total_waited_micros=7),
            None,
        ])
        assert merged.total_waited_micros == 7

    def test_zero_is_kept_distinct_from_none(self):
        merged = ThreadStatsMerger.merge([ThreadStats(total_blocked_micros=0)])
        assert merged.total_blocked_micros == 0
        assert not merged.is_empty()

    def test_empty_input(self):
        merged = ThreadStatsMerger.merge([])
        assert merged.is_empty()
