"""
Merging of sampled aggregates into window summaries.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple, TypeVar

from ..core.histogram import DEFAULT_PRECISION_BITS, DurationHistogram, validate_percentile
from ..core.types import (
    OverviewSample,
    PercentileSample,
    ThreadStats,
    TimerNode,
    validate_capture_times,
)
from ..formatters.percentile_formatter import percentile_series_name
from .histogram_merger import HistogramMerger
from .thread_stats_merger import ThreadStatsMerger
from .timer_merger import TimerTreeMerger

SampleT = TypeVar('SampleT', OverviewSample, PercentileSample)


@dataclass
class TimerMergedAggregate:
    """Timer tree and totals merged over a window."""
    synthetic_root_timer: TimerNode
    transaction_count: int
    total_micros: int

    def to_dict(self) -> dict:
        return {
            'syntheticRootTimer': self.synthetic_root_timer.to_dict(),
            'transactionCount': self.transaction_count,
            'totalMicros': self.total_micros,
        }


@dataclass
class PercentileMergedAggregate:
    """Histogram merged over a window with the requested percentile values."""
    histogram: DurationHistogram
    percentiles: Tuple[float, ...]
    transaction_count: int
    total_micros: int
    percentile_values: List[Tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'transactionCount': self.transaction_count,
            'totalMicros': self.total_micros,
            'percentileValues': [
                {'dataSeriesName': name, 'value': value}
                for name, value in self.percentile_values
            ],
        }


@dataclass
class ThreadInfoAggregate:
    """Thread counters summed over a window."""
    thread_stats: ThreadStats

    def is_empty(self) -> bool:
        return self.thread_stats.is_empty()

    def to_dict(self) -> dict:
        return {
            'totalCpuMicros': self.thread_stats.total_cpu_micros,
            'totalBlockedMicros': self.thread_stats.total_blocked_micros,
            'totalWaitedMicros': self.thread_stats.total_waited_micros,
            'totalAllocatedKBytes': self.thread_stats.total_allocated_kbytes,
        }


class AggregateMerger:
    """Orchestrates the histogram, timer tree and thread statistics mergers."""

    def __init__(self, precision_bits: int = DEFAULT_PRECISION_BITS):
        self.histogram_merger = HistogramMerger(precision_bits)
        self.timer_merger = TimerTreeMerger()
        self.thread_stats_merger = ThreadStatsMerger()

    @staticmethod
    def exclude_prior_window(samples: Sequence[SampleT], window_from: int) -> List[SampleT]:
        """
        Drop a leading sample captured exactly at the window start.

        Such a sample covers the interval before the window; it is charted but not
        merged.
        """
        samples = list(samples)
        if samples and samples[0].capture_time == window_from:
            return samples[1:]
        return samples

    def timer_merged_aggregate(self, samples: Sequence[OverviewSample]) -> TimerMergedAggregate:
        validate_capture_times(samples)
        transaction_count = 0
        total_micros = 0
        for sample in samples:
            transaction_count += sample.transaction_count
            total_micros += sample.total_micros
        synthetic_root_timer = self.timer_merger.merge(
            sample.synthetic_root_timer for sample in samples)
        return TimerMergedAggregate(
            synthetic_root_timer=synthetic_root_timer,
            transaction_count=transaction_count,
            total_micros=total_micros,
        )

    def percentile_merged_aggregate(self, samples: Sequence[PercentileSample],
                                    percentiles: Sequence[float]) -> PercentileMergedAggregate:
        for percentile in percentiles:
            validate_percentile(percentile)
        validate_capture_times(samples)
        transaction_count = 0
        total_micros = 0
        for sample in samples:
            transaction_count += sample.transaction_count
            total_micros += sample.total_micros
        histogram = self.histogram_merger.merge(sample.histogram for sample in samples)
        return self.build_percentile_aggregate(histogram, percentiles, transaction_count,
                                               total_micros)

    @staticmethod
    def build_percentile_aggregate(histogram: DurationHistogram, percentiles: Sequence[float],
                                   transaction_count: int,
                                   total_micros: int) -> PercentileMergedAggregate:
        percentile_values = [
            (percentile_series_name(percentile), histogram.value_at_percentile(percentile))
            for percentile in percentiles
        ]
        return PercentileMergedAggregate(
            histogram=histogram,
            percentiles=tuple(percentiles),
            transaction_count=transaction_count,
            total_micros=total_micros,
            percentile_values=percentile_values,
        )

    def thread_info_aggregate(self, samples: Sequence[OverviewSample]) -> ThreadInfoAggregate:
        return ThreadInfoAggregate(
            self.thread_stats_merger.merge(sample.thread_stats for sample in samples))
