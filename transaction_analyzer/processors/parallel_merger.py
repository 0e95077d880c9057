"""
Parallel aggregate merger for improved performance on very large windows.
"""

import logging
import os
from multiprocessing import Pool
from typing import List, Optional, Sequence, Tuple

from ..core.histogram import DurationHistogram, validate_percentile
from ..core.types import (
    AnalyzerConfig,
    OverviewSample,
    PercentileSample,
    TimerNode,
    validate_capture_times,
)
from .aggregate_merger import (
    AggregateMerger,
    PercentileMergedAggregate,
    ThreadInfoAggregate,
    TimerMergedAggregate,
)
from .histogram_merger import HistogramMerger
from .timer_merger import TimerTreeMerger

logger = logging.getLogger(__name__)


# Timer trees cross the process boundary as flat arenas; pickling nested
# TimerNode objects recurses once per tree level.
TimerArena = List[Tuple[Optional[str], int, int, int]]


def _merge_overview_chunk(rows: List[Tuple[int, int, TimerArena]]) -> Tuple[TimerArena, int, int]:
    """
    Merge one chunk of overview samples. Designed to run in a worker process.

    Args:
        rows: (transaction count, total micros, timer arena) per sample

    Returns:
        Tuple of (merged synthetic root timer arena, transaction count, total micros)
    """
    merged_root = TimerTreeMerger.merge(TimerNode.from_arena(arena) for _, _, arena in rows)
    transaction_count = sum(count for count, _, _ in rows)
    total_micros = sum(micros for _, micros, _ in rows)
    return merged_root.to_arena(), transaction_count, total_micros


def _merge_percentile_chunk(args: Tuple[List[PercentileSample], int]) -> Tuple[DurationHistogram, int, int]:
    """
    Merge one chunk of percentile samples. Designed to run in a worker process.

    Returns:
        Tuple of (merged histogram, transaction count, total micros)
    """
    samples, precision_bits = args
    histogram = HistogramMerger(precision_bits).merge(sample.histogram for sample in samples)
    transaction_count = sum(sample.transaction_count for sample in samples)
    total_micros = sum(sample.total_micros for sample in samples)
    return histogram, transaction_count, total_micros


class ParallelAggregateMerger:
    """
    Merge aggregates in parallel using multiprocessing.

    Histogram and timer tree merges are associative and commutative, so each worker
    merges a contiguous chunk and the partial results are folded at the end. The
    result is identical to the sequential merge.
    """

    def __init__(self, config: AnalyzerConfig, num_workers: Optional[int] = None):
        """
        Initialize parallel merger.

        Args:
            config: AnalyzerConfig instance
            num_workers: Number of worker processes (default: config, then CPU count)
        """
        self.config = config
        self.num_workers = num_workers or config.num_workers or os.cpu_count() or 4
        self.sequential_merger = AggregateMerger(config.histogram_precision_bits)

    def _should_parallelize(self, sample_count: int) -> bool:
        return self.num_workers > 1 and sample_count >= self.config.parallel_threshold

    def _chunk(self, samples: Sequence) -> List[List]:
        chunk_size = -(-len(samples) // self.num_workers)
        return [list(samples[i:i + chunk_size]) for i in range(0, len(samples), chunk_size)]

    def timer_merged_aggregate(self, samples: Sequence[OverviewSample]) -> TimerMergedAggregate:
        if not self._should_parallelize(len(samples)):
            return self.sequential_merger.timer_merged_aggregate(samples)

        validate_capture_times(samples)
        rows = [(sample.transaction_count, sample.total_micros,
                 sample.synthetic_root_timer.to_arena()) for sample in samples]
        chunks = self._chunk(rows)
        logger.debug("Merging %d overview samples in %d chunks", len(samples), len(chunks))
        with Pool(processes=min(self.num_workers, len(chunks))) as pool:
            partials = pool.map(_merge_overview_chunk, chunks)

        return TimerMergedAggregate(
            synthetic_root_timer=TimerTreeMerger.merge(
                TimerNode.from_arena(arena) for arena, _, _ in partials),
            transaction_count=sum(count for _, count, _ in partials),
            total_micros=sum(micros for _, _, micros in partials),
        )

    def percentile_merged_aggregate(self, samples: Sequence[PercentileSample],
                                    percentiles: Sequence[float]) -> PercentileMergedAggregate:
        if not self._should_parallelize(len(samples)):
            return self.sequential_merger.percentile_merged_aggregate(samples, percentiles)

        for percentile in percentiles:
            validate_percentile(percentile)
        validate_capture_times(samples)
        precision_bits = self.config.histogram_precision_bits
        chunks = self._chunk(samples)
        logger.debug("Merging %d percentile samples in %d chunks", len(samples), len(chunks))
        with Pool(processes=min(self.num_workers, len(chunks))) as pool:
            partials = pool.map(_merge_percentile_chunk,
                                [(chunk, precision_bits) for chunk in chunks])

        histogram = HistogramMerger(precision_bits).merge(h for h, _, _ in partials)
        return AggregateMerger.build_percentile_aggregate(
            histogram,
            percentiles,
            transaction_count=sum(count for _, count, _ in partials),
            total_micros=sum(micros for _, _, micros in partials),
        )

    def thread_info_aggregate(self, samples: Sequence[OverviewSample]) -> ThreadInfoAggregate:
        return self.sequential_merger.thread_info_aggregate(samples)
