"""
Main transaction aggregate analyzer orchestrator.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..core.types import AnalyzerConfig, OverviewSample, PercentileSample, ProfileNode, QueryStats
from ..processors import (
    AggregateExport,
    AggregateFileProcessor,
    AggregateMerger,
    FlameGraphNode,
    FlameGraphReducer,
    ParallelAggregateMerger,
    ProfileFilter,
    PercentileMergedAggregate,
    QueryMerger,
    StackedTimerReducer,
    ThreadInfoAggregate,
    TimerMergedAggregate,
)
from ..series import DataSeries, GapFillPolicy, build_percentile_series
from ..formatters import format_micros

logger = logging.getLogger(__name__)


@dataclass
class OverviewView:
    """Stacked timer chart and merged timer breakdown for a window."""
    data_series: List[DataSeries]
    transaction_counts: Dict[int, int]
    merged_aggregate: TimerMergedAggregate
    thread_info_aggregate: ThreadInfoAggregate


@dataclass
class PercentileView:
    """Percentile chart and merged percentiles for a window."""
    data_series: List[DataSeries]
    transaction_counts: Dict[int, int]
    merged_aggregate: PercentileMergedAggregate


class TransactionAnalyzer:
    """Main orchestrator for transaction aggregate analysis."""

    def __init__(
        self,
        top_timer_count: int = 5,
        gap_slack_factor: float = 1.5,
        micros_per_milli: float = 1000.0,
        histogram_precision_bits: int = 7,
        default_percentiles: Sequence[float] = (0.5, 0.95, 0.99),
        num_workers: Optional[int] = None,
        parallel_threshold: int = 500
    ):
        """
        Initialize the TransactionAnalyzer.

        Args:
            top_timer_count: Named series in the stacked timer chart
            gap_slack_factor: Interior gap threshold as a multiple of the interval
            micros_per_milli: Conversion from microseconds to charted milliseconds
            histogram_precision_bits: Significant bits kept per histogram bucket
            default_percentiles: Percentiles charted when none are requested
            num_workers: Worker processes for merging very large windows
            parallel_threshold: Minimum samples before merging in parallel
        """
        # Configuration
        self.config = AnalyzerConfig(
            top_timer_count=top_timer_count,
            gap_slack_factor=gap_slack_factor,
            micros_per_milli=micros_per_milli,
            histogram_precision_bits=histogram_precision_bits,
            default_percentiles=tuple(default_percentiles),
            num_workers=num_workers,
            parallel_threshold=parallel_threshold
        )

        # Initialize components
        self.file_processor = AggregateFileProcessor(histogram_precision_bits)
        self.aggregate_merger = ParallelAggregateMerger(self.config)
        self.stacked_timer_reducer = StackedTimerReducer(top_timer_count, micros_per_milli)
        self.flame_graph_reducer = FlameGraphReducer()
        self.query_merger = QueryMerger()

    def process_export_file(self, file_path: str) -> AggregateExport:
        """
        Read an aggregate export file.

        Args:
            file_path: Path to the export JSON file
        """
        export = self.file_processor.process_file(file_path)
        print(f"\nFound {len(export.overview_samples)} overview aggregates "
              f"and {len(export.percentile_samples)} percentile aggregates")
        return export

    def _gap_fill_policy(self, interval_millis: int,
                         live_capture_time: Optional[int]) -> GapFillPolicy:
        return GapFillPolicy(interval_millis, self.config.gap_slack_factor, live_capture_time)

    @staticmethod
    def transaction_counts(samples: Sequence) -> Dict[int, int]:
        return {sample.capture_time: sample.transaction_count for sample in samples}

    def overview(self, samples: Sequence[OverviewSample], window_from: int, window_to: int,
                 interval_millis: int, live_capture_time: Optional[int] = None) -> OverviewView:
        """
        Build the timer breakdown view for a window.

        The chart covers every sample, including a leading one captured exactly at
        ``window_from``; the merged summaries exclude it, since it covers the
        interval before the window.

        Args:
            samples: Overview samples ordered by capture time
            window_from: Requested window start (ms)
            window_to: Requested window end (ms)
            interval_millis: Nominal sampling interval for the window
            live_capture_time: "Now" of the request, if the window reaches it

        Returns:
            OverviewView with chart series, transaction counts and merged summaries
        """
        gap_fill_policy = self._gap_fill_policy(interval_millis, live_capture_time)
        data_series = self.stacked_timer_reducer.build_data_series(
            samples, window_from, window_to, gap_fill_policy)
        transaction_counts = self.transaction_counts(samples)

        merged_samples = AggregateMerger.exclude_prior_window(samples, window_from)
        merged_aggregate = self.aggregate_merger.timer_merged_aggregate(merged_samples)
        thread_info_aggregate = self.aggregate_merger.thread_info_aggregate(merged_samples)

        logger.debug("Overview for [%d, %d]: %d samples, %d merged, %s average",
                     window_from, window_to, len(samples), len(merged_samples),
                     format_micros(merged_aggregate.total_micros
                                   / max(1, merged_aggregate.transaction_count),
                                   self.config.micros_per_milli))
        return OverviewView(
            data_series=data_series,
            transaction_counts=transaction_counts,
            merged_aggregate=merged_aggregate,
            thread_info_aggregate=thread_info_aggregate,
        )

    def percentiles(self, samples: Sequence[PercentileSample], window_from: int, window_to: int,
                    interval_millis: int, percentiles: Optional[Sequence[float]] = None,
                    live_capture_time: Optional[int] = None) -> PercentileView:
        """
        Build the percentile view for a window.

        Args:
            samples: Percentile samples ordered by capture time
            window_from: Requested window start (ms)
            window_to: Requested window end (ms)
            interval_millis: Nominal sampling interval for the window
            percentiles: Fractions in [0, 1]; defaults to the configured percentiles
            live_capture_time: "Now" of the request, if the window reaches it

        Returns:
            PercentileView with one series per percentile and the merged histogram
        """
        if not percentiles:
            percentiles = self.config.default_percentiles
        gap_fill_policy = self._gap_fill_policy(interval_millis, live_capture_time)
        data_series = build_percentile_series(
            samples, percentiles, window_from, window_to, gap_fill_policy,
            self.config.micros_per_milli)
        transaction_counts = self.transaction_counts(samples)

        merged_samples = AggregateMerger.exclude_prior_window(samples, window_from)
        merged_aggregate = self.aggregate_merger.percentile_merged_aggregate(
            merged_samples, percentiles)
        return PercentileView(
            data_series=data_series,
            transaction_counts=transaction_counts,
            merged_aggregate=merged_aggregate,
        )

    def profile(self, profile: ProfileNode, include: Sequence[str] = (),
                exclude: Sequence[str] = ()) -> ProfileNode:
        """
        Apply stack frame filters to a merged profile.

        Args:
            profile: Merged profile tree
            include: Keep only samples with a frame containing one of these
            exclude: Drop samples with a frame containing one of these

        Returns:
            Filtered copy, or the profile itself when no filter is given
        """
        profile_filter = ProfileFilter(include, exclude)
        if not profile_filter.is_active():
            return profile
        return profile_filter.apply(profile)

    def flame_graph(self, profile: ProfileNode, include: Sequence[str] = (),
                    exclude: Sequence[str] = ()) -> FlameGraphNode:
        return self.flame_graph_reducer.reduce(self.profile(profile, include, exclude))

    def queries(self, queries: Sequence[QueryStats]) -> List[QueryStats]:
        return self.query_merger.merge([queries])
