"""Processors for aggregate merging and reduction."""

from .file_processor import AggregateExport, AggregateFileProcessor
from .histogram_merger import HistogramMerger
from .timer_merger import TimerTreeMerger
from .thread_stats_merger import ThreadStatsMerger
from .aggregate_merger import (
    AggregateMerger,
    PercentileMergedAggregate,
    ThreadInfoAggregate,
    TimerMergedAggregate,
)
from .stacked_timers import StackedTimerReducer
from .flame_graph import FlameGraphNode, FlameGraphReducer
from .query_merger import QueryMerger
from .profile_filter import ProfileFilter
from .parallel_merger import ParallelAggregateMerger

__all__ = [
    "AggregateExport",
    "AggregateFileProcessor",
    "HistogramMerger",
    "TimerTreeMerger",
    "ThreadStatsMerger",
    "AggregateMerger",
    "PercentileMergedAggregate",
    "ThreadInfoAggregate",
    "TimerMergedAggregate",
    "StackedTimerReducer",
    "FlameGraphNode",
    "FlameGraphReducer",
    "QueryMerger",
    "ProfileFilter",
    "ParallelAggregateMerger",
]
