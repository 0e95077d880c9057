"""
Result builder for web interface output.
"""

from typing import Dict, List, Sequence, Union

from ..core.analyzer import OverviewView, PercentileView
from ..core.types import ProfileNode, QueryStats
from ..formatters import format_micros
from ..processors import FlameGraphNode

OVERWRITTEN = {'overwritten': True}


def prepare_overview_results(view: OverviewView, micros_per_milli: float = 1000.0) -> Dict:
    """
    Convert an overview view to a structured format for JSON output.

    The thread info aggregate is only included when some sample carried thread
    statistics.

    Args:
        view: OverviewView from TransactionAnalyzer.overview()
        micros_per_milli: Conversion used for the formatted average

    Returns:
        Dictionary with dataSeries, transactionCounts, mergedAggregate and
        optionally threadInfoAggregate
    """
    merged = view.merged_aggregate
    merged_dict = merged.to_dict()
    if merged.transaction_count > 0:
        merged_dict['averageFormatted'] = format_micros(
            merged.total_micros / merged.transaction_count, micros_per_milli)
    else:
        merged_dict['averageFormatted'] = None

    results = {
        'dataSeries': [data_series.to_dict() for data_series in view.data_series],
        'transactionCounts': _transaction_counts(view.transaction_counts),
        'mergedAggregate': merged_dict,
    }
    if not view.thread_info_aggregate.is_empty():
        results['threadInfoAggregate'] = view.thread_info_aggregate.to_dict()
    return results


def prepare_percentile_results(view: PercentileView) -> Dict:
    return {
        'dataSeries': [data_series.to_dict() for data_series in view.data_series],
        'transactionCounts': _transaction_counts(view.transaction_counts),
        'mergedAggregate': view.merged_aggregate.to_dict(),
    }


def prepare_flame_graph_results(flame_graph: FlameGraphNode) -> Dict:
    return flame_graph.to_dict()


def prepare_profile_results(profile: ProfileNode, filtered: bool,
                            should_have_profile: bool) -> Dict:
    """
    Convert a merged profile, flagging it as overwritten when it should exist.

    An empty unfiltered profile for a window that should have had one means the
    underlying data was rolled up or overwritten, not that nothing ran.
    """
    if profile.sample_count == 0 and not filtered and should_have_profile:
        return dict(OVERWRITTEN)
    return profile.to_dict()


def prepare_query_results(queries: Sequence[QueryStats],
                          should_have_queries: bool) -> Union[Dict, List[Dict]]:
    if not queries and should_have_queries:
        return dict(OVERWRITTEN)
    return [
        {
            'queryType': query.query_type,
            'queryText': query.query_text,
            'totalMicros': query.total_micros,
            'executionCount': query.execution_count,
            'totalRows': query.total_rows,
        }
        for query in queries
    ]


def _transaction_counts(transaction_counts: Dict[int, int]) -> Dict[str, int]:
    # JSON object keys are strings
    return {str(capture_time): count for capture_time, count in transaction_counts.items()}
