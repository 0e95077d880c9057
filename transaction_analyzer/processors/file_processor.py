"""
Aggregate export file processing using streaming parser.
"""

import ijson
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..core.errors import InvalidInputError
from ..core.histogram import DEFAULT_PRECISION_BITS, DurationHistogram
from ..core.types import (
    OverviewSample,
    PercentileSample,
    ProfileNode,
    QueryStats,
    ThreadStats,
    TimerNode,
)


@dataclass
class AggregateExport:
    """Everything read from one aggregate export file."""
    transaction_type: Optional[str] = None
    transaction_name: Optional[str] = None
    window_from: int = 0
    window_to: int = 0
    interval_millis: int = 60000
    should_have_profile: bool = False
    should_have_queries: bool = False
    overview_samples: List[OverviewSample] = field(default_factory=list)
    percentile_samples: List[PercentileSample] = field(default_factory=list)
    profile: ProfileNode = field(default_factory=lambda: ProfileNode(frame_label=None,
                                                                     sample_count=0))
    queries: List[QueryStats] = field(default_factory=list)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def timer_node_from_dict(data: Dict) -> TimerNode:
    """Decode a ``{"name", "totalMicros", "count", "childNodes"}`` tree iteratively."""
    root = TimerNode(name=data.get('name'), total_micros=int(data.get('totalMicros', 0)),
                     count=int(data.get('count', 0)))
    stack = [(data, root)]
    while stack:
        node_data, node = stack.pop()
        for child_data in node_data.get('childNodes', []):
            child = TimerNode(name=child_data.get('name'),
                              total_micros=int(child_data.get('totalMicros', 0)),
                              count=int(child_data.get('count', 0)))
            node.children.append(child)
            stack.append((child_data, child))
    return root


def profile_node_from_dict(data: Dict) -> ProfileNode:
    """Decode a ``{"frameLabel", "sampleCount", "childNodes"}`` tree iteratively."""
    root = ProfileNode(frame_label=data.get('frameLabel'),
                       sample_count=int(data.get('sampleCount', 0)))
    stack = [(data, root)]
    while stack:
        node_data, node = stack.pop()
        for child_data in node_data.get('childNodes', []):
            child = ProfileNode(frame_label=child_data.get('frameLabel'),
                                sample_count=int(child_data.get('sampleCount', 0)))
            node.children.append(child)
            stack.append((child_data, child))
    return root


def histogram_from_dict(data: Dict, precision_bits: int = DEFAULT_PRECISION_BITS) -> DurationHistogram:
    """Decode a histogram given either as raw ``values`` or as ``buckets``."""
    if 'values' in data:
        return DurationHistogram.from_values((int(v) for v in data['values']), precision_bits)
    if 'buckets' in data:
        return DurationHistogram.from_buckets(
            {int(k): int(v) for k, v in data['buckets'].items()}, precision_bits)
    raise InvalidInputError("Histogram must define 'values' or 'buckets'")


def overview_sample_from_dict(data: Dict) -> OverviewSample:
    thread_stats = None
    if data.get('threadStats') is not None:
        stats = data['threadStats']
        thread_stats = ThreadStats(
            total_cpu_micros=_optional_int(stats.get('totalCpuMicros')),
            total_blocked_micros=_optional_int(stats.get('totalBlockedMicros')),
            total_waited_micros=_optional_int(stats.get('totalWaitedMicros')),
            total_allocated_kbytes=_optional_int(stats.get('totalAllocatedKBytes')),
        )
    root_data = data.get('syntheticRootTimer') or {'name': None, 'totalMicros': 0}
    return OverviewSample(
        capture_time=int(data['captureTime']),
        transaction_count=int(data.get('transactionCount', 0)),
        total_micros=int(data.get('totalMicros', 0)),
        synthetic_root_timer=timer_node_from_dict(root_data),
        thread_stats=thread_stats,
    )


def percentile_sample_from_dict(data: Dict,
                                precision_bits: int = DEFAULT_PRECISION_BITS) -> PercentileSample:
    return PercentileSample(
        capture_time=int(data['captureTime']),
        transaction_count=int(data.get('transactionCount', 0)),
        histogram=histogram_from_dict(data.get('histogram') or {'values': []}, precision_bits),
        total_micros=int(data.get('totalMicros', 0)),
    )


def query_stats_from_dict(data: Dict) -> QueryStats:
    return QueryStats(
        query_type=data.get('queryType', 'SQL'),
        query_text=data['queryText'],
        total_micros=int(data.get('totalMicros', 0)),
        execution_count=int(data.get('executionCount', 0)),
        total_rows=int(data.get('totalRows', 0)),
    )


SCALAR_KEYS = {'transactionType', 'transactionName', 'from', 'to', 'intervalMillis',
               'shouldHaveProfile', 'shouldHaveQueries'}
CONTAINER_START_EVENTS = ('start_map', 'start_array')
CONTAINER_END_EVENTS = ('end_map', 'end_array')


def _build_value(event: str, value: Any, events: Iterator[Tuple[str, str, Any]]) -> Any:
    """Assemble the value whose first parse event was just read, consuming the rest of it."""
    if event not in CONTAINER_START_EVENTS:
        return value
    builder = ijson.common.ObjectBuilder()
    builder.event(event, value)
    depth = 1
    while depth:
        _, event, value = next(events)
        if event in CONTAINER_START_EVENTS:
            depth += 1
        elif event in CONTAINER_END_EVENTS:
            depth -= 1
        builder.event(event, value)
    return builder.value


class AggregateFileProcessor:
    """Processes aggregate export JSON files using streaming parser."""

    def __init__(self, precision_bits: int = DEFAULT_PRECISION_BITS):
        self.precision_bits = precision_bits

    def process_file(self, file_path: str) -> AggregateExport:
        """
        Process an aggregate export file in a single streaming pass.

        Top-level fields may appear in any order.

        Args:
            file_path: Path to the export JSON file

        Returns:
            AggregateExport with samples in file order

        Raises:
            FileNotFoundError: If the file does not exist
            InvalidInputError: If the file is not well-formed JSON
        """
        print(f"Processing {file_path}...")

        export = AggregateExport()
        scalars: Dict[str, Any] = {}
        try:
            with open(file_path, 'rb') as f:
                events = ijson.parse(f)
                for prefix, event, value in events:
                    if prefix in SCALAR_KEYS:
                        scalars[prefix] = _build_value(event, value, events)
                    elif prefix == 'overviewAggregates.item':
                        item = _build_value(event, value, events)
                        export.overview_samples.append(overview_sample_from_dict(item))
                        if len(export.overview_samples) % 1000 == 0:
                            print(f"  Read {len(export.overview_samples)} overview aggregates...")
                    elif prefix == 'percentileAggregates.item':
                        item = _build_value(event, value, events)
                        export.percentile_samples.append(
                            percentile_sample_from_dict(item, self.precision_bits))
                        if len(export.percentile_samples) % 1000 == 0:
                            print(f"  Read {len(export.percentile_samples)} percentile aggregates...")
                    elif prefix == 'profile':
                        profile = _build_value(event, value, events)
                        if profile is not None:
                            export.profile = profile_node_from_dict(profile)
                    elif prefix == 'queries.item':
                        export.queries.append(query_stats_from_dict(_build_value(event, value, events)))
        except ijson.JSONError as e:
            raise InvalidInputError(f"Malformed export file {file_path}: {e}") from e

        export.transaction_type = scalars.get('transactionType')
        export.transaction_name = scalars.get('transactionName')
        export.window_from = int(scalars.get('from') or 0)
        export.window_to = int(scalars.get('to') or 0)
        export.interval_millis = int(scalars.get('intervalMillis') or 60000)
        export.should_have_profile = bool(scalars.get('shouldHaveProfile', False))
        export.should_have_queries = bool(scalars.get('shouldHaveQueries', False))

        print(f"Completed reading file: {len(export.overview_samples)} overview aggregates, "
              f"{len(export.percentile_samples)} percentile aggregates, "
              f"{export.profile.sample_count} profile samples, {len(export.queries)} queries.")

        return export
