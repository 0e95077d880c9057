"""
Type definitions for transaction aggregate analysis.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .errors import InvalidInputError
from .histogram import DEFAULT_PRECISION_BITS, DurationHistogram


@dataclass
class TimerNode:
    """
    One node of a timer tree.

    ``total_micros`` includes the time of all descendants. ``name`` is None only for
    the synthetic root that holds the per-transaction root timers.
    """
    name: Optional[str]
    total_micros: int
    count: int = 0
    children: List['TimerNode'] = field(default_factory=list)

    def self_micros(self) -> int:
        return self.total_micros - sum(child.total_micros for child in self.children)

    def to_dict(self) -> dict:
        """Convert to a nested dictionary without recursing on the call stack."""
        root = {}
        stack = [(self, root)]
        while stack:
            node, out = stack.pop()
            out['name'] = node.name
            out['totalMicros'] = node.total_micros
            out['count'] = node.count
            out['childNodes'] = []
            for child in node.children:
                child_out = {}
                out['childNodes'].append(child_out)
                stack.append((child, child_out))
        return root

    def to_arena(self) -> List[Tuple[Optional[str], int, int, int]]:
        """
        Flatten the tree into parent-first ``(name, total_micros, count, parent_index)``
        rows; the root's parent index is -1.

        Pickling a nested tree recurses once per level, the flat rows do not.
        """
        arena = []
        stack = [(self, -1)]
        while stack:
            node, parent_index = stack.pop()
            index = len(arena)
            arena.append((node.name, node.total_micros, node.count, parent_index))
            for child in reversed(node.children):
                stack.append((child, index))
        return arena

    @classmethod
    def from_arena(cls, arena: Sequence[Tuple[Optional[str], int, int, int]]) -> 'TimerNode':
        """Rebuild a tree flattened by ``to_arena``."""
        nodes: List['TimerNode'] = []
        for name, total_micros, count, parent_index in arena:
            node = cls(name=name, total_micros=total_micros, count=count)
            if parent_index >= 0:
                nodes[parent_index].children.append(node)
            nodes.append(node)
        return nodes[0]


@dataclass
class ProfileNode:
    """One stack frame of a sampled execution profile."""
    frame_label: Optional[str]
    sample_count: int
    children: List['ProfileNode'] = field(default_factory=list)

    def is_empty(self) -> bool:
        return self.sample_count == 0

    def to_dict(self) -> dict:
        root = {}
        stack = [(self, root)]
        while stack:
            node, out = stack.pop()
            out['frameLabel'] = node.frame_label
            out['sampleCount'] = node.sample_count
            out['childNodes'] = []
            for child in node.children:
                child_out = {}
                out['childNodes'].append(child_out)
                stack.append((child, child_out))
        return root


@dataclass(frozen=True)
class ThreadStats:
    """Thread-level counters; None means the counter was not available."""
    total_cpu_micros: Optional[int] = None
    total_blocked_micros: Optional[int] = None
    total_waited_micros: Optional[int] = None
    total_allocated_kbytes: Optional[int] = None

    def is_empty(self) -> bool:
        return (self.total_cpu_micros is None
                and self.total_blocked_micros is None
                and self.total_waited_micros is None
                and self.total_allocated_kbytes is None)


@dataclass(frozen=True)
class QueryStats:
    """Aggregated statistics for one query text."""
    query_type: str
    query_text: str
    total_micros: int
    execution_count: int
    total_rows: int = 0


@dataclass(frozen=True)
class OverviewSample:
    """Timer breakdown for one sampling interval."""
    capture_time: int
    transaction_count: int
    total_micros: int
    synthetic_root_timer: TimerNode
    thread_stats: Optional[ThreadStats] = None

    def __post_init__(self):
        _validate_counts(self.capture_time, self.transaction_count, self.total_micros)


@dataclass(frozen=True)
class PercentileSample:
    """Duration histogram for one sampling interval."""
    capture_time: int
    transaction_count: int
    histogram: DurationHistogram
    total_micros: int = 0

    def __post_init__(self):
        _validate_counts(self.capture_time, self.transaction_count, self.total_micros)


def _validate_counts(capture_time: int, transaction_count: int, total_micros: int) -> None:
    if transaction_count < 0:
        raise InvalidInputError(
            f"Negative transaction count {transaction_count} at capture time {capture_time}")
    if total_micros < 0:
        raise InvalidInputError(
            f"Negative total duration {total_micros} at capture time {capture_time}")


def validate_capture_times(samples: Sequence) -> None:
    """
    Ensure capture times are strictly increasing.

    Raises:
        InvalidInputError: On the first out-of-order or repeated capture time
    """
    for previous, current in zip(samples, samples[1:]):
        if current.capture_time <= previous.capture_time:
            raise InvalidInputError(
                f"Capture times must be strictly increasing: "
                f"{current.capture_time} follows {previous.capture_time}")


class AnalyzerConfig:
    """Configuration for aggregate analysis."""

    def __init__(
        self,
        top_timer_count: int = 5,
        gap_slack_factor: float = 1.5,
        micros_per_milli: float = 1000.0,
        histogram_precision_bits: int = DEFAULT_PRECISION_BITS,
        default_percentiles: Tuple[float, ...] = (0.5, 0.95, 0.99),
        num_workers: Optional[int] = None,
        parallel_threshold: int = 500
    ):
        """
        Initialize aggregate analysis configuration.

        Args:
            top_timer_count: Number of named timer series in the stacked timer chart.
                             Every other timer is routed to the "other" series.
                             Default: 5

            gap_slack_factor: Consecutive samples further apart than
                              interval * gap_slack_factor are charted with a gap.
                              Default: 1.5

            micros_per_milli: Conversion constant from recorded microseconds to
                              charted milliseconds. Default: 1000.0

            histogram_precision_bits: Significant bits kept per histogram bucket.
                                      Values below 2**bits are recorded exactly.
                                      Default: 7

            default_percentiles: Percentiles (fractions) charted when the request
                                 names none. Default: (0.5, 0.95, 0.99)

            num_workers: Worker processes for the parallel merge of large windows.
                         Default: None (CPU count)

            parallel_threshold: Minimum number of samples before the parallel merge
                                is used. Default: 500
        """
        self.top_timer_count = top_timer_count
        self.gap_slack_factor = gap_slack_factor
        self.micros_per_milli = micros_per_milli
        self.histogram_precision_bits = histogram_precision_bits
        self.default_percentiles = tuple(default_percentiles)
        self.num_workers = num_workers
        self.parallel_threshold = parallel_threshold
        self.validate()

    def validate(self) -> None:
        if self.top_timer_count < 1:
            raise InvalidInputError(f"top_timer_count must be positive, got {self.top_timer_count}")
        if self.gap_slack_factor < 1.0:
            raise InvalidInputError(f"gap_slack_factor must be >= 1, got {self.gap_slack_factor}")
        if self.micros_per_milli <= 0:
            raise InvalidInputError(
                f"micros_per_milli must be positive, got {self.micros_per_milli}")
        if not 1 <= self.histogram_precision_bits <= 30:
            raise InvalidInputError(
                f"histogram_precision_bits must be in [1, 30], got {self.histogram_precision_bits}")
        if self.num_workers is not None and self.num_workers < 1:
            raise InvalidInputError(f"num_workers must be positive, got {self.num_workers}")
        for percentile in self.default_percentiles:
            if not 0.0 <= percentile <= 1.0:
                raise InvalidInputError(
                    f"Percentile must be a fraction in [0, 1], got {percentile}")
