"""
Log-linear bucketed duration histogram.
"""

import math
from typing import Dict, Iterable, Optional

from .errors import InvalidInputError

DEFAULT_PRECISION_BITS = 7


def bucket_lower_bound(value: int, precision_bits: int = DEFAULT_PRECISION_BITS) -> int:
    """
    Map a recorded value to the lower boundary of its bucket.

    Values below 2**precision_bits are kept exactly. Larger values keep only their
    top ``precision_bits`` significant bits, so bucket width grows with magnitude
    and the relative error stays below 2**(1 - precision_bits).

    Args:
        value: Non-negative recorded value (microseconds)
        precision_bits: Number of significant bits kept

    Returns:
        Lower boundary of the bucket containing ``value``
    """
    shift = value.bit_length() - precision_bits
    if shift <= 0:
        return value
    return (value >> shift) << shift


class DurationHistogram:
    """
    Histogram of recorded durations in microseconds.

    Counts are kept per bucket lower boundary, so merging two histograms is a plain
    addition of bucket counts and does not depend on merge order.
    """

    def __init__(self, precision_bits: int = DEFAULT_PRECISION_BITS):
        if precision_bits < 1:
            raise InvalidInputError(f"precision_bits must be positive, got {precision_bits}")
        self.precision_bits = precision_bits
        self._buckets: Dict[int, int] = {}
        self._total_count = 0

    @classmethod
    def from_values(cls, values: Iterable[int],
                    precision_bits: int = DEFAULT_PRECISION_BITS) -> 'DurationHistogram':
        histogram = cls(precision_bits)
        for value in values:
            histogram.record(value)
        return histogram

    @classmethod
    def from_buckets(cls, buckets: Dict[int, int],
                     precision_bits: int = DEFAULT_PRECISION_BITS) -> 'DurationHistogram':
        """Build a histogram from a ``{lower_bound: count}`` mapping."""
        histogram = cls(precision_bits)
        for lower_bound, count in buckets.items():
            histogram.record(int(lower_bound), int(count))
        return histogram

    @property
    def total_count(self) -> int:
        return self._total_count

    def is_empty(self) -> bool:
        return self._total_count == 0

    def buckets(self) -> Dict[int, int]:
        """Return a sorted copy of the bucket counts."""
        return dict(sorted(self._buckets.items()))

    def record(self, value: int, count: int = 1) -> None:
        if value < 0:
            raise InvalidInputError(f"Cannot record negative duration {value}")
        if count < 0:
            raise InvalidInputError(f"Cannot record negative count {count}")
        if count == 0:
            return
        key = bucket_lower_bound(int(value), self.precision_bits)
        self._buckets[key] = self._buckets.get(key, 0) + count
        self._total_count += count

    def merge(self, other: 'DurationHistogram') -> None:
        """Add the bucket counts of ``other`` into this histogram."""
        if other.precision_bits == self.precision_bits:
            for key, count in other._buckets.items():
                self._buckets[key] = self._buckets.get(key, 0) + count
            self._total_count += other._total_count
        else:
            # rebucket at this histogram's precision
            for key, count in other._buckets.items():
                self.record(key, count)

    def copy(self) -> 'DurationHistogram':
        histogram = DurationHistogram(self.precision_bits)
        histogram._buckets = dict(self._buckets)
        histogram._total_count = self._total_count
        return histogram

    def value_at_percentile(self, percentile: float) -> int:
        """
        Return the smallest bucket boundary covering at least ``percentile`` of samples.

        Args:
            percentile: Fraction in [0, 1]

        Returns:
            Bucket lower boundary in microseconds, or 0 for an empty histogram

        Raises:
            InvalidInputError: If percentile is outside [0, 1]
        """
        validate_percentile(percentile)
        if self._total_count == 0:
            return 0
        # guard against float noise, e.g. 0.07 * 100 == 7.000000000000001
        target = max(1, math.ceil(percentile * self._total_count - 1e-9))
        cumulative = 0
        for key in sorted(self._buckets):
            cumulative += self._buckets[key]
            if cumulative >= target:
                return key
        return max(self._buckets)

    def to_dict(self) -> Dict:
        return {
            'precisionBits': self.precision_bits,
            'totalCount': self._total_count,
            'buckets': {str(key): count for key, count in sorted(self._buckets.items())},
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DurationHistogram):
            return NotImplemented
        return (self.precision_bits == other.precision_bits
                and self._buckets == other._buckets)

    def __repr__(self) -> str:
        return f"DurationHistogram(total_count={self._total_count}, buckets={len(self._buckets)})"


def validate_percentile(percentile: Optional[float]) -> None:
    if percentile is None or not 0.0 <= percentile <= 1.0:
        raise InvalidInputError(f"Percentile must be a fraction in [0, 1], got {percentile}")
