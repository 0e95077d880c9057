"""
Histogram merging across sampling intervals.
"""

from typing import Iterable

from ..core.histogram import DEFAULT_PRECISION_BITS, DurationHistogram


class HistogramMerger:
    """Combines interval histograms into one histogram over their union."""

    def __init__(self, precision_bits: int = DEFAULT_PRECISION_BITS):
        self.precision_bits = precision_bits

    def merge(self, histograms: Iterable[DurationHistogram]) -> DurationHistogram:
        """
        Merge histograms by adding bucket counts.

        Inputs are left untouched. An empty input gives an empty histogram whose
        percentile queries return 0.
        """
        merged = DurationHistogram(self.precision_bits)
        for histogram in histograms:
            merged.merge(histogram)
        return merged
