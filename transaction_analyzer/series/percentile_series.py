"""
Percentile chart series.
"""

from typing import List, Optional, Sequence

from ..core.histogram import validate_percentile
from ..core.types import PercentileSample, validate_capture_times
from ..formatters.percentile_formatter import percentile_series_name
from .data_series import DataSeries
from .gap_fill import GapFillPolicy


def build_percentile_series(samples: Sequence[PercentileSample], percentiles: Sequence[float],
                            window_from: int, window_to: int, gap_fill_policy: GapFillPolicy,
                            micros_per_milli: float = 1000.0) -> List[DataSeries]:
    """
    Build one series per requested percentile, in milliseconds.

    Args:
        samples: Percentile samples ordered by capture time
        percentiles: Fractions in [0, 1]
        window_from: Requested window start (ms)
        window_to: Requested window end (ms)
        gap_fill_policy: Policy deciding where "no data" markers go
        micros_per_milli: Conversion from recorded microseconds to milliseconds

    Returns:
        List of series named like "95th percentile", empty when there are no samples
    """
    for percentile in percentiles:
        validate_percentile(percentile)
    if not samples:
        return []
    validate_capture_times(samples)

    data_series_list = [DataSeries(percentile_series_name(p)) for p in percentiles]
    last_sample: Optional[PercentileSample] = None
    for sample in samples:
        if last_sample is None:
            gap_fill_policy.add_initial_upslope_if_needed(
                window_from, sample.capture_time, data_series_list)
        else:
            gap_fill_policy.add_gap_if_needed(
                last_sample.capture_time, sample.capture_time, data_series_list)
        last_sample = sample
        for data_series, percentile in zip(data_series_list, percentiles):
            data_series.add(sample.capture_time,
                            sample.histogram.value_at_percentile(percentile) / micros_per_milli)

    gap_fill_policy.add_final_downslope_if_needed(
        window_to, last_sample.capture_time, data_series_list)
    return data_series_list
