"""Chart data series construction."""

from .data_series import ABSENT, Absent, DataSeries, PointValue, Present
from .gap_fill import GapFillPolicy
from .percentile_series import build_percentile_series

__all__ = [
    "ABSENT",
    "Absent",
    "DataSeries",
    "PointValue",
    "Present",
    "GapFillPolicy",
    "build_percentile_series",
]
