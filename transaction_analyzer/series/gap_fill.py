"""
Gap fill policy for chart data series.
"""

from typing import List, Optional

from ..core.errors import InvalidInputError
from .data_series import DataSeries


class GapFillPolicy:
    """
    Decides where "no data" markers go so line charts do not connect across
    missing samples.

    All markers are written to every series in ``data_series_list`` and to the
    optional ``other_data_series``, so the series stay aligned on one time axis.
    """

    def __init__(self, interval_millis: int, slack_factor: float = 1.5,
                 live_capture_time: Optional[int] = None):
        """
        Args:
            interval_millis: Nominal sampling interval for the requested window
            slack_factor: Interior gaps longer than interval * slack_factor are broken
            live_capture_time: "Now" of the request; a last sample this recent is not
                               followed by a final downslope marker
        """
        if interval_millis <= 0:
            raise InvalidInputError(f"Sampling interval must be positive, got {interval_millis}")
        self.interval_millis = interval_millis
        self.slack_factor = slack_factor
        self.live_capture_time = live_capture_time
        self._half_interval = max(1, interval_millis // 2)

    def add_initial_upslope_if_needed(self, window_from: int, capture_time: int,
                                      data_series_list: List[DataSeries],
                                      other_data_series: Optional[DataSeries] = None) -> bool:
        if capture_time - window_from <= self.interval_millis:
            return False
        self._add_marker(capture_time - self._half_interval, data_series_list, other_data_series)
        return True

    def add_gap_if_needed(self, last_capture_time: int, capture_time: int,
                          data_series_list: List[DataSeries],
                          other_data_series: Optional[DataSeries] = None) -> bool:
        if capture_time - last_capture_time <= self.interval_millis * self.slack_factor:
            return False
        after_last = last_capture_time + self._half_interval
        before_next = capture_time - self._half_interval
        self._add_marker(after_last, data_series_list, other_data_series)
        if before_next > after_last:
            self._add_marker(before_next, data_series_list, other_data_series)
        return True

    def add_final_downslope_if_needed(self, window_to: int, last_capture_time: int,
                                      data_series_list: List[DataSeries],
                                      other_data_series: Optional[DataSeries] = None) -> bool:
        if (self.live_capture_time is not None
                and self.live_capture_time - last_capture_time
                < self.interval_millis * self.slack_factor):
            # the next sample has not been captured yet
            return False
        if window_to - last_capture_time <= self.interval_millis:
            return False
        self._add_marker(last_capture_time + self._half_interval, data_series_list,
                         other_data_series)
        return True

    @staticmethod
    def _add_marker(timestamp: int, data_series_list: List[DataSeries],
                    other_data_series: Optional[DataSeries]) -> None:
        for data_series in data_series_list:
            data_series.add_absent(timestamp)
        if other_data_series is not None:
            other_data_series.add_absent(timestamp)
