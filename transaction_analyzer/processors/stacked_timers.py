"""
Stacked timer reduction for the timer breakdown chart.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.errors import InvalidInputError
from ..core.types import OverviewSample, TimerNode, validate_capture_times
from ..series.data_series import DataSeries
from ..series.gap_fill import GapFillPolicy

logger = logging.getLogger(__name__)


class StackedTimerReducer:
    """Reduces timer trees to per-name self times and stacked chart series."""

    def __init__(self, top_timer_count: int = 5, micros_per_milli: float = 1000.0):
        """
        Initialize the reducer.

        Args:
            top_timer_count: Number of named series kept; the rest go to "other"
            micros_per_milli: Conversion from microseconds to charted milliseconds
        """
        self.top_timer_count = top_timer_count
        self.micros_per_milli = micros_per_milli

    @staticmethod
    def calculate_self_times(synthetic_root_timer: TimerNode) -> Dict[str, int]:
        """
        Flatten one sample's timer tree into total self time per timer name.

        The synthetic root and the real per-transaction root timers are skipped;
        their own time is left for the "other" series. Every timer below them
        contributes total minus direct children's totals to its name's bucket,
        wherever it sits in the tree.

        Args:
            synthetic_root_timer: Root of the sample's timer tree

        Returns:
            Dictionary mapping timer name -> self time in microseconds
        """
        self_times: Dict[str, int] = defaultdict(int)
        stack = [
            top_level_timer
            for real_root_timer in synthetic_root_timer.children
            for top_level_timer in real_root_timer.children
        ]
        while stack:
            timer = stack.pop()
            if timer.name is None:
                raise InvalidInputError("Only the synthetic root timer may be unnamed")
            nested_micros = 0
            for nested_timer in timer.children:
                nested_micros += nested_timer.total_micros
                stack.append(nested_timer)
            self_micros = timer.total_micros - nested_micros
            if self_micros < 0:
                logger.warning("Timer %r has children totalling %d us beyond its own %d us, "
                               "clamping self time to zero",
                               timer.name, -self_micros, timer.total_micros)
                self_micros = 0
            self_times[timer.name] += self_micros
        return dict(self_times)

    def top_timer_names(self, self_times_per_sample: Sequence[Dict[str, int]]) -> List[str]:
        """
        Rank timer names by self time summed over the window.

        Ties are broken by name so the selection is the same on every run.
        """
        timer_totals: Dict[str, int] = defaultdict(int)
        for self_times in self_times_per_sample:
            for name, micros in self_times.items():
                timer_totals[name] += micros
        ranked = sorted(timer_totals.items(), key=lambda item: (-item[1], item[0]))
        return [name for name, _ in ranked[:self.top_timer_count]]

    def build_data_series(self, samples: Sequence[OverviewSample], window_from: int,
                          window_to: int, gap_fill_policy: GapFillPolicy) -> List[DataSeries]:
        """
        Build the stacked timer chart series for a window.

        Args:
            samples: Overview samples ordered by capture time
            window_from: Requested window start (ms)
            window_to: Requested window end (ms)
            gap_fill_policy: Policy deciding where "no data" markers go

        Returns:
            Named series in rank order followed by the "other" series (name None),
            or an empty list when there are no samples
        """
        if not samples:
            return []
        validate_capture_times(samples)

        stacked_points: List[Tuple[OverviewSample, Dict[str, int]]] = [
            (sample, self.calculate_self_times(sample.synthetic_root_timer))
            for sample in samples
        ]
        timer_names = self.top_timer_names([self_times for _, self_times in stacked_points])
        data_series_list = [DataSeries(name) for name in timer_names]
        # "other" is needed even with fewer than top_timer_count timers, to capture
        # time spent directly in root timers
        other_data_series = DataSeries(None)

        last_sample: Optional[OverviewSample] = None
        for sample, self_times in stacked_points:
            if last_sample is None:
                gap_fill_policy.add_initial_upslope_if_needed(
                    window_from, sample.capture_time, data_series_list, other_data_series)
            else:
                gap_fill_policy.add_gap_if_needed(
                    last_sample.capture_time, sample.capture_time, data_series_list,
                    other_data_series)
            last_sample = sample
            self._add_stacked_point(sample, self_times, data_series_list, other_data_series)

        gap_fill_policy.add_final_downslope_if_needed(
            window_to, last_sample.capture_time, data_series_list, other_data_series)
        data_series_list.append(other_data_series)
        return data_series_list

    def _add_stacked_point(self, sample: OverviewSample, self_times: Dict[str, int],
                           data_series_list: List[DataSeries],
                           other_data_series: DataSeries) -> None:
        transaction_count = sample.transaction_count
        total_other_micros = sample.total_micros
        for data_series in data_series_list:
            micros = self_times.get(data_series.name)
            if micros is None or transaction_count == 0:
                data_series.add(sample.capture_time, 0)
            else:
                data_series.add(sample.capture_time, self._average_millis(micros, transaction_count))
            if micros is not None:
                total_other_micros -= micros
        if transaction_count == 0:
            other_data_series.add(sample.capture_time, 0)
        else:
            other_data_series.add(sample.capture_time,
                                  self._average_millis(total_other_micros, transaction_count))

    def _average_millis(self, micros: int, transaction_count: int) -> float:
        return (micros / transaction_count) / self.micros_per_milli
