"""
Unit tests for transaction_analyzer.series.percentile_series module.
"""
import pytest
from transaction_analyzer.core.errors import InvalidInputError
from transaction_analyzer.core.histogram import DurationHistogram
from transaction_analyzer.core.types import PercentileSample
from transaction_analyzer.series.data_series import ABSENT, Present
from transaction_analyzer.series.gap_fill import GapFillPolicy
from transaction_analyzer.series.percentile_series import build_percentile_series

INTERVAL = 60000


class TestBuildPercentileSeries:
    """Tests for percentile chart series."""

    def test_one_series_per_percentile(self, percentile_samples):
        series = build_percentile_series(percentile_samples, [0.5, 1.0], 60000, 180000,
                                         GapFillPolicy(INTERVAL))

        assert [s.name for s in series] == ["50th percentile", "100th percentile"]
        assert [v for _, v in series[0].points] == [Present(0.02), Present(0.005), Present(0.0)]
        assert [v for _, v in series[1].points] == [Present(0.04), Present(0.05), Present(0.0)]

    def test_gap_between_samples(self):
        samples = [
            PercentileSample(60000, 1, DurationHistogram.from_values([1000])),
            PercentileSample(300000, 1, DurationHistogram.from_values([2000])),
        ]
        series = build_percentile_series(samples, [0.5], 0, 300000, GapFillPolicy(INTERVAL))

        assert series[0].points == [
            (60000, Present(1.0)),
            (90000, ABSENT),
            (270000, ABSENT),
            (300000, Present(2.0)),
        ]

    def test_no_samples(self):
        assert build_percentile_series([], [0.5], 0, 60000, GapFillPolicy(INTERVAL)) == []

    def test_invalid_percentile(self, percentile_samples):
        with pytest.raises(InvalidInputError):
            build_percentile_series(percentile_samples, [1.01], 0, 60000, GapFillPolicy(INTERVAL))

    def test_repeated_capture_time_rejected(self, percentile_samples):
        samples = [percentile_samples[0], percentile_samples[0]]
        with pytest.raises(InvalidInputError):
            build_percentile_series(samples, [0.5], 0, 60000, GapFillPolicy(INTERVAL))
