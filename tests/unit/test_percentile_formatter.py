"""
Unit tests for transaction_analyzer.formatters.percentile_formatter module.
"""
import pytest
from transaction_analyzer.formatters.percentile_formatter import (
    format_percentile,
    percentile_series_name,
)


class TestFormatPercentile:
    """Tests for ordinal percentile names."""

    @pytest.mark.parametrize("percentile, expected", [
        (0.5, "50th"),
        (0.95, "95th"),
        (0.99, "99th"),
        (0.999, "99.9th"),
        (1.0, "100th"),
        (0.0, "0th"),
    ])
    def test_common_percentiles(self, percentile, expected):
        assert format_percentile(percentile) == expected

    @pytest.mark.parametrize("percentile, expected", [
        (0.01, "1st"),
        (0.02, "2nd"),
        (0.03, "3rd"),
        (0.11, "11th"),
        (0.12, "12th"),
        (0.13, "13th"),
        (0.21, "21st"),
        (0.07, "7th"),
    ])
    def test_ordinal_suffixes(self, percentile, expected):
        assert format_percentile(percentile) == expected

    def test_series_name(self):
        assert percentile_series_name(0.95) == "95th percentile"
