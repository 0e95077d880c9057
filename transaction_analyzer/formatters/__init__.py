"""Formatting utilities for human-readable output."""

from .time_formatter import format_time, format_micros
from .percentile_formatter import format_percentile, percentile_series_name

__all__ = ["format_time", "format_micros", "format_percentile", "percentile_series_name"]
