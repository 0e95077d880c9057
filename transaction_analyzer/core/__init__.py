"""Core components for aggregate analysis."""

from .analyzer import OverviewView, PercentileView, TransactionAnalyzer
from .errors import AnalyzerError, InvalidInputError
from .histogram import DurationHistogram
from .types import (
    AnalyzerConfig,
    OverviewSample,
    PercentileSample,
    ProfileNode,
    QueryStats,
    ThreadStats,
    TimerNode,
)

__all__ = [
    "TransactionAnalyzer",
    "OverviewView",
    "PercentileView",
    "AnalyzerError",
    "InvalidInputError",
    "DurationHistogram",
    "AnalyzerConfig",
    "OverviewSample",
    "PercentileSample",
    "ProfileNode",
    "QueryStats",
    "ThreadStats",
    "TimerNode",
]
