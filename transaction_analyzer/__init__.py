"""
Transaction Analyzer - Aggregate merging and derived chart series
"""

__version__ = "1.0.0"

from .core.analyzer import TransactionAnalyzer
from .core.errors import InvalidInputError
from .core.types import AnalyzerConfig, OverviewSample, PercentileSample, ProfileNode, TimerNode

__all__ = [
    "TransactionAnalyzer",
    "InvalidInputError",
    "AnalyzerConfig",
    "OverviewSample",
    "PercentileSample",
    "ProfileNode",
    "TimerNode",
]
