"""
Exceptions raised by the aggregate merging engine.
"""


class AnalyzerError(Exception):
    """Base class for analyzer errors."""


class InvalidInputError(AnalyzerError, ValueError):
    """Raised when input samples or request parameters have an invalid shape."""
