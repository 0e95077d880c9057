"""
Percentile naming for chart series and merged summaries.
"""


def format_percentile(percentile: float) -> str:
    """
    Format a percentile fraction with its ordinal suffix.

    Args:
        percentile: Fraction in [0, 1]

    Returns:
        Ordinal text (e.g., "50th", "99.9th", "1st", "2nd", "11th")
    """
    text = f"{percentile * 100:.6f}".rstrip('0').rstrip('.')
    if text.endswith(('11', '12', '13')):
        suffix = 'th'
    elif text.endswith('1'):
        suffix = 'st'
    elif text.endswith('2'):
        suffix = 'nd'
    elif text.endswith('3'):
        suffix = 'rd'
    else:
        suffix = 'th'
    return text + suffix


def percentile_series_name(percentile: float) -> str:
    return f"{format_percentile(percentile)} percentile"
