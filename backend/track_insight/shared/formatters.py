"""
Formatting utilities for display.

Used by the metadata aggregator and the annotation engine.
"""

from datetime import datetime
from typing import Optional


def format_elapsed(seconds: Optional[float]) -> str:
    """
    Format a time span coarsely.

    Args:
        seconds: Span in seconds, None if unknown

    Returns:
        '2h 5m' if at least an hour, '5m 30s' if at least a minute,
        '42s' otherwise, 'N/A' if unknown
    """
    if seconds is None:
        return "N/A"

    total = int(max(0.0, seconds))
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    else:
        return f"{secs}s"


def format_date_label(moment: Optional[datetime]) -> str:
    """
    Format a date as 'Monday, Jan 5, 2024'.

    Returns an empty string when there is no date.
    """
    if moment is None:
        return ""
    return f"{moment:%A}, {moment:%b} {moment.day}, {moment.year}"


def format_minutes(seconds: float, digits: int = 1) -> str:
    """Format seconds as a number of minutes (e.g. '10.0')."""
    return f"{seconds / 60:.{digits}f}"
