"""
cadence.utils - Shared utility functions.

Contains small helpers used across the scoring and reporting modules.
"""

from __future__ import annotations


def clamp_score(value: float) -> int:
    """Clamp a raw score into the 0-100 integer range."""
    return max(0, min(100, int(value)))


def format_duration(seconds: float) -> str:
    """Format seconds as HH:MM:SS or MM:SS.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (HH:MM:SS if >= 1 hour, otherwise MM:SS)
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def get_score_class(score: int) -> str:
    """Get a display style for a 0-100 score.

    Args:
        score: Score from 0 to 100

    Returns:
        Style name: "green" (high), "yellow" (medium), or "red" (low)
    """
    if score >= 75:
        return "green"
    elif score >= 55:
        return "yellow"
    return "red"
