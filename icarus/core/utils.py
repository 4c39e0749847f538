# icarus/core/utils.py
"""
Shared utility functions used across the application.
"""

import re
from typing import Optional

# scheme + (localhost | IPv4 | dotted hostname) + optional port + optional path
URL_PATTERN = re.compile(
    r'^(https?://)'
    r'(localhost|\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b|([a-zA-Z0-9-]+\.)+[a-zA-Z]{2,})'
    r'(:\d+)?'
    r'(/.*)?$'
)


def validate_url(url: str) -> bool:
    """
    Validate if a string is an accepted service URL.
    """
    if not url:
        return False
    return URL_PATTERN.fullmatch(url) is not None


def normalize_url(url: Optional[str]) -> str:
    """Strip whitespace and any trailing slash from a URL."""
    if not url:
        return ""
    return url.strip().rstrip("/")


def format_interval(seconds: int) -> str:
    """
    Format a refresh interval the way the settings menu labels it.
    """
    if isinstance(seconds, float) and seconds.is_integer():
        seconds = int(seconds)
    if seconds < 60:
        return f"{seconds} sec"

    minutes = int(seconds // 60)
    remaining = seconds - minutes * 60
    if remaining == 0:
        return f"{minutes} min"

    return f"{minutes} min {remaining} sec"


def parse_percent(value) -> Optional[float]:
    """
    Coerce a progress value to a float clamped to 0-100.
    Accepts numbers and numeric strings; returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        percent = float(value)
    except (TypeError, ValueError):
        return None
    if percent != percent:  # NaN
        return None
    return max(0.0, min(100.0, percent))
