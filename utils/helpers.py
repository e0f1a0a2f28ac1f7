"""
Helper Utility Module

This module provides helper functions shared by the models, resources and CLI:
URL checks, alias-aware dictionary lookups and timestamp conversions.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import urlparse

# Server-local timestamp format used by the API for publish_at and friends
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def is_valid_url(url: str) -> bool:
    """
    Check if a URL is valid.

    Args:
        url: The URL to validate

    Returns:
        bool: True if the URL has an http(s) scheme and a host, False otherwise
    """
    try:
        result = urlparse(url)
        return result.scheme in ("http", "https") and bool(result.netloc)
    except (ValueError, AttributeError):
        return False


def first_present(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """
    Return the value of the first alias key present (and not None) in data.

    Args:
        data: The dictionary to search
        *keys: Accepted key aliases, in priority order
        default: Value returned when none of the keys is present

    Returns:
        The first non-None value, or the default
    """
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def optional_int(value: Any) -> Optional[int]:
    """Convert a value to int, keeping None as None."""
    if value is None:
        return None
    return int(value)


def truncate_text(text: str, max_length: int = 100, add_ellipsis: bool = True) -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: The text to truncate
        max_length: Maximum length
        add_ellipsis: Whether to add an ellipsis if text is truncated

    Returns:
        str: Truncated text
    """
    if not text or len(text) <= max_length:
        return text

    truncated = text[:max_length]
    if add_ellipsis:
        truncated += "..."

    return truncated


def unique_ids(ids: Iterable[int]) -> List[int]:
    """De-duplicate ids, keeping the first occurrence order."""
    return list(dict.fromkeys(ids))


def parse_datetime(value: Union[str, datetime, date, int, float, None]) -> Optional[datetime]:
    """
    Parse an API timestamp into a datetime.

    Accepts ISO-8601 strings (with ``T`` or a space separator and an optional
    trailing ``Z``), datetime/date objects and epoch seconds.

    Raises:
        ValueError: If a string cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as ``YYYY-MM-DD HH:MM:SS``, passing None through."""
    if value is None:
        return None
    return value.strftime(DATETIME_FORMAT)


def format_date(value: Union[str, date]) -> str:
    """Format a date or datetime as ``YYYY-MM-DD``; strings are passed through."""
    if isinstance(value, (date, datetime)):
        return value.strftime(DATE_FORMAT)
    return value


def is_future(value: datetime) -> bool:
    """Check whether a naive or timezone-aware datetime lies in the future."""
    if value.tzinfo is not None:
        return value > datetime.now(timezone.utc)
    return value > datetime.now()
