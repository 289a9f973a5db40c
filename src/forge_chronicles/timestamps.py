"""Timestamp formatting for forge-chronicles reports."""

from datetime import datetime, timezone


def _to_datetime(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def format_utc(timestamp: int) -> str:
    """
    Format a Unix timestamp as an RFC 1123 date in UTC.

    Example: 1700000000 -> "Tue, 14 Nov 2023 22:13:20 UTC"
    """
    return _to_datetime(timestamp).strftime("%a, %d %b %Y %H:%M:%S UTC")


def format_date(timestamp: int) -> str:
    """
    Format a Unix timestamp as a short UTC date.

    Example: 1700000000 -> "Tue Nov 14 2023"
    """
    return _to_datetime(timestamp).strftime("%a %b %d %Y")
