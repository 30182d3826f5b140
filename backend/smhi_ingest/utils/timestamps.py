"""
Timestamp Helpers
=================

SMHI and the telemetry store both speak epoch milliseconds.
Internally we keep timezone-aware UTC datetimes.
"""

from datetime import datetime, timezone


def epoch_ms_to_datetime(value: float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def datetime_to_epoch_ms(value: datetime) -> int:
    """
    Convert a datetime to epoch milliseconds.

    Naive datetimes are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(round(value.timestamp() * 1000))
