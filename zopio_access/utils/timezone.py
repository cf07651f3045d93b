"""
Timezone Utilities.

Audit timestamps are always timezone-aware UTC and serialized as
ISO 8601 with a Z suffix.
"""

from datetime import datetime, timezone

UTC = timezone.utc


def utc_now() -> datetime:
    """
    Get current time in UTC (timezone-aware).

    Use this instead of datetime.utcnow(), which returns a naive datetime.
    """
    return datetime.now(UTC)


def to_iso8601(dt: datetime) -> str:
    """
    Format as ISO 8601 with Z suffix, keeping milliseconds.

    Naive datetimes are assumed to already be UTC.

    Usage:
        to_iso8601(record.timestamp)
        # "2024-01-15T14:30:00.123Z"
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    utc_dt = dt.astimezone(UTC)
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_dt.microsecond // 1000:03d}Z"
