"""UTC-everywhere time handling for token expiry and record timestamps."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Current time in UTC. All expiry comparisons use aware datetimes."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime read back from storage to aware UTC.

    Naive values are assumed to already be UTC (timestamp columns written
    by this service are always UTC).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
