"""Timestamp and elapsed-time rendering for job-log banners."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def ensure_aware(ts: datetime) -> datetime:
    """Return ``ts`` as a timezone-aware value; naive values are taken as server-local."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        return ts.astimezone()
    return ts


def format_offset(offset: timedelta | None) -> str:
    """Render a UTC offset as ``+HH:MM``.

    Examples
    --------
    >>> format_offset(timedelta(hours=2))
    '+02:00'
    >>> format_offset(timedelta(hours=-5, minutes=-30))
    '-05:30'
    """
    total_minutes = int((offset or timedelta()).total_seconds() // 60)
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def format_utc(ts: datetime) -> str:
    """Render ``ts`` converted to UTC.

    Examples
    --------
    >>> format_utc(datetime(2025, 1, 2, 13, 4, 5, tzinfo=timezone(timedelta(hours=1))))
    '2025-01-02 12:04:05'
    """
    return ensure_aware(ts).astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def format_server_time(ts: datetime) -> str:
    """Render ``ts`` in the server's local zone followed by its UTC offset."""
    local = ensure_aware(ts).astimezone()
    return f"{local.strftime(TIMESTAMP_FORMAT)} UTC{format_offset(local.utcoffset())}"


def format_elapsed(elapsed: timedelta) -> str:
    """Render a duration as ``<hours>h:<MM>m:<SS>s``; negative spans count as zero.

    Examples
    --------
    >>> format_elapsed(timedelta(hours=1, minutes=2, seconds=3))
    '1h:02m:03s'
    >>> format_elapsed(timedelta(days=1, seconds=59.9))
    '24h:00m:59s'
    >>> format_elapsed(timedelta(seconds=-4))
    '0h:00m:00s'
    """
    seconds = max(int(elapsed.total_seconds()), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours}h:{minutes:02d}m:{seconds:02d}s"


__all__ = [
    "TIMESTAMP_FORMAT",
    "ensure_aware",
    "format_elapsed",
    "format_offset",
    "format_server_time",
    "format_utc",
]
