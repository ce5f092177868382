from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from ..core.exceptions import ValidationError

Timestamp = Union[str, datetime]


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing ``Z``; naive values are taken as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {value!r}") from None
    return to_utc(parsed)


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_timestamp(value: Optional[Timestamp]) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    return parse_iso_datetime(value)


def naive_utc(value: datetime) -> datetime:
    """Drop tzinfo after converting to UTC (relational columns hold naive UTC)."""
    return to_utc(value).replace(tzinfo=None)


def to_iso_z(value: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.ffffffZ``."""
    return naive_utc(value).isoformat(timespec="microseconds") + "Z"


def to_sqlite_text(value: datetime) -> str:
    # Fixed width so text ordering matches chronological ordering.
    return naive_utc(value).isoformat(sep=" ", timespec="microseconds")


def day_of_week(value: datetime) -> int:
    """Day of week with Sunday=0 .. Saturday=6 (same as SQL ``%w``)."""
    return (to_utc(value).weekday() + 1) % 7


def week_start(value: datetime) -> date:
    """Monday (midnight UTC) of the week containing ``value``."""
    day = to_utc(value).date()
    return day - timedelta(days=day.weekday())


def in_range(value: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    """Inclusive bounds; a missing bound leaves that side open."""
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True
