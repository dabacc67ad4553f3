"""
ISO-8601 helpers.

Event dates travel as strings. These helpers parse them into timezone-aware
UTC datetimes (naive values are taken as UTC) and format them back.
"""

from datetime import date, datetime, timezone
from typing import Optional, Union


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 string into an aware UTC datetime.

    Accepts a trailing ``Z``, date-only strings and naive timestamps.
    Returns None for empty or unparsable input.
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    return as_utc(parsed)


def as_utc(value: Union[datetime, date]) -> datetime:
    """Coerce a date or datetime into an aware UTC datetime."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def sort_key(value: Optional[str]) -> datetime:
    """Sort key for event start strings; unparsable values sort as the epoch."""
    return parse_iso(value) or EPOCH


def date_part(value: Optional[str]) -> str:
    """The YYYY-MM-DD portion of an ISO string."""
    return (value or "").split("T")[0]


def to_iso(value: Union[datetime, date]) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    utc = as_utc(value)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
