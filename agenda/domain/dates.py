from __future__ import annotations

from datetime import date, datetime


def parse_date(value: object) -> date | None:
    """Read a calendar date from a ``YYYY-MM-DD`` string, a date or a datetime.

    Anything unreadable comes back as ``None``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def parse_timestamp(value: object) -> datetime | None:
    """Read an ISO-8601 timestamp as a naive local datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def as_date(value: date | datetime | str) -> date | None:
    # datetime is a date subclass, parse_date drops the time part first
    return parse_date(value)


def format_date(value: date | None) -> str | None:
    return value.isoformat() if value else None


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
