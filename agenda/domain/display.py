from __future__ import annotations

from datetime import date, datetime, time, timedelta

WEEKDAY_LABELS_PT = (
    "Segunda-feira",
    "Terça-feira",
    "Quarta-feira",
    "Quinta-feira",
    "Sexta-feira",
    "Sábado",
    "Domingo",
)


def _parse_time(due_time: str | None) -> time | None:
    if not due_time:
        return None
    try:
        hours, minutes = (int(part) for part in due_time.split(":")[:2])
        return time(hours, minutes)
    except ValueError:
        return None


def is_overdue(due_date: date | None, due_time: str | None, now: datetime) -> bool:
    """A dated task without a time is due at the end of its day."""
    if not due_date:
        return False
    due_at = _parse_time(due_time) or time.max
    return datetime.combine(due_date, due_at) < now


def format_due_date(due_date: date, due_time: str | None, today: date) -> str:
    suffix = f" às {due_time}" if due_time else ""

    if due_date == today:
        return f"Hoje{suffix}"
    if due_date == today + timedelta(days=1):
        return f"Amanhã{suffix}"
    if due_date == today - timedelta(days=1):
        return f"Ontem{suffix}"
    if abs((due_date - today).days) <= 7:
        return f"{WEEKDAY_LABELS_PT[due_date.weekday()]}{suffix}"

    label = due_date.strftime("%d/%m")
    if due_date.year != today.year:
        label = due_date.strftime("%d/%m/%Y")
    return f"{label}{suffix}"


def truncate_words(text: str, limit: int) -> str:
    if not text:
        return ""
    words = text.split()
    if len(words) <= limit:
        return text
    return " ".join(words[:limit]) + "…"
