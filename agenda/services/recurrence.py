from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import replace
from datetime import date, datetime, timedelta

from agenda.domain.dates import as_date
from agenda.domain.entities import TaskEntity
from agenda.domain.enums import RecurringType, TaskStatus
from agenda.domain.occurrence import OccurrenceKey

logger = logging.getLogger(__name__)

# Upper bound on occurrences returned by a single call.
MAX_OCCURRENCES = 100

WEEKDAY_NAMES = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

_ONE_DAY = timedelta(days=1)


def weekday_name(day: date) -> str:
    # date.weekday() counts from Monday, the names start on Sunday
    return WEEKDAY_NAMES[(day.weekday() + 1) % 7]


def anchor_date(template: TaskEntity) -> date | None:
    """First date a recurrence rule is evaluated from: due date, else creation date."""
    if template.due_date:
        return template.due_date
    if template.created_at:
        return template.created_at.date()
    return None


def _interval(template: TaskEntity) -> int:
    return max(1, template.recurring_interval or 1)


def _end_count(template: TaskEntity) -> int | None:
    count = template.recurring_end_count
    return count if count and count > 0 else None


def should_create_occurrence(current: date, anchor: date, template: TaskEntity) -> bool:
    rule = template.recurring_type
    if rule == RecurringType.WEEKLY:
        if template.recurring_days:
            wanted = {day.lower() for day in template.recurring_days}
            return weekday_name(current) in wanted
        return (current - anchor).days % (7 * _interval(template)) == 0
    if rule == RecurringType.MONTHLY:
        # no month-end clamping: an anchor on the 31st skips shorter months
        return current.day == anchor.day
    if rule == RecurringType.YEARLY:
        return current.day == anchor.day and current.month == anchor.month
    if rule == RecurringType.CUSTOM:
        return (current - anchor).days % _interval(template) == 0
    # daily, and templates saved without a type
    return True


def build_occurrence(template: TaskEntity, day: date, completed_keys: Collection[str]) -> TaskEntity:
    key = OccurrenceKey(template.id, day)
    status = TaskStatus.DONE if key.ledger_key in completed_keys else template.status
    return replace(
        template,
        id=key.occurrence_id,
        due_date=day,
        is_recurring=False,
        status=status,
    )


def generate_occurrences(
    template: TaskEntity,
    window_start: date | datetime | str,
    window_end: date | datetime | str,
    completed_keys: Collection[str] = (),
) -> list[TaskEntity]:
    """Expand a recurring template into its occurrences inside a date window.

    Both bounds are inclusive and compared as calendar dates. Days are
    scanned one at a time from ``max(anchor, window_start)``; the scan
    stops at the window end, after ``MAX_OCCURRENCES`` results, past
    ``recurring_end_date`` or once ``recurring_end_count`` occurrences
    exist. The end count is measured from the anchor, so when it is set
    the days before the window are walked too, without emitting.

    Excluded dates are skipped and do not use up the end count.
    Non-recurring templates and templates without a usable anchor give
    an empty list.
    """
    if not template.is_recurring:
        return []

    anchor = anchor_date(template)
    start = as_date(window_start)
    end = as_date(window_end)
    if anchor is None or start is None or end is None:
        logger.debug("Task %s has no usable anchor or window, skipping", template.id)
        return []

    end_count = _end_count(template)
    end_date = template.recurring_end_date
    current = anchor if end_count else max(anchor, start)
    occurrences: list[TaskEntity] = []
    generated = 0

    while current <= end and len(occurrences) < MAX_OCCURRENCES:
        if end_date and current > end_date:
            break
        if end_count and generated >= end_count:
            break

        if should_create_occurrence(current, anchor, template) and current not in template.excluded_dates:
            generated += 1
            if current >= start:
                occurrences.append(build_occurrence(template, current, completed_keys))

        if current == date.max:
            break
        current += _ONE_DAY

    return occurrences
