from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from .dates import format_date, format_timestamp, parse_date, parse_timestamp
from .enums import Priority, RecurringType, SubtaskStatus, TaskStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubtaskEntity:
    id: str
    title: str
    status: SubtaskStatus = SubtaskStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class TaskEntity:
    id: str
    title: str
    description: str = ""
    tags: tuple[str, ...] = ()
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: Optional[date] = None
    due_time: str | None = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_recurring: bool = False
    recurring_type: RecurringType | None = None
    recurring_interval: int | None = None
    recurring_days: tuple[str, ...] = ()
    recurring_end_date: Optional[date] = None
    recurring_end_count: int | None = None
    excluded_dates: frozenset[date] = field(default_factory=frozenset)
    subtasks: tuple[SubtaskEntity, ...] = ()


def _enum_or_default(enum_cls, value: Any, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def subtask_from_record(record: dict[str, Any]) -> SubtaskEntity:
    return SubtaskEntity(
        id=str(record.get("id", "")),
        title=record.get("title") or "",
        status=_enum_or_default(SubtaskStatus, record.get("status"), SubtaskStatus.PENDING),
        created_at=parse_timestamp(record.get("createdAt")),
        updated_at=parse_timestamp(record.get("updatedAt")),
    )


def task_from_record(record: dict[str, Any]) -> TaskEntity:
    """Build a task from its stored form (camelCase keys, ISO date strings).

    Unreadable dates become ``None`` and unreadable excluded dates are
    dropped, so a damaged record yields a task without occurrences instead
    of an exception.
    """
    excluded: set[date] = set()
    for raw in record.get("excludedDates") or ():
        parsed = parse_date(raw)
        if parsed is None:
            logger.debug("Ignoring excluded date %r on task %s", raw, record.get("id"))
            continue
        excluded.add(parsed)

    recurring_type = record.get("recurringType")
    return TaskEntity(
        id=str(record["id"]),
        title=record.get("title") or "",
        description=record.get("description") or "",
        tags=tuple(record.get("tags") or ()),
        priority=_enum_or_default(Priority, record.get("priority"), Priority.MEDIUM),
        status=_enum_or_default(TaskStatus, record.get("status"), TaskStatus.PENDING),
        due_date=parse_date(record.get("dueDate")),
        due_time=record.get("dueTime") or None,
        created_at=parse_timestamp(record.get("createdAt")),
        updated_at=parse_timestamp(record.get("updatedAt")),
        is_recurring=bool(record.get("isRecurring")),
        recurring_type=_enum_or_default(RecurringType, recurring_type, None) if recurring_type else None,
        recurring_interval=_optional_int(record.get("recurringInterval")),
        recurring_days=tuple(day.lower() for day in record.get("recurringDays") or ()),
        recurring_end_date=parse_date(record.get("recurringEndDate")),
        recurring_end_count=_optional_int(record.get("recurringEndCount")),
        excluded_dates=frozenset(excluded),
        subtasks=tuple(subtask_from_record(item) for item in record.get("subtasks") or ()),
    )


def subtask_to_record(subtask: SubtaskEntity) -> dict[str, Any]:
    return {
        "id": subtask.id,
        "title": subtask.title,
        "status": subtask.status.value,
        "createdAt": format_timestamp(subtask.created_at),
        "updatedAt": format_timestamp(subtask.updated_at),
    }


def task_to_record(task: TaskEntity) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "tags": list(task.tags),
        "priority": task.priority.value,
        "status": task.status.value,
        "createdAt": format_timestamp(task.created_at),
        "updatedAt": format_timestamp(task.updated_at),
        "isRecurring": task.is_recurring,
        "excludedDates": sorted(day.isoformat() for day in task.excluded_dates),
        "subtasks": [subtask_to_record(subtask) for subtask in task.subtasks],
    }
    optional = {
        "dueDate": format_date(task.due_date),
        "dueTime": task.due_time,
        "recurringType": task.recurring_type.value if task.recurring_type else None,
        "recurringInterval": task.recurring_interval,
        "recurringDays": list(task.recurring_days) if task.recurring_days else None,
        "recurringEndDate": format_date(task.recurring_end_date),
        "recurringEndCount": task.recurring_end_count,
    }
    record.update({key: value for key, value in optional.items() if value is not None})
    return record
