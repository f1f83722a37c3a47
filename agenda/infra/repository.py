from __future__ import annotations

import uuid
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from sqlalchemy import case, delete, select

from agenda.domain.dates import parse_date
from agenda.domain.entities import SubtaskEntity, TaskEntity
from agenda.domain.enums import Priority, RecurringType, SubtaskStatus, TaskStatus

from .db import SessionLocal
from .models import CompletedOccurrenceModel, SubtaskModel, TaskModel, now

LIST_COLUMNS = ("tags", "recurring_days")

PRIORITY_ORDER = case(
    {Priority.HIGH.value: 3, Priority.MEDIUM.value: 2, Priority.LOW.value: 1},
    value=TaskModel.priority,
    else_=0,
)


def _split(value: str | None) -> tuple[str, ...]:
    return tuple(part for part in (value or "").split(",") if part)


def _subtask_to_entity(model: SubtaskModel) -> SubtaskEntity:
    return SubtaskEntity(
        id=model.id,
        title=model.title,
        status=SubtaskStatus(model.status),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _to_entity(model: TaskModel) -> TaskEntity:
    excluded = (parse_date(raw) for raw in _split(model.excluded_dates))
    return TaskEntity(
        id=model.id,
        title=model.title,
        description=model.description,
        tags=_split(model.tags),
        priority=Priority(model.priority),
        status=TaskStatus(model.status),
        due_date=model.due_date,
        due_time=model.due_time,
        created_at=model.created_at,
        updated_at=model.updated_at,
        is_recurring=model.is_recurring,
        recurring_type=RecurringType(model.recurring_type) if model.recurring_type else None,
        recurring_interval=model.recurring_interval,
        recurring_days=_split(model.recurring_days),
        recurring_end_date=model.recurring_end_date,
        recurring_end_count=model.recurring_end_count,
        excluded_dates=frozenset(day for day in excluded if day is not None),
        subtasks=tuple(_subtask_to_entity(subtask) for subtask in model.subtasks),
    )


def _to_columns(data: dict) -> dict:
    columns = {}
    for key, value in data.items():
        if key == "subtasks":
            continue
        if isinstance(value, Enum):
            value = value.value
        if key in LIST_COLUMNS:
            value = ",".join(value or ())
        elif key == "excluded_dates":
            value = ",".join(sorted(day.isoformat() for day in value or ()))
        columns[key] = value
    return columns


def _sync_subtasks(task: TaskModel, subtasks: Iterable[SubtaskEntity]) -> None:
    existing = {row.id: row for row in task.subtasks}
    rows = []
    for order, subtask in enumerate(subtasks, start=1):
        row = existing.get(subtask.id) or SubtaskModel(id=subtask.id or uuid.uuid4().hex)
        row.title = subtask.title
        row.status = subtask.status.value
        row.created_at = subtask.created_at or row.created_at or now()
        row.updated_at = subtask.updated_at or now()
        row.sort_order = order
        rows.append(row)
    task.subtasks = rows


class TaskRepository:
    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def list_tasks(self) -> list[TaskEntity]:
        with self._session_factory() as session:
            stmt = select(TaskModel).order_by(
                PRIORITY_ORDER.desc(),
                TaskModel.updated_at.desc(),
            )
            return [_to_entity(task) for task in session.scalars(stmt)]

    def get_task(self, task_id: str) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            return _to_entity(task) if task else None

    def create_task(self, data: dict) -> TaskEntity:
        with self._session_factory() as session:
            columns = _to_columns(data)
            columns.setdefault("id", uuid.uuid4().hex)
            task = TaskModel(**columns)
            if "subtasks" in data:
                _sync_subtasks(task, data["subtasks"])
            session.add(task)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def update_task(self, task_id: str, data: dict) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return None

            for key, value in _to_columns(data).items():
                setattr(task, key, value)
            if "subtasks" in data:
                _sync_subtasks(task, data["subtasks"])
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def add_excluded_date(self, task_id: str, day: date) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return None
            current = set(_split(task.excluded_dates))
            current.add(day.isoformat())
            task.excluded_dates = ",".join(sorted(current))
            task.updated_at = now()
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def delete_task(self, task_id: str) -> None:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return
            session.delete(task)
            session.commit()


class CompletionRepository:
    """Persisted completion ledger: one row per ledger key."""

    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def list_keys(self) -> frozenset[str]:
        with self._session_factory() as session:
            return frozenset(session.scalars(select(CompletedOccurrenceModel.key)))

    def add(self, key: str) -> None:
        with self._session_factory() as session:
            if session.get(CompletedOccurrenceModel, key) is not None:
                return
            session.add(CompletedOccurrenceModel(key=key))
            session.commit()

    def remove(self, key: str) -> None:
        with self._session_factory() as session:
            session.execute(delete(CompletedOccurrenceModel).where(CompletedOccurrenceModel.key == key))
            session.commit()
