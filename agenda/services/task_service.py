from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta

from agenda.domain.dates import as_date, parse_date
from agenda.domain.entities import TaskEntity
from agenda.domain.enums import Priority, RecurringType, SubtaskStatus, TaskStatus, ViewType
from agenda.domain.filters import TaskFilters, apply_filters, sort_by_proximity
from agenda.domain.occurrence import OccurrenceKey, is_occurrence_id
from agenda.infra.repository import CompletionRepository, TaskRepository

from . import views
from .completion import occurrence_key

logger = logging.getLogger(__name__)

_ENUM_FIELDS = {
    "status": TaskStatus,
    "priority": Priority,
    "recurring_type": RecurringType,
}
_DATE_FIELDS = ("due_date", "recurring_end_date")


class TaskService:
    def __init__(
        self,
        repo: TaskRepository,
        ledger: CompletionRepository,
        horizon_days: int = 30,
    ) -> None:
        self._repo = repo
        self._ledger = ledger
        self._horizon_days = horizon_days

    def list_tasks(self, filters: TaskFilters | None = None, now: datetime | None = None) -> list[TaskEntity]:
        """Filtered tasks, closest to ``now`` first."""
        tasks = self._repo.list_tasks()
        if filters:
            tasks = apply_filters(tasks, filters)
        return sort_by_proximity(tasks, now or datetime.now())

    def get_task(self, task_id: str) -> TaskEntity | None:
        return self._repo.get_task(task_id)

    def create_task(self, data: dict) -> TaskEntity:
        normalized = self._normalize_data(data)
        stamp = datetime.now()
        normalized.setdefault("created_at", stamp)
        normalized.setdefault("updated_at", stamp)
        return self._repo.create_task(normalized)

    def update_task(self, task_id: str, data: dict) -> TaskEntity | None:
        normalized = self._normalize_data(data)
        normalized["updated_at"] = datetime.now()
        return self._repo.update_task(task_id, normalized)

    def delete_task(self, task_id: str) -> None:
        self._repo.delete_task(task_id)

    def update_status(self, task_id: str, status: TaskStatus | str) -> TaskEntity | None:
        return self.update_task(task_id, {"status": status})

    def mark_done(self, task_id: str) -> TaskEntity | None:
        return self.update_status(task_id, TaskStatus.DONE)

    # Completion ledger

    def completed_occurrences(self) -> frozenset[str]:
        return self._ledger.list_keys()

    def mark_occurrence_completed(self, template_id: str, occurrence_date: date | str) -> None:
        key = occurrence_key(template_id, self._require_date(occurrence_date))
        self._ledger.add(key)
        logger.info("Marked occurrence %s as completed", key)

    def unmark_occurrence_completed(self, template_id: str, occurrence_date: date | str) -> None:
        key = occurrence_key(template_id, self._require_date(occurrence_date))
        self._ledger.remove(key)
        logger.info("Unmarked occurrence %s", key)

    def toggle_completion(self, task_id: str, checked: bool) -> TaskEntity | None:
        """Check or uncheck a task card.

        Occurrence ids go to the completion ledger and return ``None``;
        plain task ids switch the task between done and pending.
        """
        if is_occurrence_id(task_id):
            key = OccurrenceKey.parse(task_id)
            if checked:
                self.mark_occurrence_completed(key.template_id, key.date)
            else:
                self.unmark_occurrence_completed(key.template_id, key.date)
            return None
        return self.update_status(task_id, TaskStatus.DONE if checked else TaskStatus.PENDING)

    def toggle_subtask(self, task_id: str, subtask_id: str, checked: bool) -> TaskEntity | None:
        task = self._repo.get_task(task_id)
        if not task or not task.subtasks:
            return None
        stamp = datetime.now()
        status = SubtaskStatus.DONE if checked else SubtaskStatus.PENDING
        subtasks = tuple(
            replace(subtask, status=status, updated_at=stamp) if subtask.id == subtask_id else subtask
            for subtask in task.subtasks
        )
        return self.update_task(task_id, {"subtasks": subtasks})

    # Recurring series edits

    def delete_occurrence(self, task_id: str) -> TaskEntity | None:
        """Drop a single occurrence by excluding its date from the series.

        Given a template id instead, the whole series is deleted.
        """
        if not is_occurrence_id(task_id):
            self.delete_series(task_id)
            return None
        key = OccurrenceKey.parse(task_id)
        logger.info("Excluding %s from task %s", key.date, key.template_id)
        return self._repo.add_excluded_date(key.template_id, key.date)

    def delete_from_date_forward(self, task_id: str) -> TaskEntity | None:
        """End the series the day before the given occurrence."""
        if not is_occurrence_id(task_id):
            self.delete_series(task_id)
            return None
        key = OccurrenceKey.parse(task_id)
        return self.update_task(key.template_id, {"recurring_end_date": key.date - timedelta(days=1)})

    def delete_series(self, task_id: str) -> None:
        template_id = OccurrenceKey.parse(task_id).template_id if is_occurrence_id(task_id) else task_id
        logger.info("Deleting task %s", template_id)
        self._repo.delete_task(template_id)

    # Views

    def tasks_for_view(
        self,
        view: ViewType | str,
        filters: TaskFilters | None = None,
        today: date | None = None,
        now: datetime | None = None,
        horizon_days: int | None = None,
    ) -> list[TaskEntity]:
        view = ViewType(view)
        tasks = self.list_tasks(filters, now)
        if view == ViewType.KANBAN:
            return views.kanban_view(tasks)
        if view == ViewType.LIST:
            return views.list_view(
                tasks,
                today or date.today(),
                self.completed_occurrences(),
                self._horizon_days if horizon_days is None else horizon_days,
            )
        return tasks

    def tasks_for_day(
        self,
        day: date,
        filters: TaskFilters | None = None,
        now: datetime | None = None,
    ) -> list[TaskEntity]:
        return views.calendar_day(self.list_tasks(filters, now), day, self.completed_occurrences())

    @staticmethod
    def _require_date(value: date | str) -> date:
        parsed = as_date(value)
        if parsed is None:
            raise ValueError(f"Invalid occurrence date: {value!r}")
        return parsed

    def _normalize_data(self, data: dict) -> dict:
        normalized = dict(data)
        for key, enum_cls in _ENUM_FIELDS.items():
            value = normalized.get(key)
            if value is not None and not isinstance(value, enum_cls):
                normalized[key] = enum_cls(value)
        for key in _DATE_FIELDS:
            if isinstance(normalized.get(key), str):
                normalized[key] = parse_date(normalized[key])
        if "excluded_dates" in normalized:
            parsed = (parse_date(value) for value in normalized["excluded_dates"] or ())
            normalized["excluded_dates"] = frozenset(day for day in parsed if day is not None)
        return normalized
