from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from datetime import date, timedelta

from agenda.domain.entities import TaskEntity

from . import recurrence

logger = logging.getLogger(__name__)


def expand_recurring(
    templates: Iterable[TaskEntity],
    start: date,
    end: date,
    completed: Collection[str],
) -> list[TaskEntity]:
    """Occurrences of every recurring template in the window.

    A template that fails to expand is logged and left out; the rest
    still render.
    """
    occurrences: list[TaskEntity] = []
    for template in templates:
        if not template.is_recurring:
            continue
        try:
            occurrences.extend(recurrence.generate_occurrences(template, start, end, completed))
        except Exception:  # noqa: BLE001
            logger.exception("Failed to expand recurring task %s", template.id)
    return occurrences


def list_view(
    tasks: Iterable[TaskEntity],
    today: date,
    completed: Collection[str],
    horizon_days: int = 30,
) -> list[TaskEntity]:
    tasks = list(tasks)
    regular = [task for task in tasks if not task.is_recurring]
    end = today + timedelta(days=horizon_days)
    return regular + expand_recurring(tasks, today, end, completed)


def kanban_view(tasks: Iterable[TaskEntity]) -> list[TaskEntity]:
    return [task for task in tasks if not task.is_recurring]


def calendar_day(tasks: Iterable[TaskEntity], day: date, completed: Collection[str]) -> list[TaskEntity]:
    tasks = list(tasks)
    regular = []
    for task in tasks:
        if task.is_recurring:
            continue
        if task.due_date:
            if task.due_date == day:
                regular.append(task)
        elif task.created_at and task.created_at.date() == day:
            regular.append(task)
    return regular + expand_recurring(tasks, day, day, completed)
