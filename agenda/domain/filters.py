from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .entities import TaskEntity


@dataclass(frozen=True)
class TaskFilters:
    search: str | None = None
    tags: tuple[str, ...] = ()


def _matches_search(task: TaskEntity, term: str) -> bool:
    return (
        term in task.title.lower()
        or term in task.description.lower()
        or any(term in tag.lower() for tag in task.tags)
    )


def apply_filters(tasks: Iterable[TaskEntity], filters: TaskFilters) -> list[TaskEntity]:
    result = list(tasks)
    term = (filters.search or "").strip().lower()
    if term:
        result = [task for task in result if _matches_search(task, term)]
    if filters.tags:
        result = [task for task in result if all(tag in task.tags for tag in filters.tags)]
    return result


def task_moment(task: TaskEntity) -> datetime | None:
    if task.due_date:
        moment = datetime.combine(task.due_date, datetime.min.time())
        if task.due_time:
            try:
                hours, minutes = (int(part) for part in task.due_time.split(":")[:2])
                moment = moment.replace(hour=hours, minute=minutes)
            except ValueError:
                pass
        return moment
    return task.created_at


def sort_by_proximity(tasks: Iterable[TaskEntity], now: datetime) -> list[TaskEntity]:
    """Closest to ``now`` first, in either direction; undated and unknown last."""

    def distance(task: TaskEntity) -> float:
        moment = task_moment(task)
        if moment is None:
            return float("inf")
        return abs((moment - now).total_seconds())

    return sorted(tasks, key=distance)
