from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta

from agenda.domain.entities import SubtaskEntity, TaskEntity
from agenda.domain.enums import Priority, RecurringType, SubtaskStatus, TaskStatus, ViewType
from agenda.domain.filters import TaskFilters
from agenda.services import recurrence
from agenda.services.task_service import TaskService

TODAY = date(2024, 1, 1)


class FakeRepo:
    def __init__(self) -> None:
        self.tasks: dict[str, TaskEntity] = {}
        self._id = 1

    def list_tasks(self) -> list[TaskEntity]:
        return list(self.tasks.values())

    def get_task(self, task_id: str) -> TaskEntity | None:
        return self.tasks.get(task_id)

    def create_task(self, data: dict) -> TaskEntity:
        data = dict(data)
        task_id = data.pop("id", None) or f"task-{self._id}"
        self._id += 1
        task = TaskEntity(id=task_id, **data)
        self.tasks[task.id] = task
        return task

    def update_task(self, task_id: str, data: dict) -> TaskEntity | None:
        task = self.get_task(task_id)
        if not task:
            return None
        updated = replace(task, **data)
        self.tasks[task_id] = updated
        return updated

    def add_excluded_date(self, task_id: str, day: date) -> TaskEntity | None:
        task = self.get_task(task_id)
        if not task:
            return None
        return self.update_task(task_id, {"excluded_dates": task.excluded_dates | {day}})

    def delete_task(self, task_id: str) -> None:
        self.tasks.pop(task_id, None)


class FakeLedger:
    def __init__(self) -> None:
        self.keys: set[str] = set()

    def list_keys(self) -> frozenset[str]:
        return frozenset(self.keys)

    def add(self, key: str) -> None:
        self.keys.add(key)

    def remove(self, key: str) -> None:
        self.keys.discard(key)


def make_service(horizon_days: int = 30) -> tuple[TaskService, FakeRepo, FakeLedger]:
    repo = FakeRepo()
    ledger = FakeLedger()
    return TaskService(repo, ledger, horizon_days=horizon_days), repo, ledger


def add_daily(service: TaskService, task_id: str = "daily", **extra) -> TaskEntity:
    data = {
        "id": task_id,
        "title": "Read",
        "is_recurring": True,
        "recurring_type": "daily",
        "due_date": "2024-01-01",
    }
    data.update(extra)
    return service.create_task(data)


def test_create_task_normalizes_values() -> None:
    service, _, _ = make_service()

    task = service.create_task({
        "title": "Report",
        "status": "em-progresso",
        "priority": "alta",
        "due_date": "2024-02-10",
        "excluded_dates": ["2024-02-11", "garbage"],
    })

    assert task.status == TaskStatus.IN_PROGRESS
    assert task.due_date == date(2024, 2, 10)
    assert task.excluded_dates == frozenset({date(2024, 2, 11)})
    assert task.created_at is not None
    assert task.updated_at == task.created_at


def test_completing_an_occurrence_updates_the_ledger() -> None:
    service, _, ledger = make_service(horizon_days=2)
    add_daily(service, status="pendente")

    service.toggle_completion("daily_occurrence_2024-01-02", True)
    service.toggle_completion("daily_occurrence_2024-01-02", True)

    assert ledger.keys == {"daily_occurrence_2024-01-02_2024-01-02"}
    statuses = {
        task.id: task.status
        for task in service.tasks_for_view(ViewType.LIST, today=TODAY)
    }
    assert statuses == {
        "daily_occurrence_2024-01-01": TaskStatus.PENDING,
        "daily_occurrence_2024-01-02": TaskStatus.DONE,
        "daily_occurrence_2024-01-03": TaskStatus.PENDING,
    }

    service.toggle_completion("daily_occurrence_2024-01-02", False)
    assert ledger.keys == set()
    assert all(
        task.status == TaskStatus.PENDING
        for task in service.tasks_for_view(ViewType.LIST, today=TODAY)
    )


def test_toggle_completion_on_plain_task_sets_status() -> None:
    service, _, ledger = make_service()
    task = service.create_task({"title": "Once"})

    assert service.toggle_completion(task.id, True).status == TaskStatus.DONE
    assert service.toggle_completion(task.id, False).status == TaskStatus.PENDING
    assert service.toggle_completion("missing", True) is None
    assert ledger.keys == set()


def test_mark_occurrence_accepts_date_strings() -> None:
    service, _, ledger = make_service()

    service.mark_occurrence_completed("t1", "2024-01-02")
    assert service.completed_occurrences() == frozenset({"t1_occurrence_2024-01-02_2024-01-02"})

    service.unmark_occurrence_completed("t1", date(2024, 1, 2))
    service.unmark_occurrence_completed("t1", date(2024, 1, 2))
    assert ledger.keys == set()


def test_delete_occurrence_excludes_its_date() -> None:
    service, repo, _ = make_service(horizon_days=4)
    add_daily(service)

    service.delete_occurrence("daily_occurrence_2024-01-03")

    assert repo.tasks["daily"].excluded_dates == frozenset({date(2024, 1, 3)})
    ids = [task.id for task in service.tasks_for_view(ViewType.LIST, today=TODAY)]
    assert "daily_occurrence_2024-01-03" not in ids
    assert len(ids) == 4


def test_delete_occurrence_with_template_id_removes_series() -> None:
    service, repo, _ = make_service()
    add_daily(service)

    service.delete_occurrence("daily")

    assert repo.tasks == {}


def test_delete_from_date_forward_ends_series_day_before() -> None:
    service, repo, _ = make_service()
    add_daily(service)

    service.delete_from_date_forward("daily_occurrence_2024-01-10")

    assert repo.tasks["daily"].recurring_end_date == date(2024, 1, 9)
    occurrences = service.tasks_for_view(ViewType.LIST, today=TODAY)
    assert occurrences[-1].due_date == date(2024, 1, 9)


def test_delete_series_from_occurrence_id() -> None:
    service, repo, _ = make_service()
    add_daily(service)
    service.create_task({"id": "other", "title": "Other"})

    service.delete_series("daily_occurrence_2024-01-05")

    assert list(repo.tasks) == ["other"]


def test_toggle_subtask() -> None:
    service, _, _ = make_service()
    task = service.create_task({
        "title": "Trip",
        "subtasks": (SubtaskEntity(id="s1", title="Pack"), SubtaskEntity(id="s2", title="Go")),
    })

    updated = service.toggle_subtask(task.id, "s2", True)

    assert [s.status for s in updated.subtasks] == [SubtaskStatus.PENDING, SubtaskStatus.DONE]
    assert updated.subtasks[1].updated_at is not None
    assert service.toggle_subtask("missing", "s1", True) is None


def test_kanban_view_leaves_out_recurring_templates() -> None:
    service, _, _ = make_service()
    add_daily(service)
    service.create_task({"id": "once", "title": "Once"})

    assert [task.id for task in service.tasks_for_view("kanban")] == ["once"]


def test_list_view_appends_occurrences_within_horizon() -> None:
    service, _, _ = make_service(horizon_days=3)
    add_daily(service)
    service.create_task({"id": "once", "title": "Once"})

    ids = [task.id for task in service.tasks_for_view(ViewType.LIST, today=TODAY)]

    assert ids == ["once"] + [
        f"daily_occurrence_{TODAY + timedelta(days=offset)}" for offset in range(4)
    ]


def test_list_view_applies_filters() -> None:
    service, _, _ = make_service(horizon_days=1)
    add_daily(service, tags=("habit",))
    service.create_task({"id": "once", "title": "Buy milk"})

    ids = [
        task.id
        for task in service.tasks_for_view(ViewType.LIST, TaskFilters(tags=("habit",)), today=TODAY)
    ]

    assert ids == ["daily_occurrence_2024-01-01", "daily_occurrence_2024-01-02"]


def test_failing_template_does_not_hide_other_tasks(monkeypatch, caplog) -> None:
    service, _, _ = make_service(horizon_days=1)
    add_daily(service, task_id="broken")
    add_daily(service, task_id="fine")
    service.create_task({"id": "once", "title": "Once"})

    real_generate = recurrence.generate_occurrences

    def flaky_generate(template, *args, **kwargs):
        if template.id == "broken":
            raise RuntimeError("boom")
        return real_generate(template, *args, **kwargs)

    monkeypatch.setattr(recurrence, "generate_occurrences", flaky_generate)

    with caplog.at_level(logging.ERROR):
        ids = [task.id for task in service.tasks_for_view(ViewType.LIST, today=TODAY)]

    assert ids == ["once", "fine_occurrence_2024-01-01", "fine_occurrence_2024-01-02"]
    assert "broken" in caplog.text


def test_tasks_for_day_mixes_regular_tasks_and_occurrences() -> None:
    service, _, _ = make_service()
    add_daily(service, recurring_type=RecurringType.WEEKLY, recurring_days=("wednesday",))
    service.create_task({"id": "dentist", "title": "Dentist", "due_date": "2024-01-03"})
    service.create_task({"id": "later", "title": "Later", "due_date": "2024-01-04"})
    service.mark_occurrence_completed("daily", date(2024, 1, 3))

    tasks = service.tasks_for_day(date(2024, 1, 3))

    assert [task.id for task in tasks] == ["dentist", "daily_occurrence_2024-01-03"]
    assert tasks[1].status == TaskStatus.DONE
    assert service.tasks_for_day(date(2024, 1, 2)) == []


def test_list_view_orders_regular_tasks_by_proximity() -> None:
    service, _, _ = make_service(horizon_days=0)
    service.create_task({"id": "far", "title": "Renew passport", "priority": "alta", "due_date": "2025-01-01"})
    service.create_task({"id": "near", "title": "Buy bread", "priority": "baixa", "due_date": "2024-01-01"})
    add_daily(service)

    tasks = service.tasks_for_view(ViewType.LIST, today=TODAY, now=datetime(2024, 1, 1, 9, 0))

    assert [task.id for task in tasks] == ["near", "far", "daily_occurrence_2024-01-01"]
    assert tasks[1].priority == Priority.HIGH


def test_list_view_horizon_can_be_overridden() -> None:
    service, _, _ = make_service(horizon_days=30)
    add_daily(service)

    tasks = service.tasks_for_view(ViewType.LIST, today=TODAY, horizon_days=2)

    assert len(tasks) == 3
