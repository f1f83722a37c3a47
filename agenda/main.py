from __future__ import annotations

import logging
from datetime import datetime

import click

from agenda.config import SETTINGS
from agenda.domain.display import format_due_date, is_overdue, truncate_words
from agenda.domain.entities import TaskEntity
from agenda.domain.enums import TaskStatus, ViewType
from agenda.domain.filters import TaskFilters
from agenda.domain.occurrence import is_occurrence_id
from agenda.infra.db import init_db
from agenda.infra.logging import setup_logging
from agenda.infra.repository import CompletionRepository, TaskRepository
from agenda.services.task_service import TaskService

logger = logging.getLogger(__name__)

STATUS_MARKS = {
    TaskStatus.PENDING: "[ ]",
    TaskStatus.IN_PROGRESS: "[~]",
    TaskStatus.DONE: "[x]",
}

# Task cards show at most this many words of the description.
DESCRIPTION_WORDS = 15


def format_task(task: TaskEntity, now: datetime) -> str:
    mark = STATUS_MARKS.get(task.status, "[ ]")
    due = format_due_date(task.due_date, task.due_time, now.date()) if task.due_date else "-"
    flag = " !" if task.status != TaskStatus.DONE and is_overdue(task.due_date, task.due_time, now) else ""
    line = f"{mark} {task.title} ({task.priority.value}) {due}{flag}  [{task.id}]"
    if task.description:
        line += f"\n    {truncate_words(task.description, DESCRIPTION_WORDS)}"
    return line


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL for this run")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Tasks and recurring occurrences.

    \b
    Commands:
      list - Print tasks for a view
      done - Mark a task or occurrence as done
      undo - Mark a task or occurrence as not done
    """
    if ctx.obj is not None:
        return

    setup_logging(log_level, console=False)
    try:
        init_db()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Database initialisation failed")
        click.echo(f"DB error: {exc}", err=True)
        ctx.exit(2)

    ctx.obj = TaskService(
        TaskRepository(),
        CompletionRepository(),
        horizon_days=SETTINGS.list_horizon_days,
    )


@cli.command("list")
@click.option(
    "--view",
    type=click.Choice([view.value for view in ViewType]),
    default=ViewType.LIST.value,
    show_default=True,
)
@click.option("--day", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Calendar day (YYYY-MM-DD)")
@click.option("--days", type=click.IntRange(min=0), default=None, help="List view horizon in days")
@click.option("--search", default=None, help="Match title, description or tags")
@click.option("--tag", "tags", multiple=True, help="Required tag (repeatable)")
@click.pass_obj
def list_tasks(
    service: TaskService,
    view: str,
    day: datetime | None,
    days: int | None,
    search: str | None,
    tags: tuple[str, ...],
) -> None:
    """Print the tasks of a view, recurring occurrences included."""
    filters = TaskFilters(search=search, tags=tags)
    now = datetime.now()
    if view == ViewType.CALENDAR.value:
        tasks = service.tasks_for_day(day.date() if day else now.date(), filters, now=now)
    else:
        tasks = service.tasks_for_view(view, filters, today=now.date(), now=now, horizon_days=days)
    for task in tasks:
        click.echo(format_task(task, now))


def _toggle(ctx: click.Context, task_id: str, checked: bool) -> None:
    service: TaskService = ctx.obj
    if service.toggle_completion(task_id, checked) is None and not is_occurrence_id(task_id):
        click.echo(f"Task not found: {task_id}", err=True)
        ctx.exit(1)


@cli.command("done")
@click.argument("task_id")
@click.pass_context
def done(ctx: click.Context, task_id: str) -> None:
    """Mark a task or an occurrence as done."""
    _toggle(ctx, task_id, True)


@cli.command("undo")
@click.argument("task_id")
@click.pass_context
def undo(ctx: click.Context, task_id: str) -> None:
    """Mark a task or an occurrence as not done."""
    _toggle(ctx, task_id, False)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
