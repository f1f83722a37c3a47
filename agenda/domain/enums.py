from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    PENDING = "pendente"
    IN_PROGRESS = "em-progresso"
    DONE = "concluida"


class SubtaskStatus(StrEnum):
    PENDING = "pendente"
    DONE = "concluida"


class Priority(StrEnum):
    LOW = "baixa"
    MEDIUM = "media"
    HIGH = "alta"


class RecurringType(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class ViewType(StrEnum):
    LIST = "list"
    KANBAN = "kanban"
    CALENDAR = "calendar"
