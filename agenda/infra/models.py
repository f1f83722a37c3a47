from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .db import Base


def now() -> datetime:
    return datetime.now()


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(String(64), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    tags = Column(Text, nullable=False, default="")
    priority = Column(String(10), nullable=False, default="media")
    status = Column(String(20), nullable=False, default="pendente", index=True)
    due_date = Column(Date, nullable=True)
    due_time = Column(String(5), nullable=True)
    created_at = Column(DateTime, nullable=False, default=now)
    updated_at = Column(DateTime, nullable=False, default=now, onupdate=now)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_type = Column(String(20), nullable=True)
    recurring_interval = Column(Integer, nullable=True)
    recurring_days = Column(Text, nullable=False, default="")
    recurring_end_date = Column(Date, nullable=True)
    recurring_end_count = Column(Integer, nullable=True)
    excluded_dates = Column(Text, nullable=False, default="")

    subtasks = relationship(
        "SubtaskModel",
        order_by="SubtaskModel.sort_order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class SubtaskModel(Base):
    __tablename__ = "subtasks"

    id = Column(String(64), primary_key=True)
    task_id = Column(String(64), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default="pendente")
    created_at = Column(DateTime, nullable=False, default=now)
    updated_at = Column(DateTime, nullable=False, default=now, onupdate=now)
    sort_order = Column(Integer, nullable=False, default=0)


class CompletedOccurrenceModel(Base):
    __tablename__ = "completed_occurrences"

    key = Column(String(255), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=now)
