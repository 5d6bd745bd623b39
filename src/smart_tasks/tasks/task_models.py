# src/smart_tasks/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class Task:
    """
    A single task as handed out by TaskStore.

    Instances are immutable: the store replaces its record when a task changes,
    so a snapshot taken earlier never changes under the caller.
    """

    id: int
    title: str
    priority: int  # lower = higher priority
    deadline: datetime | None
    created_at: datetime

    completed: bool = False
    completed_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class ReminderEvent:
    """Emitted by the reminder scheduler for a task close to its deadline."""

    task_id: int
    title: str
    deadline: datetime
