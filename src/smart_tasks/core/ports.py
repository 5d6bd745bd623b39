# src/smart_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder scheduler.

The scheduler depends on Protocols instead of the concrete TaskStore.
This keeps the store swappable and makes testing easier.
"""

from collections.abc import Callable, Sequence
from typing import Protocol

from ..tasks.task_models import ReminderEvent, Task

ReminderObserver = Callable[[ReminderEvent], None]
# Called once per emitted reminder.

ErrorObserver = Callable[[BaseException], None]
# Called when a tick (or an observer) fails; the scheduler keeps running.


class TaskRepo(Protocol):
    """Read side of the task store, as seen by the scheduler."""

    def snapshot(self) -> Sequence[Task]: ...
