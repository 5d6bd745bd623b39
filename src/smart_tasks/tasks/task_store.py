# src/smart_tasks/tasks/task_store.py

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from .task_models import Task
from .task_ordering import sort_tasks

logger = logging.getLogger(__name__)


def _check_task_id(task_id: object) -> int:
    # bool is an int subclass but never a valid id.
    if not isinstance(task_id, int) or isinstance(task_id, bool):
        raise TypeError(f"task_id must be int, got {type(task_id).__name__}")
    return task_id


class TaskStore:
    """
    In-memory task store.

    Tasks live in a dict keyed by id; ordering is derived on every snapshot()
    rather than maintained, since complete() changes a task's rank.

    Missing ids are not errors: remove/complete return False, find returns None.
    Wrong argument types raise TypeError.

    Thread-safety:
    - one lock guards the dict for the whole of each operation
    """

    def __init__(self, *, now_provider: Callable[[], datetime] | None = None) -> None:
        self._tasks: dict[int, Task] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._now = now_provider or datetime.now
        logger.info("TaskStore ready")

    # ---- mutations ----

    def add(self, title: str, priority: int, deadline: datetime | None = None) -> int:
        if not isinstance(title, str):
            raise TypeError(f"title must be str, got {type(title).__name__}")
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise TypeError(f"priority must be int, got {type(priority).__name__}")
        if deadline is not None and not isinstance(deadline, datetime):
            raise TypeError(f"deadline must be datetime or None, got {type(deadline).__name__}")
        # Deadlines are naive local time, like datetime.now(); mixing in aware ones breaks ordering.
        if deadline is not None and deadline.utcoffset() is not None:
            raise TypeError("deadline must be a naive local datetime, got a timezone-aware one")

        with self._lock:
            task_id = next(self._ids)
            self._tasks[task_id] = Task(
                id=task_id,
                title=title,
                priority=priority,
                deadline=deadline,
                created_at=self._now(),
            )

        logger.debug("Task added id=%s priority=%s deadline=%s", task_id, priority, deadline)
        return task_id

    def remove(self, task_id: int) -> bool:
        task_id = _check_task_id(task_id)
        with self._lock:
            removed = self._tasks.pop(task_id, None)

        if removed is None:
            return False
        logger.debug("Task removed id=%s", task_id)
        return True

    def complete(self, task_id: int) -> bool:
        """
        Mark a task as completed.

        Returns True only on the transition; completing an unknown or
        already-completed task returns False and changes nothing.
        """
        task_id = _check_task_id(task_id)
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None or task.completed:
                return False
            self._tasks[task_id] = replace(task, completed=True, completed_at=self._now())

        logger.info("Task %s -> done", task_id)
        return True

    # ---- queries ----

    def snapshot(self) -> list[Task]:
        with self._lock:
            tasks = list(self._tasks.values())
        # Task objects are immutable, so sorting outside the lock is safe.
        return sort_tasks(tasks)

    def find(self, task_id: int) -> Task | None:
        task_id = _check_task_id(task_id)
        with self._lock:
            return self._tasks.get(task_id)

    def find_by_title(self, title: str) -> list[Task]:
        """All tasks with exactly this title, in snapshot order (titles are not unique)."""
        with self._lock:
            matches = [t for t in self._tasks.values() if t.title == title]
        return sort_tasks(matches)

    def count_tasks(self) -> int:
        with self._lock:
            return len(self._tasks)
