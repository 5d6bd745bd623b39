# src/smart_tasks/tasks/task_ordering.py

"""
Task ordering.

Pairwise comparison used by TaskStore.snapshot():
1. incomplete before completed
2. earlier deadline first, but only when BOTH tasks have a deadline
3. otherwise lower priority number first
4. remaining ties: insertion order (task ids are assigned increasingly)

Rule 2 is not a key function: a task without a deadline is never compared
by deadline, so the relation has to go through functools.cmp_to_key.
"""

from __future__ import annotations

import functools
from collections.abc import Iterable

from .task_models import Task


def _sign(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def compare_tasks(a: Task, b: Task) -> int:
    """Return <0 if a ranks before b, >0 if after, 0 only for the same task."""
    if a.completed != b.completed:
        return 1 if a.completed else -1

    if a.deadline is not None and b.deadline is not None:
        by_deadline = _sign(a.deadline, b.deadline)
        if by_deadline:
            return by_deadline

    by_priority = _sign(a.priority, b.priority)
    if by_priority:
        return by_priority

    return _sign(a.id, b.id)


task_sort_key = functools.cmp_to_key(compare_tasks)


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=task_sort_key)
