# src/smart_tasks/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.reminder_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    task_store: TaskStore
    reminders: ReminderScheduler

    # Serializes console command handling; the store has its own lock.
    lock: threading.Lock = field(default_factory=threading.Lock)
