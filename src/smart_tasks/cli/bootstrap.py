# src/smart_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local data directory exists,
- wires TaskStore and ReminderScheduler into AppState.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

from ..config import get_settings
from ..core.state import AppState
from ..tasks.reminder_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)


def _on_reminder_error(exc: BaseException) -> None:
    logger.warning("Reminder check failed (%s); will retry next tick.", exc.__class__.__name__)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings().
    The reminder scheduler is created idle; the caller starts it.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    task_store = TaskStore()
    reminders = ReminderScheduler(
        task_store,
        interval_seconds=float(getattr(settings, "reminder_interval_seconds", 60.0)),
        lead_time=timedelta(minutes=float(getattr(settings, "reminder_lead_minutes", 5.0))),
        on_error=_on_reminder_error,
    )

    return AppState(settings=settings, task_store=task_store, reminders=reminders)
