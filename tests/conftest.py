# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from smart_tasks.cli.bootstrap import create_initial_state
from smart_tasks.core.state import AppState
from smart_tasks.tasks.task_store import TaskStore

from .fakes import FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="smart-tasks-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        reminder_interval_seconds=60.0,
        reminder_lead_minutes=5.0,
        console_enabled=False,
        deadline_format="%Y-%m-%d %H:%M",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 12, 0))


@pytest.fixture()
def store(clock: FakeClock) -> TaskStore:
    return TaskStore(now_provider=clock.now)


@pytest.fixture()
def state(settings: SimpleNamespace):
    """AppState wired by the real bootstrap; the scheduler is stopped on teardown."""
    app_state: AppState = create_initial_state(settings=settings)
    yield app_state
    app_state.reminders.stop(timeout=5.0)
