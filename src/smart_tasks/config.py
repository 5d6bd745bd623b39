# src/smart_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Malformed values fall back to defaults instead of failing at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "SMART_TASKS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Reminders ----
    reminder_interval_seconds: float
    reminder_lead_minutes: float

    # ---- Console ----
    console_enabled: bool
    deadline_format: str

    @property
    def reminder_lead_time(self) -> timedelta:
        return timedelta(minutes=self.reminder_lead_minutes)

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "smart-tasks").strip() or "smart-tasks"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/smart_tasks"))

        interval = _env_float(_k("REMINDER_INTERVAL"), 60.0)
        if interval <= 0:
            interval = 60.0
        lead_minutes = _env_float(_k("REMINDER_LEAD_MINUTES"), 5.0)
        if lead_minutes < 0:
            lead_minutes = 5.0

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            reminder_interval_seconds=interval,
            reminder_lead_minutes=lead_minutes,
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), True),
            deadline_format=_env(_k("DEADLINE_FORMAT"), "%Y-%m-%d %H:%M"),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
