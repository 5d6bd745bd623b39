# src/smart_tasks/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "smart_tasks.log"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the task console readable while the reminder thread runs:
    - store and command logs pass through
    - reminder scheduler logs only at WARNING+ (reminders are printed by the
      console observer, and tick-level logs would interleave with the prompt)
    - captured warnings and other libraries only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("smart_tasks."):
            if name.startswith("smart_tasks.tasks.reminder_scheduler"):
                return record.levelno >= logging.WARNING
            return True

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/smart_tasks",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send logs to stderr (filtered) and to <log_dir>/smart_tasks.log (everything,
    including every reminder tick at DEBUG).

    Replaces any handlers already on the root logger; the CLI calls it once
    before building the task store. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    # Millisecond timestamps: reminder ticks and console commands interleave.
    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    task_log = logging.FileHandler(str(log_file), encoding="utf-8")
    task_log.setLevel(file_level)
    task_log.setFormatter(fmt)
    root.addHandler(task_log)

    logging.captureWarnings(True)
    return log_file
