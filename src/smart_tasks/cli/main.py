# src/smart_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, starts the reminder scheduler in the
background, then runs the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import print_reminder, run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    state.reminders.start()

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
        if not settings.console_enabled:
            # The console handles Ctrl+C itself via KeyboardInterrupt.
            signal.signal(signal.SIGINT, _handle_signal)
    except (ValueError, OSError, AttributeError):
        logger.debug("Signal handlers not installed.", exc_info=True)

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled. Printing reminders only. Press Ctrl+C to stop.")
            state.reminders.add_observer(print_reminder)
            stop_main.wait()
    finally:
        state.reminders.stop(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
