# src/smart_tasks/tasks/reminder_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A small polling loop that, on every tick:
- reads a snapshot of the task store,
- picks incomplete tasks whose deadline is within lead_time of now,
- emits one ReminderEvent per such task to the registered observers.

There is no "already reminded" bookkeeping: a task keeps being reported on
every tick until it is completed or removed.

Failures (store read, evaluation, observer callback) are logged and reported to on_error;
they never stop the loop.
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from ..core.ports import ErrorObserver, ReminderObserver, TaskRepo
from .task_models import ReminderEvent, Task

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0
DEFAULT_LEAD_TIME = timedelta(minutes=5)


def evaluate(tasks: Iterable[Task], *, now: datetime, lead_time: timedelta) -> list[ReminderEvent]:
    """Pure reminder rule: incomplete, has a deadline, and now >= deadline - lead_time."""
    events: list[ReminderEvent] = []
    for task in tasks:
        if task.completed or task.deadline is None:
            continue
        if now >= task.deadline - lead_time:
            events.append(ReminderEvent(task_id=task.id, title=task.title, deadline=task.deadline))
    return events


def _report(on_error: ErrorObserver | None, exc: BaseException) -> None:
    if on_error is None:
        return
    try:
        on_error(exc)
    except Exception:
        logger.debug("on_error observer failed.", exc_info=True)


def run_reminder_tick(
        task_store: TaskRepo,
        emit: ReminderObserver,
        *,
        now: datetime,
        lead_time: timedelta = DEFAULT_LEAD_TIME,
        on_error: ErrorObserver | None = None,
) -> list[ReminderEvent]:
    """
    One evaluation cycle.

    Returns the events that were computed (even if emitting some of them failed).
    A failing snapshot() or evaluation skips the tick and returns [].
    """
    try:
        tasks = task_store.snapshot()
        events = evaluate(tasks, now=now, lead_time=lead_time)
    except Exception as exc:
        logger.exception("reminder evaluation failed; skipping tick")
        _report(on_error, exc)
        return []

    for event in events:
        try:
            emit(event)
        except Exception as exc:
            logger.exception("reminder emit failed task_id=%s", event.task_id)
            _report(on_error, exc)

    if events:
        logger.debug("Reminder tick emitted %d event(s)", len(events))
    return events


async def run_reminder_loop(
        task_store: TaskRepo,
        emit: ReminderObserver,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        lead_time: timedelta = DEFAULT_LEAD_TIME,
        stop_event: asyncio.Event | None = None,
        now_provider: Callable[[], datetime] | None = None,
        on_error: ErrorObserver | None = None,
) -> None:
    """
    Polling loop for use inside an existing event loop.

    Ticks immediately, then every interval_seconds. Returns once stop_event is
    set (checked between ticks, without waiting out the interval); without a
    stop_event, cancel the coroutine/task to stop it.
    """
    sleep_s = max(0.01, float(interval_seconds))
    now_fn = now_provider or datetime.now

    while stop_event is None or not stop_event.is_set():
        try:
            run_reminder_tick(task_store, emit, now=now_fn(), lead_time=lead_time, on_error=on_error)
        except Exception as exc:
            logger.exception("reminder tick crashed")
            _report(on_error, exc)

        if stop_event is None:
            await asyncio.sleep(sleep_s)
            continue
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


class ReminderScheduler:
    """
    Background reminder scheduler with explicit start/stop.

    Runs the polling loop on its own asyncio event loop in a daemon thread, so
    start() never blocks the caller.

    States:
    - idle: not started, or stopped
    - running: ticking every interval_seconds

    start() and stop() are idempotent. stop() waits for an in-flight tick to
    finish; once it returns no further reminders are emitted.
    """

    def __init__(
            self,
            task_store: TaskRepo,
            *,
            interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
            lead_time: timedelta = DEFAULT_LEAD_TIME,
            now_provider: Callable[[], datetime] | None = None,
            on_error: ErrorObserver | None = None,
    ) -> None:
        self._task_store = task_store
        self.interval_seconds = max(0.01, float(interval_seconds))
        self.lead_time = lead_time
        self._now = now_provider or datetime.now
        self._on_error = on_error

        self._observers: list[ReminderObserver] = []
        self._observers_lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._state_lock = threading.Lock()

        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop_event: asyncio.Event | None = None
        self._stop_requested = False

    # ---- observers ----

    def add_observer(self, observer: ReminderObserver) -> None:
        with self._observers_lock:
            self._observers.append(observer)

    def remove_observer(self, observer: ReminderObserver) -> bool:
        with self._observers_lock:
            try:
                self._observers.remove(observer)
            except ValueError:
                return False
        return True

    def _emit(self, event: ReminderEvent) -> None:
        with self._observers_lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(event)
            except Exception as exc:
                logger.exception("reminder observer failed task_id=%s", event.task_id)
                _report(self._on_error, exc)

    # ---- evaluation ----

    def tick(self) -> list[ReminderEvent]:
        """Run one evaluation now. Ticks never overlap."""
        with self._tick_lock:
            return run_reminder_tick(
                self._task_store,
                self._emit,
                now=self._now(),
                lead_time=self.lead_time,
                on_error=self._on_error,
            )

    async def _run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                self.tick()
            except Exception as exc:
                logger.exception("reminder tick crashed")
                _report(self._on_error, exc)
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)

    # ---- lifecycle ----

    @property
    def is_running(self) -> bool:
        """True while the loop thread is alive, including a tick still finishing after stop()."""
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        with self._state_lock:
            old = self._thread
            if old is not None and old.is_alive():
                if not self._stop_requested:
                    return
                if old is threading.current_thread():
                    # start() from an observer right after stop(): the loop is still ours.
                    logger.warning("Reminder scheduler is stopping; start() ignored on its own thread")
                    return
                # Previous loop was told to stop from its own thread; let it finish first.
                old.join()

            self._stop_requested = False
            ready = threading.Event()

            def runner() -> None:
                loop = asyncio.new_event_loop()
                asyncio.set_event_loop(loop)
                stop_event = asyncio.Event()

                self._loop = loop
                self._stop_event = stop_event
                ready.set()

                try:
                    loop.run_until_complete(self._run(stop_event))
                finally:
                    with contextlib.suppress(Exception):
                        loop.close()

            t = threading.Thread(target=runner, name="reminder-scheduler", daemon=True)
            self._thread = t
            t.start()
            ready.wait()

        logger.info(
            "Reminder scheduler started (interval=%ss lead_time=%s)",
            self.interval_seconds,
            self.lead_time,
        )

    def stop(self, timeout: float | None = None) -> None:
        with self._state_lock:
            thread = self._thread
            loop = self._loop
            stop_event = self._stop_event
            if thread is None or loop is None or stop_event is None:
                return

            self._stop_requested = True
            try:
                loop.call_soon_threadsafe(stop_event.set)
            except RuntimeError:
                # Loop already closed: the thread has exited on its own.
                logger.debug("Reminder loop already closed.", exc_info=True)

            if thread is threading.current_thread():
                # Called from an observer: the current tick finishes, no further tick starts.
                # The thread reference is kept so is_running and the next start() can see it.
                logger.info("Reminder scheduler stopping (requested from its own thread)")
                return

            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Reminder scheduler thread did not stop within %ss", timeout)
                return

            self._thread = None
            self._loop = None
            self._stop_event = None

        logger.info("Reminder scheduler stopped")
