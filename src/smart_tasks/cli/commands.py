# src/smart_tasks/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import ReminderEvent, Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

DEFAULT_DEADLINE_FORMAT = "%Y-%m-%d %H:%M"

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- presentation helpers ----


def parse_deadline(text: str, fmt: str = DEFAULT_DEADLINE_FORMAT) -> datetime:
    """Parse user input into a deadline. Raises ValueError on malformed text."""
    return datetime.strptime(text.strip(), fmt)


def format_deadline(deadline: datetime | None, fmt: str = DEFAULT_DEADLINE_FORMAT) -> str:
    return deadline.strftime(fmt) if deadline is not None else "None"


def format_task_row(task: Task, fmt: str = DEFAULT_DEADLINE_FORMAT) -> str:
    status = "Done" if task.completed else "Pending"
    return (
        f"#{task.id:<4} {task.title:<30} "
        f"p={task.priority:<4} due={format_deadline(task.deadline, fmt):<16} "
        f"{status}"
    )


def format_reminder(event: ReminderEvent) -> str:
    return f'⏰ Reminder: Task "{event.title}" is due soon!'


def _deadline_format(state: AppState) -> str:
    return str(getattr(state.settings, "deadline_format", DEFAULT_DEADLINE_FORMAT))


def _resolve_task(state: AppState, args: list[str]) -> tuple[Task | None, str | None]:
    """
    Resolve "#<id>" or a title to a single task.
    Returns (task, None) or (None, error message).
    """
    if not args:
        return None, "Specify a task: #<id> or its title."

    ref = " ".join(args).strip()
    if ref.startswith("#"):
        try:
            task_id = int(ref[1:])
        except ValueError:
            return None, f"Invalid task id: {ref}"
        task = state.task_store.find(task_id)
        if task is None:
            return None, f"No task {ref}."
        return task, None

    matches = state.task_store.find_by_title(ref)
    if not matches:
        return None, f'No task titled "{ref}".'
    if len(matches) > 1:
        ids = ", ".join(f"#{t.id}" for t in matches)
        return None, f'Several tasks are titled "{ref}" ({ids}); use the id.'
    return matches[0], None


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <priority> <title...>                   -> task without a deadline
    /add <priority> <title...> @ <deadline>      -> deadline in the configured format
    """
    fmt = _deadline_format(state)
    usage = f"Usage: /add <priority> <title> [@ <deadline as {fmt}>]"
    if len(args) < 2:
        return usage

    try:
        priority = int(args[0])
    except ValueError:
        return f"Priority must be an integer (1 = high). {usage}"

    # The deadline follows the last standalone "@", so titles may contain "a@b".
    words = args[1:]
    at = None
    for i, word in enumerate(words):
        if word == "@":
            at = i
    title = " ".join(words if at is None else words[:at]).strip()
    if not title:
        return usage

    deadline = None
    if at is not None:
        deadline_text = " ".join(words[at + 1 :])
        try:
            deadline = parse_deadline(deadline_text, fmt)
        except ValueError:
            return f"Invalid deadline: {deadline_text!r}. Expected format {fmt}."

    task_id = state.task_store.add(title, priority, deadline)
    return f"Added #{task_id}: {title} (priority {priority}, due {format_deadline(deadline, fmt)})."


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.snapshot()
    if not tasks:
        return "No tasks."
    fmt = _deadline_format(state)
    return "\n".join(format_task_row(t, fmt) for t in tasks)


def cmd_done(state: AppState, args: list[str]) -> str:
    task, err = _resolve_task(state, args)
    if task is None:
        return err or "No such task."
    if state.task_store.complete(task.id):
        return f"Marked #{task.id} done."
    return f"#{task.id} is already done."


def cmd_remove(state: AppState, args: list[str]) -> str:
    task, err = _resolve_task(state, args)
    if task is None:
        return err or "No such task."
    if state.task_store.remove(task.id):
        return f"Removed #{task.id}."
    return f"#{task.id} was already removed."


def cmd_check(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    """Run one reminder evaluation right now (observers print the reminders)."""
    if emit:
        with contextlib.suppress(Exception):
            emit("[REMINDERS] Checking deadlines...")
    events = state.reminders.tick()
    logger.debug("Manual reminder check: %d event(s)", len(events))
    return f"{len(events)} reminder(s)."


def cmd_status(state: AppState, args: list[str]) -> str:
    reminders = state.reminders
    tasks = state.task_store.snapshot()
    pending = sum(1 for t in tasks if not t.completed)
    return (
        "Status:\n"
        f"  Tasks: {len(tasks)} ({pending} pending)\n"
        f"  Reminders: {'RUNNING' if reminders.is_running else 'STOPPED'}"
        f" every {reminders.interval_seconds:g}s, lead time {reminders.lead_time}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <priority> <title> [@ <deadline>].", aliases=["a"]
)
registry.register("list", cmd_list, help_text="List tasks in priority order.", aliases=["ls"])
registry.register("done", cmd_done, help_text="Mark a task done: /done #<id> | <title>.")
registry.register(
    "rm", cmd_remove, help_text="Delete a task: /rm #<id> | <title>.", aliases=["del", "delete"]
)
registry.register("check", cmd_check, help_text="Check deadlines and emit reminders now.")
registry.register("status", cmd_status, help_text="Show task counts and reminder settings.")
