"""
Task subsystem.

Components:
- task_models.py: data structures (Task, ReminderEvent)
- task_ordering.py: comparison used to order snapshots
- task_store.py: thread-safe in-memory store (add/remove/complete/snapshot/find)
- reminder_scheduler.py: polling scheduler that emits deadline reminders
"""
