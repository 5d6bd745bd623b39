"""Priority-ordered task store with deadline reminders."""

__version__ = "0.1.0"
