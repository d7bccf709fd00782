"""
errors.py — Failure taxonomy of the habit-period engine.
Routes map these to status codes; the core only raises them.
"""


class HabitError(Exception):
    """Base class for every error the core raises."""


class NotFound(HabitError):
    """A habit or log id does not resolve."""


class ValidationError(HabitError):
    """Malformed timestamp, unknown enum value, inactive habit, field too long."""


class ConflictRetried(HabitError):
    """Duplicate (habit_id, period_start) on write. Internal: upserts turn it into an update."""


class StorageUnavailable(HabitError):
    """The database could not be reached. Propagated as-is, never retried."""
