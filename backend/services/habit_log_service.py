"""
habit_log_service.py — Habit logs: one per habit per period
Upsert finds-or-creates the log of the period a timestamp falls in, so logging
twice in the same day/week/month edits the existing entry. Races between
requests are settled by the storage unique constraint: a duplicate on create is
retried once as an update. ConflictRetried never leaves this module.
"""

import logging
from datetime import date

from config import COMMENT_MAX_LENGTH
from domain import HabitRecord, LogRecord, Rating
from errors import ConflictRetried, NotFound, StorageUnavailable, ValidationError
from services.log_store import LogStore
from services.period_service import period_key, period_range, period_start_utc

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"period_start", "rating", "comment"}


def coerce_rating(value) -> Rating:
    try:
        return Rating(value)
    except ValueError:
        raise ValidationError(f"Unsupported rating: {value!r}") from None


def clean_comment(value) -> str | None:
    """Trim; empty becomes None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Comment must be a string")
    value = value.strip()
    if len(value) > COMMENT_MAX_LENGTH:
        raise ValidationError(f"Comment must be {COMMENT_MAX_LENGTH} characters or fewer")
    return value or None


class HabitLogService:
    def __init__(self, store: LogStore):
        self.store = store

    # ------------------------------------------------------------------
    def _require_habit(self, habit_id: int) -> HabitRecord:
        habit = self.store.find_habit(habit_id)
        if not habit:
            raise NotFound("Habit not found")
        return habit

    @staticmethod
    def _require_active(habit: HabitRecord, candidate) -> None:
        if not habit.start_date:
            return
        end = period_range(candidate, habit.frequency).end
        if end.date() < habit.start_date:
            raise ValidationError(
                f"Habit starts on {habit.start_date.isoformat()}; "
                f"nothing to log for the period of {period_key(candidate, habit.frequency)}"
            )

    # ------------------------------------------------------------------
    def upsert(self, habit_id: int, candidate, rating, comment=None) -> LogRecord:
        """Create or edit the log for the period containing `candidate`."""
        habit = self._require_habit(habit_id)
        rating = coerce_rating(rating)
        comment = clean_comment(comment)
        self._require_active(habit, candidate)

        period_start = period_start_utc(candidate, habit.frequency)
        fields = {"period_start": period_start, "rating": rating.value, "comment": comment}

        existing = self.store.find_log(habit.id, period_start)
        if existing:
            return self.store.update_log(existing.id, fields)

        try:
            return self.store.create_log({"habit_id": habit.id, **fields})
        except ConflictRetried:
            logger.info(
                f"Concurrent log for habit {habit.id} at {period_key(period_start, habit.frequency)}; "
                "retrying as update"
            )

        existing = self.store.find_log(habit.id, period_start)
        if existing:
            return self.store.update_log(existing.id, fields)
        # the competing row vanished again before we could read it
        try:
            return self.store.create_log({"habit_id": habit.id, **fields})
        except ConflictRetried as e:
            logger.error(
                f"Log for habit {habit.id} at {period_key(period_start, habit.frequency)} "
                "still conflicting after retry"
            )
            raise StorageUnavailable("Could not settle the log for this period, try again") from e

    def update(self, habit_id: int, log_id: int, fields: dict) -> LogRecord:
        """Partial edit of one log by id. Moving the period re-normalizes it."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        log = self.store.find_log_by_id(habit_id, log_id)
        if not log:
            raise NotFound("Log not found")

        changes = {}
        if fields.get("period_start") is not None:
            habit = self._require_habit(habit_id)
            self._require_active(habit, fields["period_start"])
            changes["period_start"] = period_start_utc(fields["period_start"], habit.frequency)
        if fields.get("rating") is not None:
            changes["rating"] = coerce_rating(fields["rating"]).value
        if "comment" in fields:
            changes["comment"] = clean_comment(fields["comment"])

        if not changes:
            return log
        try:
            return self.store.update_log(log.id, changes)
        except ConflictRetried:
            raise ValidationError("Another log already exists for that period") from None

    def delete(self, habit_id: int, log_id: int) -> None:
        log = self.store.find_log_by_id(habit_id, log_id)
        if not log:
            raise NotFound("Log not found")
        self.store.delete_log(log.id)
        logger.info(f"Deleted log {log.id} of habit {habit_id}")

    def list_logs(self, habit_id: int) -> list[LogRecord]:
        self._require_habit(habit_id)
        return self.store.list_logs(habit_id)

    def bulk_upsert(self, entries: list[dict], reference=None) -> list[LogRecord]:
        """
        Log several habits in one go. Each entry: habit_id, rating, optional
        comment and period_start (defaults to `reference`, then today).
        Every entry is validated before anything is written.
        """
        reference = reference if reference is not None else date.today()
        prepared = []
        for entry in entries:
            habit = self._require_habit(entry.get("habit_id"))
            candidate = entry.get("period_start") or reference
            coerce_rating(entry.get("rating"))
            clean_comment(entry.get("comment"))
            self._require_active(habit, candidate)
            period_start_utc(candidate, habit.frequency)
            prepared.append((habit.id, candidate, entry.get("rating"), entry.get("comment")))

        return [self.upsert(*args) for args in prepared]
