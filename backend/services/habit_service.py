"""
habit_service.py — Habit definitions (CRUD)
Creates, edits and deletes habits; deleting a habit removes its logs.
A habit's frequency is fixed once it has logs.
get_all() reports, per habit, whether the current period is already logged.
"""

import logging
from datetime import date, datetime

from sqlalchemy.orm import Session

from config import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH
from domain import HabitRecord, LogRecord
from errors import NotFound, ValidationError
from models.habit import Habit
from models.habit_log import HabitLog
from services.log_store import habit_to_record, log_to_record, storage_guard
from services.period_service import coerce_frequency, has_log_for_period, is_habit_active_this_period

logger = logging.getLogger(__name__)

RATING_KEYS = ("good", "okay", "bad")


def clean_text(value, field: str, max_length: int) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{field} must be {max_length} characters or fewer")
    return value or None


def _clean_start_date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid start date: {value!r}") from None


def _clean(data: dict, partial: bool) -> dict:
    """Validate habit fields; returns column values."""
    out = {}
    if "name" in data or not partial:
        name = clean_text(data.get("name"), "Name", NAME_MAX_LENGTH)
        if not name:
            raise ValidationError("Name is required")
        out["name"] = name
    if "description" in data:
        out["description"] = clean_text(data["description"], "Description", DESCRIPTION_MAX_LENGTH)
    if "frequency" in data or not partial:
        out["frequency"] = coerce_frequency(data.get("frequency")).value
    if "start_date" in data:
        out["start_date"] = _clean_start_date(data["start_date"])

    descriptions = data.get("rating_descriptions")
    if descriptions is not None:
        if not isinstance(descriptions, dict):
            raise ValidationError("rating_descriptions must be an object")
        for key in RATING_KEYS:
            if key in descriptions or not partial:
                text = clean_text(descriptions.get(key), f"{key} description", DESCRIPTION_MAX_LENGTH)
                out[f"rating_{key}"] = text or ""
    return out


class HabitService:
    @staticmethod
    def create(db: Session, data: dict) -> HabitRecord:
        fields = _clean(data, partial=False)
        with storage_guard(db, "create_habit"):
            h = Habit(**fields)
            db.add(h)
            db.commit()
            db.refresh(h)
        logger.info(f"Created habit {h.id} ({h.frequency})")
        return habit_to_record(h)

    @staticmethod
    def get(db: Session, habit_id: int) -> HabitRecord:
        with storage_guard(db, "get_habit"):
            h = db.query(Habit).filter_by(id=habit_id).first()
        if not h:
            raise NotFound("Habit not found")
        return habit_to_record(h)

    @staticmethod
    def get_all(db: Session, reference=None) -> list[dict]:
        """All habits, newest first, with this period's status."""
        habits, logs_by_habit = HabitService.get_all_with_logs(db)
        result = []
        for h in habits:
            result.append({
                "habit": h,
                "logged_this_period": has_log_for_period(logs_by_habit[h.id], h.frequency, reference),
                "active_this_period": is_habit_active_this_period(h, reference),
            })
        return result

    @staticmethod
    def get_all_with_logs(db: Session) -> tuple[list[HabitRecord], dict[int, list[LogRecord]]]:
        with storage_guard(db, "list_habits"):
            habits = db.query(Habit).order_by(Habit.created_at.desc(), Habit.id.desc()).all()
            logs = db.query(HabitLog).order_by(HabitLog.period_start.asc()).all()
        logs_by_habit = {h.id: [] for h in habits}
        for log in logs:
            logs_by_habit.setdefault(log.habit_id, []).append(log_to_record(log))
        return [habit_to_record(h) for h in habits], logs_by_habit

    @staticmethod
    def update(db: Session, habit_id: int, data: dict) -> HabitRecord:
        fields = _clean(data, partial=True)
        with storage_guard(db, "update_habit"):
            h = db.query(Habit).filter_by(id=habit_id).first()
            if not h:
                raise NotFound("Habit not found")
            # existing logs sit on the old period grid
            if fields.get("frequency", h.frequency) != h.frequency and \
                    db.query(HabitLog.id).filter_by(habit_id=habit_id).first():
                raise ValidationError("Frequency can only change while the habit has no logs")
            for k, v in fields.items():
                setattr(h, k, v)
            db.commit()
            db.refresh(h)
        return habit_to_record(h)

    @staticmethod
    def delete(db: Session, habit_id: int) -> None:
        with storage_guard(db, "delete_habit"):
            h = db.query(Habit).filter_by(id=habit_id).first()
            if not h:
                raise NotFound("Habit not found")
            db.delete(h)
            db.commit()
        logger.info(f"Deleted habit {habit_id} and its logs")
