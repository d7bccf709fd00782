"""
log_store.py — Persistence boundary for habits and habit logs
Wraps an explicitly passed SQLAlchemy session and hands typed records to the core.
The (habit_id, period_start) unique constraint lives in the database; a violation
surfaces here as ConflictRetried so callers can decide how to resolve it. Any
other constraint failure is a NotFound (dangling reference) or ValidationError.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session

from domain import Frequency, HabitRecord, LogRecord, Rating
from errors import ConflictRetried, NotFound, StorageUnavailable, ValidationError
from models.habit import Habit
from models.habit_log import HabitLog

logger = logging.getLogger(__name__)

PERIOD_CONSTRAINT = "uq_habit_period"
PERIOD_COLUMNS = "habit_logs.habit_id, habit_logs.period_start"


def habit_to_record(h: Habit) -> HabitRecord:
    return HabitRecord(
        id=h.id,
        name=h.name,
        frequency=Frequency(h.frequency),
        start_date=h.start_date,
        description=h.description,
        rating_good=h.rating_good or "",
        rating_okay=h.rating_okay or "",
        rating_bad=h.rating_bad or "",
        created_at=h.created_at,
        updated_at=h.updated_at,
    )


def log_to_record(log: HabitLog) -> LogRecord:
    return LogRecord(
        id=log.id,
        habit_id=log.habit_id,
        period_start=log.period_start,
        rating=Rating(log.rating),
        comment=log.comment,
        created_at=log.created_at,
        updated_at=log.updated_at,
    )


def is_period_conflict(error: IntegrityError) -> bool:
    """Postgres names the violated constraint; SQLite lists its columns."""
    message = str(error.orig)
    return PERIOD_CONSTRAINT in message or PERIOD_COLUMNS in message


@contextmanager
def storage_guard(db: Session, action: str):
    """Roll back and translate driver errors into the core's taxonomy."""
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        if is_period_conflict(e):
            raise ConflictRetried(f"{action}: duplicate period for habit") from e
        if "foreign key" in str(e.orig).lower():
            # the referenced habit/favorite was deleted under us
            raise NotFound(f"{action}: referenced row no longer exists") from e
        logger.warning(f"Constraint violation during {action}: {e.orig}")
        raise ValidationError(f"{action}: rejected by storage constraints") from e
    except (OperationalError, InterfaceError) as e:
        db.rollback()
        logger.error(f"Storage unavailable during {action}: {e}")
        raise StorageUnavailable(f"{action} failed: storage unavailable") from e


class LogStore:
    def __init__(self, db: Session):
        self.db = db

    def guard(self, action: str):
        return storage_guard(self.db, action)

    # ------------------------------------------------------------------
    def find_habit(self, habit_id: int) -> HabitRecord | None:
        with self.guard("find_habit"):
            h = self.db.query(Habit).filter_by(id=habit_id).first()
        return habit_to_record(h) if h else None

    def find_log(self, habit_id: int, period_start) -> LogRecord | None:
        with self.guard("find_log"):
            log = self.db.query(HabitLog).filter_by(habit_id=habit_id, period_start=period_start).first()
        return log_to_record(log) if log else None

    def find_log_by_id(self, habit_id: int, log_id: int) -> LogRecord | None:
        with self.guard("find_log_by_id"):
            log = self.db.query(HabitLog).filter_by(id=log_id, habit_id=habit_id).first()
        return log_to_record(log) if log else None

    def list_logs(self, habit_id: int) -> list[LogRecord]:
        """All logs of a habit, oldest period first."""
        with self.guard("list_logs"):
            logs = self.db.query(HabitLog).filter_by(habit_id=habit_id)\
                          .order_by(HabitLog.period_start.asc()).all()
        return [log_to_record(log) for log in logs]

    # ------------------------------------------------------------------
    def create_log(self, fields: dict) -> LogRecord:
        with self.guard("create_log"):
            log = HabitLog(**fields)
            self.db.add(log)
            self.db.commit()
            self.db.refresh(log)
        return log_to_record(log)

    def update_log(self, log_id: int, fields: dict) -> LogRecord:
        with self.guard("update_log"):
            log = self.db.query(HabitLog).filter_by(id=log_id).first()
            if not log:
                raise NotFound(f"Log {log_id} not found")
            for k, v in fields.items():
                setattr(log, k, v)
            self.db.commit()
            self.db.refresh(log)
        return log_to_record(log)

    def delete_log(self, log_id: int) -> None:
        with self.guard("delete_log"):
            log = self.db.query(HabitLog).filter_by(id=log_id).first()
            if not log:
                raise NotFound(f"Log {log_id} not found")
            self.db.delete(log)
            self.db.commit()
