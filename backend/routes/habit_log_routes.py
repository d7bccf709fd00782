from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_db
from domain import LogRecord, Rating
from services.habit_log_service import HabitLogService
from services.log_store import LogStore
from services.period_service import format_instant

router = APIRouter(prefix="/api/v1/habits", tags=["Habit Logs"])


class HabitLogCreate(BaseModel):
    period_start: str  # any ISO-8601 timestamp or date inside the period
    rating: Rating
    comment: Optional[str] = None


class HabitLogUpdate(BaseModel):
    period_start: Optional[str] = None
    rating: Optional[Rating] = None
    comment: Optional[str] = None


class BulkLogEntry(BaseModel):
    habit_id: int
    rating: Rating
    comment: Optional[str] = None
    period_start: Optional[str] = None


class BulkLogRequest(BaseModel):
    entries: list[BulkLogEntry]
    reference: Optional[str] = None  # shared period_start for entries without one


def serialize_log(log: LogRecord) -> dict:
    data = asdict(log)
    data["period_start"] = format_instant(log.period_start)
    return data


def log_service(db: Session = Depends(get_db)) -> HabitLogService:
    return HabitLogService(LogStore(db))


@router.post("/logs/bulk", status_code=201)
def bulk_log(payload: BulkLogRequest, service: HabitLogService = Depends(log_service)):
    logs = service.bulk_upsert(
        [entry.model_dump() for entry in payload.entries],
        reference=payload.reference,
    )
    return [serialize_log(log) for log in logs]


@router.get("/{habit_id}/logs")
def list_logs(habit_id: int, service: HabitLogService = Depends(log_service)):
    return [serialize_log(log) for log in service.list_logs(habit_id)]


@router.post("/{habit_id}/logs", status_code=201)
def upsert_log(habit_id: int, payload: HabitLogCreate, service: HabitLogService = Depends(log_service)):
    log = service.upsert(habit_id, payload.period_start, payload.rating, payload.comment)
    return serialize_log(log)


@router.patch("/{habit_id}/logs/{log_id}")
def update_log(habit_id: int, log_id: int, payload: HabitLogUpdate, service: HabitLogService = Depends(log_service)):
    log = service.update(habit_id, log_id, payload.model_dump(exclude_unset=True))
    return serialize_log(log)


@router.delete("/{habit_id}/logs/{log_id}")
def delete_log(habit_id: int, log_id: int, service: HabitLogService = Depends(log_service)):
    service.delete(habit_id, log_id)
    return {"id": log_id}
