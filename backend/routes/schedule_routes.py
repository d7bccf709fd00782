from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_db
from services.backlog_service import BacklogService
from services.schedule_service import ScheduleService

router = APIRouter(prefix="/api/v1", tags=["Schedule"])


class BacklogItemCreate(BaseModel):
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    is_completed: Optional[bool] = None


class BacklogItemUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    is_completed: Optional[bool] = None
    completed_at: Optional[str] = None


def serialize_view(view: dict) -> dict:
    return {
        **view,
        "events": [asdict(e) for e in view["events"]],
        "backlog": [asdict(item) for item in view["backlog"]],
    }


# --- Backlog ---

@router.get("/backlog")
def list_backlog(db: Session = Depends(get_db)):
    return [asdict(item) for item in BacklogService.get_all(db)]


@router.post("/backlog", status_code=201)
def create_backlog_item(item_data: BacklogItemCreate, db: Session = Depends(get_db)):
    return asdict(BacklogService.create(db, item_data.model_dump(exclude_unset=True)))


@router.patch("/backlog/{item_id}")
def update_backlog_item(item_id: int, item_data: BacklogItemUpdate, db: Session = Depends(get_db)):
    return asdict(BacklogService.update(db, item_id, item_data.model_dump(exclude_unset=True)))


@router.delete("/backlog/{item_id}")
def delete_backlog_item(item_id: int, db: Session = Depends(get_db)):
    BacklogService.delete(db, item_id)
    return {"id": item_id}


# --- Day views ---

@router.get("/schedule/today")
def schedule_today(db: Session = Depends(get_db)):
    return serialize_view(ScheduleService.today(db))


@router.get("/schedule/next-day")
def schedule_next_day(db: Session = Depends(get_db)):
    return serialize_view(ScheduleService.next_day(db))
