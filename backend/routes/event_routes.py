from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_db
from services.event_service import EventService, FavoriteEventService

router = APIRouter(prefix="/api/v1", tags=["Events"])


class EventCreate(BaseModel):
    day: str  # ISO date; a full timestamp keeps its written calendar day
    title: str
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_completed: Optional[bool] = None
    favorite_id: Optional[int] = None


class EventUpdate(BaseModel):
    day: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_completed: Optional[bool] = None
    favorite_id: Optional[int] = None


class FavoriteCreate(BaseModel):
    title: str
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class FavoriteUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class FavoriteSchedule(BaseModel):
    day: str


# --- Events ---

@router.get("/events")
def list_events(
    day: Optional[str] = None,
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    db: Session = Depends(get_db),
):
    return [asdict(e) for e in EventService.get_all(db, day=day, date_from=date_from, date_to=date_to)]


@router.post("/events", status_code=201)
def create_event(event_data: EventCreate, db: Session = Depends(get_db)):
    return asdict(EventService.create(db, event_data.model_dump(exclude_unset=True)))


@router.get("/events/{event_id}")
def get_event(event_id: int, db: Session = Depends(get_db)):
    return asdict(EventService.get(db, event_id))


@router.patch("/events/{event_id}")
def update_event(event_id: int, event_data: EventUpdate, db: Session = Depends(get_db)):
    return asdict(EventService.update(db, event_id, event_data.model_dump(exclude_unset=True)))


@router.delete("/events/{event_id}")
def delete_event(event_id: int, db: Session = Depends(get_db)):
    EventService.delete(db, event_id)
    return {"id": event_id}


# --- Favorites ---

@router.get("/favorites")
def list_favorites(db: Session = Depends(get_db)):
    return [asdict(f) for f in FavoriteEventService.get_all(db)]


@router.post("/favorites", status_code=201)
def create_favorite(favorite_data: FavoriteCreate, db: Session = Depends(get_db)):
    return asdict(FavoriteEventService.create(db, favorite_data.model_dump(exclude_unset=True)))


@router.patch("/favorites/{favorite_id}")
def update_favorite(favorite_id: int, favorite_data: FavoriteUpdate, db: Session = Depends(get_db)):
    return asdict(FavoriteEventService.update(db, favorite_id, favorite_data.model_dump(exclude_unset=True)))


@router.delete("/favorites/{favorite_id}")
def delete_favorite(favorite_id: int, db: Session = Depends(get_db)):
    FavoriteEventService.delete(db, favorite_id)
    return {"id": favorite_id}


@router.post("/favorites/{favorite_id}/schedule", status_code=201)
def schedule_favorite(favorite_id: int, payload: FavoriteSchedule, db: Session = Depends(get_db)):
    return asdict(FavoriteEventService.schedule_favorite(db, favorite_id, payload.day))
