from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_db
from domain import Frequency, HabitRecord
from services.habit_service import HabitService
from services.log_store import LogStore
from services.progress_service import ProgressClassifier

router = APIRouter(prefix="/api/v1/habits", tags=["Habits"])


class RatingDescriptions(BaseModel):
    good: Optional[str] = None
    okay: Optional[str] = None
    bad: Optional[str] = None


class HabitCreate(BaseModel):
    name: str
    description: Optional[str] = None
    frequency: Frequency
    start_date: Optional[date] = None
    rating_descriptions: Optional[RatingDescriptions] = None


class HabitUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[Frequency] = None
    start_date: Optional[date] = None
    rating_descriptions: Optional[RatingDescriptions] = None


def serialize_habit(h: HabitRecord) -> dict:
    data = asdict(h)
    data["rating_descriptions"] = {
        "good": data.pop("rating_good"),
        "okay": data.pop("rating_okay"),
        "bad": data.pop("rating_bad"),
    }
    return data


@router.get("")
def list_habits(db: Session = Depends(get_db)):
    return [
        {
            **serialize_habit(item["habit"]),
            "logged_this_period": item["logged_this_period"],
            "active_this_period": item["active_this_period"],
        }
        for item in HabitService.get_all(db)
    ]


@router.post("", status_code=201)
def create_habit(habit_data: HabitCreate, db: Session = Depends(get_db)):
    habit = HabitService.create(db, habit_data.model_dump(exclude_unset=True))
    return serialize_habit(habit)


@router.get("/{habit_id}")
def get_habit(habit_id: int, db: Session = Depends(get_db)):
    return serialize_habit(HabitService.get(db, habit_id))


@router.patch("/{habit_id}")
def update_habit(habit_id: int, habit_data: HabitUpdate, db: Session = Depends(get_db)):
    habit = HabitService.update(db, habit_id, habit_data.model_dump(exclude_unset=True))
    return serialize_habit(habit)


@router.delete("/{habit_id}")
def delete_habit(habit_id: int, db: Session = Depends(get_db)):
    HabitService.delete(db, habit_id)
    return {"id": habit_id}


@router.get("/{habit_id}/progress")
def habit_progress(habit_id: int, db: Session = Depends(get_db)):
    habit = HabitService.get(db, habit_id)
    logs = LogStore(db).list_logs(habit_id)
    category = ProgressClassifier().classify(habit, logs)
    return {"habit_id": habit_id, "category": asdict(category) if category else None}
