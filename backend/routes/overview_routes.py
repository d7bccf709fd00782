from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from routes.habit_routes import serialize_habit
from services.overview_service import OverviewService

router = APIRouter(prefix="/api/v1/overview", tags=["Overview"])


@router.get("")
def overview_stats(db: Session = Depends(get_db)):
    return OverviewService.get_stats(db)


@router.get("/chart")
def overview_chart(
    preset: str = "7d",
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    db: Session = Depends(get_db),
):
    return OverviewService.get_chart_data(db, preset, date_from, date_to)


@router.get("/categories")
def overview_categories(db: Session = Depends(get_db)):
    buckets = OverviewService.get_categories(db)
    return {
        key: [
            {
                "habit": serialize_habit(item["habit"]),
                "category": asdict(item["category"]) if item["category"] else None,
            }
            for item in items
        ]
        for key, items in buckets.items()
    }
