"""
schedule_service.py — Day views for the planner
A day view is that calendar day's events (by start time) plus every open
backlog item. "Today" is the host's local calendar day.
"""

from datetime import date, timedelta

from sqlalchemy.orm import Session

from database import utcnow
from services.backlog_service import BacklogService
from services.event_service import EventService


class ScheduleService:
    @staticmethod
    def for_day(db: Session, day: date) -> dict:
        return {
            "day": day,
            "events": EventService.get_all(db, day=day),
            "backlog": BacklogService.get_all(db, open_only=True),
        }

    @staticmethod
    def today(db: Session, today: date | None = None) -> dict:
        view = ScheduleService.for_day(db, today or date.today())
        view["now"] = utcnow()
        return view

    @staticmethod
    def next_day(db: Session, today: date | None = None) -> dict:
        return ScheduleService.for_day(db, (today or date.today()) + timedelta(days=1))
