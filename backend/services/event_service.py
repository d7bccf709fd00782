"""
event_service.py — Day-planner events and favorite templates
Events belong to a calendar day and may carry an HH:MM start/end. Favorites are
reusable templates; schedule_favorite() copies one onto a day and remembers
where it came from. Deleting a favorite keeps the events made from it.
"""

import logging
import re

from sqlalchemy.orm import Session

from config import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from domain import EventRecord, FavoriteEventRecord
from errors import NotFound, ValidationError
from models.event import Event
from models.favorite_event import FavoriteEvent
from services.habit_service import clean_text
from services.log_store import storage_guard
from services.period_service import day_range, normalize_day

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def event_to_record(e: Event) -> EventRecord:
    return EventRecord(
        id=e.id,
        day=e.day,
        title=e.title,
        description=e.description,
        start_time=e.start_time,
        end_time=e.end_time,
        is_completed=bool(e.is_completed),
        favorite_id=e.favorite_id,
        created_at=e.created_at,
        updated_at=e.updated_at,
    )


def favorite_to_record(f: FavoriteEvent) -> FavoriteEventRecord:
    return FavoriteEventRecord(
        id=f.id,
        title=f.title,
        description=f.description,
        start_time=f.start_time,
        end_time=f.end_time,
        created_at=f.created_at,
        updated_at=f.updated_at,
    )


def clean_time(value, field: str) -> str | None:
    """HH:MM (24h); empty means no time."""
    if value is None or value == "":
        return None
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValidationError(f"{field} must use HH:MM (24h) format")
    return value


def check_time_order(start_time: str | None, end_time: str | None) -> None:
    # zero-padded HH:MM compares correctly as text
    if start_time and end_time and start_time > end_time:
        raise ValidationError("Start time must be before end time")


def _clean_template(data: dict, partial: bool) -> dict:
    """Fields shared by events and favorites."""
    out = {}
    if "title" in data or not partial:
        title = clean_text(data.get("title"), "Title", TITLE_MAX_LENGTH)
        if not title:
            raise ValidationError("Title is required")
        out["title"] = title
    if "description" in data:
        out["description"] = clean_text(data["description"], "Description", DESCRIPTION_MAX_LENGTH)
    if "start_time" in data:
        out["start_time"] = clean_time(data["start_time"], "Start time")
    if "end_time" in data:
        out["end_time"] = clean_time(data["end_time"], "End time")
    return out


def _clean_event(data: dict, partial: bool) -> dict:
    out = _clean_template(data, partial)
    if "day" in data or not partial:
        if data.get("day") is None:
            raise ValidationError("Day is required")
        out["day"] = normalize_day(data["day"])
    if data.get("is_completed") is not None:
        out["is_completed"] = bool(data["is_completed"])
    if "favorite_id" in data:
        out["favorite_id"] = data["favorite_id"]
    return out


def _require_favorite(db: Session, favorite_id: int) -> FavoriteEvent:
    f = db.query(FavoriteEvent).filter_by(id=favorite_id).first()
    if not f:
        raise NotFound("Favorite not found")
    return f


class EventService:
    @staticmethod
    def create(db: Session, data: dict) -> EventRecord:
        fields = _clean_event(data, partial=False)
        check_time_order(fields.get("start_time"), fields.get("end_time"))
        with storage_guard(db, "create_event"):
            if fields.get("favorite_id") is not None:
                _require_favorite(db, fields["favorite_id"])
            e = Event(**fields)
            db.add(e)
            db.commit()
            db.refresh(e)
        logger.info(f"Created event {e.id} on {e.day.isoformat()}")
        return event_to_record(e)

    @staticmethod
    def get(db: Session, event_id: int) -> EventRecord:
        with storage_guard(db, "get_event"):
            e = db.query(Event).filter_by(id=event_id).first()
        if not e:
            raise NotFound("Event not found")
        return event_to_record(e)

    @staticmethod
    def get_all(db: Session, day=None, date_from=None, date_to=None) -> list[EventRecord]:
        """
        Events ordered by day, then start time. `day` selects a single day;
        otherwise `date_from` / `date_to` bound an inclusive range of days.
        """
        query = db.query(Event)
        if day is not None:
            start, end = day_range(day)
            query = query.filter(Event.day >= start, Event.day < end)
        else:
            if date_from is not None:
                query = query.filter(Event.day >= normalize_day(date_from))
            if date_to is not None:
                query = query.filter(Event.day < day_range(date_to)[1])
        with storage_guard(db, "list_events"):
            events = query.order_by(Event.day.asc(), Event.start_time.asc(), Event.id.asc()).all()
        return [event_to_record(e) for e in events]

    @staticmethod
    def update(db: Session, event_id: int, data: dict) -> EventRecord:
        fields = _clean_event(data, partial=True)
        with storage_guard(db, "update_event"):
            e = db.query(Event).filter_by(id=event_id).first()
            if not e:
                raise NotFound("Event not found")
            check_time_order(fields.get("start_time", e.start_time), fields.get("end_time", e.end_time))
            if fields.get("favorite_id") is not None:
                _require_favorite(db, fields["favorite_id"])
            for k, v in fields.items():
                setattr(e, k, v)
            db.commit()
            db.refresh(e)
        return event_to_record(e)

    @staticmethod
    def delete(db: Session, event_id: int) -> None:
        with storage_guard(db, "delete_event"):
            e = db.query(Event).filter_by(id=event_id).first()
            if not e:
                raise NotFound("Event not found")
            db.delete(e)
            db.commit()
        logger.info(f"Deleted event {event_id}")


class FavoriteEventService:
    @staticmethod
    def create(db: Session, data: dict) -> FavoriteEventRecord:
        fields = _clean_template(data, partial=False)
        check_time_order(fields.get("start_time"), fields.get("end_time"))
        with storage_guard(db, "create_favorite"):
            f = FavoriteEvent(**fields)
            db.add(f)
            db.commit()
            db.refresh(f)
        return favorite_to_record(f)

    @staticmethod
    def get_all(db: Session) -> list[FavoriteEventRecord]:
        """Newest first."""
        with storage_guard(db, "list_favorites"):
            favorites = db.query(FavoriteEvent)\
                          .order_by(FavoriteEvent.created_at.desc(), FavoriteEvent.id.desc()).all()
        return [favorite_to_record(f) for f in favorites]

    @staticmethod
    def update(db: Session, favorite_id: int, data: dict) -> FavoriteEventRecord:
        fields = _clean_template(data, partial=True)
        with storage_guard(db, "update_favorite"):
            f = _require_favorite(db, favorite_id)
            check_time_order(fields.get("start_time", f.start_time), fields.get("end_time", f.end_time))
            for k, v in fields.items():
                setattr(f, k, v)
            db.commit()
            db.refresh(f)
        return favorite_to_record(f)

    @staticmethod
    def delete(db: Session, favorite_id: int) -> None:
        with storage_guard(db, "delete_favorite"):
            f = _require_favorite(db, favorite_id)
            db.query(Event).filter_by(favorite_id=favorite_id).update({"favorite_id": None})
            db.delete(f)
            db.commit()
        logger.info(f"Deleted favorite {favorite_id}")

    @staticmethod
    def schedule_favorite(db: Session, favorite_id: int, day) -> EventRecord:
        """Quick-add: a new event on `day` copied from the template."""
        with storage_guard(db, "get_favorite"):
            f = _require_favorite(db, favorite_id)
        return EventService.create(db, {
            "day": day,
            "title": f.title,
            "description": f.description,
            "start_time": f.start_time,
            "end_time": f.end_time,
            "favorite_id": f.id,
        })
