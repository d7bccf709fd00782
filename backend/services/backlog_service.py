"""
backlog_service.py — Undated to-do items shown beside the day plan
Completing an item stamps completed_at; reopening it clears the stamp.
"""

import logging

from sqlalchemy.orm import Session

from config import CATEGORY_MAX_LENGTH, DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from database import utcnow
from domain import BacklogItemRecord
from errors import NotFound, ValidationError
from models.backlog_item import BacklogItem
from services.habit_service import clean_text
from services.log_store import storage_guard
from services.period_service import to_utc

logger = logging.getLogger(__name__)


def backlog_to_record(item: BacklogItem) -> BacklogItemRecord:
    return BacklogItemRecord(
        id=item.id,
        title=item.title,
        description=item.description,
        category=item.category,
        is_completed=bool(item.is_completed),
        completed_at=item.completed_at,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _clean(data: dict, partial: bool) -> dict:
    out = {}
    if "title" in data or not partial:
        title = clean_text(data.get("title"), "Title", TITLE_MAX_LENGTH)
        if not title:
            raise ValidationError("Title is required")
        out["title"] = title
    if "description" in data:
        out["description"] = clean_text(data["description"], "Description", DESCRIPTION_MAX_LENGTH)
    if "category" in data:
        out["category"] = clean_text(data["category"], "Category", CATEGORY_MAX_LENGTH)
    if data.get("is_completed") is not None:
        out["is_completed"] = bool(data["is_completed"])
    if "completed_at" in data:
        value = data["completed_at"]
        out["completed_at"] = to_utc(value) if value is not None else None
    return out


class BacklogService:
    @staticmethod
    def create(db: Session, data: dict) -> BacklogItemRecord:
        fields = _clean({k: v for k, v in data.items() if k != "completed_at"}, partial=False)
        if fields.get("is_completed"):
            fields["completed_at"] = utcnow()
        with storage_guard(db, "create_backlog_item"):
            item = BacklogItem(**fields)
            db.add(item)
            db.commit()
            db.refresh(item)
        return backlog_to_record(item)

    @staticmethod
    def get_all(db: Session, open_only: bool = False) -> list[BacklogItemRecord]:
        """Open items first, newest first within each group."""
        query = db.query(BacklogItem)
        if open_only:
            query = query.filter(BacklogItem.is_completed.is_(False))
        with storage_guard(db, "list_backlog"):
            items = query.order_by(
                BacklogItem.is_completed.asc(),
                BacklogItem.created_at.desc(),
                BacklogItem.id.desc(),
            ).all()
        return [backlog_to_record(item) for item in items]

    @staticmethod
    def update(db: Session, item_id: int, data: dict) -> BacklogItemRecord:
        fields = _clean(data, partial=True)
        # an explicit completed_at wins over the derived one
        if "is_completed" in fields and "completed_at" not in fields:
            fields["completed_at"] = utcnow() if fields["is_completed"] else None
        with storage_guard(db, "update_backlog_item"):
            item = db.query(BacklogItem).filter_by(id=item_id).first()
            if not item:
                raise NotFound("Backlog item not found")
            if fields.get("is_completed") and item.is_completed and "completed_at" not in data:
                # already done; keep the original stamp
                fields.pop("completed_at", None)
            for k, v in fields.items():
                setattr(item, k, v)
            db.commit()
            db.refresh(item)
        return backlog_to_record(item)

    @staticmethod
    def delete(db: Session, item_id: int) -> None:
        with storage_guard(db, "delete_backlog_item"):
            item = db.query(BacklogItem).filter_by(id=item_id).first()
            if not item:
                raise NotFound("Backlog item not found")
            db.delete(item)
            db.commit()
        logger.info(f"Deleted backlog item {item_id}")
