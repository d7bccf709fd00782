"""Tests for the backlog and the today / next-day views."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from errors import NotFound, ValidationError
from services.backlog_service import BacklogService
from services.event_service import EventService
from services.schedule_service import ScheduleService

UTC = timezone.utc


# ---- backlog ----


def test_create_backlog_item(session):
    item = BacklogService.create(session, {"title": " Taxes ", "category": "  ", "description": "file by April"})
    assert item.title == "Taxes"
    assert item.category is None
    assert item.is_completed is False
    assert item.completed_at is None


@pytest.mark.parametrize("data", [{"title": ""}, {"title": "Taxes", "category": "c" * 61}])
def test_create_backlog_rejects_invalid(session, data):
    with pytest.raises(ValidationError):
        BacklogService.create(session, data)


def test_completing_stamps_and_reopening_clears(session):
    item = BacklogService.create(session, {"title": "Taxes"})
    done = BacklogService.update(session, item.id, {"is_completed": True})
    assert done.is_completed is True
    assert done.completed_at is not None

    again = BacklogService.update(session, item.id, {"is_completed": True})
    assert again.completed_at == done.completed_at

    reopened = BacklogService.update(session, item.id, {"is_completed": False})
    assert reopened.completed_at is None


def test_explicit_completed_at_wins(session):
    item = BacklogService.create(session, {"title": "Taxes"})
    done = BacklogService.update(session, item.id, {"is_completed": True, "completed_at": "2025-03-01T10:00:00Z"})
    assert done.completed_at == datetime(2025, 3, 1, 10, tzinfo=UTC)


def test_backlog_open_items_first(session):
    a = BacklogService.create(session, {"title": "A"})
    b = BacklogService.create(session, {"title": "B"})
    BacklogService.update(session, b.id, {"is_completed": True})
    c = BacklogService.create(session, {"title": "C"})

    assert [i.id for i in BacklogService.get_all(session)] == [c.id, a.id, b.id]
    assert [i.id for i in BacklogService.get_all(session, open_only=True)] == [c.id, a.id]


def test_backlog_update_and_delete_unknown(session):
    with pytest.raises(NotFound):
        BacklogService.update(session, 3, {"title": "x"})
    with pytest.raises(NotFound):
        BacklogService.delete(session, 3)


# ---- day views ----


def test_today_and_next_day(session):
    EventService.create(session, {"day": "2025-03-15", "title": "Late", "start_time": "18:00"})
    EventService.create(session, {"day": "2025-03-15", "title": "Early", "start_time": "08:00"})
    EventService.create(session, {"day": "2025-03-16", "title": "Brunch", "start_time": "11:00"})
    open_item = BacklogService.create(session, {"title": "Taxes"})
    BacklogService.create(session, {"title": "Done already", "is_completed": True})

    today = ScheduleService.today(session, today=date(2025, 3, 15))
    assert today["day"] == date(2025, 3, 15)
    assert [e.title for e in today["events"]] == ["Early", "Late"]
    assert [i.id for i in today["backlog"]] == [open_item.id]
    assert today["now"].tzinfo is not None

    tomorrow = ScheduleService.next_day(session, today=date(2025, 3, 15))
    assert tomorrow["day"] == date(2025, 3, 16)
    assert [e.title for e in tomorrow["events"]] == ["Brunch"]
    assert "now" not in tomorrow


def test_next_day_crosses_month(session):
    assert ScheduleService.next_day(session, today=date(2025, 2, 28))["day"] == date(2025, 3, 1)
