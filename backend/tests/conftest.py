"""Shared fixtures: an in-memory SQLite database per test."""

from __future__ import annotations

import pytest

from database import Database
from services.habit_log_service import HabitLogService
from services.habit_service import HabitService
from services.log_store import LogStore


@pytest.fixture()
def database():
    db = Database("sqlite://").init()
    yield db
    db.dispose()


@pytest.fixture()
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture()
def store(session) -> LogStore:
    return LogStore(session)


@pytest.fixture()
def service(store) -> HabitLogService:
    return HabitLogService(store)


@pytest.fixture()
def make_habit(session):
    def _make(**fields):
        data = {"name": "Read", "frequency": "daily", **fields}
        return HabitService.create(session, data)

    return _make
