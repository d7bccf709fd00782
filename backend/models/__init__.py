# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.habit import Habit
from models.habit_log import HabitLog
from models.event import Event
from models.favorite_event import FavoriteEvent
from models.backlog_item import BacklogItem

__all__ = [
    "Habit",
    "HabitLog",
    "Event",
    "FavoriteEvent",
    "BacklogItem",
]
