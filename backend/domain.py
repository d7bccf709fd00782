"""
domain.py — Typed contracts shared by the habit and schedule services.
Enums are wire-stable: values are serialized lowercase and Rating's
declaration order is its ordinal (bad=0, okay=1, good=2).
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import NamedTuple, Optional

# Aware datetime in UTC, start of a period. Identity for lookups.
CanonicalInstant = datetime
# Calendar date as the user sees it. Input and display only.
LocalCalendarDate = date


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Rating(str, Enum):
    BAD = "bad"
    OKAY = "okay"
    GOOD = "good"

    @property
    def ordinal(self) -> int:
        return list(Rating).index(self)

    @classmethod
    def from_ordinal(cls, value: int) -> "Rating":
        return list(cls)[value]


class CategoryKind(str, Enum):
    HOT_STREAK = "hot_streak"
    NEEDS_ATTENTION = "needs_attention"
    IMPROVING = "improving"
    DECLINING = "declining"
    BACK_ON_TRACK = "back_on_track"


class PeriodRange(NamedTuple):
    start: CanonicalInstant
    end: CanonicalInstant  # midnight of the last day in the period, inclusive


@dataclass(frozen=True)
class HabitRecord:
    id: int
    name: str
    frequency: Frequency
    start_date: Optional[LocalCalendarDate] = None
    description: Optional[str] = None
    rating_good: str = ""
    rating_okay: str = ""
    rating_bad: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class LogRecord:
    id: int
    habit_id: int
    period_start: CanonicalInstant
    rating: Rating
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Category:
    kind: CategoryKind
    label: str
    count: Optional[int] = None
    from_rating: Optional[Rating] = None
    to_rating: Optional[Rating] = None
    gap_days: Optional[int] = None


# ---- schedule ----


@dataclass(frozen=True)
class EventRecord:
    id: int
    day: LocalCalendarDate
    title: str
    description: Optional[str] = None
    start_time: Optional[str] = None  # HH:MM, 24h
    end_time: Optional[str] = None
    is_completed: bool = False
    favorite_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class FavoriteEventRecord:
    id: int
    title: str
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class BacklogItemRecord:
    id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
