"""
progress_service.py — Progress categories for the dashboard
Reads a habit's whole log history (newest first) and assigns at most one
category. Rules run in a fixed order and the first match wins:
  1. hot streak       — newest logs all "good", run >= 3
  2. needs attention  — newest logs all "bad", run >= 3
  3. improving / declining — mean rating of the recent window vs the one before
  4. back on track    — a "good" log after a long gap
Read-only analytics: an empty or partly malformed history yields None, never raises.
"""

import logging
import math
from dataclasses import dataclass, field
from fractions import Fraction

import config
from domain import Category, CategoryKind, Frequency, Rating
from errors import ValidationError
from services.period_service import FREQUENCY_LABELS, coerce_frequency, to_utc

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"


def _default_gaps() -> dict:
    return {
        Frequency.DAILY: config.BACK_ON_TRACK_DAILY_DAYS,
        Frequency.WEEKLY: config.BACK_ON_TRACK_WEEKLY_DAYS,
        Frequency.MONTHLY: config.BACK_ON_TRACK_MONTHLY_DAYS,
    }


@dataclass(frozen=True)
class ClassifierSettings:
    streak_min: int = 3
    trend_min_logs: int = 4
    trend_window: int = 5
    trend_delta: float = config.TREND_DELTA_THRESHOLD
    back_on_track_days: dict = field(default_factory=_default_gaps)


def round_rating(mean) -> int:
    """Nearest ordinal in 0..2, ties round up."""
    return max(0, min(2, math.floor(mean + Fraction(1, 2))))


def leading_run(ratings: list[Rating], rating: Rating) -> int:
    count = 0
    for r in ratings:
        if r != rating:
            break
        count += 1
    return count


def _mean(ratings: list[Rating]) -> Fraction:
    return Fraction(sum(r.ordinal for r in ratings), len(ratings))


class ProgressClassifier:
    def __init__(self, settings: ClassifierSettings | None = None):
        self.settings = settings or ClassifierSettings()

    # ------------------------------------------------------------------
    @staticmethod
    def sort_logs(logs) -> list[tuple]:
        """(period_start, Rating) pairs, newest first. Entries that can't be read are skipped."""
        entries = []
        for log in logs or []:
            try:
                entries.append((to_utc(log.period_start), Rating(log.rating)))
            except (ValidationError, ValueError, AttributeError):
                logger.warning(f"Skipping unreadable log {getattr(log, 'id', None)!r}")
        entries.sort(key=lambda e: e[0], reverse=True)
        return entries

    def classify(self, habit, logs) -> Category | None:
        try:
            frequency = coerce_frequency(habit.frequency)
        except ValidationError:
            return None
        entries = self.sort_logs(logs)
        if not entries:
            return None
        ratings = [r for _, r in entries]

        return (
            self.hot_streak(ratings, frequency)
            or self.needs_attention(ratings, frequency)
            or self.trend(ratings)
            or self.back_on_track(entries, frequency)
        )

    # ------------------------------------------------------------------
    def hot_streak(self, ratings: list[Rating], frequency: Frequency) -> Category | None:
        count = leading_run(ratings, Rating.GOOD)
        if count < self.settings.streak_min:
            return None
        return Category(
            kind=CategoryKind.HOT_STREAK,
            label=f"{count} good {FREQUENCY_LABELS[frequency]}s in a row",
            count=count,
        )

    def needs_attention(self, ratings: list[Rating], frequency: Frequency) -> Category | None:
        count = leading_run(ratings, Rating.BAD)
        if count < self.settings.streak_min:
            return None
        return Category(
            kind=CategoryKind.NEEDS_ATTENTION,
            label=f"{count} bad {FREQUENCY_LABELS[frequency]}s in a row",
            count=count,
        )

    def trend(self, ratings: list[Rating]) -> Category | None:
        """Compare the recent window against the window right before it. `ratings` newest first."""
        n = len(ratings)
        if n < self.settings.trend_min_logs:
            return None

        recent_size = min(self.settings.trend_window, n // 2)
        previous_size = min(self.settings.trend_window, n - recent_size)
        recent = ratings[:recent_size]
        previous = ratings[recent_size:recent_size + previous_size]

        delta = _mean(recent) - _mean(previous)
        threshold = Fraction(str(self.settings.trend_delta))
        before = Rating.from_ordinal(round_rating(_mean(previous)))
        after = Rating.from_ordinal(round_rating(_mean(recent)))
        if before == after:
            return None

        if delta >= threshold:
            kind = CategoryKind.IMPROVING
        elif delta <= -threshold:
            kind = CategoryKind.DECLINING
        else:
            return None
        return Category(
            kind=kind,
            label=f"{before.value} → {after.value}",
            from_rating=before,
            to_rating=after,
        )

    def back_on_track(self, entries: list[tuple], frequency: Frequency) -> Category | None:
        if len(entries) < 2:
            return None
        (latest, rating), (previous, _) = entries[0], entries[1]
        gap = (latest - previous).days
        if gap <= self.settings.back_on_track_days[frequency] or rating != Rating.GOOD:
            return None
        return Category(
            kind=CategoryKind.BACK_ON_TRACK,
            label=f"Back after {gap} days",
            gap_days=gap,
        )

    # ------------------------------------------------------------------
    def partition(self, habits, logs_by_habit: dict) -> dict[str, list[dict]]:
        """Bucket every habit that has logs. Habits without logs are left out."""
        buckets = {kind.value: [] for kind in CategoryKind}
        buckets[UNCATEGORIZED] = []
        for habit in habits:
            logs = logs_by_habit.get(habit.id) or []
            if not logs:
                continue
            category = self.classify(habit, logs)
            key = category.kind.value if category else UNCATEGORIZED
            buckets[key].append({"habit": habit, "category": category})
        return buckets
