"""Tests for the progress classifier."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from domain import CategoryKind, Frequency, HabitRecord, LogRecord, Rating
from services.progress_service import (
    UNCATEGORIZED,
    ClassifierSettings,
    ProgressClassifier,
    leading_run,
    round_rating,
)

UTC = timezone.utc
G, O, B = Rating.GOOD, Rating.OKAY, Rating.BAD


def habit(frequency=Frequency.DAILY, habit_id=1) -> HabitRecord:
    return HabitRecord(id=habit_id, name=f"Habit {habit_id}", frequency=frequency)


def logs_for(ratings, step_days=1, newest=datetime(2025, 3, 31, tzinfo=UTC), habit_id=1) -> list[LogRecord]:
    """`ratings` newest first; returned oldest first so the classifier has to sort."""
    logs = [
        LogRecord(id=i + 1, habit_id=habit_id, period_start=newest - timedelta(days=i * step_days), rating=r)
        for i, r in enumerate(ratings)
    ]
    return list(reversed(logs))


def log_at(day: datetime, rating: Rating, log_id=1) -> LogRecord:
    return LogRecord(id=log_id, habit_id=1, period_start=day, rating=rating)


@pytest.fixture()
def classifier() -> ProgressClassifier:
    return ProgressClassifier()


# ---- helpers ----


@pytest.mark.parametrize(
    "mean, expected",
    [(0, 0), (0.49, 0), (0.5, 1), (1.49, 1), (1.5, 2), (2, 2), (2.4, 2), (-0.3, 0)],
)
def test_round_rating_ties_up(mean, expected):
    assert round_rating(mean) == expected


def test_leading_run_stops_at_first_mismatch():
    assert leading_run([G, G, O, G], G) == 2
    assert leading_run([O, G], G) == 0
    assert leading_run([], G) == 0


# ---- streaks ----


def test_hot_streak_counts_from_newest(classifier):
    category = classifier.classify(habit(), logs_for([G, G, G, O, B]))
    assert category.kind == CategoryKind.HOT_STREAK
    assert category.count == 3
    assert category.label == "3 good days in a row"


def test_two_good_is_not_a_streak(classifier):
    assert classifier.classify(habit(), logs_for([G, G])) is None


def test_needs_attention(classifier):
    category = classifier.classify(habit(Frequency.WEEKLY), logs_for([B, B, B, B, G], step_days=7))
    assert category.kind == CategoryKind.NEEDS_ATTENTION
    assert category.count == 4
    assert category.label == "4 bad weeks in a row"


def test_streak_wins_over_trend(classifier):
    # 3 newest good, 3 before bad: trend would say improving, the streak rule comes first
    category = classifier.classify(habit(), logs_for([G, G, G, B, B, B]))
    assert category.kind == CategoryKind.HOT_STREAK
    assert category.count == 3


# ---- trend ----


def test_trend_six_logs_bad_to_good(classifier):
    category = classifier.trend([G, G, G, B, B, B])
    assert category.kind == CategoryKind.IMPROVING
    assert category.label == "bad → good"
    assert (category.from_rating, category.to_rating) == (B, G)


def test_improving(classifier):
    category = classifier.classify(habit(), logs_for([G, G, O, B, B, O]))
    assert category.kind == CategoryKind.IMPROVING
    assert category.label == "bad → good"


def test_declining(classifier):
    category = classifier.classify(habit(), logs_for([B, B, O, G, G, O]))
    assert category.kind == CategoryKind.DECLINING
    assert category.label == "good → bad"


def test_improving_at_exact_threshold_with_tie_rounding(classifier):
    # recent (good, okay) = 1.5 -> good; previous (okay, okay) = 1.0 -> okay; delta 0.5
    category = classifier.classify(habit(), logs_for([G, O, O, O]))
    assert category.kind == CategoryKind.IMPROVING
    assert category.label == "okay → good"


def test_delta_without_category_change_is_ignored(classifier):
    # recent 1.0 -> okay, previous 0.5 -> okay
    assert classifier.classify(habit(), logs_for([O, O, B, O])) is None


def test_trend_needs_four_logs(classifier):
    assert classifier.trend([G, B, B]) is None


def test_windows_capped_at_five(classifier):
    recent = [G, O, G, O, G]  # 1.6 -> good
    previous = [B, O, B, O, B]  # 0.4 -> bad
    older = [G, G, G, G]  # outside both windows
    category = classifier.classify(habit(), logs_for(recent + previous + older))
    assert category.kind == CategoryKind.IMPROVING
    assert category.label == "bad → good"


def test_odd_history_previous_window_takes_remainder(classifier):
    # n=5: recent = 2 newest (0.5 -> okay), previous = the other 3 (2.0 -> good)
    category = classifier.trend([B, O, G, G, G])
    assert category.kind == CategoryKind.DECLINING
    assert category.label == "good → okay"


# ---- back on track ----


def test_back_on_track_daily(classifier):
    logs = [log_at(datetime(2025, 3, 1, tzinfo=UTC), B, 1), log_at(datetime(2025, 3, 21, tzinfo=UTC), G, 2)]
    category = classifier.classify(habit(), logs)
    assert category.kind == CategoryKind.BACK_ON_TRACK
    assert category.gap_days == 20
    assert category.label == "Back after 20 days"


def test_gap_equal_to_threshold_is_not_enough(classifier):
    logs = [log_at(datetime(2025, 3, 1, tzinfo=UTC), B, 1), log_at(datetime(2025, 3, 15, tzinfo=UTC), G, 2)]
    assert classifier.classify(habit(), logs) is None


def test_back_on_track_needs_good_latest(classifier):
    logs = [log_at(datetime(2025, 3, 1, tzinfo=UTC), G, 1), log_at(datetime(2025, 3, 25, tzinfo=UTC), O, 2)]
    assert classifier.classify(habit(), logs) is None


def test_back_on_track_weekly_threshold(classifier):
    first = log_at(datetime(2025, 3, 3, tzinfo=UTC), O, 1)
    assert classifier.classify(habit(Frequency.WEEKLY), [first, log_at(datetime(2025, 3, 24, tzinfo=UTC), G, 2)]) is None
    category = classifier.classify(habit(Frequency.WEEKLY), [first, log_at(datetime(2025, 3, 31, tzinfo=UTC), G, 2)])
    assert category.gap_days == 28


def test_back_on_track_monthly_threshold(classifier):
    jan, mar, apr = (datetime(2025, m, 1, tzinfo=UTC) for m in (1, 3, 4))
    assert classifier.classify(habit(Frequency.MONTHLY), [log_at(jan, B, 1), log_at(mar, G, 2)]) is None  # 59 days
    category = classifier.classify(habit(Frequency.MONTHLY), [log_at(jan, B, 1), log_at(apr, G, 2)])
    assert category.gap_days == 90


def test_thresholds_are_configurable():
    settings = ClassifierSettings(
        back_on_track_days={Frequency.DAILY: 30, Frequency.WEEKLY: 21, Frequency.MONTHLY: 60},
    )
    logs = [log_at(datetime(2025, 3, 1, tzinfo=UTC), B, 1), log_at(datetime(2025, 3, 21, tzinfo=UTC), G, 2)]
    assert ProgressClassifier(settings).classify(habit(), logs) is None


def test_trend_delta_configurable():
    settings = ClassifierSettings(trend_delta=1.0)
    assert ProgressClassifier(settings).classify(habit(), logs_for([G, O, O, O])) is None


# ---- robustness ----


def test_empty_history(classifier):
    assert classifier.classify(habit(), []) is None
    assert classifier.classify(habit(), None) is None


def test_order_of_input_does_not_matter(classifier):
    logs = logs_for([G, G, O, B, B, O])
    shuffled = logs[:]
    random.Random(7).shuffle(shuffled)
    assert classifier.classify(habit(), shuffled) == classifier.classify(habit(), logs)


def test_unreadable_logs_are_skipped(classifier):
    logs = logs_for([G, G, G])
    logs.append(SimpleNamespace(id=99, period_start=datetime(2025, 4, 30, tzinfo=UTC), rating="great"))
    logs.append(SimpleNamespace(id=100, period_start="garbage", rating="bad"))
    assert classifier.classify(habit(), logs).kind == CategoryKind.HOT_STREAK


def test_unknown_frequency_yields_none(classifier):
    odd = SimpleNamespace(id=1, frequency="yearly")
    assert classifier.classify(odd, logs_for([G, G, G])) is None


# ---- partition ----


def test_partition_buckets_every_logged_habit(classifier):
    habits = [habit(habit_id=i) for i in range(1, 5)]
    logs_by_habit = {
        1: logs_for([G, G, G], habit_id=1),
        2: logs_for([B, B, B], habit_id=2),
        3: logs_for([O], habit_id=3),
        4: [],
    }
    buckets = classifier.partition(habits, logs_by_habit)

    assert [item["habit"].id for item in buckets["hot_streak"]] == [1]
    assert [item["habit"].id for item in buckets["needs_attention"]] == [2]
    assert [item["habit"].id for item in buckets[UNCATEGORIZED]] == [3]
    assert buckets["improving"] == buckets["declining"] == buckets["back_on_track"] == []
    assert sum(len(v) for v in buckets.values()) == 3
