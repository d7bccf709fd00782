"""
overview_service.py — Dashboard summary across all habits
Rating statistics, a per-period timeline for the chart, and the progress
category buckets. Periods are grouped by their canonical key.
"""

from datetime import date, timedelta

from sqlalchemy.orm import Session

from domain import HabitRecord, LogRecord, Rating
from errors import ValidationError
from services.habit_service import HabitService
from services.period_service import format_period_axis_label, period_key, period_start_utc, to_utc
from services.progress_service import ClassifierSettings, ProgressClassifier

PRESET_DAYS = {"7d": 7, "30d": 30, "90d": 90}
ALL_TIME_PERIODS = 20


def summarize(habits: list[HabitRecord], logs_by_habit: dict[int, list[LogRecord]]) -> dict:
    total_logs = 0
    total_rating = 0
    habits_with_logs = 0
    distribution = {r.value: 0 for r in reversed(Rating)}

    for h in habits:
        logs = logs_by_habit.get(h.id) or []
        if not logs:
            continue
        habits_with_logs += 1
        total_logs += len(logs)
        for log in logs:
            total_rating += log.rating.ordinal
            distribution[log.rating.value] += 1

    average = total_rating / total_logs if total_logs else None
    average_key = None
    if average is not None:
        # half-up, the way the ratings are read on screen
        average_key = Rating.from_ordinal(min(2, int(average + 0.5))).value
    return {
        "total_habits": len(habits),
        "total_logs": total_logs,
        "habits_with_logs": habits_with_logs,
        "average_rating": round(average, 2) if average is not None else None,
        "average_rating_key": average_key,
        "rating_distribution": distribution,
    }


def resolve_range(preset: str = "7d", date_from=None, date_to=None, today: date | None = None):
    """(from, to) canonical instants, or None for all time."""
    today = today or date.today()
    if preset == "all":
        return None
    if preset == "custom":
        if date_from is None or date_to is None:
            raise ValidationError("Custom range needs both 'from' and 'to'")
        start, end = to_utc(date_from), to_utc(date_to)
        if start > end:
            raise ValidationError("'from' must not be after 'to'")
        return start, end
    if preset not in PRESET_DAYS:
        raise ValidationError(f"Unknown range preset: {preset!r}")
    return to_utc(today - timedelta(days=PRESET_DAYS[preset])), to_utc(today)


def build_timeline(habits: list[HabitRecord], logs_by_habit: dict[int, list[LogRecord]], date_range=None) -> list[dict]:
    """One row per period key, oldest first, with each habit's ordinal rating."""
    periods = {}
    for h in habits:
        for log in logs_by_habit.get(h.id) or []:
            start = period_start_utc(log.period_start, h.frequency)
            key = period_key(start, h.frequency)
            entry = periods.setdefault(key, {"period_start": start, "labels": {}, "ratings": {}})
            entry["labels"][h.id] = format_period_axis_label(start, h.frequency)
            entry["ratings"][h.id] = log.rating.ordinal

    rows = sorted(periods.items(), key=lambda item: item[1]["period_start"])
    if date_range:
        start, end = date_range
        rows = [(k, v) for k, v in rows if start <= v["period_start"] <= end]
    else:
        rows = rows[-ALL_TIME_PERIODS:]

    result = []
    for key, entry in rows:
        labels = list(entry["labels"].values())
        result.append({
            "period": labels[0] if labels else "",
            "period_key": key,
            "ratings": {h.id: entry["ratings"].get(h.id) for h in habits},
        })
    return result


class OverviewService:
    @staticmethod
    def get_stats(db: Session) -> dict:
        habits, logs_by_habit = HabitService.get_all_with_logs(db)
        return summarize(habits, logs_by_habit)

    @staticmethod
    def get_chart_data(db: Session, preset: str = "7d", date_from=None, date_to=None) -> list[dict]:
        date_range = resolve_range(preset, date_from, date_to)
        habits, logs_by_habit = HabitService.get_all_with_logs(db)
        return build_timeline(habits, logs_by_habit, date_range)

    @staticmethod
    def get_categories(db: Session, settings: ClassifierSettings | None = None) -> dict:
        habits, logs_by_habit = HabitService.get_all_with_logs(db)
        return ProgressClassifier(settings).partition(habits, logs_by_habit)
