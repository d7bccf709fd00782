"""
period_service.py — Period boundaries and period keys
Maps any timestamp onto the canonical UTC start of its daily / weekly / monthly
bucket. Weeks start on Monday. Re-applying the mapping to its own output is a
no-op, so "now" and a stored period_start can go through the same function.
Compare periods with period_key(), never with local date fields.
"""

import calendar
from datetime import date, datetime, timedelta, timezone

from domain import CanonicalInstant, Frequency, LocalCalendarDate, PeriodRange
from errors import ValidationError

FREQUENCY_LABELS = {
    Frequency.DAILY: "day",
    Frequency.WEEKLY: "week",
    Frequency.MONTHLY: "month",
}


def coerce_frequency(value) -> Frequency:
    try:
        return Frequency(value)
    except ValueError:
        raise ValidationError(f"Unsupported frequency: {value!r}") from None


def parse_iso(value: str) -> date | datetime:
    """ISO-8601 date or datetime; a trailing Z means UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {value!r}") from None


def to_utc(value) -> datetime:
    """
    Anchor an input to an aware UTC datetime.
    - aware datetime -> converted to UTC
    - naive datetime -> taken as UTC (how period starts come back from storage)
    - date           -> its calendar day, at UTC midnight
    - ISO-8601 str   -> parsed, then as above
    """
    original = value
    if isinstance(value, str):
        value = parse_iso(value)

    try:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
    except OverflowError:
        raise ValidationError(f"Timestamp out of range: {original!r}") from None
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    raise ValidationError(f"Invalid timestamp: {original!r}")


def period_start_utc(value, frequency) -> CanonicalInstant:
    frequency = coerce_frequency(frequency)
    d = to_utc(value)

    if frequency == Frequency.WEEKLY:
        # weekday() counts days since Monday
        monday = d.date() - timedelta(days=d.weekday())
        return datetime(monday.year, monday.month, monday.day, tzinfo=timezone.utc)
    if frequency == Frequency.MONTHLY:
        return datetime(d.year, d.month, 1, tzinfo=timezone.utc)
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)


def period_range(value, frequency) -> PeriodRange:
    """Start and inclusive end (midnight of the period's last day)."""
    frequency = coerce_frequency(frequency)
    start = period_start_utc(value, frequency)

    if frequency == Frequency.WEEKLY:
        try:
            return PeriodRange(start, start + timedelta(days=6))
        except OverflowError:
            raise ValidationError(f"Week of {value!r} ends past the supported date range") from None
    if frequency == Frequency.MONTHLY:
        last_day = calendar.monthrange(start.year, start.month)[1]
        return PeriodRange(start, start.replace(day=last_day))
    return PeriodRange(start, start)


def format_instant(value: datetime) -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2025-03-10T00:00:00.000Z"""
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def period_key(value, frequency) -> str:
    return format_instant(period_start_utc(value, frequency))


def period_start_local(value, frequency) -> LocalCalendarDate:
    """Calendar date of the period start, for display. Never use for identity."""
    return period_start_utc(value, frequency).date()


def normalize_day(value) -> LocalCalendarDate:
    """
    Calendar day of a value as the user wrote it. Unlike to_utc() an offset is
    not applied first: 2025-03-15T23:30-05:00 is March 15, not March 16.
    """
    original = value
    if isinstance(value, str):
        value = parse_iso(value)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Invalid day: {original!r}")


def day_range(value) -> tuple[LocalCalendarDate, LocalCalendarDate]:
    """[day, next day) for querying rows stored by calendar day."""
    day = normalize_day(value)
    try:
        return day, day + timedelta(days=1)
    except OverflowError:
        raise ValidationError(f"Day out of range: {value!r}") from None


def current_period_start(frequency, reference=None) -> CanonicalInstant:
    # The user's "today" is a local calendar date, not the current UTC instant.
    return period_start_utc(reference if reference is not None else date.today(), frequency)


def is_date_within_period(value, frequency, reference=None) -> bool:
    reference = reference if reference is not None else date.today()
    start, end = period_range(reference, frequency)
    return start <= period_start_utc(value, frequency) <= end


def is_log_for_period(log_period_start, frequency, reference=None) -> bool:
    reference = reference if reference is not None else date.today()
    return period_key(log_period_start, frequency) == period_key(reference, frequency)


def has_log_for_period(logs, frequency, reference=None) -> bool:
    if not logs:
        return False
    reference = reference if reference is not None else date.today()
    current = period_key(reference, frequency)
    return any(period_key(log.period_start, frequency) == current for log in logs)


def is_habit_active_this_period(habit, reference=None) -> bool:
    """A habit is active once its start_date falls on or before the period's last day."""
    if not habit.start_date:
        return True
    reference = reference if reference is not None else date.today()
    end = period_range(reference, habit.frequency).end
    return habit.start_date <= end.date()


def _month_day(d: datetime) -> str:
    return f"{d:%b} {d.day}"


def format_period_label(value, frequency) -> str:
    frequency = coerce_frequency(frequency)
    start, end = period_range(value, frequency)

    if frequency == Frequency.WEEKLY:
        same_month = start.month == end.month
        same_year = start.year == end.year
        if same_month:
            end_label = str(end.day)
        elif same_year:
            end_label = _month_day(end)
        else:
            end_label = f"{_month_day(end)}, {end.year}"
        suffix = f", {end.year}" if same_year else ""
        return f"Week of {_month_day(start)} – {end_label}{suffix}"
    if frequency == Frequency.MONTHLY:
        return f"{start:%B} {start.year}"
    return f"{_month_day(start)}, {start.year}"


def format_period_axis_label(value, frequency) -> str:
    frequency = coerce_frequency(frequency)
    start = period_start_utc(value, frequency)
    if frequency == Frequency.MONTHLY:
        return f"{start:%b} {start.year}"
    return _month_day(start)
