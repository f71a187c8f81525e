"""
Day-bucket helpers.

Every comparison between "today" and an event ignores the time of day:
both sides are truncated to a calendar date in the current timezone.
"""

from datetime import date, datetime, time, timedelta

from django.utils import timezone


def day_bucket(value: datetime | date) -> date:
    """Truncate a datetime to its calendar date (current timezone if aware)."""
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    return value


def start_of_day(value: datetime | date) -> datetime:
    """Aware datetime at midnight of the value's day."""
    return timezone.make_aware(datetime.combine(day_bucket(value), time.min))


def end_of_day(value: datetime | date) -> datetime:
    """Aware datetime at midnight of the following day (exclusive bound)."""
    return start_of_day(day_bucket(value) + timedelta(days=1))


def days_between(earlier: datetime | date, later: datetime | date) -> int:
    """Whole calendar days from `earlier` to `later` (negative if reversed)."""
    return (day_bucket(later) - day_bucket(earlier)).days


def minutes_since_midnight(value: datetime) -> int:
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.hour * 60 + value.minute
