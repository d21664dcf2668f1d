"""Calendar period helpers (ISO weeks start on Monday).

Boundaries are worked out on naive local wall-clock time and only then made
aware, so each one carries the UTC offset in effect at that instant.
"""

from __future__ import annotations

from datetime import datetime, timedelta

_ONE_SECOND = timedelta(seconds=1)


def as_local(moment: datetime) -> datetime:
    """Return an aware datetime; naive values are read as local wall-clock time."""
    if moment.tzinfo is None:
        return moment.astimezone()
    return moment


def now_local() -> datetime:
    return datetime.now().astimezone()


def wall_clock(moment: datetime) -> datetime:
    """Naive local wall-clock time for ``moment``."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def _localize(wall: datetime) -> datetime:
    return wall.astimezone()


def _day(moment: datetime) -> datetime:
    return wall_clock(moment).replace(hour=0, minute=0, second=0, microsecond=0)


def _week(moment: datetime) -> datetime:
    day = _day(moment)
    return day - timedelta(days=day.weekday())


def _month(moment: datetime) -> datetime:
    return _day(moment).replace(day=1)


def _next_month(first: datetime) -> datetime:
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def _year(moment: datetime) -> datetime:
    return _day(moment).replace(month=1, day=1)


def start_of_day(moment: datetime) -> datetime:
    return _localize(_day(moment))


def end_of_day(moment: datetime) -> datetime:
    return _localize(_day(moment) + timedelta(days=1) - _ONE_SECOND)


def start_of_week(moment: datetime) -> datetime:
    return _localize(_week(moment))


def end_of_week(moment: datetime) -> datetime:
    return _localize(_week(moment) + timedelta(days=7) - _ONE_SECOND)


def start_of_month(moment: datetime) -> datetime:
    return _localize(_month(moment))


def end_of_month(moment: datetime) -> datetime:
    return _localize(_next_month(_month(moment)) - _ONE_SECOND)


def start_of_year(moment: datetime) -> datetime:
    return _localize(_year(moment))


def end_of_year(moment: datetime) -> datetime:
    first = _year(moment)
    return _localize(first.replace(year=first.year + 1) - _ONE_SECOND)


def months_before(moment: datetime, months: int) -> datetime:
    """Shift back by whole calendar months, clamping the day to the target month's length."""
    wall = wall_clock(moment)
    index = wall.year * 12 + (wall.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(wall.day, _days_in_month(year, month))
    return _localize(wall.replace(year=year, month=month, day=day))


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        return 31
    first = datetime(year, month, 1)
    following = datetime(year, month + 1, 1)
    return (following - first).days


def iso_week_label(moment: datetime) -> str:
    iso_year, iso_week, _ = wall_clock(moment).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"
