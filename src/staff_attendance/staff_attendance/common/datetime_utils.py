from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Protocol

import pytz

from ..core.constants import DEFAULT_TIMEZONE


class Clock(Protocol):
    def now(self) -> datetime:
        """Current instant as a timezone-aware UTC datetime."""
        raise NotImplementedError

    def today(self) -> date:
        """Current calendar day in the organization's time zone."""
        raise NotImplementedError


class SystemClock:
    """Wall clock; the work date is taken in ``tz_name`` (Kenya time by default)."""

    def __init__(self, tz_name: str = DEFAULT_TIMEZONE):
        self._tz = pytz.timezone(tz_name)

    def now(self) -> datetime:
        return datetime.now(pytz.utc)

    def today(self) -> date:
        return local_date(self.now(), self._tz.zone)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def local_date(value: datetime, tz_name: str = DEFAULT_TIMEZONE) -> date:
    return as_utc(value).astimezone(pytz.timezone(tz_name)).date()


def format_local_time(value: datetime | None, tz_name: str = DEFAULT_TIMEZONE) -> str:
    if value is None:
        return "-"
    return as_utc(value).astimezone(pytz.timezone(tz_name)).strftime("%H:%M")


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded to the nearest minute."""
    return int(round((end - start).total_seconds() / 60))


def format_minutes(minutes: int) -> str:
    minutes = max(int(minutes), 0)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def iter_dates(start: date, end: date):
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)
