# app/utils/dates.py
"""
Week math. Weeks run Monday..Sunday and are stored as plain calendar dates,
so the same input always yields the same bounds regardless of server zone.
The wall clock is read in one place only: current_week().
"""
from __future__ import annotations

import datetime as dt
import re
from typing import NamedTuple
from zoneinfo import ZoneInfo

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class WeekBounds(NamedTuple):
    start: dt.date   # Monday
    end: dt.date     # Sunday, start + 6 days

    @property
    def key(self) -> str:
        return self.start.isoformat()


def parse_iso_date(value: str) -> dt.date:
    """Strict yyyy-mm-dd -> date. Raises ValueError otherwise."""
    s = (value or "").strip()
    if not _ISO_DATE.match(s):
        raise ValueError("Use YYYY-MM-DD")
    return dt.date.fromisoformat(s)


def to_local_date(value, tz: str | None = None) -> dt.date:
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None and tz:
            value = value.astimezone(ZoneInfo(tz))
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        return parse_iso_date(value)
    raise TypeError(f"unsupported date value: {value!r}")


def week_bounds(value, tz: str | None = None) -> WeekBounds:
    d = to_local_date(value, tz)
    # weekday(): Monday=0 .. Sunday=6, so Sunday goes back six days
    start = d - dt.timedelta(days=d.weekday())
    return WeekBounds(start, start + dt.timedelta(days=6))


def today_in(tz: str) -> dt.date:
    return dt.datetime.now(ZoneInfo(tz)).date()


def current_week(tz: str, today: dt.date | None = None) -> WeekBounds:
    return week_bounds(today or today_in(tz))


def format_week_range(start: dt.date, end: dt.date | None = None) -> str:
    # "3 Nov – 9 Nov", year appended when the week crosses a year boundary
    if end is None:
        start, end = week_bounds(start)
    out = f"{start.day} {start:%b} – {end.day} {end:%b}"
    if start.year != end.year:
        out += f", {end.year}"
    return out
