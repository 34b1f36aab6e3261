# app/services/performance.py
"""
Dashboard numbers for the performance page.

`summarize()` is pure: it takes driver views (already limited to visible
drivers) and the current week, so it can be tested without a database.
"""
from __future__ import annotations

import csv
import datetime as dt
import io
import re
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..models.driver import Driver
from ..models.weekly import WeeklyEntry
from ..utils.dates import WeekBounds, format_week_range
from ..utils.money import round_whole
from .drivers import get_driver

PLACEHOLDER = "—"
NO_TOP_EARNER = PLACEHOLDER
CSV_HEADER = ["Week Start", "Week End", "Earnings (INR)", "Trips"]


@dataclass
class WeeklyRow:
    id: int
    week_start: dt.date
    week_end: dt.date
    earnings: Decimal
    trips: int

    @classmethod
    def from_entry(cls, e: WeeklyEntry) -> "WeeklyRow":
        return cls(
            id=e.id,
            week_start=e.week_start,
            week_end=e.week_end,
            earnings=Decimal(e.earnings or 0),
            trips=int(e.trips or 0),
        )


@dataclass
class DriverView:
    id: str
    name: str
    profile_image_url: str | None = None
    license_number: str | None = None
    weekly: list[WeeklyRow] = field(default_factory=list)

    @property
    def initials(self) -> str:
        return self.name[:2].upper()

    @property
    def masked_license(self) -> str:
        # last three digits only, "DL-AAA-0001" -> "001"
        digits = re.sub(r"\D", "", self.license_number or "")
        return digits[-3:] or PLACEHOLDER


@dataclass
class DisplayWeek:
    label: str
    start: dt.date
    end: dt.date
    earnings: Decimal


@dataclass
class DriverCard:
    driver: DriverView
    display_week: DisplayWeek
    total_earnings: Decimal
    total_trips: int
    best_week: Decimal


@dataclass
class PerformanceSummary:
    week: WeekBounds
    total_weekly: Decimal
    active_count: int
    avg_weekly: int
    top_earner_name: str
    top_earner_amount: Decimal
    cards: list[DriverCard]

    @property
    def week_label(self) -> str:
        return format_week_range(self.week.start, self.week.end)


def _current_row(rows: list[WeeklyRow], week: WeekBounds) -> WeeklyRow | None:
    for r in rows:
        if r.week_start == week.start and r.week_end == week.end:
            return r
    return None


def pick_display_week(rows: list[WeeklyRow], week: WeekBounds) -> DisplayWeek:
    """This week if recorded, else the latest recorded week, else this week at 0."""
    current = _current_row(rows, week)
    if current:
        return DisplayWeek("This Week", week.start, week.end, current.earnings)
    if rows:
        latest = max(rows, key=lambda r: r.week_end)
        return DisplayWeek("Recent Week", latest.week_start, latest.week_end, latest.earnings)
    return DisplayWeek("This Week", week.start, week.end, Decimal(0))


def build_card(d: DriverView, week: WeekBounds) -> DriverCard:
    return DriverCard(
        driver=d,
        display_week=pick_display_week(d.weekly, week),
        total_earnings=sum((r.earnings for r in d.weekly), Decimal(0)),
        total_trips=sum(r.trips for r in d.weekly),
        best_week=max((r.earnings for r in d.weekly), default=Decimal(0)),
    )


def summarize(drivers: list[DriverView], week: WeekBounds) -> PerformanceSummary:
    total = Decimal(0)
    top_amount = Decimal(0)
    top_name: str | None = None

    for d in drivers:
        current = _current_row(d.weekly, week)
        amount = current.earnings if current else Decimal(0)
        total += amount
        # strict ">" keeps the first driver on ties
        if amount > top_amount:
            top_amount = amount
            top_name = d.name

    active = len(drivers)
    avg = round_whole(total / active) if active else 0

    return PerformanceSummary(
        week=week,
        total_weekly=total,
        active_count=active,
        avg_weekly=avg,
        top_earner_name=top_name or NO_TOP_EARNER,
        top_earner_amount=top_amount,
        cards=[build_card(d, week) for d in drivers],
    )


def load_driver_views(db: Session) -> list[DriverView]:
    drivers = db.execute(
        select(Driver)
        .where(Driver.hidden.is_(False), Driver.removed_at.is_(None))
        .options(selectinload(Driver.weekly_entries))
        .order_by(Driver.created_at.desc(), Driver.name.asc())
    ).scalars().all()
    return [
        DriverView(
            id=d.id,
            name=d.name,
            profile_image_url=d.profile_image_url,
            license_number=d.license_number,
            weekly=[WeeklyRow.from_entry(e) for e in d.weekly_entries],
        )
        for d in drivers
    ]


# ---------- CSV ----------

def rows_to_csv(rows: list[WeeklyRow]) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(CSV_HEADER)
    for r in rows:
        w.writerow([r.week_start.isoformat(), r.week_end.isoformat(), round_whole(r.earnings), r.trips])
    return buf.getvalue()


def export_driver_csv(db: Session, driver_id: str) -> tuple[Driver, str]:
    d = get_driver(db, driver_id)
    entries = db.execute(
        select(WeeklyEntry)
        .where(WeeklyEntry.driver_id == d.id)
        .order_by(WeeklyEntry.week_start.desc(), WeeklyEntry.id.desc())
    ).scalars().all()
    return d, rows_to_csv([WeeklyRow.from_entry(e) for e in entries])
