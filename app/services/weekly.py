# app/services/weekly.py
from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import Conflict, InvalidReference, NotFound, ValidationFailed
from ..models.driver import Driver
from ..models.weekly import WeeklyEntry
from ..schemas import WeeklyEntryCreate, WeeklyEntryUpdate, parse
from ..utils.dates import parse_iso_date, week_bounds
from .drivers import find_active_driver

logger = logging.getLogger(__name__)

_UPSERT_COLUMNS = ("week_end", "earnings", "trips", "notes")


def _dialect_insert(db: Session):
    name = db.get_bind().dialect.name
    if name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None


def _entry_for_week(db: Session, driver_id: str, week_start) -> WeeklyEntry | None:
    return db.execute(
        select(WeeklyEntry)
        .where(WeeklyEntry.driver_id == driver_id, WeeklyEntry.week_start == week_start)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def get_entry(db: Session, entry_id: int) -> WeeklyEntry:
    e = db.get(WeeklyEntry, entry_id)
    if not e:
        raise NotFound("Weekly entry not found")
    return e


def upsert_weekly_entry(db: Session, payload: dict) -> tuple[WeeklyEntry, bool]:
    """
    Create or replace the entry for (driver, week). The week is normalized to
    its Monday, week_end is derived. Returns (entry, created).
    """
    data = parse(WeeklyEntryCreate, payload)

    driver = find_active_driver(db, data.driver_id)
    if not driver:
        logger.warning("weekly entry rejected: driver %s hidden, removed or missing", data.driver_id)
        raise InvalidReference("Driver is hidden, removed, or does not exist.")

    bounds = week_bounds(data.week_start)
    values = {
        "driver_id": driver.id,
        "week_start": bounds.start,
        "week_end": bounds.end,
        "earnings": data.earnings,
        "trips": data.trips,
        "notes": data.notes,
    }

    existed = db.execute(
        select(WeeklyEntry.id).where(
            WeeklyEntry.driver_id == driver.id, WeeklyEntry.week_start == bounds.start
        )
    ).scalar_one_or_none() is not None

    insert = _dialect_insert(db)
    if insert is not None:
        stmt = insert(WeeklyEntry).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["driver_id", "week_start"],
            set_={
                **{col: stmt.excluded[col] for col in _UPSERT_COLUMNS},
                "updated_at": func.now(),
            },
        )
        db.execute(stmt)
    else:
        e = _entry_for_week(db, driver.id, bounds.start)
        if e is None:
            db.add(WeeklyEntry(**values))
        else:
            for col in _UPSERT_COLUMNS:
                setattr(e, col, values[col])
    db.commit()

    entry = _entry_for_week(db, driver.id, bounds.start)
    logger.info(
        "weekly entry %s driver=%s week=%s earnings=%s trips=%s",
        "replaced" if existed else "created", driver.id, bounds.key, data.earnings, data.trips,
    )
    return entry, not existed


def update_weekly_entry(db: Session, entry_id: int, payload: dict) -> WeeklyEntry:
    data = parse(WeeklyEntryUpdate, payload)
    e = get_entry(db, entry_id)
    fields = data.model_fields_set

    if "week_start" in fields and data.week_start is not None:
        bounds = week_bounds(data.week_start)
        e.week_start, e.week_end = bounds.start, bounds.end
    if "earnings" in fields and data.earnings is not None:
        e.earnings = data.earnings
    if "trips" in fields and data.trips is not None:
        e.trips = data.trips
    if "notes" in fields:
        e.notes = data.notes

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("This driver already has an entry for that week")
    db.refresh(e)
    logger.info("weekly entry %s updated fields=%s", e.id, sorted(fields))
    return e


def delete_weekly_entry(db: Session, entry_id: int) -> dict:
    e = get_entry(db, entry_id)
    db.delete(e)
    db.commit()
    logger.info("weekly entry %s deleted", entry_id)
    return {"count": 1, "id": entry_id}


def coerce_ids(ids: Iterable) -> list[int]:
    out: list[int] = []
    for raw in ids:
        s = str(raw).strip()
        if not s:
            continue
        try:
            out.append(int(s))
        except ValueError:
            raise ValidationFailed.single("ids", f"Invalid id: {s}")
    return out


def delete_weekly_entries(db: Session, ids: Iterable) -> dict:
    id_list = coerce_ids(ids)
    if not id_list:
        return {"count": 0}
    res = db.execute(
        delete(WeeklyEntry)
        .where(WeeklyEntry.id.in_(id_list))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    logger.info("weekly entries bulk delete requested=%d removed=%d", len(id_list), res.rowcount)
    return {"count": res.rowcount}


def _filter_date(value: str | None, field: str):
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationFailed.single(field, "Use YYYY-MM-DD")


def list_weekly_entries(
    db: Session,
    driver_id: str | None = None,
    week_start: str | None = None,
    week_end: str | None = None,
) -> list[WeeklyEntry]:
    q = select(WeeklyEntry)
    if driver_id:
        q = q.where(WeeklyEntry.driver_id == driver_id)
    start = _filter_date(week_start, "weekStart")
    if start:
        q = q.where(WeeklyEntry.week_start == week_bounds(start).start)
    end = _filter_date(week_end, "weekEnd")
    if end:
        q = q.where(WeeklyEntry.week_end == week_bounds(end).end)
    q = q.order_by(WeeklyEntry.week_start.desc(), WeeklyEntry.id.desc())
    return db.execute(q).scalars().all()


# manage page: entries of visible drivers, newest week first
def list_manage_rows(db: Session) -> list[dict]:
    rows = db.execute(
        select(WeeklyEntry, Driver.name)
        .join(Driver, Driver.id == WeeklyEntry.driver_id)
        .where(Driver.hidden.is_(False), Driver.removed_at.is_(None))
        .order_by(WeeklyEntry.week_start.desc(), WeeklyEntry.id.desc())
    ).all()
    out = []
    for e, driver_name in rows:
        item = e.to_dict()
        item["driverName"] = driver_name
        out.append(item)
    return out
