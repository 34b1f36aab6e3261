# app/services/drivers.py
from __future__ import annotations

import datetime as dt
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import Conflict, NotFound
from ..models.driver import Driver
from ..schemas import DriverCreate, DriverUpdate, parse

logger = logging.getLogger(__name__)


def _active_clause():
    return (Driver.hidden.is_(False), Driver.removed_at.is_(None))


def get_driver(db: Session, driver_id: str) -> Driver:
    d = db.get(Driver, driver_id)
    if not d:
        raise NotFound("Driver not found")
    return d


def find_active_driver(db: Session, driver_id: str) -> Driver | None:
    return db.execute(
        select(Driver).where(Driver.id == driver_id, *_active_clause())
    ).scalar_one_or_none()


# all drivers, newest first (registration page / GET /api/drivers)
def list_drivers(db: Session) -> list[Driver]:
    return db.execute(
        select(Driver).order_by(Driver.created_at.desc(), Driver.name.asc())
    ).scalars().all()


# pickers and dashboard: no hidden / removed drivers
def list_active_drivers(db: Session) -> list[Driver]:
    return db.execute(
        select(Driver).where(*_active_clause()).order_by(Driver.name.asc())
    ).scalars().all()


def _commit_or_conflict(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(
            "A driver with this phone already exists",
            issues={"fieldErrors": {"phone": ["Phone already registered"]}, "formErrors": []},
        )


def create_driver(db: Session, payload: dict) -> Driver:
    data = parse(DriverCreate, payload)
    d = Driver(
        name=data.name,
        phone=data.phone,
        license_number=data.license_number,
        join_date=data.join_date,
        profile_image_url=data.profile_image_url,
        hidden=data.hidden,
    )
    db.add(d)
    _commit_or_conflict(db)
    db.refresh(d)
    logger.info("driver created id=%s name=%s", d.id, d.name)
    return d


def update_driver(db: Session, driver_id: str, payload: dict) -> Driver:
    data = parse(DriverUpdate, payload)
    d = get_driver(db, driver_id)
    for field in data.model_fields_set:
        value = getattr(data, field)
        if field == "hidden" and value is None:
            continue
        setattr(d, field, value)
    _commit_or_conflict(db)
    db.refresh(d)
    logger.info("driver updated id=%s fields=%s", d.id, sorted(data.model_fields_set))
    return d


def set_hidden(db: Session, driver_id: str, hidden: bool) -> Driver:
    """Hide / unhide. Weekly history stays untouched."""
    d = get_driver(db, driver_id)
    d.hidden = bool(hidden)
    db.commit()
    db.refresh(d)
    logger.info("driver %s hidden=%s", d.id, d.hidden)
    return d


def remove_driver(db: Session, driver_id: str) -> Driver:
    # soft delete: the row and its entries stay, listings skip it
    d = get_driver(db, driver_id)
    if d.removed_at is None:
        d.removed_at = dt.datetime.now(dt.timezone.utc)
        db.commit()
        db.refresh(d)
        logger.info("driver %s removed", d.id)
    return d


def restore_driver(db: Session, driver_id: str) -> Driver:
    d = get_driver(db, driver_id)
    d.removed_at = None
    db.commit()
    db.refresh(d)
    return d


def delete_driver(db: Session, driver_id: str) -> None:
    """
    Hard delete. Weekly entries go with the driver in the same transaction
    (ON DELETE CASCADE on weekly_entries.driver_id).
    """
    d = get_driver(db, driver_id)
    db.delete(d)
    db.commit()
    logger.info("driver %s deleted with its weekly entries", driver_id)
