# app/routers/weekly.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import AppError
from ..services.weekly import (
    list_weekly_entries,
    upsert_weekly_entry,
    update_weekly_entry,
    delete_weekly_entry,
    delete_weekly_entries,
    coerce_ids,
)

router = APIRouter(prefix="/api/weekly", tags=["weekly"])


@router.get("")
def api_list_weekly(
    driver_id: Optional[str] = Query(None, alias="driverId"),
    week_start: Optional[str] = Query(None, alias="weekStart"),
    week_end: Optional[str] = Query(None, alias="weekEnd"),
    db: Session = Depends(get_db),
):
    rows = list_weekly_entries(db, driver_id=driver_id, week_start=week_start, week_end=week_end)
    return [e.to_dict() for e in rows]


@router.post("")
def api_upsert_weekly(payload: dict, db: Session = Depends(get_db)):
    """201 when the (driver, week) row was created, 200 when it was replaced."""
    entry, created = upsert_weekly_entry(db, payload)
    return JSONResponse(
        entry.to_dict(),
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


@router.patch("/{entry_id}")
def api_update_weekly(entry_id: int, payload: dict, db: Session = Depends(get_db)):
    return update_weekly_entry(db, entry_id, payload).to_dict()


@router.delete("/{entry_id}")
def api_delete_weekly(entry_id: int, db: Session = Depends(get_db)):
    return delete_weekly_entry(db, entry_id)


@router.delete("")
def api_delete_weekly_many(
    id: Optional[str] = Query(None),
    ids: list[str] = Query(default=[]),
    payload: Optional[dict] = Body(default=None),
    db: Session = Depends(get_db),
):
    """
    ?id=1            -> single delete
    ?ids=1,2,3       -> bulk (also repeated ?ids=1&ids=2)
    {"ids": [1, 2]}  -> bulk from JSON body
    """
    if id:
        return delete_weekly_entry(db, coerce_ids([id])[0])

    wanted: list = []
    for chunk in ids:
        wanted.extend(s for s in chunk.split(",") if s.strip())
    if not wanted and payload and isinstance(payload.get("ids"), list):
        wanted = payload["ids"]

    id_list = coerce_ids(wanted)
    if not id_list:
        raise AppError("Provide an id (?id=...) or ids (?ids=a,b,c or JSON {ids:[]}).")
    if len(id_list) == 1:
        return delete_weekly_entry(db, id_list[0])
    return delete_weekly_entries(db, id_list)
