# app/routers/drivers.py
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import ToggleHidden, parse
from ..services.drivers import (
    list_drivers,
    get_driver,
    create_driver,
    update_driver,
    set_hidden,
    remove_driver,
    restore_driver,
    delete_driver,
)

router = APIRouter(prefix="/api/drivers", tags=["drivers"])


@router.get("")
def api_list_drivers(db: Session = Depends(get_db)):
    return [d.to_dict() for d in list_drivers(db)]


@router.post("")
def api_create_driver(payload: dict, db: Session = Depends(get_db)):
    d = create_driver(db, payload)
    return JSONResponse(d.to_dict(), status_code=status.HTTP_201_CREATED)


@router.get("/{driver_id}")
def api_get_driver(driver_id: str, db: Session = Depends(get_db)):
    return get_driver(db, driver_id).to_dict()


@router.patch("/{driver_id}")
def api_update_driver(driver_id: str, payload: dict, db: Session = Depends(get_db)):
    return update_driver(db, driver_id, payload).to_dict()


@router.patch("/{driver_id}/toggle")
def api_toggle_driver(driver_id: str, payload: dict | None = None, db: Session = Depends(get_db)):
    """
    Body {hidden: bool}. Without a body the flag is flipped.
    """
    if payload and "hidden" in payload:
        hidden = parse(ToggleHidden, payload).hidden
    else:
        hidden = not get_driver(db, driver_id).hidden
    return set_hidden(db, driver_id, hidden).to_dict()


# soft delete / undo: the row and its history stay in storage
@router.post("/{driver_id}/remove")
def api_remove_driver(driver_id: str, db: Session = Depends(get_db)):
    return remove_driver(db, driver_id).to_dict()


@router.post("/{driver_id}/restore")
def api_restore_driver(driver_id: str, db: Session = Depends(get_db)):
    return restore_driver(db, driver_id).to_dict()


@router.delete("/{driver_id}")
def api_delete_driver(driver_id: str, db: Session = Depends(get_db)):
    # weekly rows are removed by ON DELETE CASCADE
    delete_driver(db, driver_id)
    return {"ok": True}
