# app/routers/pages.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..services.drivers import list_drivers, list_active_drivers
from ..services.weekly import list_manage_rows
from ..templating import templates
from ..utils.dates import current_week

router = APIRouter(tags=["pages"])


@router.get("/", include_in_schema=False)
def index():
    return RedirectResponse("/performance", status_code=307)


# ---------- drivers: register + list ----------
@router.get("/drivers", response_class=HTMLResponse, include_in_schema=False)
def drivers_page(request: Request, db: Session = Depends(get_db)):
    drivers = [d.to_dict() for d in list_drivers(db)]
    return templates.TemplateResponse(request, "drivers.html", {"drivers": drivers})


# ---------- weekly: add ----------
@router.get("/weekly/add", response_class=HTMLResponse, include_in_schema=False)
def weekly_add_page(request: Request, db: Session = Depends(get_db)):
    settings = request.app.state.settings
    drivers = [{"id": d.id, "name": d.name} for d in list_active_drivers(db)]
    week = current_week(settings.TIMEZONE)
    return templates.TemplateResponse(
        request,
        "weekly_add.html",
        {"drivers": drivers, "default_week_start": week.start.isoformat(), "week": week},
    )


# ---------- weekly: manage ----------
@router.get("/weekly/manage", response_class=HTMLResponse, include_in_schema=False)
def weekly_manage_page(request: Request, db: Session = Depends(get_db)):
    rows = list_manage_rows(db)
    return templates.TemplateResponse(request, "weekly_manage.html", {"rows": rows})
