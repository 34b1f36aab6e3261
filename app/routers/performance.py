# app/routers/performance.py
import re

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..services.performance import export_driver_csv, load_driver_views, summarize
from ..templating import templates
from ..utils.dates import current_week

router = APIRouter(tags=["performance"])


@router.get("/performance", response_class=HTMLResponse, include_in_schema=False)
def performance_page(request: Request, db: Session = Depends(get_db)):
    week = current_week(request.app.state.settings.TIMEZONE)
    summary = summarize(load_driver_views(db), week)
    return templates.TemplateResponse(request, "performance.html", {"summary": summary})


@router.get("/api/performance")
def api_performance(request: Request, db: Session = Depends(get_db)):
    week = current_week(request.app.state.settings.TIMEZONE)
    s = summarize(load_driver_views(db), week)
    return {
        "ok": True,
        "week": {"start": s.week.start.isoformat(), "end": s.week.end.isoformat(), "label": s.week_label},
        "totalWeekly": float(s.total_weekly),
        "activeDrivers": s.active_count,
        "avgWeekly": s.avg_weekly,
        "topEarner": {"name": s.top_earner_name, "amount": float(s.top_earner_amount)},
        "drivers": [
            {
                "id": c.driver.id,
                "name": c.driver.name,
                "displayWeek": {
                    "label": c.display_week.label,
                    "start": c.display_week.start.isoformat(),
                    "end": c.display_week.end.isoformat(),
                    "earnings": float(c.display_week.earnings),
                },
                "totalEarnings": float(c.total_earnings),
                "totalTrips": c.total_trips,
                "bestWeek": float(c.best_week),
            }
            for c in s.cards
        ],
    }


@router.get("/performance/{driver_id}/export.csv")
def performance_export_csv(driver_id: str, db: Session = Depends(get_db)):
    driver, body = export_driver_csv(db, driver_id)
    slug = re.sub(r"[^a-z0-9]+", "-", driver.name.lower()).strip("-") or driver.id
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{slug}-weekly.csv"'},
    )
