"""
Pytest configuration and fixtures.

Every test gets a fresh app on an in-memory SQLite database (StaticPool,
foreign keys on), so cascades and the ON CONFLICT upsert run for real.
"""
import datetime as dt

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from app.config import Settings
from app.main import create_app
from app.models.weekly import WeeklyEntry


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        AUTO_CREATE_TABLES=True,
        TIMEZONE="Asia/Kolkata",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # context manager so the lifespan builds app.state.db
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client):
    session = client.app.state.db.session()
    try:
        yield session
    finally:
        session.close()


# ---------- factories ----------

@pytest.fixture
def make_driver(client):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        payload = {
            "name": f"Driver {counter['n']}",
            "phone": f"98765{counter['n']:05d}",
        }
        payload.update(overrides)
        r = client.post("/api/drivers", json=payload)
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def make_entry(client):
    def _make(driver_id, week_start, earnings=1000, trips=10, **extra):
        if isinstance(week_start, dt.date):
            week_start = week_start.isoformat()
        payload = {"driverId": driver_id, "weekStart": week_start, "earnings": earnings, "trips": trips}
        payload.update(extra)
        r = client.post("/api/weekly", json=payload)
        assert r.status_code in (200, 201), r.text
        return r.json()

    return _make


@pytest.fixture
def count_entries(db):
    def _count(driver_id=None):
        q = select(func.count()).select_from(WeeklyEntry)
        if driver_id:
            q = q.where(WeeklyEntry.driver_id == driver_id)
        return db.execute(q).scalar_one()

    return _count
