"""
Server-rendered pages, health check and error bodies.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

import app.routers.weekly as weekly_routes
from app.errors import MIGRATION_HINT
from app.utils.dates import current_week


def test_root_redirects_to_dashboard(client):
    r = client.get("/", follow_redirects=False)
    assert r.status_code == 307
    assert r.headers["location"] == "/performance"


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_static_assets(client):
    assert client.get("/static/app.js").status_code == 200
    assert client.get("/static/app.css").status_code == 200


def test_unknown_route_json_error(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert "error" in r.json()


def test_drivers_page_lists_everyone(client, make_driver):
    make_driver(name="Visible Driver")
    hidden = make_driver(name="Hidden Driver")
    client.patch(f"/api/drivers/{hidden['id']}/toggle", json={"hidden": True})

    r = client.get("/drivers")
    assert r.status_code == 200
    assert "text/html" in r.headers["content-type"]
    assert "Visible Driver" in r.text
    assert "Hidden Driver" in r.text


def test_weekly_add_page_offers_active_drivers_only(client, make_driver):
    make_driver(name="Visible Driver")
    hidden = make_driver(name="Hidden Driver")
    removed = make_driver(name="Removed Driver")
    client.patch(f"/api/drivers/{hidden['id']}/toggle", json={"hidden": True})
    client.post(f"/api/drivers/{removed['id']}/remove")

    r = client.get("/weekly/add")
    assert r.status_code == 200
    assert "Visible Driver" in r.text
    assert "Hidden Driver" not in r.text
    assert "Removed Driver" not in r.text
    assert current_week("Asia/Kolkata").start.isoformat() in r.text


def test_weekly_manage_page(client, make_driver, make_entry):
    d = make_driver(name="Aarav Kumar")
    make_entry(d["id"], "2025-10-27", earnings=1850, trips=64)

    r = client.get("/weekly/manage")
    assert r.status_code == 200
    assert "Aarav Kumar" in r.text
    assert "1,850" in r.text


def test_performance_page(client, make_driver, make_entry):
    week = current_week("Asia/Kolkata")
    d = make_driver(name="Aarav Kumar", licenseNumber="DL-AAA-0001")
    make_entry(d["id"], week.start, earnings=123456, trips=64)

    r = client.get("/performance")
    assert r.status_code == 200
    assert "Total Weekly Earnings" in r.text
    assert "Aarav Kumar" in r.text
    assert "1,23,456" in r.text
    assert f"/performance/{d['id']}/export.csv" in r.text


def test_performance_page_empty(client):
    r = client.get("/performance")
    assert r.status_code == 200
    assert "No active drivers" in r.text


# ---------- error bodies ----------

@pytest.mark.parametrize(
    "ddl,details",
    [
        ("ALTER TABLE weekly_entries RENAME COLUMN trips TO trip_count", "no such column"),
        ("DROP TABLE weekly_entries", "no such table"),
    ],
)
def test_outdated_schema_asks_for_migration(client, ddl, details):
    with client.app.state.db.engine.begin() as conn:
        conn.execute(text(ddl))

    r = client.get("/api/weekly")
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == MIGRATION_HINT
    assert body["needsMigration"] is True
    assert details in body["details"]


def test_other_operational_error_is_plain_500(client, monkeypatch):
    def locked(*args, **kwargs):
        raise OperationalError("SELECT 1", None, Exception("database is locked"))

    monkeypatch.setattr(weekly_routes, "list_weekly_entries", locked)
    r = client.get("/api/weekly")
    assert r.status_code == 500
    body = r.json()
    assert "needsMigration" not in body
    assert "database is locked" in body["error"]


def test_unexpected_error_body(app, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(weekly_routes, "list_weekly_entries", boom)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/api/weekly")
    assert r.status_code == 500
    assert r.json() == {"error": "boom"}
