"""
Dashboard aggregation, display week selection and CSV export.
"""
import csv
import datetime as dt
import io
from decimal import Decimal

from app.services.performance import (
    CSV_HEADER,
    PLACEHOLDER,
    DriverView,
    WeeklyRow,
    build_card,
    pick_display_week,
    rows_to_csv,
    summarize,
)
from app.utils.dates import current_week, week_bounds

WEEK = week_bounds(dt.date(2025, 10, 27))
PREV = week_bounds(dt.date(2025, 10, 20))
OLDER = week_bounds(dt.date(2025, 10, 13))

_ids = iter(range(1, 10_000))


def row(bounds, earnings, trips=10):
    return WeeklyRow(next(_ids), bounds.start, bounds.end, Decimal(str(earnings)), trips)


def view(name, *rows, **kw):
    return DriverView(id=name.lower(), name=name, weekly=list(rows), **kw)


class TestSummarize:
    def test_kpis(self):
        drivers = [
            view("Michael Rodriguez", row(WEEK, 1850, 64), row(PREV, 2500, 70)),
            view("Sarah Johnson", row(WEEK, 2100, 66)),
            view("New Driver"),
        ]
        s = summarize(drivers, WEEK)
        assert s.total_weekly == Decimal("3950")
        assert s.active_count == 3
        assert s.avg_weekly == 1317
        assert s.top_earner_name == "Sarah Johnson"
        assert s.top_earner_amount == Decimal("2100")

    def test_only_current_week_counts(self):
        s = summarize([view("A", row(PREV, 5000))], WEEK)
        assert s.total_weekly == 0
        assert s.avg_weekly == 0
        assert s.top_earner_name == PLACEHOLDER
        assert s.top_earner_amount == 0

    def test_tie_keeps_first_driver(self):
        s = summarize([view("First", row(WEEK, 2000)), view("Second", row(WEEK, 2000))], WEEK)
        assert s.top_earner_name == "First"

    def test_zero_earnings_is_not_a_top_earner(self):
        s = summarize([view("A", row(WEEK, 0))], WEEK)
        assert s.top_earner_name == PLACEHOLDER

    def test_no_drivers(self):
        s = summarize([], WEEK)
        assert s.active_count == 0
        assert s.avg_weekly == 0
        assert s.cards == []
        assert s.week_label == "27 Oct – 2 Nov"


class TestDisplayWeek:
    def test_this_week(self):
        d = pick_display_week([row(PREV, 100), row(WEEK, 200)], WEEK)
        assert (d.label, d.start, d.earnings) == ("This Week", WEEK.start, Decimal("200"))

    def test_latest_recorded_week(self):
        d = pick_display_week([row(OLDER, 100), row(PREV, 300)], WEEK)
        assert (d.label, d.start, d.end, d.earnings) == ("Recent Week", PREV.start, PREV.end, Decimal("300"))

    def test_nothing_recorded(self):
        d = pick_display_week([], WEEK)
        assert (d.label, d.start, d.end, d.earnings) == ("This Week", WEEK.start, WEEK.end, 0)


class TestCard:
    def test_totals_and_best(self):
        card = build_card(view("A", row(WEEK, 1000, 5), row(PREV, 2500.5, 7), row(OLDER, 300, 1)), WEEK)
        assert card.total_earnings == Decimal("3800.5")
        assert card.total_trips == 13
        assert card.best_week == Decimal("2500.5")

    def test_empty(self):
        card = build_card(view("A"), WEEK)
        assert card.total_earnings == 0
        assert card.total_trips == 0
        assert card.best_week == 0

    def test_initials_and_masked_license(self):
        v = view("sarah johnson", license_number="DL-AAA-0002")
        assert v.initials == "SA"
        assert v.masked_license == "002"
        assert view("x").masked_license == PLACEHOLDER


class TestCsv:
    def test_rows(self):
        text = rows_to_csv([row(WEEK, "1850.50", 64), row(PREV, "99.49", 3)])
        parsed = list(csv.reader(io.StringIO(text)))
        assert parsed[0] == CSV_HEADER
        assert parsed[1] == ["2025-10-27", "2025-11-02", "1851", "64"]
        assert parsed[2] == ["2025-10-20", "2025-10-26", "99", "3"]

    def test_header_only(self):
        assert rows_to_csv([]) == "Week Start,Week End,Earnings (INR),Trips\n"


class TestEndpoints:
    def test_summary_json(self, client, make_driver, make_entry):
        week = current_week("Asia/Kolkata")
        a = make_driver(name="Michael Rodriguez")
        b = make_driver(name="Sarah Johnson")
        hidden = make_driver(name="Hidden Driver")
        make_entry(a["id"], week.start, earnings=1850, trips=64)
        make_entry(b["id"], week.start, earnings=2100, trips=66)
        make_entry(hidden["id"], week.start, earnings=9999, trips=1)
        client.patch(f"/api/drivers/{hidden['id']}/toggle", json={"hidden": True})

        body = client.get("/api/performance").json()
        assert body["week"]["start"] == week.start.isoformat()
        assert body["totalWeekly"] == 3950.0
        assert body["activeDrivers"] == 2
        assert body["avgWeekly"] == 1975
        assert body["topEarner"] == {"name": "Sarah Johnson", "amount": 2100.0}
        assert {d["name"] for d in body["drivers"]} == {"Michael Rodriguez", "Sarah Johnson"}
        assert all(d["displayWeek"]["label"] == "This Week" for d in body["drivers"])

    def test_export_csv(self, client, make_driver, make_entry):
        d = make_driver(name="Aarav Kumar")
        make_entry(d["id"], "2025-10-20", earnings=1200, trips=40)
        make_entry(d["id"], "2025-10-27", earnings=1850, trips=64)

        r = client.get(f"/performance/{d['id']}/export.csv")
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/csv")
        assert 'filename="aarav-kumar-weekly.csv"' in r.headers["content-disposition"]
        assert r.text.splitlines() == [
            "Week Start,Week End,Earnings (INR),Trips",
            "2025-10-27,2025-11-02,1850,64",
            "2025-10-20,2025-10-26,1200,40",
        ]

    def test_export_missing_driver(self, client):
        assert client.get("/performance/nope/export.csv").status_code == 404
