"""Demo data: two drivers and their entries for the week of 2025-10-27.

Run with:  python -m app.scripts.seed
Safe to run repeatedly: drivers are matched by phone, entries are upserts.
"""
import logging

from sqlalchemy import select

from app.config import settings
from app.db import Database
from app.log import setup_logging
from app.models.driver import Driver
from app.services.drivers import create_driver
from app.services.weekly import upsert_weekly_entry

logger = logging.getLogger(__name__)

DEMO = [
    {
        "driver": {"name": "Michael Rodriguez", "phone": "9000000001", "licenseNumber": "DL-AAA-0001"},
        "week": {"weekStart": "2025-10-27", "earnings": 1850, "trips": 64},
    },
    {
        "driver": {"name": "Sarah Johnson", "phone": "9000000002", "licenseNumber": "DL-AAA-0002"},
        "week": {"weekStart": "2025-10-27", "earnings": 2100, "trips": 66},
    },
]


def seed(db) -> int:
    count = 0
    for item in DEMO:
        d = db.execute(
            select(Driver).where(Driver.phone == item["driver"]["phone"])
        ).scalar_one_or_none()
        if d is None:
            d = create_driver(db, item["driver"])
        upsert_weekly_entry(db, {"driverId": d.id, **item["week"]})
        count += 1
    return count


def main():
    setup_logging(settings.LOG_LEVEL)
    database = Database(settings.DATABASE_URL)
    database.create_all()
    try:
        with database.session() as db:
            n = seed(db)
        logger.info("seeded %d drivers", n)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
