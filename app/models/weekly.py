# app/models/weekly.py
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric, Text, ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db import Base


class WeeklyEntry(Base):
    __tablename__ = "weekly_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(
        String(32), ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Monday..Sunday, week_end is always week_start + 6 days
    week_start = Column(Date, nullable=False)
    week_end   = Column(Date, nullable=False)

    earnings = Column(Numeric(12, 2), nullable=False, default=0)   # INR
    trips    = Column(Integer, nullable=False, default=0)
    notes    = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    driver = relationship("Driver", back_populates="weekly_entries")

    __table_args__ = (
        # one entry per driver per week; the upsert conflicts on this
        UniqueConstraint("driver_id", "week_start", name="uq_weekly_driver_week"),
        Index("ix_weekly_entries_week_start", "week_start"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "driverId": self.driver_id,
            "weekStart": self.week_start.isoformat(),
            "weekEnd": self.week_end.isoformat(),
            "earnings": float(self.earnings or 0),
            "trips": self.trips,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
