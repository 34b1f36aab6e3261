# app/models/driver.py
import uuid

from sqlalchemy import Column, Boolean, String, Date, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(String(32), primary_key=True, default=_new_id)

    name              = Column(String(200), nullable=False)
    license_number    = Column(String(50), nullable=True)      # uppercase, >= 3 chars
    phone             = Column(String(20), nullable=False)   # digits only, unique
    join_date         = Column(Date, nullable=True)
    profile_image_url = Column(String(500), nullable=True)

    # visibility: hidden/removed drivers drop out of pickers and the dashboard
    hidden     = Column(Boolean, default=False, nullable=False)
    removed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("phone", name="uq_drivers_phone"),
    )

    # rows are deleted by the FK cascade in the database
    weekly_entries = relationship(
        "WeeklyEntry",
        back_populates="driver",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="WeeklyEntry.week_end.desc()",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "licenseNumber": self.license_number,
            "phone": self.phone,
            "joinDate": self.join_date.isoformat() if self.join_date else None,
            "profileImageUrl": self.profile_image_url,
            "hidden": bool(self.hidden),
            "removedAt": self.removed_at.isoformat() if self.removed_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
