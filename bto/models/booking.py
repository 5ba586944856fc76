# bto/models/booking.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bto.db.base import Base


def _now():
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    application_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
    )

    applicant_nric: Mapped[str] = mapped_column(String(9), nullable=False)
    project_name: Mapped[str] = mapped_column(String(128), nullable=False)
    unit_type: Mapped[str] = mapped_column(String(16), nullable=False)
    officer_nric: Mapped[str] = mapped_column(String(9), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)

    application = relationship("Application", back_populates="booking")

    __table_args__ = (
        # one booking per application, ever
        UniqueConstraint("application_id", name="uq_bookings_application"),
        Index("ix_bookings_project_type", "project_name", "unit_type"),
    )
