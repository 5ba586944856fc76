# bto/models/application.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Index, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bto.db.base import Base
from bto.models.enums import ApplicationStatus


def _now():
    return datetime.now(timezone.utc)


class Application(Base):
    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    applicant_nric: Mapped[str] = mapped_column(String(9), nullable=False)
    project_name: Mapped[str] = mapped_column(
        String(128), ForeignKey("projects.name"), nullable=False
    )
    unit_type: Mapped[str] = mapped_column(String(16), nullable=False)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ApplicationStatus.PENDING.value
    )

    # orthogonal to status; no status guard on setting it
    withdrawal_requested: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=false(), default=False
    )

    booking_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)

    booking = relationship(
        "Booking",
        back_populates="application",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_applications_applicant_status", "applicant_nric", "status"),
        Index("ix_applications_project_status", "project_name", "status"),
    )

    @property
    def state(self) -> ApplicationStatus:
        return ApplicationStatus(self.status)
