# bto/models/officer_registration.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from bto.db.base import Base
from bto.models.enums import RegistrationStatus


def _now():
    return datetime.now(timezone.utc)


class OfficerRegistration(Base):
    """
    An officer's request to handle a project. The id doubles as the
    registration token handed back by ``register``.
    """
    __tablename__ = "officer_registrations"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    officer_nric: Mapped[str] = mapped_column(String(9), nullable=False)
    project_name: Mapped[str] = mapped_column(
        String(128), ForeignKey("projects.name", ondelete="CASCADE"), nullable=False
    )

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=RegistrationStatus.PENDING.value,
        doc="PENDING | APPROVED | REJECTED",
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)
    decided_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_officer_registrations_project_status", "project_name", "status"),
        Index("ix_officer_registrations_officer", "officer_nric"),
    )
