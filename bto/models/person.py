# bto/models/person.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Integer, DateTime, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bto.db.base import Base
from bto.models.enums import MaritalStatus, PersonRole


def _now():
    return datetime.now(timezone.utc)


class Person(Base):
    """
    One row per citizen. Role-specific behaviour is read through ``profile``
    (see bto/models/profiles.py), never by inspecting ``role`` ad hoc.
    """
    __tablename__ = "people"

    nric: Mapped[str] = mapped_column(String(9), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    marital_status: Mapped[str] = mapped_column(String(16), nullable=False)
    role: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PersonRole.APPLICANT.value
    )

    # single outstanding application (PENDING / SUCCESSFUL / BOOKED)
    current_application_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    # officer binding; the project's officer list is derived from this column
    handling_project_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)

    __table_args__ = (
        CheckConstraint("age >= 0", name="ck_people_age_nonneg"),
        Index("ix_people_handling_project", "handling_project_name"),
        Index("ix_people_role", "role"),
    )

    @property
    def marital(self) -> MaritalStatus:
        return MaritalStatus(self.marital_status)

    @property
    def profile(self):
        from bto.models.profiles import profile_of

        return profile_of(self)
