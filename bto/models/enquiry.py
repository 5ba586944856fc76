# bto/models/enquiry.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from bto.db.base import Base


def _now():
    return datetime.now(timezone.utc)


class Enquiry(Base):
    __tablename__ = "enquiries"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    applicant_nric: Mapped[str] = mapped_column(String(9), nullable=False)
    project_name: Mapped[str] = mapped_column(
        String(128), ForeignKey("projects.name", ondelete="CASCADE"), nullable=False
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)

    response: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    responder_nric: Mapped[Optional[str]] = mapped_column(String(9), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)
    answered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_enquiries_project", "project_name"),
        Index("ix_enquiries_applicant", "applicant_nric"),
    )

    @property
    def is_answered(self) -> bool:
        return self.response is not None
