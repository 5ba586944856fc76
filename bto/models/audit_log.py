from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import String, DateTime, Index, JSON
from sqlalchemy.orm import Mapped, mapped_column

from bto.db.base import Base


def _now():
    return datetime.now(timezone.utc)


class AuditLog(Base):
    """
    Append-only trail of mutating operations (never UPDATE).
    """
    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)

    request_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)

    actor_nric: Mapped[Optional[str]] = mapped_column(String(9), nullable=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)  # e.g. FLAT_BOOKED

    project_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    ref_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    details_json: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_audit_project", "project_name"),
        Index("ix_audit_action", "action"),
    )
