from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from bto.models.audit_log import AuditLog


class AuditAction:
    # People / projects
    PERSON_CREATED = "PERSON_CREATED"
    PROJECT_CREATED = "PROJECT_CREATED"
    PROJECT_UPDATED = "PROJECT_UPDATED"
    PROJECT_VISIBILITY_CHANGED = "PROJECT_VISIBILITY_CHANGED"
    PROJECT_DELETED = "PROJECT_DELETED"

    # Officer assignment
    OFFICER_REGISTERED = "OFFICER_REGISTERED"
    OFFICER_APPROVED = "OFFICER_APPROVED"
    OFFICER_REJECTED = "OFFICER_REJECTED"
    OFFICER_RELEASED = "OFFICER_RELEASED"

    # Applications
    APPLICATION_CREATED = "APPLICATION_CREATED"
    APPLICATION_APPROVED = "APPLICATION_APPROVED"
    APPLICATION_REJECTED = "APPLICATION_REJECTED"
    WITHDRAWAL_REQUESTED = "WITHDRAWAL_REQUESTED"
    WITHDRAWAL_APPROVED = "WITHDRAWAL_APPROVED"

    # Bookings
    FLAT_BOOKED = "FLAT_BOOKED"

    # Enquiries
    ENQUIRY_CREATED = "ENQUIRY_CREATED"
    ENQUIRY_EDITED = "ENQUIRY_EDITED"
    ENQUIRY_DELETED = "ENQUIRY_DELETED"
    ENQUIRY_ANSWERED = "ENQUIRY_ANSWERED"


class AuditService:
    def write(
        self,
        db: Session,
        *,
        actor_nric: Optional[str],
        action: str,
        request_id: Optional[str],
        project_name: Optional[str] = None,
        ref_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        row = AuditLog(
            actor_nric=actor_nric,
            action=action,
            request_id=request_id,
            project_name=project_name,
            ref_id=ref_id,
            details_json=details or {},
        )
        db.add(row)
        db.commit()

    def list(
        self,
        db: Session,
        *,
        project_name: Optional[str] = None,
        limit: int = 200,
    ) -> List[AuditLog]:
        stmt = select(AuditLog)
        if project_name is not None:
            stmt = stmt.where(AuditLog.project_name == project_name)
        stmt = stmt.order_by(AuditLog.created_at.desc()).limit(limit)
        return list(db.execute(stmt).scalars().all())
