from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bto.core.auth_deps import get_current_principal
from bto.core.deps import ensure_action
from bto.db.session import get_db
from bto.policies.rbac import ACTION_VIEW_AUDIT, Principal
from bto.services.audit_service import AuditService

router = APIRouter(prefix="/audit")


def _iso(dt):
    return dt.isoformat() if dt else None


@router.get("")
def get_audit_log(
    projectName: str | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=2000),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_VIEW_AUDIT)
    rows = AuditService().list(db, project_name=projectName, limit=limit)
    return {
        "entries": [
            {
                "id": r.id,
                "createdAtIso": _iso(r.created_at),
                "requestId": r.request_id,
                "actorNric": r.actor_nric,
                "action": r.action,
                "projectName": r.project_name,
                "refId": r.ref_id,
                "details": r.details_json or {},
            }
            for r in rows
        ]
    }
