# bto/core/deps.py
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from bto.policies.rbac import Principal, require_action
from bto.services.audit_service import AuditService


def ensure_action(principal: Principal, action: str) -> None:
    """
    RBAC gate for route handlers; PermissionError becomes 403.
    """
    try:
        require_action(principal, action)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


def request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def audit(
    db: Session,
    *,
    request: Request,
    principal: Principal,
    action: str,
    project_name: Optional[str] = None,
    ref_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    AuditService().write(
        db,
        actor_nric=principal.nric,
        action=action,
        request_id=request_id(request),
        project_name=project_name,
        ref_id=ref_id,
        details={"role": principal.role.value, **(details or {})},
    )
