# bto/api/v1/people.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from bto.api.errors import http_error
from bto.api.v1.serializers import person_resp
from bto.core.auth_deps import get_current_principal
from bto.core.deps import audit, ensure_action
from bto.core.errors import DomainError
from bto.db.session import get_db
from bto.models.enums import PersonRole
from bto.policies.rbac import ACTION_MANAGE_PEOPLE, Principal
from bto.schemas.people import PersonCreateRequest, PersonListResponse, PersonResponse
from bto.services.audit_service import AuditAction
from bto.services.people_service import PeopleService

router = APIRouter(prefix="/people")

STAFF_ROLES = {PersonRole.MANAGER, PersonRole.ADMIN}


@router.post("", response_model=PersonResponse, status_code=201)
def create_person(
    request: Request,
    body: PersonCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_MANAGE_PEOPLE)

    try:
        p = PeopleService().create(
            db,
            nric=body.nric,
            name=body.name,
            age=body.age,
            marital_status=body.maritalStatus,
            role=body.role,
        )
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.PERSON_CREATED,
        ref_id=p.nric,
        details={"personRole": p.role},
    )
    return person_resp(p)


@router.get("", response_model=PersonListResponse)
def list_people(
    role: PersonRole | None = Query(default=None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if principal.role not in STAFF_ROLES:
        raise HTTPException(status_code=403, detail="Managers and admins only.")
    rows = PeopleService().list(db, role=role)
    return {"people": [person_resp(p) for p in rows]}


@router.get("/me", response_model=PersonResponse)
def get_me(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        return person_resp(PeopleService().get(db, nric=principal.nric))
    except DomainError as e:
        raise http_error(e)


@router.get("/{nric}", response_model=PersonResponse)
def get_person(
    nric: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if nric != principal.nric and principal.role not in STAFF_ROLES:
        raise HTTPException(status_code=403, detail="Not permitted to view this person.")
    try:
        return person_resp(PeopleService().get(db, nric=nric))
    except DomainError as e:
        raise http_error(e)
