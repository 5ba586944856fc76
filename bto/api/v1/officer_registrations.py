# bto/api/v1/officer_registrations.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from bto.api.errors import http_error
from bto.api.v1.serializers import registration_resp
from bto.core.auth_deps import get_current_principal
from bto.core.deps import audit, ensure_action
from bto.core.errors import DomainError
from bto.db.session import get_db
from bto.policies.projects_policy import can_manage_project
from bto.policies.rbac import (
    ACTION_DECIDE_REGISTRATION,
    ACTION_REGISTER_FOR_PROJECT,
    Principal,
)
from bto.schemas.officer_registrations import (
    RegistrationCreateRequest,
    RegistrationListResponse,
    RegistrationResponse,
)
from bto.services.audit_service import AuditAction
from bto.services.officer_assignment_service import OfficerAssignmentService
from bto.services.people_service import PeopleService
from bto.services.projects_service import ProjectsService

router = APIRouter(prefix="/officer-registrations")


def _require_manager_of(db: Session, principal: Principal, project_name: str) -> None:
    try:
        project = ProjectsService().get(db, name=project_name)
    except DomainError as e:
        raise http_error(e)
    if not can_manage_project(principal, project):
        raise HTTPException(status_code=403, detail="Only the project's manager may decide.")


def _load(db: Session, registration_id: str):
    try:
        return OfficerAssignmentService().get_registration(db, registration_id=registration_id)
    except DomainError as e:
        raise http_error(e)


@router.post("", response_model=RegistrationResponse, status_code=201)
def register_for_project(
    request: Request,
    body: RegistrationCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_REGISTER_FOR_PROJECT)

    try:
        r = OfficerAssignmentService().register(
            db, officer_nric=principal.nric, project_name=body.projectName
        )
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.OFFICER_REGISTERED,
        project_name=r.project_name,
        ref_id=r.id,
    )
    return registration_resp(r)


@router.get("/me", response_model=RegistrationListResponse)
def my_registrations(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    rows = OfficerAssignmentService().list_registrations(db, officer_nric=principal.nric)
    return {"registrations": [registration_resp(r) for r in rows]}


@router.post("/{registrationId}/approve", response_model=RegistrationResponse)
def approve_registration(
    request: Request,
    registrationId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_DECIDE_REGISTRATION)
    reg = _load(db, registrationId)
    _require_manager_of(db, principal, reg.project_name)

    try:
        r = OfficerAssignmentService().approve(
            db,
            registration_id=registrationId,
            officer_nric=reg.officer_nric,
            project_name=reg.project_name,
        )
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.OFFICER_APPROVED,
        project_name=r.project_name,
        ref_id=r.id,
        details={"officerNric": r.officer_nric},
    )
    return registration_resp(r)


@router.post("/{registrationId}/reject", response_model=RegistrationResponse)
def reject_registration(
    request: Request,
    registrationId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_DECIDE_REGISTRATION)
    reg = _load(db, registrationId)
    _require_manager_of(db, principal, reg.project_name)

    try:
        r = OfficerAssignmentService().reject(db, registration_id=registrationId)
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.OFFICER_REJECTED,
        project_name=r.project_name,
        ref_id=r.id,
        details={"officerNric": r.officer_nric},
    )
    return registration_resp(r)


@router.delete("/assignments/{officerNric}")
def release_officer(
    request: Request,
    officerNric: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_DECIDE_REGISTRATION)
    try:
        officer = PeopleService().get(db, nric=officerNric)
    except DomainError as e:
        raise http_error(e)
    if officer.handling_project_name is None:
        raise HTTPException(status_code=409, detail="Officer is not handling any project.")
    _require_manager_of(db, principal, officer.handling_project_name)

    try:
        released = OfficerAssignmentService().release(db, officer_nric=officerNric)
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.OFFICER_RELEASED,
        project_name=released,
        ref_id=officerNric,
    )
    return {"officerNric": officerNric, "releasedProject": released}
