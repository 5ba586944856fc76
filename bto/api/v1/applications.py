# bto/api/v1/applications.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from bto.api.errors import http_error
from bto.api.v1.serializers import application_resp
from bto.core.auth_deps import get_current_principal
from bto.core.deps import audit, ensure_action
from bto.core.errors import DomainError
from bto.db.session import get_db
from bto.policies.projects_policy import can_manage_project, can_view_project_applications
from bto.policies.rbac import (
    ACTION_APPLY,
    ACTION_DECIDE_APPLICATION,
    ACTION_DECIDE_WITHDRAWAL,
    ACTION_REQUEST_WITHDRAWAL,
    Principal,
)
from bto.schemas.applications import ApplicationCreateRequest, ApplicationResponse
from bto.services.application_service import ApplicationService
from bto.services.audit_service import AuditAction
from bto.services.projects_service import ProjectsService

router = APIRouter(prefix="/applications")


def _load(db: Session, application_id: str):
    try:
        return ApplicationService().get_application(db, application_id=application_id)
    except DomainError as e:
        raise http_error(e)


def _require_project_manager(db: Session, principal: Principal, project_name: str) -> None:
    try:
        project = ProjectsService().get(db, name=project_name)
    except DomainError as e:
        raise http_error(e)
    if not can_manage_project(principal, project):
        raise HTTPException(status_code=403, detail="Only the project's manager may decide.")


@router.post("", response_model=ApplicationResponse, status_code=201)
def create_application(
    request: Request,
    body: ApplicationCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_APPLY)

    try:
        a = ApplicationService().create(
            db,
            applicant_nric=principal.nric,
            project_name=body.projectName,
            unit_type=body.unitType,
        )
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.APPLICATION_CREATED,
        project_name=a.project_name,
        ref_id=a.id,
        details={"unitType": a.unit_type},
    )
    return application_resp(a)


@router.get("/me")
def get_my_application(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        a = ApplicationService().get_current_application_for_applicant(
            db, applicant_nric=principal.nric
        )
    except DomainError as e:
        raise http_error(e)
    return {"application": application_resp(a) if a else None}


@router.get("/{applicationId}", response_model=ApplicationResponse)
def get_application(
    applicationId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    a = _load(db, applicationId)
    if a.applicant_nric != principal.nric:
        project = ProjectsService().get(db, name=a.project_name)
        if not can_view_project_applications(principal, project):
            raise HTTPException(status_code=403, detail="Not permitted to view this application.")
    return application_resp(a)


@router.post("/{applicationId}/approve", response_model=ApplicationResponse)
def approve_application(
    request: Request,
    applicationId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_DECIDE_APPLICATION)
    a = _load(db, applicationId)
    _require_project_manager(db, principal, a.project_name)

    try:
        a = ApplicationService().approve(db, application_id=applicationId)
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.APPLICATION_APPROVED,
        project_name=a.project_name,
        ref_id=a.id,
    )
    return application_resp(a)


@router.post("/{applicationId}/reject", response_model=ApplicationResponse)
def reject_application(
    request: Request,
    applicationId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_DECIDE_APPLICATION)
    a = _load(db, applicationId)
    _require_project_manager(db, principal, a.project_name)

    try:
        a = ApplicationService().reject(db, application_id=applicationId)
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.APPLICATION_REJECTED,
        project_name=a.project_name,
        ref_id=a.id,
    )
    return application_resp(a)


@router.post("/{applicationId}/withdrawal", response_model=ApplicationResponse)
def request_withdrawal(
    request: Request,
    applicationId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_REQUEST_WITHDRAWAL)
    a = _load(db, applicationId)
    if a.applicant_nric != principal.nric:
        raise HTTPException(status_code=403, detail="Only the applicant may request withdrawal.")

    try:
        a = ApplicationService().request_withdrawal(db, application_id=applicationId)
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.WITHDRAWAL_REQUESTED,
        project_name=a.project_name,
        ref_id=a.id,
        details={"status": a.status},
    )
    return application_resp(a)


@router.post("/{applicationId}/withdrawal/approve")
def approve_withdrawal(
    request: Request,
    applicationId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_DECIDE_WITHDRAWAL)
    a = _load(db, applicationId)
    project_name = a.project_name
    status = a.status
    _require_project_manager(db, principal, project_name)

    try:
        ApplicationService().approve_withdrawal(db, application_id=applicationId)
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.WITHDRAWAL_APPROVED,
        project_name=project_name,
        ref_id=applicationId,
        details={"previousStatus": status},
    )
    return {"applicationId": applicationId, "deleted": True}
