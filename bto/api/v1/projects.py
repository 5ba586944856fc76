# bto/api/v1/projects.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from bto.api.errors import http_error
from bto.api.v1.serializers import (
    application_resp,
    booking_resp,
    enquiry_resp,
    project_resp,
    registration_resp,
)
from bto.core.auth_deps import get_current_principal
from bto.core.deps import audit, ensure_action
from bto.core.errors import DomainError
from bto.db.session import get_db
from bto.models.enums import ApplicationStatus, PersonRole, RegistrationStatus, UnitType
from bto.policies.projects_policy import (
    can_create_project,
    can_manage_project,
    can_view_project,
    can_view_project_applications,
)
from bto.policies.rbac import ACTION_MANAGE_PROJECT, Principal
from bto.schemas.applications import ApplicationListResponse
from bto.schemas.bookings import BookingListResponse
from bto.schemas.enquiries import EnquiryListResponse
from bto.schemas.officer_registrations import RegistrationListResponse
from bto.schemas.projects import (
    ProjectCreateRequest,
    ProjectListResponse,
    ProjectPatchRequest,
    ProjectResponse,
    ProjectVisibilityRequest,
)
from bto.services.application_service import ApplicationService
from bto.services.audit_service import AuditAction
from bto.services.booking_service import BookingService
from bto.services.enquiry_service import EnquiryService
from bto.services.officer_assignment_service import OfficerAssignmentService
from bto.services.projects_service import ProjectsService

router = APIRouter(prefix="/projects")


def _load(db: Session, name: str):
    try:
        return ProjectsService().get(db, name=name)
    except DomainError as e:
        raise http_error(e)


def _require_manager_of(principal: Principal, project) -> None:
    ensure_action(principal, ACTION_MANAGE_PROJECT)
    if not can_manage_project(principal, project):
        raise HTTPException(status_code=403, detail="Only the project's manager may do this.")


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(
    request: Request,
    body: ProjectCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if not can_create_project(principal):
        raise HTTPException(status_code=403, detail="Only managers can create projects.")

    try:
        p = ProjectsService().create(
            db,
            manager_nric=principal.nric,
            name=body.name,
            neighborhood=body.neighborhood,
            opening_date=body.openingDate,
            closing_date=body.closingDate,
            units=body.units,
            officer_slots=body.officerSlots,
            is_visible=body.isVisible,
        )
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.PROJECT_CREATED,
        project_name=p.name,
        ref_id=p.name,
        details={"units": {u.value: n for u, n in body.units.items()}},
    )
    return project_resp(p)


@router.get("", response_model=ProjectListResponse)
def list_projects(
    neighborhood: str | None = Query(default=None),
    unitType: UnitType | None = Query(default=None),
    visible: bool | None = Query(default=None),
    mine: bool = Query(default=False),
    limit: int = Query(default=200, ge=1, le=2000),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    svc = ProjectsService()
    filters = {
        "neighborhood": neighborhood,
        "unit_type": unitType,
        "visible": visible,
        "manager_nric": principal.nric if mine and principal.role == PersonRole.MANAGER else None,
    }
    rows = svc.list(db, filters=filters, limit=limit)

    if principal.role == PersonRole.APPLICANT:
        try:
            allowed = {p.name for p in svc.list_for_applicant(db, applicant_nric=principal.nric)}
        except DomainError as e:
            raise http_error(e)
        rows = [p for p in rows if p.name in allowed]
    elif principal.role == PersonRole.OFFICER:
        # officers browse every visible project (to register) plus the one they handle
        rows = [p for p in rows if can_view_project(principal, p)]

    return {"projects": [project_resp(p) for p in rows]}


@router.get("/{name}", response_model=ProjectResponse)
def get_project(
    name: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    p = _load(db, name)
    if not can_view_project(principal, p):
        raise HTTPException(status_code=404, detail="Project not found.")
    return project_resp(p)


@router.patch("/{name}", response_model=ProjectResponse)
def patch_project(
    request: Request,
    name: str,
    body: ProjectPatchRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _require_manager_of(principal, _load(db, name))

    try:
        p = ProjectsService().patch(
            db,
            name=name,
            neighborhood=body.neighborhood,
            opening_date=body.openingDate,
            closing_date=body.closingDate,
            officer_slots=body.officerSlots,
            units=body.units,
        )
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.PROJECT_UPDATED,
        project_name=name,
        ref_id=name,
        details={"fields": sorted(body.model_dump(exclude_none=True).keys())},
    )
    return project_resp(p)


@router.put("/{name}/visibility", response_model=ProjectResponse)
def set_visibility(
    request: Request,
    name: str,
    body: ProjectVisibilityRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _require_manager_of(principal, _load(db, name))

    try:
        p = ProjectsService().set_visibility(db, name=name, visible=body.isVisible)
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.PROJECT_VISIBILITY_CHANGED,
        project_name=name,
        ref_id=name,
        details={"isVisible": body.isVisible},
    )
    return project_resp(p)


@router.delete("/{name}")
def delete_project(
    request: Request,
    name: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _require_manager_of(principal, _load(db, name))

    try:
        released = ProjectsService().delete(db, name=name)
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.PROJECT_DELETED,
        project_name=name,
        ref_id=name,
        details={"releasedOfficers": released},
    )
    return {"name": name, "deleted": True, "releasedOfficers": released}


# ---------------------------------------------------------------------
# project-scoped reads
# ---------------------------------------------------------------------


@router.get("/{name}/applications", response_model=ApplicationListResponse)
def list_project_applications(
    name: str,
    status: ApplicationStatus | None = Query(default=None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if not can_view_project_applications(principal, _load(db, name)):
        raise HTTPException(status_code=403, detail="Not permitted to view applications.")
    rows = ApplicationService().get_applications_for_project(db, project_name=name, status=status)
    return {"projectName": name, "applications": [application_resp(a) for a in rows]}


@router.get("/{name}/withdrawals", response_model=ApplicationListResponse)
def list_withdrawal_requests(
    name: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _require_manager_of(principal, _load(db, name))
    rows = ApplicationService().get_withdrawal_requests(db, project_name=name)
    return {"projectName": name, "applications": [application_resp(a) for a in rows]}


@router.get("/{name}/bookings", response_model=BookingListResponse)
def list_project_bookings(
    name: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if not can_view_project_applications(principal, _load(db, name)):
        raise HTTPException(status_code=403, detail="Not permitted to view bookings.")
    rows = BookingService().get_bookings_for_project(db, project_name=name)
    return {"bookings": [booking_resp(b) for b in rows]}


@router.get("/{name}/enquiries", response_model=EnquiryListResponse)
def list_project_enquiries(
    name: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    p = _load(db, name)
    if principal.role != PersonRole.MANAGER and not can_view_project_applications(principal, p):
        raise HTTPException(status_code=403, detail="Not permitted to view enquiries.")
    rows = EnquiryService().list_for_project(db, project_name=name)
    return {"enquiries": [enquiry_resp(e) for e in rows]}


@router.get("/{name}/registrations", response_model=RegistrationListResponse)
def list_project_registrations(
    name: str,
    status: RegistrationStatus | None = Query(default=None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _require_manager_of(principal, _load(db, name))
    rows = OfficerAssignmentService().list_registrations(db, project_name=name, status=status)
    return {"registrations": [registration_resp(r) for r in rows]}
