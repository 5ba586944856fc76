# bto/api/v1/bookings.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from bto.api.errors import http_error
from bto.api.v1.serializers import booking_resp
from bto.core.auth_deps import get_current_principal
from bto.core.deps import audit, ensure_action
from bto.core.errors import DomainError
from bto.db.session import get_db
from bto.models.enums import MaritalStatus, PersonRole, UnitType
from bto.policies.projects_policy import can_view_project_applications
from bto.policies.rbac import ACTION_BOOK_FLAT, Principal
from bto.schemas.bookings import (
    BookingCreateRequest,
    BookingListResponse,
    BookingResponse,
    ReceiptResponse,
)
from bto.services.audit_service import AuditAction
from bto.services.booking_service import BookingService
from bto.services.projects_service import ProjectsService

router = APIRouter(prefix="/bookings")


def _load_visible(db: Session, principal: Principal, booking_id: str):
    try:
        b = BookingService().get_booking(db, booking_id=booking_id)
    except DomainError as e:
        raise http_error(e)
    if b.applicant_nric != principal.nric:
        project = ProjectsService().get(db, name=b.project_name)
        if not can_view_project_applications(principal, project):
            raise HTTPException(status_code=403, detail="Not permitted to view this booking.")
    return b


@router.post("", response_model=BookingResponse, status_code=201)
def book_flat(
    request: Request,
    body: BookingCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_BOOK_FLAT)

    try:
        b = BookingService().book_flat(
            db, application_id=body.applicationId, officer_nric=principal.nric
        )
    except DomainError as e:
        raise http_error(e)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.FLAT_BOOKED,
        project_name=b.project_name,
        ref_id=b.id,
        details={"applicationId": b.application_id, "unitType": b.unit_type},
    )
    return booking_resp(b)


@router.get("/report", response_model=BookingListResponse)
def booking_report(
    projectName: str | None = Query(default=None),
    unitType: UnitType | None = Query(default=None),
    maritalStatus: MaritalStatus | None = Query(default=None),
    minAge: int | None = Query(default=None, ge=0),
    maxAge: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if principal.role not in {PersonRole.MANAGER, PersonRole.ADMIN}:
        raise HTTPException(status_code=403, detail="Managers and admins only.")
    rows = BookingService().booking_report(
        db,
        project_name=projectName,
        unit_type=unitType,
        marital_status=maritalStatus,
        min_age=minAge,
        max_age=maxAge,
    )
    return {"bookings": [booking_resp(b) for b in rows]}


@router.get("/{bookingId}", response_model=BookingResponse)
def get_booking(
    bookingId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return booking_resp(_load_visible(db, principal, bookingId))


@router.get("/{bookingId}/receipt", response_model=ReceiptResponse)
def get_receipt(
    bookingId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _load_visible(db, principal, bookingId)
    try:
        text = BookingService().generate_receipt(db, booking_id=bookingId)
    except DomainError as e:
        raise http_error(e)
    return {"bookingId": bookingId, "receipt": text}
