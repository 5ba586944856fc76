# bto/api/v1/enquiries.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from bto.api.errors import http_error
from bto.api.v1.serializers import enquiry_resp
from bto.core.auth_deps import get_current_principal
from bto.core.deps import audit, ensure_action
from bto.core.errors import DomainError
from bto.db.session import get_db
from bto.policies.rbac import ACTION_ANSWER_ENQUIRY, ACTION_SUBMIT_ENQUIRY, Principal
from bto.schemas.enquiries import (
    EnquiryAnswerRequest,
    EnquiryCreateRequest,
    EnquiryEditRequest,
    EnquiryListResponse,
    EnquiryResponse,
)
from bto.services.audit_service import AuditAction
from bto.services.enquiry_service import EnquiryService

router = APIRouter(prefix="/enquiries")


@router.post("", response_model=EnquiryResponse, status_code=201)
def create_enquiry(
    request: Request,
    body: EnquiryCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_SUBMIT_ENQUIRY)
    try:
        e = EnquiryService().create(
            db, applicant_nric=principal.nric, project_name=body.projectName, text=body.text
        )
    except DomainError as err:
        raise http_error(err)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.ENQUIRY_CREATED,
        project_name=e.project_name,
        ref_id=e.id,
    )
    return enquiry_resp(e)


@router.get("/me", response_model=EnquiryListResponse)
def my_enquiries(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    rows = EnquiryService().list_for_applicant(db, applicant_nric=principal.nric)
    return {"enquiries": [enquiry_resp(e) for e in rows]}


@router.patch("/{enquiryId}", response_model=EnquiryResponse)
def edit_enquiry(
    request: Request,
    enquiryId: str,
    body: EnquiryEditRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        e = EnquiryService().edit(db, enquiry_id=enquiryId, author_nric=principal.nric, text=body.text)
    except DomainError as err:
        raise http_error(err)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.ENQUIRY_EDITED,
        project_name=e.project_name,
        ref_id=e.id,
    )
    return enquiry_resp(e)


@router.delete("/{enquiryId}")
def delete_enquiry(
    request: Request,
    enquiryId: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        EnquiryService().delete(db, enquiry_id=enquiryId, author_nric=principal.nric)
    except DomainError as err:
        raise http_error(err)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.ENQUIRY_DELETED,
        ref_id=enquiryId,
    )
    return {"enquiryId": enquiryId, "deleted": True}


@router.post("/{enquiryId}/answer", response_model=EnquiryResponse)
def answer_enquiry(
    request: Request,
    enquiryId: str,
    body: EnquiryAnswerRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_action(principal, ACTION_ANSWER_ENQUIRY)
    try:
        e = EnquiryService().answer(
            db, enquiry_id=enquiryId, responder_nric=principal.nric, response=body.response
        )
    except DomainError as err:
        raise http_error(err)

    audit(
        db,
        request=request,
        principal=principal,
        action=AuditAction.ENQUIRY_ANSWERED,
        project_name=e.project_name,
        ref_id=e.id,
    )
    return enquiry_resp(e)
