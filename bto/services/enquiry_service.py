# bto/services/enquiry_service.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy.orm import Session

from bto.core.errors import StateError, ValidationError
from bto.db import repository as repo
from bto.db.repository import compare_and_set
from bto.db.session import transaction
from bto.models.enquiry import Enquiry
from bto.models.profiles import (
    AdminProfile,
    ApplicantProfile,
    ManagerProfile,
    OfficerProfile,
)

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc)


def _clean(text: str) -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Enquiry text cannot be empty.", code="EMPTY_TEXT")
    return text


class EnquiryService:
    def _own_unanswered(self, db: Session, enquiry_id: str, author_nric: str) -> Enquiry:
        enq = repo.enquiries.require(db, enquiry_id)
        if enq.applicant_nric != author_nric:
            raise ValidationError("Only the author can change this enquiry.", code="NOT_AUTHOR")
        if enq.is_answered:
            raise StateError("Answered enquiries cannot be changed.", enquiry_id=enquiry_id)
        return enq

    def create(self, db: Session, *, applicant_nric: str, project_name: str, text: str) -> Enquiry:
        body = _clean(text)
        repo.people.require(db, applicant_nric)
        repo.projects.require(db, project_name)

        with transaction(db):
            enq = repo.enquiries.put(
                db,
                Enquiry(
                    id=str(uuid.uuid4()),
                    applicant_nric=applicant_nric,
                    project_name=project_name,
                    text=body,
                    created_at=_now(),
                ),
            )
            enquiry_id = enq.id

        logger.info("enquiry created", extra={"enquiry_id": enquiry_id, "project": project_name})
        return repo.enquiries.require(db, enquiry_id)

    def edit(self, db: Session, *, enquiry_id: str, author_nric: str, text: str) -> Enquiry:
        body = _clean(text)
        with transaction(db):
            self._own_unanswered(db, enquiry_id, author_nric)
            ok = compare_and_set(
                db,
                Enquiry,
                where=[Enquiry.id == enquiry_id, Enquiry.response.is_(None)],
                values={"text": body},
            )
            if not ok:
                raise StateError("Answered enquiries cannot be changed.", enquiry_id=enquiry_id)
        return repo.enquiries.require(db, enquiry_id)

    def delete(self, db: Session, *, enquiry_id: str, author_nric: str) -> None:
        with transaction(db):
            self._own_unanswered(db, enquiry_id, author_nric)
            repo.enquiries.delete(db, enquiry_id)
        logger.info("enquiry deleted", extra={"enquiry_id": enquiry_id})

    def answer(self, db: Session, *, enquiry_id: str, responder_nric: str, response: str) -> Enquiry:
        body = _clean(response)
        enq = repo.enquiries.require(db, enquiry_id)
        responder = repo.people.require(db, responder_nric)

        match responder.profile:
            case ManagerProfile() | AdminProfile():
                pass
            case OfficerProfile(handling_project_name=handled) if handled == enq.project_name:
                pass
            case OfficerProfile():
                raise ValidationError(
                    "Officers can only answer enquiries for the project they handle.",
                    code="NOT_HANDLING_PROJECT",
                )
            case ApplicantProfile():
                raise ValidationError("Applicants cannot answer enquiries.", code="ROLE_CANNOT_ANSWER")

        with transaction(db):
            compare_and_set(
                db,
                Enquiry,
                where=[Enquiry.id == enquiry_id],
                values={
                    "response": body,
                    "responder_nric": responder_nric,
                    "answered_at": _now(),
                },
            )

        logger.info("enquiry answered", extra={"enquiry_id": enquiry_id, "responder": responder_nric})
        return repo.enquiries.require(db, enquiry_id)

    def list_for_applicant(self, db: Session, *, applicant_nric: str) -> List[Enquiry]:
        return list(
            repo.enquiries.list_where(
                db, Enquiry.applicant_nric == applicant_nric, order_by=Enquiry.created_at.asc()
            )
        )

    def list_for_project(self, db: Session, *, project_name: str) -> List[Enquiry]:
        repo.projects.require(db, project_name)
        return list(
            repo.enquiries.list_where(
                db, Enquiry.project_name == project_name, order_by=Enquiry.created_at.asc()
            )
        )
