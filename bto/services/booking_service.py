# bto/services/booking_service.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from bto.core.errors import ConflictError, NotFoundError, StateError, ValidationError
from bto.core.locks import application_key, inventory_key, row_locks
from bto.db import repository as repo
from bto.db.repository import compare_and_set
from bto.db.session import transaction
from bto.models.application import Application
from bto.models.booking import Booking
from bto.models.enums import ApplicationStatus, MaritalStatus, UnitType
from bto.models.person import Person
from bto.services.officer_assignment_service import OfficerAssignmentService
from bto.services.unit_inventory_service import UnitInventoryService

logger = logging.getLogger(__name__)

RECEIPT_RULE = "=" * 49


def _now():
    return datetime.now(timezone.utc)


class BookingService:
    def __init__(
        self,
        inventory: Optional[UnitInventoryService] = None,
        assignments: Optional[OfficerAssignmentService] = None,
    ) -> None:
        self.inventory = inventory or UnitInventoryService()
        self.assignments = assignments or OfficerAssignmentService()

    # ---------------------------
    # MUTATIONS
    # ---------------------------

    def book_flat(self, db: Session, *, application_id: str, officer_nric: str) -> Booking:
        """
        SUCCESSFUL -> BOOKED.

        Checked in order: the application exists and is SUCCESSFUL without a
        booking; the officer handles its project; a unit can be taken. The
        unit, the booking row and the status change commit together or not
        at all.
        """
        app = repo.applications.require(db, application_id)
        keys = (
            application_key(application_id),
            inventory_key(app.project_name, app.unit_type),
        )

        with row_locks.hold(*keys):
            with transaction(db):
                app = repo.applications.get_for_update(db, application_id)
                if app is None:
                    raise NotFoundError(f"Application not found: {application_id}", key=application_id)

                if app.booking_id is not None or app.state == ApplicationStatus.BOOKED:
                    raise ConflictError(
                        "Application is already booked.",
                        code="ALREADY_BOOKED",
                        application_id=application_id,
                    )
                if app.state != ApplicationStatus.SUCCESSFUL:
                    raise StateError(
                        f"Only successful applications can be booked (status {app.status}).",
                        application_id=application_id,
                        status=app.status,
                    )

                project_name = app.project_name
                unit = UnitType(app.unit_type)
                applicant_nric = app.applicant_nric

                if not self.assignments.is_assigned(db, officer_nric=officer_nric, project_name=project_name):
                    raise ValidationError(
                        f"Officer {officer_nric} is not handling {project_name}.",
                        code="OFFICER_NOT_ASSIGNED",
                        officer=officer_nric,
                    )

                if not self.inventory.decrement(db, project_name=project_name, unit_type=unit):
                    raise ConflictError(
                        f"No {unit.description} units left in {project_name}.",
                        code="NO_UNITS_LEFT",
                        unit_type=unit.value,
                    )

                booking = repo.bookings.put(
                    db,
                    Booking(
                        id=str(uuid.uuid4()),
                        application_id=application_id,
                        applicant_nric=applicant_nric,
                        project_name=project_name,
                        unit_type=unit.value,
                        officer_nric=officer_nric,
                        created_at=_now(),
                    ),
                )
                booking_id = booking.id

                ok = compare_and_set(
                    db,
                    Application,
                    where=[
                        Application.id == application_id,
                        Application.status == ApplicationStatus.SUCCESSFUL.value,
                        Application.booking_id.is_(None),
                    ],
                    values={
                        "status": ApplicationStatus.BOOKED.value,
                        "booking_id": booking_id,
                        "updated_at": _now(),
                    },
                )
                if not ok:
                    raise ConflictError(
                        "Application is already booked.",
                        code="ALREADY_BOOKED",
                        application_id=application_id,
                    )

        logger.info(
            "flat booked",
            extra={
                "booking_id": booking_id,
                "application_id": application_id,
                "officer": officer_nric,
                "project": project_name,
                "unit_type": unit.value,
            },
        )
        return repo.bookings.require(db, booking_id)

    # ---------------------------
    # READS
    # ---------------------------

    def get_booking(self, db: Session, *, booking_id: str) -> Booking:
        return repo.bookings.require(db, booking_id)

    def get_bookings_for_project(self, db: Session, *, project_name: str) -> List[Booking]:
        repo.projects.require(db, project_name)
        return list(
            repo.bookings.list_where(
                db,
                Booking.project_name == project_name,
                order_by=Booking.created_at.asc(),
            )
        )

    def booking_report(
        self,
        db: Session,
        *,
        project_name: Optional[str] = None,
        unit_type: Optional[UnitType] = None,
        marital_status: Optional[MaritalStatus] = None,
        min_age: Optional[int] = None,
        max_age: Optional[int] = None,
    ) -> List[Booking]:
        """
        Bookings filtered by project, unit type and applicant attributes.
        """
        stmt = select(Booking).join(Person, Person.nric == Booking.applicant_nric)
        if project_name is not None:
            stmt = stmt.where(Booking.project_name == project_name)
        if unit_type is not None:
            stmt = stmt.where(Booking.unit_type == UnitType(unit_type).value)
        if marital_status is not None:
            stmt = stmt.where(Person.marital_status == MaritalStatus(marital_status).value)
        if min_age is not None:
            stmt = stmt.where(Person.age >= min_age)
        if max_age is not None:
            stmt = stmt.where(Person.age <= max_age)
        stmt = stmt.order_by(Booking.project_name.asc(), Booking.created_at.asc())
        return list(db.execute(stmt).scalars().all())

    def generate_receipt(self, db: Session, *, booking_id: str) -> str:
        booking = repo.bookings.require(db, booking_id)
        applicant = repo.people.require(db, booking.applicant_nric)
        project = repo.projects.require(db, booking.project_name)

        lines = [
            "=============== FLAT BOOKING RECEIPT ===============",
            f"Booking ID: {booking.id}",
            f"Date: {booking.created_at:%Y-%m-%d %H:%M:%S}",
            "",
            "Applicant Information:",
            f"Name: {applicant.name}",
            f"NRIC: {applicant.nric}",
            f"Age: {applicant.age}",
            f"Marital Status: {applicant.marital.value.title()}",
            "",
            "Project Information:",
            f"Project Name: {project.name}",
            f"Neighborhood: {project.neighborhood}",
            f"Flat Type: {UnitType(booking.unit_type).description}",
            "",
            f"Officer NRIC: {booking.officer_nric}",
            RECEIPT_RULE,
        ]
        return "\n".join(lines) + "\n"
