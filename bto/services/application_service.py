# bto/services/application_service.py
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from bto.core.application_status_graph import can_transition
from bto.core.errors import ConflictError, NotFoundError, StateError, ValidationError
from bto.core.locks import (
    applicant_key,
    application_key,
    inventory_key,
    row_locks,
)
from bto.db import repository as repo
from bto.db.repository import compare_and_set
from bto.db.session import transaction
from bto.models.application import Application
from bto.models.enums import ACTIVE_APPLICATION_STATUSES, ApplicationStatus, UnitType
from bto.models.person import Person
from bto.models.profiles import OfficerProfile, can_apply
from bto.services.eligibility import eligible_unit_types
from bto.services.unit_inventory_service import UnitInventoryService

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc)


class ApplicationService:
    """
    Application state machine:

        PENDING -> SUCCESSFUL | UNSUCCESSFUL
        SUCCESSFUL -> BOOKED   (BookingService.book_flat only)

    Every status change is a conditional UPDATE on the expected current status,
    so two callers racing on one application cannot both win.
    """

    def __init__(self, inventory: Optional[UnitInventoryService] = None) -> None:
        self.inventory = inventory or UnitInventoryService()

    # ---------------------------
    # helpers
    # ---------------------------

    def _transition(
        self,
        db: Session,
        application_id: str,
        current: ApplicationStatus,
        target: ApplicationStatus,
        **extra,
    ) -> None:
        if not can_transition(current, target):
            raise StateError(
                f"Cannot move application from {current.value} to {target.value}.",
                application_id=application_id,
                status=current.value,
            )
        ok = compare_and_set(
            db,
            Application,
            where=[Application.id == application_id, Application.status == current.value],
            values={"status": target.value, "updated_at": _now(), **extra},
        )
        if not ok:
            raise StateError(
                "Application status changed concurrently.",
                application_id=application_id,
            )

    def _clear_link(self, db: Session, applicant_nric: str, application_id: str) -> None:
        compare_and_set(
            db,
            Person,
            where=[
                Person.nric == applicant_nric,
                Person.current_application_id == application_id,
            ],
            values={"current_application_id": None},
        )

    # ---------------------------
    # READS
    # ---------------------------

    def get_application(self, db: Session, *, application_id: str) -> Application:
        return repo.applications.require(db, application_id)

    def get_current_application_for_applicant(
        self, db: Session, *, applicant_nric: str
    ) -> Optional[Application]:
        person = repo.people.require(db, applicant_nric)
        if person.current_application_id is None:
            return None
        return repo.applications.get(db, person.current_application_id)

    def get_applications_for_project(
        self,
        db: Session,
        *,
        project_name: str,
        status: Optional[ApplicationStatus] = None,
    ) -> List[Application]:
        repo.projects.require(db, project_name)
        criteria = [Application.project_name == project_name]
        if status is not None:
            criteria.append(Application.status == ApplicationStatus(status).value)
        return list(
            repo.applications.list_where(db, *criteria, order_by=Application.created_at.asc())
        )

    def get_withdrawal_requests(self, db: Session, *, project_name: str) -> List[Application]:
        repo.projects.require(db, project_name)
        return list(
            repo.applications.list_where(
                db,
                Application.project_name == project_name,
                Application.withdrawal_requested.is_(True),
                order_by=Application.updated_at.asc(),
            )
        )

    def has_active_applications(self, db: Session, *, project_name: str) -> bool:
        row = db.execute(
            select(Application.id).where(
                Application.project_name == project_name,
                Application.status.in_([s.value for s in ACTIVE_APPLICATION_STATUSES]),
            ).limit(1)
        ).first()
        return row is not None

    # ---------------------------
    # MUTATIONS
    # ---------------------------

    def create(
        self,
        db: Session,
        *,
        applicant_nric: str,
        project_name: str,
        unit_type: UnitType,
        today: Optional[date] = None,
    ) -> Application:
        """
        Persist a PENDING application and link it from the applicant.

        Remaining units are checked only as a hint; the unit is taken at
        booking time.
        """
        unit = UnitType(unit_type)
        today = today or date.today()

        with row_locks.hold(applicant_key(applicant_nric)):
            with transaction(db):
                person = repo.people.get_for_update(db, applicant_nric)
                if person is None:
                    raise NotFoundError(f"Person not found: {applicant_nric}", key=applicant_nric)
                project = repo.projects.require(db, project_name)

                profile = person.profile
                if not can_apply(profile):
                    raise ValidationError(
                        f"A {person.role.lower()} cannot apply for a flat.",
                        code="ROLE_CANNOT_APPLY",
                    )
                if isinstance(profile, OfficerProfile) and profile.handling_project_name == project_name:
                    raise ValidationError(
                        "Officers cannot apply to the project they handle.",
                        code="OFFICER_OWN_PROJECT",
                    )
                if not project.is_visible or not project.is_in_application_period(today):
                    raise ValidationError(
                        f"{project_name} is not open for applications.",
                        code="PROJECT_NOT_OPEN",
                    )

                if person.current_application_id is not None:
                    raise ConflictError(
                        "Applicant already has an active application.",
                        code="ACTIVE_APPLICATION_EXISTS",
                        application_id=person.current_application_id,
                    )

                offered = [UnitType(inv.unit_type) for inv in project.inventories]
                if unit not in eligible_unit_types(person.age, person.marital, offered):
                    raise ValidationError(
                        f"Not eligible for a {unit.description} flat in {project_name}.",
                        code="NOT_ELIGIBLE",
                        unit_type=unit.value,
                    )

                if self.inventory.available(db, project_name=project_name, unit_type=unit) <= 0:
                    raise ConflictError(
                        f"No {unit.description} units left in {project_name}.",
                        code="NO_UNITS_LEFT",
                        unit_type=unit.value,
                    )

                now = _now()
                app = repo.applications.put(
                    db,
                    Application(
                        id=str(uuid.uuid4()),
                        applicant_nric=applicant_nric,
                        project_name=project_name,
                        unit_type=unit.value,
                        status=ApplicationStatus.PENDING.value,
                        withdrawal_requested=False,
                        created_at=now,
                        updated_at=now,
                    ),
                )
                app_id = app.id

                # closes the check-then-act window across processes too
                linked = compare_and_set(
                    db,
                    Person,
                    where=[Person.nric == applicant_nric, Person.current_application_id.is_(None)],
                    values={"current_application_id": app_id},
                )
                if not linked:
                    raise ConflictError(
                        "Applicant already has an active application.",
                        code="ACTIVE_APPLICATION_EXISTS",
                    )

        logger.info(
            "application created",
            extra={
                "application_id": app_id,
                "applicant": applicant_nric,
                "project": project_name,
                "unit_type": unit.value,
            },
        )
        return repo.applications.require(db, app_id)

    def approve(self, db: Session, *, application_id: str) -> Application:
        with row_locks.hold(application_key(application_id)):
            with transaction(db):
                app = repo.applications.get_for_update(db, application_id)
                if app is None:
                    raise NotFoundError(f"Application not found: {application_id}", key=application_id)
                self._transition(db, application_id, app.state, ApplicationStatus.SUCCESSFUL)

        logger.info("application approved", extra={"application_id": application_id})
        return repo.applications.require(db, application_id)

    def reject(self, db: Session, *, application_id: str) -> Application:
        with row_locks.hold(application_key(application_id)):
            with transaction(db):
                app = repo.applications.get_for_update(db, application_id)
                if app is None:
                    raise NotFoundError(f"Application not found: {application_id}", key=application_id)
                applicant_nric = app.applicant_nric
                self._transition(db, application_id, app.state, ApplicationStatus.UNSUCCESSFUL)
                self._clear_link(db, applicant_nric, application_id)

        logger.info("application rejected", extra={"application_id": application_id})
        return repo.applications.require(db, application_id)

    def request_withdrawal(self, db: Session, *, application_id: str) -> Application:
        """
        Sets the withdrawal flag whatever the status (PENDING and UNSUCCESSFUL
        included).
        """
        with row_locks.hold(application_key(application_id)):
            with transaction(db):
                repo.applications.require(db, application_id)
                compare_and_set(
                    db,
                    Application,
                    where=[Application.id == application_id],
                    values={"withdrawal_requested": True, "updated_at": _now()},
                )

        logger.info("withdrawal requested", extra={"application_id": application_id})
        return repo.applications.require(db, application_id)

    def approve_withdrawal(self, db: Session, *, application_id: str) -> None:
        """
        Release the held unit (only a booked application holds one), clear the
        applicant link, delete the booking and the application. One transaction.
        """
        app = repo.applications.require(db, application_id)
        keys = [
            application_key(application_id),
            applicant_key(app.applicant_nric),
            inventory_key(app.project_name, app.unit_type),
        ]

        with row_locks.hold(*keys):
            with transaction(db):
                app = repo.applications.get_for_update(db, application_id)
                if app is None:
                    raise NotFoundError(f"Application not found: {application_id}", key=application_id)

                status = app.state
                project_name = app.project_name
                unit = UnitType(app.unit_type)
                applicant_nric = app.applicant_nric
                had_booking = app.booking is not None

                released = False
                if had_booking:
                    released = self.inventory.increment(db, project_name=project_name, unit_type=unit)

                self._clear_link(db, applicant_nric, application_id)

                # booking goes with it (delete-orphan cascade)
                repo.applications.delete(db, application_id)

        logger.info(
            "withdrawal approved",
            extra={
                "application_id": application_id,
                "status": status.value,
                "unit_released": released,
            },
        )
