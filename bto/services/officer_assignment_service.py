# bto/services/officer_assignment_service.py
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from bto.core.errors import ConflictError, StateError, ValidationError
from bto.core.locks import officer_key, project_key, row_locks
from bto.db import repository as repo
from bto.db.repository import compare_and_set
from bto.db.session import transaction
from bto.models.application import Application
from bto.models.enums import ACTIVE_APPLICATION_STATUSES, RegistrationStatus
from bto.models.officer_registration import OfficerRegistration
from bto.models.person import Person
from bto.models.profiles import OfficerProfile
from bto.models.project import Project

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc)


class OfficerAssignmentService:
    """
    Officer <-> project bindings.

    The binding lives on ``people.handling_project_name``; a project's officer
    list is read from that column, so there is a single source of truth.
    ``projects.available_officer_slots`` is only changed by conditional UPDATEs.
    """

    # ---------------------------
    # helpers
    # ---------------------------

    def _require_officer(self, db: Session, officer_nric: str) -> Person:
        person = repo.people.require(db, officer_nric)
        if not isinstance(person.profile, OfficerProfile):
            raise ValidationError(
                f"{officer_nric} is not an officer.",
                code="NOT_AN_OFFICER",
                nric=officer_nric,
            )
        return person

    def _take_slot(self, db: Session, project_name: str) -> bool:
        return compare_and_set(
            db,
            Project,
            where=[Project.name == project_name, Project.available_officer_slots > 0],
            values={
                "available_officer_slots": Project.available_officer_slots - 1,
                "updated_at": _now(),
            },
        )

    def _return_slot(self, db: Session, project_name: str) -> bool:
        return compare_and_set(
            db,
            Project,
            where=[
                Project.name == project_name,
                Project.available_officer_slots < Project.officer_slots,
            ],
            values={
                "available_officer_slots": Project.available_officer_slots + 1,
                "updated_at": _now(),
            },
        )

    def _has_active_application(self, db: Session, officer_nric: str, project_name: str) -> bool:
        row = db.execute(
            select(Application.id).where(
                Application.applicant_nric == officer_nric,
                Application.project_name == project_name,
                Application.status.in_([s.value for s in ACTIVE_APPLICATION_STATUSES]),
            ).limit(1)
        ).first()
        return row is not None

    def _pending_for(self, db: Session, officer_nric: str, project_name: str) -> Optional[OfficerRegistration]:
        return db.execute(
            select(OfficerRegistration).where(
                OfficerRegistration.officer_nric == officer_nric,
                OfficerRegistration.project_name == project_name,
                OfficerRegistration.status == RegistrationStatus.PENDING.value,
            ).limit(1)
        ).scalar_one_or_none()

    def unbind(self, db: Session, person: Person) -> Optional[str]:
        """
        Clear ``person``'s binding and return the slot, inside the caller's
        transaction. Returns the project that was released, if any.
        """
        previous = person.handling_project_name
        if previous is None:
            return None

        ok = compare_and_set(
            db,
            Person,
            where=[Person.nric == person.nric, Person.handling_project_name == previous],
            values={"handling_project_name": None},
        )
        if not ok:
            raise ConflictError("Officer binding changed concurrently; retry.", nric=person.nric)

        # capped at officer_slots; a miss means the slot count was already full
        self._return_slot(db, previous)
        logger.info("officer released", extra={"officer": person.nric, "project": previous})
        return previous

    # ---------------------------
    # READS
    # ---------------------------

    def is_assigned(self, db: Session, *, officer_nric: str, project_name: str) -> bool:
        person = repo.people.get(db, officer_nric)
        return bool(person and person.handling_project_name == project_name)

    def get_registration(self, db: Session, *, registration_id: str) -> OfficerRegistration:
        return repo.registrations.require(db, registration_id)

    def list_registrations(
        self,
        db: Session,
        *,
        project_name: Optional[str] = None,
        officer_nric: Optional[str] = None,
        status: Optional[RegistrationStatus] = None,
    ) -> List[OfficerRegistration]:
        stmt = select(OfficerRegistration)
        if project_name is not None:
            stmt = stmt.where(OfficerRegistration.project_name == project_name)
        if officer_nric is not None:
            stmt = stmt.where(OfficerRegistration.officer_nric == officer_nric)
        if status is not None:
            stmt = stmt.where(OfficerRegistration.status == RegistrationStatus(status).value)
        stmt = stmt.order_by(OfficerRegistration.created_at.asc())
        return list(db.execute(stmt).scalars().all())

    # ---------------------------
    # MUTATIONS
    # ---------------------------

    def register(
        self,
        db: Session,
        *,
        officer_nric: str,
        project_name: str,
        today: Optional[date] = None,
    ) -> OfficerRegistration:
        today = today or date.today()

        with row_locks.hold(officer_key(officer_nric), project_key(project_name)):
            with transaction(db):
                officer = self._require_officer(db, officer_nric)
                project = repo.projects.require(db, project_name)

                current = officer.handling_project_name
                if current == project_name:
                    raise ConflictError(
                        f"Officer is already handling {project_name}.",
                        code="ALREADY_ASSIGNED",
                    )

                if current is not None:
                    bound = repo.projects.get(db, current)
                    # both windows open right now counts as a clash
                    if (
                        bound is not None
                        and bound.is_in_application_period(today)
                        and project.is_in_application_period(today)
                    ):
                        raise ConflictError(
                            f"Officer is handling {current}, whose application period is also open.",
                            code="ASSIGNMENT_OVERLAP",
                            current_project=current,
                        )

                if self._pending_for(db, officer_nric, project_name) is not None:
                    raise ConflictError(
                        "A registration for this project is already pending.",
                        code="REGISTRATION_PENDING",
                    )

                if self._has_active_application(db, officer_nric, project_name):
                    raise ConflictError(
                        "Officer has an application for this project.",
                        code="APPLIED_TO_PROJECT",
                    )

                if project.available_officer_slots <= 0:
                    raise ConflictError(
                        f"No officer slots left in {project_name}.",
                        code="NO_OFFICER_SLOTS",
                    )

                reg = repo.registrations.put(
                    db,
                    OfficerRegistration(
                        officer_nric=officer_nric,
                        project_name=project_name,
                        status=RegistrationStatus.PENDING.value,
                        created_at=_now(),
                    ),
                )
                reg_id = reg.id

        logger.info(
            "officer registration pending",
            extra={"registration_id": reg_id, "officer": officer_nric, "project": project_name},
        )
        return repo.registrations.require(db, reg_id)

    def approve(
        self,
        db: Session,
        *,
        registration_id: str,
        officer_nric: Optional[str] = None,
        project_name: Optional[str] = None,
    ) -> OfficerRegistration:
        """
        PENDING -> APPROVED: take a slot, bind the officer. An earlier binding
        is released (its slot returned) in the same transaction.
        """
        reg = repo.registrations.require(db, registration_id)
        if officer_nric is not None and officer_nric != reg.officer_nric:
            raise ValidationError("Registration belongs to another officer.", registration_id=registration_id)
        if project_name is not None and project_name != reg.project_name:
            raise ValidationError("Registration is for another project.", registration_id=registration_id)

        officer_nric = reg.officer_nric
        project_name = reg.project_name
        officer = self._require_officer(db, officer_nric)

        keys = [officer_key(officer_nric), project_key(project_name)]
        if officer.handling_project_name:
            keys.append(project_key(officer.handling_project_name))

        with row_locks.hold(*keys):
            with transaction(db):
                reg = repo.registrations.get_for_update(db, registration_id)
                if reg is None or reg.status != RegistrationStatus.PENDING.value:
                    raise StateError(
                        "Only pending registrations can be approved.",
                        registration_id=registration_id,
                    )

                officer = repo.people.get_for_update(db, officer_nric)
                if officer.handling_project_name == project_name:
                    raise ConflictError(
                        f"Officer is already handling {project_name}.",
                        code="ALREADY_ASSIGNED",
                    )

                if not self._take_slot(db, project_name):
                    raise ConflictError(
                        f"No officer slots left in {project_name}.",
                        code="NO_OFFICER_SLOTS",
                    )

                previous = self.unbind(db, officer)

                ok = compare_and_set(
                    db,
                    Person,
                    where=[Person.nric == officer_nric, Person.handling_project_name.is_(None)],
                    values={"handling_project_name": project_name},
                )
                if not ok:
                    raise ConflictError("Officer binding changed concurrently; retry.", nric=officer_nric)

                ok = compare_and_set(
                    db,
                    OfficerRegistration,
                    where=[
                        OfficerRegistration.id == registration_id,
                        OfficerRegistration.status == RegistrationStatus.PENDING.value,
                    ],
                    values={"status": RegistrationStatus.APPROVED.value, "decided_at": _now()},
                )
                if not ok:
                    raise StateError("Registration was decided concurrently.", registration_id=registration_id)

        logger.info(
            "officer registration approved",
            extra={
                "registration_id": registration_id,
                "officer": officer_nric,
                "project": project_name,
                "released_project": previous,
            },
        )
        return repo.registrations.require(db, registration_id)

    def reject(self, db: Session, *, registration_id: str) -> OfficerRegistration:
        reg = repo.registrations.require(db, registration_id)
        keys = (officer_key(reg.officer_nric), project_key(reg.project_name))

        with row_locks.hold(*keys):
            with transaction(db):
                ok = compare_and_set(
                    db,
                    OfficerRegistration,
                    where=[
                        OfficerRegistration.id == registration_id,
                        OfficerRegistration.status == RegistrationStatus.PENDING.value,
                    ],
                    values={"status": RegistrationStatus.REJECTED.value, "decided_at": _now()},
                )
                if not ok:
                    raise StateError(
                        "Only pending registrations can be rejected.",
                        registration_id=registration_id,
                    )

        logger.info("officer registration rejected", extra={"registration_id": registration_id})
        return repo.registrations.require(db, registration_id)

    def release(self, db: Session, *, officer_nric: str) -> Optional[str]:
        officer = self._require_officer(db, officer_nric)
        keys = [officer_key(officer_nric)]
        if officer.handling_project_name:
            keys.append(project_key(officer.handling_project_name))

        with row_locks.hold(*keys):
            with transaction(db):
                officer = repo.people.get_for_update(db, officer_nric)
                return self.unbind(db, officer)
