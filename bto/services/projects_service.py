# bto/services/projects_service.py
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bto.core.errors import ConflictError, ValidationError
from bto.core.locks import project_key, row_locks
from bto.db import repository as repo
from bto.db.session import transaction
from bto.models.application import Application
from bto.models.enquiry import Enquiry
from bto.models.enums import UnitType
from bto.models.officer_registration import OfficerRegistration
from bto.models.person import Person
from bto.models.profiles import ManagerProfile
from bto.models.project import Project
from bto.models.unit_inventory import UnitInventory
from bto.services.application_service import ApplicationService
from bto.services.eligibility import eligible_unit_types
from bto.services.officer_assignment_service import OfficerAssignmentService
from bto.services.unit_inventory_service import UnitInventoryService

logger = logging.getLogger(__name__)

MAX_OFFICER_SLOTS = 10


def _now():
    return datetime.now(timezone.utc)


def _check_window(opening: date, closing: date) -> None:
    if opening > closing:
        raise ValidationError(
            "Opening date must not be after closing date.",
            code="INVALID_WINDOW",
            opening_date=opening.isoformat(),
            closing_date=closing.isoformat(),
        )


def _check_slots(slots: int) -> None:
    if slots < 0 or slots > MAX_OFFICER_SLOTS:
        raise ValidationError(
            f"Officer slots must be between 0 and {MAX_OFFICER_SLOTS}.",
            code="INVALID_OFFICER_SLOTS",
            officer_slots=slots,
        )


class ProjectsService:
    def __init__(
        self,
        inventory: Optional[UnitInventoryService] = None,
        assignments: Optional[OfficerAssignmentService] = None,
        applications: Optional[ApplicationService] = None,
    ) -> None:
        self.inventory = inventory or UnitInventoryService()
        self.assignments = assignments or OfficerAssignmentService()
        self.applications = applications or ApplicationService(self.inventory)

    def create(
        self,
        db: Session,
        *,
        manager_nric: str,
        name: str,
        neighborhood: str,
        opening_date: date,
        closing_date: date,
        units: Mapping[UnitType, int],
        officer_slots: int,
        is_visible: bool = False,
    ) -> Project:
        manager = repo.people.require(db, manager_nric)
        if not isinstance(manager.profile, ManagerProfile):
            raise ValidationError("Only managers can create projects.", code="NOT_A_MANAGER")

        name = (name or "").strip()
        if not name:
            raise ValidationError("Project name is required.")
        _check_window(opening_date, closing_date)
        _check_slots(officer_slots)
        if not units:
            raise ValidationError("A project must offer at least one unit type.", code="NO_UNIT_TYPES")

        with row_locks.hold(project_key(name)):
            with transaction(db):
                now = _now()
                repo.projects.put(
                    db,
                    Project(
                        name=name,
                        neighborhood=neighborhood.strip(),
                        opening_date=opening_date,
                        closing_date=closing_date,
                        manager_nric=manager_nric,
                        officer_slots=officer_slots,
                        available_officer_slots=officer_slots,
                        is_visible=is_visible,
                        created_at=now,
                        updated_at=now,
                    ),
                )
                for unit_type, total in units.items():
                    self.inventory.provision(
                        db, project_name=name, unit_type=UnitType(unit_type), total=int(total)
                    )

        logger.info("project created", extra={"project": name, "manager": manager_nric})
        return repo.projects.require(db, name)

    def get(self, db: Session, *, name: str) -> Project:
        return repo.projects.require(db, name)

    def list(
        self,
        db: Session,
        *,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 200,
    ) -> List[Project]:
        filters = filters or {}
        stmt = select(Project)

        if filters.get("neighborhood"):
            stmt = stmt.where(
                func.lower(Project.neighborhood) == str(filters["neighborhood"]).strip().lower()
            )
        if filters.get("unit_type"):
            # offering the type with units remaining
            stmt = stmt.where(
                Project.name.in_(
                    select(UnitInventory.project_name).where(
                        UnitInventory.unit_type == UnitType(filters["unit_type"]).value,
                        UnitInventory.available > 0,
                    )
                )
            )
        if filters.get("visible") is not None:
            stmt = stmt.where(Project.is_visible.is_(bool(filters["visible"])))
        if filters.get("manager_nric"):
            stmt = stmt.where(Project.manager_nric == filters["manager_nric"])

        stmt = stmt.order_by(Project.name.asc()).limit(limit)
        return list(db.execute(stmt).scalars().all())

    def list_for_applicant(self, db: Session, *, applicant_nric: str) -> List[Project]:
        """
        Visible projects offering a unit type the person may apply for, plus
        the project of their current application even if it has been hidden.
        """
        person = repo.people.require(db, applicant_nric)
        current = None
        if person.current_application_id:
            app = repo.applications.get(db, person.current_application_id)
            current = app.project_name if app else None

        out = []
        for project in self.list(db, filters={}, limit=10_000):
            if project.name == current:
                out.append(project)
                continue
            if not project.is_visible:
                continue
            offered = [UnitType(inv.unit_type) for inv in project.inventories]
            if eligible_unit_types(person.age, person.marital, offered):
                out.append(project)
        return out

    def patch(
        self,
        db: Session,
        *,
        name: str,
        neighborhood: Optional[str] = None,
        opening_date: Optional[date] = None,
        closing_date: Optional[date] = None,
        officer_slots: Optional[int] = None,
        units: Optional[Mapping[UnitType, int]] = None,
    ) -> Project:
        with row_locks.hold(project_key(name)):
            with transaction(db):
                p = repo.projects.require(db, name)

                if neighborhood is not None:
                    p.neighborhood = neighborhood.strip()

                opening = opening_date or p.opening_date
                closing = closing_date or p.closing_date
                _check_window(opening, closing)
                p.opening_date = opening
                p.closing_date = closing

                if officer_slots is not None:
                    _check_slots(officer_slots)
                    bound = db.execute(
                        select(func.count()).select_from(Person).where(
                            Person.handling_project_name == name
                        )
                    ).scalar_one()
                    if officer_slots < bound:
                        raise ConflictError(
                            f"{bound} officers already handle {name}.",
                            code="SLOTS_BELOW_ASSIGNED",
                            assigned=bound,
                        )
                    p.officer_slots = officer_slots
                    p.available_officer_slots = officer_slots - bound

                p.updated_at = _now()
                db.flush()

                for unit_type, total in (units or {}).items():
                    self.inventory.provision(
                        db, project_name=name, unit_type=UnitType(unit_type), total=int(total)
                    )

        logger.info("project updated", extra={"project": name})
        return repo.projects.require(db, name)

    def set_visibility(self, db: Session, *, name: str, visible: bool) -> Project:
        with row_locks.hold(project_key(name)):
            with transaction(db):
                p = repo.projects.require(db, name)
                p.is_visible = bool(visible)
                p.updated_at = _now()

        logger.info("project visibility changed", extra={"project": name, "visible": bool(visible)})
        return repo.projects.require(db, name)

    def delete(self, db: Session, *, name: str) -> List[str]:
        """
        Remove a project with no active applications. Bound officers are
        released; returns their NRICs.
        """
        with row_locks.hold(project_key(name)):
            with transaction(db):
                p = repo.projects.require(db, name)
                if self.applications.has_active_applications(db, project_name=name):
                    raise ConflictError(
                        f"{name} still has active applications.",
                        code="ACTIVE_APPLICATIONS_EXIST",
                    )

                released = []
                for officer in list(p.officers):
                    self.assignments.unbind(db, officer)
                    released.append(officer.nric)

                db.execute(sa_delete(OfficerRegistration).where(OfficerRegistration.project_name == name))
                db.execute(sa_delete(Enquiry).where(Enquiry.project_name == name))
                db.execute(sa_delete(Application).where(Application.project_name == name))
                repo.projects.delete(db, name)

        logger.info("project deleted", extra={"project": name, "released_officers": released})
        return released
