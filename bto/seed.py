from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from bto.db import repository as repo
from bto.db.session import SessionLocal
from bto.models.enums import MaritalStatus, PersonRole, UnitType
from bto.services.people_service import PeopleService
from bto.services.projects_service import ProjectsService

DEMO_PEOPLE = [
    # nric, name, age, marital status, role
    ("S1234567A", "John", 35, MaritalStatus.SINGLE, PersonRole.APPLICANT),
    ("T7654321B", "Sarah", 40, MaritalStatus.MARRIED, PersonRole.APPLICANT),
    ("S9876543C", "Grace", 37, MaritalStatus.MARRIED, PersonRole.APPLICANT),
    ("T2345678D", "James", 30, MaritalStatus.MARRIED, PersonRole.OFFICER),
    ("S6543210E", "Emily", 28, MaritalStatus.SINGLE, PersonRole.OFFICER),
    ("T8765432F", "Michael", 36, MaritalStatus.SINGLE, PersonRole.MANAGER),
    ("S5678901G", "Jessica", 26, MaritalStatus.MARRIED, PersonRole.ADMIN),
]

DEMO_PROJECTS = [
    # name, neighborhood, two-room units, three-room units
    ("Acacia Breeze", "Yishun", 2, 3),
    ("Maple Grove", "Tampines", 5, 0),
]


def seed(db: Session, today: Optional[date] = None) -> None:
    """
    Demo data for local development. Safe to run twice.
    """
    today = today or date.today()
    people = PeopleService()
    projects = ProjectsService()

    for nric, name, age, status, role in DEMO_PEOPLE:
        if repo.people.get(db, nric) is None:
            people.create(db, nric=nric, name=name, age=age, marital_status=status, role=role)

    manager_nric = next(p[0] for p in DEMO_PEOPLE if p[4] == PersonRole.MANAGER)
    for name, neighborhood, two_room, three_room in DEMO_PROJECTS:
        if repo.projects.get(db, name) is not None:
            continue
        units = {UnitType.TWO_ROOM: two_room}
        if three_room:
            units[UnitType.THREE_ROOM] = three_room
        projects.create(
            db,
            manager_nric=manager_nric,
            name=name,
            neighborhood=neighborhood,
            opening_date=today - timedelta(days=7),
            closing_date=today + timedelta(days=30),
            units=units,
            officer_slots=3,
            is_visible=True,
        )


if __name__ == "__main__":
    from bto.db.init_db import init_db
    from bto.db.session import engine

    init_db(engine)
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()
