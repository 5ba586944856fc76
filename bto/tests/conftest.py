import os

# settings are read once, at first import of bto.*
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from bto.core.security import create_access_token  # noqa: E402
from bto.db.init_db import init_db  # noqa: E402
from bto.models.enums import MaritalStatus, PersonRole, UnitType  # noqa: E402
from bto.services.application_service import ApplicationService  # noqa: E402
from bto.services.officer_assignment_service import OfficerAssignmentService  # noqa: E402
from bto.services.people_service import PeopleService  # noqa: E402
from bto.services.projects_service import ProjectsService  # noqa: E402


@pytest.fixture(scope="function")
def engine():
    eng = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


class Factory:
    """
    Builds people, projects and applications through the services, so every
    fixture row obeys the same rules as production data.
    """

    def __init__(self, db):
        self.db = db
        self.today = date.today()
        self._seq = 0

    def _nric(self, prefix: str = "S") -> str:
        self._seq += 1
        return f"{prefix}{self._seq:07d}Z"

    def person(
        self,
        *,
        role: PersonRole = PersonRole.APPLICANT,
        age: int = 30,
        marital_status: MaritalStatus = MaritalStatus.MARRIED,
        nric: str = None,
        name: str = None,
    ):
        nric = nric or self._nric("T" if role == PersonRole.OFFICER else "S")
        return PeopleService().create(
            self.db,
            nric=nric,
            name=name or f"Person {nric}",
            age=age,
            marital_status=marital_status,
            role=role,
        )

    def manager(self):
        return self.person(role=PersonRole.MANAGER, age=45)

    def officer(self, **kw):
        return self.person(role=PersonRole.OFFICER, **kw)

    def project(
        self,
        *,
        name: str = "Acacia Breeze",
        manager=None,
        units=None,
        officer_slots: int = 3,
        is_visible: bool = True,
        opening_date: date = None,
        closing_date: date = None,
        neighborhood: str = "Yishun",
    ):
        manager = manager or self.manager()
        return ProjectsService().create(
            self.db,
            manager_nric=manager.nric,
            name=name,
            neighborhood=neighborhood,
            opening_date=opening_date or self.today - timedelta(days=5),
            closing_date=closing_date or self.today + timedelta(days=30),
            units=units if units is not None else {UnitType.TWO_ROOM: 2, UnitType.THREE_ROOM: 2},
            officer_slots=officer_slots,
            is_visible=is_visible,
        )

    def assigned_officer(self, project_name: str, **kw):
        officer = self.officer(**kw)
        svc = OfficerAssignmentService()
        reg = svc.register(self.db, officer_nric=officer.nric, project_name=project_name)
        svc.approve(self.db, registration_id=reg.id)
        return officer

    def application(self, project_name: str, *, unit_type: UnitType = UnitType.TWO_ROOM, applicant=None):
        applicant = applicant or self.person()
        return ApplicationService().create(
            self.db,
            applicant_nric=applicant.nric,
            project_name=project_name,
            unit_type=unit_type,
        )

    def successful_application(self, project_name: str, **kw):
        app = self.application(project_name, **kw)
        return ApplicationService().approve(self.db, application_id=app.id)


@pytest.fixture(scope="function")
def factory(db):
    return Factory(db)


@pytest.fixture(scope="function")
def make_factory():
    return Factory


def bearer(person) -> dict:
    token = create_access_token(person.nric, {"role": person.role, "name": person.name})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def auth():
    return bearer


@pytest.fixture(scope="function")
def client(session_factory):
    from fastapi.testclient import TestClient

    from bto.db.session import get_db
    from bto.main import app

    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
