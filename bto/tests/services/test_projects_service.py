from datetime import timedelta

import pytest

from bto.core.errors import ConflictError, NotFoundError, ValidationError
from bto.db import repository as repo
from bto.models.enums import MaritalStatus, PersonRole, UnitType
from bto.services.application_service import ApplicationService
from bto.services.people_service import PeopleService
from bto.services.projects_service import ProjectsService


def test_create_provisions_inventory(db, factory):
    p = factory.project(name="Alpha", units={UnitType.TWO_ROOM: 4, UnitType.THREE_ROOM: 1}, officer_slots=5)

    assert p.unit_counts == {"THREE_ROOM": 1, "TWO_ROOM": 4}
    assert p.officer_slots == 5
    assert p.available_officer_slots == 5
    assert p.officer_nrics == []


def test_create_validation(db, factory):
    manager = factory.manager()
    applicant = factory.person()
    svc = ProjectsService()
    base = dict(
        name="Alpha",
        neighborhood="Yishun",
        opening_date=factory.today,
        closing_date=factory.today + timedelta(days=10),
        units={UnitType.TWO_ROOM: 1},
        officer_slots=2,
    )

    with pytest.raises(ValidationError):
        svc.create(db, manager_nric=applicant.nric, **base)
    with pytest.raises(ValidationError):
        svc.create(db, manager_nric=manager.nric, **{**base, "officer_slots": 11})
    with pytest.raises(ValidationError):
        svc.create(db, manager_nric=manager.nric, **{**base, "closing_date": factory.today - timedelta(days=1)})
    with pytest.raises(ValidationError):
        svc.create(db, manager_nric=manager.nric, **{**base, "units": {}})

    svc.create(db, manager_nric=manager.nric, **base)
    with pytest.raises(ConflictError):
        svc.create(db, manager_nric=manager.nric, **base)


def test_list_filters(db, factory):
    manager = factory.manager()
    factory.project(name="Alpha", manager=manager, neighborhood="Yishun", units={UnitType.TWO_ROOM: 1})
    factory.project(name="Beta", manager=manager, neighborhood="Tampines", units={UnitType.THREE_ROOM: 2})
    factory.project(name="Gamma", manager=manager, neighborhood="yishun", units={UnitType.TWO_ROOM: 0}, is_visible=False)
    svc = ProjectsService()

    assert [p.name for p in svc.list(db, filters={"neighborhood": "YISHUN"})] == ["Alpha", "Gamma"]
    assert [p.name for p in svc.list(db, filters={"unit_type": UnitType.TWO_ROOM})] == ["Alpha"]
    assert [p.name for p in svc.list(db, filters={"visible": False})] == ["Gamma"]
    assert len(svc.list(db, filters={"manager_nric": manager.nric})) == 3


def test_list_for_applicant_uses_eligibility(db, factory):
    manager = factory.manager()
    factory.project(name="TwoRoom", manager=manager, units={UnitType.TWO_ROOM: 1})
    factory.project(name="ThreeRoom", manager=manager, units={UnitType.THREE_ROOM: 1})
    factory.project(name="Hidden", manager=manager, is_visible=False)
    single = factory.person(age=40, marital_status=MaritalStatus.SINGLE)
    married = factory.person(age=30, marital_status=MaritalStatus.MARRIED)
    young = factory.person(age=25, marital_status=MaritalStatus.SINGLE)
    svc = ProjectsService()

    assert [p.name for p in svc.list_for_applicant(db, applicant_nric=single.nric)] == ["TwoRoom"]
    assert [p.name for p in svc.list_for_applicant(db, applicant_nric=married.nric)] == ["ThreeRoom", "TwoRoom"]
    assert svc.list_for_applicant(db, applicant_nric=young.nric) == []


def test_list_for_applicant_keeps_current_application_project(db, factory):
    factory.project(name="Alpha")
    applicant = factory.person()
    factory.application("Alpha", applicant=applicant)
    svc = ProjectsService()
    svc.set_visibility(db, name="Alpha", visible=False)

    assert [p.name for p in svc.list_for_applicant(db, applicant_nric=applicant.nric)] == ["Alpha"]


def test_patch_slots_and_units(db, factory):
    factory.project(name="Alpha", officer_slots=3, units={UnitType.TWO_ROOM: 2})
    factory.assigned_officer("Alpha")
    factory.assigned_officer("Alpha")
    svc = ProjectsService()

    with pytest.raises(ConflictError):
        svc.patch(db, name="Alpha", officer_slots=1)

    p = svc.patch(
        db,
        name="Alpha",
        neighborhood="Sembawang",
        officer_slots=4,
        units={UnitType.TWO_ROOM: 6, UnitType.THREE_ROOM: 1},
    )
    assert p.neighborhood == "Sembawang"
    assert p.officer_slots == 4
    assert p.available_officer_slots == 2
    assert p.unit_counts == {"THREE_ROOM": 1, "TWO_ROOM": 6}

    with pytest.raises(ValidationError):
        svc.patch(db, name="Alpha", closing_date=factory.today - timedelta(days=30))
    with pytest.raises(NotFoundError):
        svc.patch(db, name="Nowhere", neighborhood="x")


def test_delete_releases_officers_and_refuses_active_applications(db, factory):
    factory.project(name="Alpha")
    officer = factory.assigned_officer("Alpha")
    app = factory.application("Alpha")
    svc = ProjectsService()

    with pytest.raises(ConflictError):
        svc.delete(db, name="Alpha")

    ApplicationService().reject(db, application_id=app.id)
    released = svc.delete(db, name="Alpha")

    assert released == [officer.nric]
    assert repo.projects.get(db, "Alpha") is None
    assert repo.people.require(db, officer.nric).handling_project_name is None


def test_people_service(db):
    svc = PeopleService()
    p = svc.create(db, nric="s1234567a", name="John", age=35, marital_status=MaritalStatus.SINGLE)
    assert p.nric == "S1234567A"
    assert p.role == PersonRole.APPLICANT.value

    with pytest.raises(ConflictError):
        svc.create(db, nric="S1234567A", name="Again", age=35, marital_status=MaritalStatus.SINGLE)
    with pytest.raises(ValidationError):
        svc.create(db, nric="X123", name="Bad", age=35, marital_status=MaritalStatus.SINGLE)

    svc.create(db, nric="T7654321B", name="Sarah", age=40, marital_status=MaritalStatus.MARRIED, role=PersonRole.OFFICER)
    assert [x.nric for x in svc.list(db, role=PersonRole.OFFICER)] == ["T7654321B"]
    assert len(svc.list(db)) == 2
