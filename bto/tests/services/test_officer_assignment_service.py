import threading
from datetime import timedelta

import pytest

from bto.core.errors import ConflictError, StateError, ValidationError
from bto.core.locks import officer_key, row_locks
from bto.db import repository as repo
from bto.models.enums import RegistrationStatus
from bto.services.application_service import ApplicationService
from bto.services.officer_assignment_service import OfficerAssignmentService


def test_register_with_zero_slots_fails(db, factory):
    factory.project(name="Full", officer_slots=0)
    officer = factory.officer()

    with pytest.raises(ConflictError) as exc:
        OfficerAssignmentService().register(db, officer_nric=officer.nric, project_name="Full")
    assert exc.value.code == "NO_OFFICER_SLOTS"


def test_register_then_approve_takes_exactly_one_slot(db, factory):
    factory.project(name="Alpha", officer_slots=3)
    officer = factory.officer()
    svc = OfficerAssignmentService()

    reg = svc.register(db, officer_nric=officer.nric, project_name="Alpha")
    assert reg.status == RegistrationStatus.PENDING.value
    assert repo.projects.require(db, "Alpha").available_officer_slots == 3

    approved = svc.approve(db, registration_id=reg.id, officer_nric=officer.nric, project_name="Alpha")
    assert approved.status == RegistrationStatus.APPROVED.value

    project = repo.projects.require(db, "Alpha")
    assert project.available_officer_slots == 2
    assert project.officer_nrics == [officer.nric]
    assert repo.people.require(db, officer.nric).handling_project_name == "Alpha"
    assert svc.is_assigned(db, officer_nric=officer.nric, project_name="Alpha")


def test_approve_rechecks_slots(db, factory):
    factory.project(name="Alpha", officer_slots=1)
    first, second = factory.officer(), factory.officer()
    svc = OfficerAssignmentService()

    reg1 = svc.register(db, officer_nric=first.nric, project_name="Alpha")
    reg2 = svc.register(db, officer_nric=second.nric, project_name="Alpha")
    svc.approve(db, registration_id=reg1.id)

    with pytest.raises(ConflictError):
        svc.approve(db, registration_id=reg2.id)

    assert repo.registrations.require(db, reg2.id).status == RegistrationStatus.PENDING.value
    assert repo.people.require(db, second.nric).handling_project_name is None
    assert repo.projects.require(db, "Alpha").available_officer_slots == 0


def test_reject_marks_registration_and_leaves_slots(db, factory):
    factory.project(name="Alpha", officer_slots=2)
    officer = factory.officer()
    svc = OfficerAssignmentService()

    reg = svc.register(db, officer_nric=officer.nric, project_name="Alpha")
    rejected = svc.reject(db, registration_id=reg.id)

    assert rejected.status == RegistrationStatus.REJECTED.value
    assert rejected.decided_at is not None
    assert repo.projects.require(db, "Alpha").available_officer_slots == 2

    with pytest.raises(StateError):
        svc.reject(db, registration_id=reg.id)
    with pytest.raises(StateError):
        svc.approve(db, registration_id=reg.id)


def test_reject_waits_for_the_officer_lock(db, factory, session_factory):
    factory.project(name="Alpha")
    officer_nric = factory.officer().nric
    reg_id = OfficerAssignmentService().register(db, officer_nric=officer_nric, project_name="Alpha").id
    outcome = []

    def decide():
        session = session_factory()
        try:
            outcome.append(OfficerAssignmentService().reject(session, registration_id=reg_id).status)
        finally:
            session.close()

    with row_locks.hold(officer_key(officer_nric)):
        t = threading.Thread(target=decide)
        t.start()
        t.join(timeout=0.3)
        assert t.is_alive()
        assert outcome == []

    t.join(timeout=10)
    assert outcome == [RegistrationStatus.REJECTED.value]


def test_cannot_register_twice_for_same_project(db, factory):
    factory.project(name="Alpha")
    officer = factory.officer()
    svc = OfficerAssignmentService()

    svc.register(db, officer_nric=officer.nric, project_name="Alpha")
    with pytest.raises(ConflictError):
        svc.register(db, officer_nric=officer.nric, project_name="Alpha")


def test_overlap_check_uses_both_windows_today(db, factory):
    manager = factory.manager()
    factory.project(name="Open A", manager=manager)
    factory.project(name="Open B", manager=manager)
    factory.project(
        name="Future C",
        manager=manager,
        opening_date=factory.today + timedelta(days=60),
        closing_date=factory.today + timedelta(days=90),
    )
    officer = factory.assigned_officer("Open A")
    svc = OfficerAssignmentService()

    with pytest.raises(ConflictError) as exc:
        svc.register(db, officer_nric=officer.nric, project_name="Open B")
    assert exc.value.code == "ASSIGNMENT_OVERLAP"

    # C is not open today, so no clash is detected
    reg = svc.register(db, officer_nric=officer.nric, project_name="Future C")
    assert reg.status == RegistrationStatus.PENDING.value


def test_approving_new_project_releases_previous_binding(db, factory):
    manager = factory.manager()
    factory.project(name="Old", manager=manager, officer_slots=2)
    factory.project(
        name="Next",
        manager=manager,
        opening_date=factory.today + timedelta(days=60),
        closing_date=factory.today + timedelta(days=90),
    )
    officer = factory.assigned_officer("Old")
    svc = OfficerAssignmentService()
    assert repo.projects.require(db, "Old").available_officer_slots == 1

    reg = svc.register(db, officer_nric=officer.nric, project_name="Next")
    svc.approve(db, registration_id=reg.id)

    assert repo.people.require(db, officer.nric).handling_project_name == "Next"
    assert repo.projects.require(db, "Old").officer_nrics == []
    assert repo.projects.require(db, "Old").available_officer_slots == 2
    assert repo.projects.require(db, "Next").officer_nrics == [officer.nric]


def test_release_returns_slot(db, factory):
    factory.project(name="Alpha", officer_slots=2)
    officer = factory.assigned_officer("Alpha")
    svc = OfficerAssignmentService()

    assert svc.release(db, officer_nric=officer.nric) == "Alpha"
    assert repo.projects.require(db, "Alpha").available_officer_slots == 2
    assert repo.projects.require(db, "Alpha").officer_nrics == []
    assert svc.release(db, officer_nric=officer.nric) is None


def test_non_officer_cannot_register(db, factory):
    factory.project(name="Alpha")
    applicant = factory.person()

    with pytest.raises(ValidationError):
        OfficerAssignmentService().register(db, officer_nric=applicant.nric, project_name="Alpha")


def test_officer_with_application_cannot_register_for_same_project(db, factory):
    factory.project(name="Alpha")
    officer = factory.officer(age=30)
    ApplicationService().create(
        db, applicant_nric=officer.nric, project_name="Alpha", unit_type="TWO_ROOM"
    )

    with pytest.raises(ConflictError) as exc:
        OfficerAssignmentService().register(db, officer_nric=officer.nric, project_name="Alpha")
    assert exc.value.code == "APPLIED_TO_PROJECT"


def test_list_registrations_filters(db, factory):
    manager = factory.manager()
    factory.project(name="Alpha", manager=manager)
    factory.project(name="Beta", manager=manager)
    a, b = factory.officer(), factory.officer()
    svc = OfficerAssignmentService()
    reg_a = svc.register(db, officer_nric=a.nric, project_name="Alpha")
    svc.register(db, officer_nric=b.nric, project_name="Beta")
    svc.reject(db, registration_id=reg_a.id)

    assert [r.officer_nric for r in svc.list_registrations(db, project_name="Alpha")] == [a.nric]
    assert svc.list_registrations(db, project_name="Alpha", status=RegistrationStatus.PENDING) == []
    assert len(svc.list_registrations(db, officer_nric=b.nric)) == 1
