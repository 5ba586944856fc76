import pytest

from bto.core.errors import NotFoundError, StateError, ValidationError
from bto.db import repository as repo
from bto.services.enquiry_service import EnquiryService


def test_create_edit_delete_by_author(db, factory):
    factory.project(name="Alpha")
    applicant = factory.person()
    svc = EnquiryService()

    enq = svc.create(db, applicant_nric=applicant.nric, project_name="Alpha", text="  Is parking included? ")
    assert enq.text == "Is parking included?"
    assert enq.is_answered is False

    edited = svc.edit(db, enquiry_id=enq.id, author_nric=applicant.nric, text="Is season parking included?")
    assert edited.text == "Is season parking included?"

    enquiry_id = enq.id
    svc.delete(db, enquiry_id=enquiry_id, author_nric=applicant.nric)
    assert repo.enquiries.get(db, enquiry_id) is None


def test_empty_text_rejected(db, factory):
    factory.project(name="Alpha")
    applicant = factory.person()

    with pytest.raises(ValidationError):
        EnquiryService().create(db, applicant_nric=applicant.nric, project_name="Alpha", text="   ")


def test_only_author_may_change(db, factory):
    factory.project(name="Alpha")
    author, other = factory.person(), factory.person()
    svc = EnquiryService()
    enq = svc.create(db, applicant_nric=author.nric, project_name="Alpha", text="When is key collection?")

    with pytest.raises(ValidationError):
        svc.edit(db, enquiry_id=enq.id, author_nric=other.nric, text="hijacked")
    with pytest.raises(ValidationError):
        svc.delete(db, enquiry_id=enq.id, author_nric=other.nric)


def test_answer_rules(db, factory):
    manager = factory.manager()
    factory.project(name="Alpha", manager=manager)
    factory.project(name="Beta", manager=manager)
    handling = factory.assigned_officer("Alpha")
    elsewhere = factory.assigned_officer("Beta")
    applicant = factory.person()
    svc = EnquiryService()
    enq = svc.create(db, applicant_nric=applicant.nric, project_name="Alpha", text="Any corner units?")

    with pytest.raises(ValidationError):
        svc.answer(db, enquiry_id=enq.id, responder_nric=applicant.nric, response="yes")
    with pytest.raises(ValidationError):
        svc.answer(db, enquiry_id=enq.id, responder_nric=elsewhere.nric, response="yes")

    answered = svc.answer(db, enquiry_id=enq.id, responder_nric=handling.nric, response="Two of them.")
    assert answered.response == "Two of them."
    assert answered.responder_nric == handling.nric
    assert answered.answered_at is not None

    again = svc.answer(db, enquiry_id=enq.id, responder_nric=manager.nric, response="Three, actually.")
    assert again.responder_nric == manager.nric


def test_answered_enquiry_is_frozen_for_author(db, factory):
    manager = factory.manager()
    factory.project(name="Alpha", manager=manager)
    applicant = factory.person()
    svc = EnquiryService()
    enq = svc.create(db, applicant_nric=applicant.nric, project_name="Alpha", text="Pets allowed?")
    svc.answer(db, enquiry_id=enq.id, responder_nric=manager.nric, response="Small ones.")

    with pytest.raises(StateError):
        svc.edit(db, enquiry_id=enq.id, author_nric=applicant.nric, text="Cats?")
    with pytest.raises(StateError):
        svc.delete(db, enquiry_id=enq.id, author_nric=applicant.nric)


def test_listing(db, factory):
    manager = factory.manager()
    factory.project(name="Alpha", manager=manager)
    factory.project(name="Beta", manager=manager)
    applicant = factory.person()
    svc = EnquiryService()
    svc.create(db, applicant_nric=applicant.nric, project_name="Alpha", text="one")
    svc.create(db, applicant_nric=applicant.nric, project_name="Beta", text="two")

    assert [e.text for e in svc.list_for_applicant(db, applicant_nric=applicant.nric)] == ["one", "two"]
    assert [e.text for e in svc.list_for_project(db, project_name="Beta")] == ["two"]
    with pytest.raises(NotFoundError):
        svc.list_for_project(db, project_name="Gamma")
