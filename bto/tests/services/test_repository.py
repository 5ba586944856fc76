from datetime import datetime, timezone

import pytest

from bto.core.errors import ConflictError, NotFoundError
from bto.db import repository as repo
from bto.models.person import Person


def _person(nric="S0000001A", name="John"):
    return Person(
        nric=nric,
        name=name,
        age=35,
        marital_status="SINGLE",
        role="APPLICANT",
        created_at=datetime.now(timezone.utc),
    )


def test_put_get_update_delete(db):
    repo.people.put(db, _person())
    db.commit()
    assert repo.people.get(db, "S0000001A").name == "John"

    with pytest.raises(ConflictError):
        repo.people.put(db, _person(name="Again"))
    db.rollback()

    repo.people.update(db, _person(name="Johnny"))
    db.commit()
    assert repo.people.require(db, "S0000001A").name == "Johnny"

    repo.people.delete(db, "S0000001A")
    db.commit()
    assert repo.people.get(db, "S0000001A") is None


def test_missing_keys(db):
    with pytest.raises(NotFoundError):
        repo.people.update(db, _person(nric="S0000002B"))
    with pytest.raises(NotFoundError):
        repo.people.delete(db, "S0000002B")
    with pytest.raises(NotFoundError):
        repo.people.require(db, "S0000002B")


def test_compare_and_set_only_one_winner(db):
    repo.people.put(db, _person())
    db.commit()

    first = repo.compare_and_set(
        db,
        Person,
        where=[Person.nric == "S0000001A", Person.current_application_id.is_(None)],
        values={"current_application_id": "app-1"},
    )
    second = repo.compare_and_set(
        db,
        Person,
        where=[Person.nric == "S0000001A", Person.current_application_id.is_(None)],
        values={"current_application_id": "app-2"},
    )
    db.commit()

    assert (first, second) == (True, False)
    assert repo.people.get(db, "S0000001A").current_application_id == "app-1"
