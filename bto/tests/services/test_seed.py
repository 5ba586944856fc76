from bto.db import repository as repo
from bto.seed import DEMO_PEOPLE, DEMO_PROJECTS, seed
from bto.services.people_service import PeopleService


def test_seed_is_idempotent(db):
    seed(db)
    seed(db)

    assert len(PeopleService().list(db)) == len(DEMO_PEOPLE)
    for name, _, two_room, three_room in DEMO_PROJECTS:
        p = repo.projects.require(db, name)
        assert p.is_visible
        assert p.unit_counts.get("TWO_ROOM") == two_room
        assert p.unit_counts.get("THREE_ROOM", 0) == three_room
