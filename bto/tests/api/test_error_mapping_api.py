from bto.models.enums import MaritalStatus, UnitType

API = "/api/v1"


def test_domain_errors_map_to_status_codes(client, factory, auth):
    factory.project(name="Acacia", units={UnitType.TWO_ROOM: 1, UnitType.THREE_ROOM: 1})
    single = factory.person(age=40, marital_status=MaritalStatus.SINGLE)
    h = auth(single)

    r = client.post(f"{API}/applications", json={"projectName": "Nowhere", "unitType": "TWO_ROOM"}, headers=h)
    assert r.status_code == 404
    assert r.json()["detail"]["kind"] == "NOT_FOUND"

    r = client.post(f"{API}/applications", json={"projectName": "Acacia", "unitType": "THREE_ROOM"}, headers=h)
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "NOT_ELIGIBLE"

    r = client.post(f"{API}/applications", json={"projectName": "Acacia", "unitType": "TWO_ROOM"}, headers=h)
    assert r.status_code == 201

    r = client.post(f"{API}/applications", json={"projectName": "Acacia", "unitType": "TWO_ROOM"}, headers=h)
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "ACTIVE_APPLICATION_EXISTS"


def test_booking_pending_application_is_state_conflict(client, factory, auth):
    factory.project(name="Acacia")
    officer = factory.assigned_officer("Acacia")
    app = factory.application("Acacia")

    r = client.post(f"{API}/bookings", json={"applicationId": app.id}, headers=auth(officer))
    assert r.status_code == 409
    assert r.json()["detail"]["kind"] == "STATE"


def test_malformed_body_is_422(client, factory, auth):
    manager = factory.manager()
    r = client.post(
        f"{API}/projects",
        json={
            "name": "Alpha",
            "neighborhood": "Yishun",
            "openingDate": "2030-02-01",
            "closingDate": "2030-01-01",
            "units": {"TWO_ROOM": 1},
            "officerSlots": 1,
        },
        headers=auth(manager),
    )
    assert r.status_code == 422


def test_other_manager_cannot_decide(client, factory, auth):
    factory.project(name="Acacia")
    intruder = factory.manager()
    app = factory.application("Acacia")

    r = client.post(f"{API}/applications/{app.id}/approve", headers=auth(intruder))
    assert r.status_code == 403
