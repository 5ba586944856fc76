from datetime import timedelta

from bto.models.enums import MaritalStatus, PersonRole

API = "/api/v1"


def _project_body(factory, **overrides):
    body = {
        "name": "Acacia",
        "neighborhood": "Yishun",
        "openingDate": (factory.today - timedelta(days=1)).isoformat(),
        "closingDate": (factory.today + timedelta(days=30)).isoformat(),
        "units": {"TWO_ROOM": 2, "THREE_ROOM": 1},
        "officerSlots": 2,
        "isVisible": True,
    }
    body.update(overrides)
    return body


def test_apply_book_withdraw_through_http(client, factory, auth):
    manager = factory.manager()
    officer = factory.officer()
    applicant = factory.person(age=36, marital_status=MaritalStatus.SINGLE, name="John")
    admin = factory.person(role=PersonRole.ADMIN)
    m, o, a = auth(manager), auth(officer), auth(applicant)

    r = client.post(f"{API}/projects", json=_project_body(factory), headers=m)
    assert r.status_code == 201, r.text
    assert r.json()["units"]["TWO_ROOM"] == {"provisioned": 2, "available": 2}

    r = client.post(f"{API}/officer-registrations", json={"projectName": "Acacia"}, headers=o)
    assert r.status_code == 201, r.text
    reg_id = r.json()["registrationId"]

    r = client.post(f"{API}/officer-registrations/{reg_id}/approve", headers=m)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "APPROVED"

    r = client.post(f"{API}/applications", json={"projectName": "Acacia", "unitType": "TWO_ROOM"}, headers=a)
    assert r.status_code == 201, r.text
    app_id = r.json()["applicationId"]
    assert r.json()["status"] == "PENDING"

    r = client.post(f"{API}/applications/{app_id}/approve", headers=m)
    assert r.json()["status"] == "SUCCESSFUL"

    r = client.post(f"{API}/bookings", json={"applicationId": app_id}, headers=o)
    assert r.status_code == 201, r.text
    booking_id = r.json()["bookingId"]
    assert r.json()["officerNric"] == officer.nric

    r = client.get(f"{API}/bookings/{booking_id}/receipt", headers=a)
    assert r.status_code == 200
    receipt = r.json()["receipt"]
    assert "Name: John" in receipt
    assert "Flat Type: 2-Room" in receipt
    assert f"Officer NRIC: {officer.nric}" in receipt

    r = client.get(f"{API}/projects/Acacia", headers=m)
    assert r.json()["units"]["TWO_ROOM"]["available"] == 1
    assert r.json()["officers"] == [officer.nric]

    r = client.get(f"{API}/applications/me", headers=a)
    assert r.json()["application"]["status"] == "BOOKED"

    r = client.post(f"{API}/applications/{app_id}/withdrawal", headers=a)
    assert r.status_code == 200
    assert r.json()["withdrawalRequested"] is True

    r = client.get(f"{API}/projects/Acacia/withdrawals", headers=m)
    assert [x["applicationId"] for x in r.json()["applications"]] == [app_id]

    r = client.post(f"{API}/applications/{app_id}/withdrawal/approve", headers=m)
    assert r.status_code == 200
    assert r.json() == {"applicationId": app_id, "deleted": True}

    assert client.get(f"{API}/applications/me", headers=a).json() == {"application": None}
    r = client.get(f"{API}/projects/Acacia", headers=m)
    assert r.json()["units"]["TWO_ROOM"]["available"] == 2

    r = client.get(f"{API}/audit", params={"projectName": "Acacia"}, headers=auth(admin))
    assert r.status_code == 200
    actions = {e["action"] for e in r.json()["entries"]}
    assert {
        "PROJECT_CREATED",
        "OFFICER_REGISTERED",
        "OFFICER_APPROVED",
        "APPLICATION_CREATED",
        "APPLICATION_APPROVED",
        "FLAT_BOOKED",
        "WITHDRAWAL_REQUESTED",
        "WITHDRAWAL_APPROVED",
    } <= actions


def test_enquiry_round_trip(client, factory, auth):
    manager = factory.manager()
    factory.project(name="Acacia", manager=manager)
    applicant = factory.person()
    a = auth(applicant)

    r = client.post(f"{API}/enquiries", json={"projectName": "Acacia", "text": "Parking?"}, headers=a)
    assert r.status_code == 201, r.text
    enquiry_id = r.json()["enquiryId"]

    r = client.patch(f"{API}/enquiries/{enquiry_id}", json={"text": "Season parking?"}, headers=a)
    assert r.json()["text"] == "Season parking?"

    r = client.post(f"{API}/enquiries/{enquiry_id}/answer", json={"response": "Yes."}, headers=auth(manager))
    assert r.status_code == 200
    assert r.json()["responderNric"] == manager.nric

    r = client.patch(f"{API}/enquiries/{enquiry_id}", json={"text": "again"}, headers=a)
    assert r.status_code == 409

    r = client.get(f"{API}/enquiries/me", headers=a)
    assert [e["response"] for e in r.json()["enquiries"]] == ["Yes."]
