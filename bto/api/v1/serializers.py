# bto/api/v1/serializers.py
from __future__ import annotations

from bto.services.eligibility import eligible_unit_types


def _iso(dt):
    return dt.isoformat() if dt else None


def person_resp(p) -> dict:
    return {
        "nric": p.nric,
        "name": p.name,
        "age": p.age,
        "maritalStatus": p.marital_status,
        "role": p.role,
        "currentApplicationId": p.current_application_id,
        "handlingProjectName": p.handling_project_name,
        "eligibleUnitTypes": sorted(u.value for u in eligible_unit_types(p.age, p.marital)),
    }


def project_resp(p) -> dict:
    return {
        "name": p.name,
        "neighborhood": p.neighborhood,
        "openingDate": _iso(p.opening_date),
        "closingDate": _iso(p.closing_date),
        "managerNric": p.manager_nric,
        "officerSlots": p.officer_slots,
        "availableOfficerSlots": p.available_officer_slots,
        "officers": p.officer_nrics,
        "isVisible": bool(p.is_visible),
        "units": {
            inv.unit_type: {"provisioned": inv.provisioned, "available": inv.available}
            for inv in p.inventories
        },
        "createdAtIso": _iso(p.created_at),
        "updatedAtIso": _iso(p.updated_at),
    }


def application_resp(a) -> dict:
    return {
        "applicationId": a.id,
        "applicantNric": a.applicant_nric,
        "projectName": a.project_name,
        "unitType": a.unit_type,
        "status": a.status,
        "withdrawalRequested": bool(a.withdrawal_requested),
        "bookingId": a.booking_id,
        "createdAtIso": _iso(a.created_at),
        "updatedAtIso": _iso(a.updated_at),
    }


def booking_resp(b) -> dict:
    return {
        "bookingId": b.id,
        "applicationId": b.application_id,
        "applicantNric": b.applicant_nric,
        "projectName": b.project_name,
        "unitType": b.unit_type,
        "officerNric": b.officer_nric,
        "createdAtIso": _iso(b.created_at),
    }


def registration_resp(r) -> dict:
    return {
        "registrationId": r.id,
        "officerNric": r.officer_nric,
        "projectName": r.project_name,
        "status": r.status,
        "createdAtIso": _iso(r.created_at),
        "decidedAtIso": _iso(r.decided_at),
    }


def enquiry_resp(e) -> dict:
    return {
        "enquiryId": e.id,
        "applicantNric": e.applicant_nric,
        "projectName": e.project_name,
        "text": e.text,
        "response": e.response,
        "responderNric": e.responder_nric,
        "createdAtIso": _iso(e.created_at),
        "answeredAtIso": _iso(e.answered_at),
    }
