#bto/policies/rbac.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Set

from bto.models.enums import PersonRole


@dataclass(frozen=True)
class Principal:
    nric: str
    role: PersonRole
    display_name: str


# --- Core action constants ---
ACTION_APPLY = "APPLY"
ACTION_REQUEST_WITHDRAWAL = "REQUEST_WITHDRAWAL"
ACTION_SUBMIT_ENQUIRY = "SUBMIT_ENQUIRY"
ACTION_ANSWER_ENQUIRY = "ANSWER_ENQUIRY"
ACTION_REGISTER_FOR_PROJECT = "REGISTER_FOR_PROJECT"
ACTION_BOOK_FLAT = "BOOK_FLAT"
ACTION_MANAGE_PROJECT = "MANAGE_PROJECT"
ACTION_DECIDE_APPLICATION = "DECIDE_APPLICATION"
ACTION_DECIDE_WITHDRAWAL = "DECIDE_WITHDRAWAL"
ACTION_DECIDE_REGISTRATION = "DECIDE_REGISTRATION"
ACTION_MANAGE_PEOPLE = "MANAGE_PEOPLE"
ACTION_VIEW_AUDIT = "VIEW_AUDIT"


def allowed_actions(role: PersonRole) -> Set[str]:
    """
    Pure RBAC: which actions a role may attempt.
    """

    if role == PersonRole.APPLICANT:
        return {ACTION_APPLY, ACTION_REQUEST_WITHDRAWAL, ACTION_SUBMIT_ENQUIRY}

    if role == PersonRole.OFFICER:
        # an officer is also an applicant
        return {
            ACTION_APPLY,
            ACTION_REQUEST_WITHDRAWAL,
            ACTION_SUBMIT_ENQUIRY,
            ACTION_ANSWER_ENQUIRY,
            ACTION_REGISTER_FOR_PROJECT,
            ACTION_BOOK_FLAT,
        }

    if role == PersonRole.MANAGER:
        return {
            ACTION_ANSWER_ENQUIRY,
            ACTION_MANAGE_PROJECT,
            ACTION_DECIDE_APPLICATION,
            ACTION_DECIDE_WITHDRAWAL,
            ACTION_DECIDE_REGISTRATION,
        }

    if role == PersonRole.ADMIN:
        return {ACTION_MANAGE_PEOPLE, ACTION_VIEW_AUDIT}

    return set()


def require_action(principal: Principal, action: str) -> None:
    if action not in allowed_actions(principal.role):
        raise PermissionError(
            f"Role {principal.role.value} not permitted for action {action}."
        )
