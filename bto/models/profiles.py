# bto/models/profiles.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from bto.models.enums import PersonRole


@dataclass(frozen=True)
class ApplicantProfile:
    current_application_id: Optional[str]


@dataclass(frozen=True)
class OfficerProfile:
    # officers may also apply, just never to the project they handle
    current_application_id: Optional[str]
    handling_project_name: Optional[str]


@dataclass(frozen=True)
class ManagerProfile:
    pass


@dataclass(frozen=True)
class AdminProfile:
    pass


Profile = Union[ApplicantProfile, OfficerProfile, ManagerProfile, AdminProfile]


def profile_of(person) -> Profile:
    match PersonRole(person.role):
        case PersonRole.APPLICANT:
            return ApplicantProfile(current_application_id=person.current_application_id)
        case PersonRole.OFFICER:
            return OfficerProfile(
                current_application_id=person.current_application_id,
                handling_project_name=person.handling_project_name,
            )
        case PersonRole.MANAGER:
            return ManagerProfile()
        case PersonRole.ADMIN:
            return AdminProfile()


def can_apply(profile: Profile) -> bool:
    match profile:
        case ApplicantProfile() | OfficerProfile():
            return True
        case ManagerProfile() | AdminProfile():
            return False
