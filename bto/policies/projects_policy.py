#bto/policies/projects_policy.py
from __future__ import annotations

from bto.models.enums import PersonRole
from bto.models.project import Project
from bto.policies.rbac import Principal


def can_create_project(principal: Principal) -> bool:
    return principal.role == PersonRole.MANAGER


def can_manage_project(principal: Principal, project: Project) -> bool:
    # only the owning manager edits, decides or deletes
    return principal.role == PersonRole.MANAGER and project.manager_nric == principal.nric


def can_view_project(principal: Principal, project: Project) -> bool:
    if project.is_visible:
        return True
    if principal.role in {PersonRole.MANAGER, PersonRole.ADMIN}:
        return True
    return principal.role == PersonRole.OFFICER and principal.nric in project.officer_nrics


def can_view_project_applications(principal: Principal, project: Project) -> bool:
    if can_manage_project(principal, project):
        return True
    return principal.role == PersonRole.OFFICER and principal.nric in project.officer_nrics
