# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Store lookups shared by the controllers.
"""

from typing import List, Optional

from ..error_handler import AuthorizationException, NotFoundException
from ..models.entities import Application, Project, User
from ..models.enums import RegistrationStatus, UserRole
from ..services.repository import HousingStores


def require_role(user: User, *roles: UserRole) -> None:
    """Raise AuthorizationException unless the user holds one of the roles."""
    if user is None or user.role not in roles:
        allowed = " or ".join(role.value.lower() for role in roles)
        raise AuthorizationException(f"This action requires the {allowed} role.")


def require_project(stores: HousingStores, project_name: str) -> Project:
    project = stores.projects.find_by_id(project_name)
    if project is None:
        raise NotFoundException(f"Project '{project_name}' not found.")
    return project


def require_project_owner(project: Project, manager: User) -> None:
    if project.manager_nric != manager.nric:
        raise AuthorizationException(f"Only the manager of '{project.name}' can perform this action.")


def find_active_application(stores: HousingStores, applicant_nric: str,
                            project_name: Optional[str] = None) -> Optional[Application]:
    """Find the applicant's active application, optionally for one project."""
    for application in stores.applications.get_all():
        if application.applicant_nric != applicant_nric or not application.is_active():
            continue
        if project_name is None or application.project_name == project_name:
            return application
    return None


def approved_officer_nrics(stores: HousingStores, project_name: str) -> List[str]:
    """NRICs of officers holding an approved registration for a project."""
    return [
        registration.officer_nric
        for registration in stores.registrations.get_all()
        if registration.project_name == project_name
        and registration.status == RegistrationStatus.APPROVED
    ]
