# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Officer registrations to handle projects.
"""

import logging
from datetime import date
from typing import Callable, List, Optional

from opentelemetry import trace

from ..error_handler import BusinessRuleException, NotFoundException
from ..models.entities import HDBManager, HDBOfficer, OfficerRegistration, Project, User
from ..models.enums import RegistrationStatus, UserRole
from ..services.repository import HousingStores
from .eligibility import windows_overlap
from .lookups import find_active_application, require_project, require_project_owner, require_role

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class OfficerRegistrationController:
    """Registration requests by officers and their approval by managers."""

    def __init__(self, stores: HousingStores, clock: Callable[[], date] = date.today):
        self.stores = stores
        self.clock = clock

    def _registrations_of(self, officer: User) -> List[OfficerRegistration]:
        return [
            registration for registration in self.stores.registrations.get_all()
            if registration.officer_nric == officer.nric
        ]

    def register_for_project(self, officer: HDBOfficer, project_name: str) -> OfficerRegistration:
        """
        Request to handle a project.

        The request does not consume an officer slot; approval does.

        Args:
            officer: Officer registering
            project_name: Project to handle

        Returns:
            The PENDING registration
        """
        with tracer.start_as_current_span("registrations.register") as span:
            span.set_attributes({"officer.nric": officer.nric, "project.name": project_name})
            require_role(officer, UserRole.OFFICER)
            project = require_project(self.stores, project_name)

            if self.check_applied_for_project(officer, project_name):
                raise BusinessRuleException("You cannot handle a project you have applied for.")

            for registration in self._registrations_of(officer):
                if registration.status == RegistrationStatus.REJECTED:
                    continue
                if registration.project_name == project_name:
                    raise BusinessRuleException(f"You have already registered for '{project_name}'.")

                other = self.stores.projects.find_by_id(registration.project_name)
                if other is not None and windows_overlap(
                        other.open_date, other.close_date, project.open_date, project.close_date):
                    raise BusinessRuleException(
                        f"You are already registered for '{other.name}' during an overlapping period."
                    )

            if project.is_full():
                raise BusinessRuleException(f"Project '{project_name}' has no officer slots left.")

            registration = OfficerRegistration(
                officer_nric=officer.nric,
                project_name=project.name,
                updated_by=officer.nric
            )
            self.stores.registrations.save(registration)

            logger.info(
                f"Officer {officer.nric} registered for '{project_name}'",
                extra={"registration_id": registration.id, "officer_nric": officer.nric}
            )
            return registration

    def _managed_registration(self, manager: HDBManager, registration_id: str):
        require_role(manager, UserRole.MANAGER)
        registration = self.stores.registrations.find_by_id(registration_id)
        if registration is None:
            raise NotFoundException(f"Registration '{registration_id}' not found.")

        project = require_project(self.stores, registration.project_name)
        require_project_owner(project, manager)

        if not registration.is_pending():
            raise BusinessRuleException(
                f"Registration is already {str(registration.status).lower()}."
            )
        return project, registration

    def approve_registration(self, manager: HDBManager, registration_id: str) -> OfficerRegistration:
        """Approve a pending registration, taking one officer slot."""
        with tracer.start_as_current_span("registrations.approve") as span:
            span.set_attribute("registration.id", registration_id)
            project, registration = self._managed_registration(manager, registration_id)

            if project.is_full():
                raise BusinessRuleException(f"Project '{project.name}' has no officer slots left.")

            project.registered_officers = [*project.registered_officers, registration.officer_nric]
            project.update_timestamp(manager.nric)
            self.stores.projects.save(project)

            registration.approve(manager.nric)
            self.stores.registrations.save(registration)

            logger.info(
                f"Registration {registration_id} approved",
                extra={
                    "registration_id": registration_id,
                    "officer_nric": registration.officer_nric,
                    "remaining_slots": project.remaining_officer_slots()
                }
            )
            return registration

    def reject_registration(self, manager: HDBManager, registration_id: str) -> OfficerRegistration:
        _, registration = self._managed_registration(manager, registration_id)
        registration.reject(manager.nric)
        self.stores.registrations.save(registration)
        logger.info(f"Registration {registration_id} rejected", extra={"registration_id": registration_id})
        return registration

    # Queries

    def check_applied_for_project(self, officer: User, project_name: str) -> bool:
        """Check if the officer holds an active application for the project."""
        return find_active_application(self.stores, officer.nric, project_name) is not None

    def get_registration_status(self, officer: User, project_name: str) -> Optional[RegistrationStatus]:
        """Status of the officer's latest registration for a project, None if never registered."""
        registrations = [
            registration for registration in self._registrations_of(officer)
            if registration.project_name == project_name
        ]
        if not registrations:
            return None
        # Stable sort keeps storage order for identical timestamps
        latest = sorted(registrations, key=lambda registration: registration.requested_at)[-1]
        return RegistrationStatus(latest.status)

    def get_handling_project(self, officer: User) -> Optional[Project]:
        """
        The project the officer currently handles.

        Resolved from approved registrations, preferring the earliest
        project whose window has not yet closed.
        """
        today = self.clock()
        projects = []
        for registration in self._registrations_of(officer):
            if not registration.is_approved():
                continue
            project = self.stores.projects.find_by_id(registration.project_name)
            if project is not None and project.close_date >= today:
                projects.append(project)

        if not projects:
            return None
        return min(projects, key=lambda project: project.open_date)

    def get_registrations_for_project(self, project_name: str,
                                      status: Optional[RegistrationStatus] = None) -> List[OfficerRegistration]:
        require_project(self.stores, project_name)
        return [
            registration for registration in self.stores.registrations.get_all()
            if registration.project_name == project_name
            and (status is None or registration.status == status)
        ]
