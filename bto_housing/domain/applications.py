# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Application workflow: apply, withdraw, manager decisions and officer booking.

Status transitions:

    PENDING --approve--> APPROVED --book--> BOOKED
    PENDING --reject--> REJECTED
    PENDING|APPROVED --withdraw--> WITHDRAWAL_REQUESTED
    WITHDRAWAL_REQUESTED --approve withdrawal--> (record removed)
    WITHDRAWAL_REQUESTED --reject withdrawal--> previous status

A unit of inventory is committed on approval and released again when an
approved or booked application is withdrawn.
"""

import logging
from datetime import date
from typing import Callable, List, Optional, Union

from opentelemetry import trace

from ..error_handler import (
    AuthorizationException,
    BusinessRuleException,
    NotFoundException,
    SystemException
)
from ..models.entities import Application, HDBManager, HDBOfficer, Project, User
from ..models.enums import ApplicationStatus, FlatType, RegistrationStatus, UserRole
from ..models.responses import BookingReceipt
from ..services.repository import HousingStores
from .eligibility import check_flat_type_eligibility, project_matches_marital_status
from .lookups import (
    approved_officer_nrics,
    find_active_application,
    require_project,
    require_project_owner,
    require_role
)
from .validation import parse_flat_type

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class ApplicationController:
    """State transitions on the single active application of each applicant."""

    def __init__(self, stores: HousingStores, clock: Callable[[], date] = date.today):
        self.stores = stores
        self.clock = clock

    # Queries

    def get_application(self, applicant: User) -> Optional[Application]:
        """The applicant's active application, if any."""
        return find_active_application(self.stores, applicant.nric)

    def get_applications_for_project(self, project_name: str,
                                     status: Optional[ApplicationStatus] = None) -> List[Application]:
        require_project(self.stores, project_name)
        return [
            application for application in self.stores.applications.get_all()
            if application.project_name == project_name
            and (status is None or application.status == status)
        ]

    def get_withdrawal_requests(self, project_name: str) -> List[Application]:
        return self.get_applications_for_project(project_name, ApplicationStatus.WITHDRAWAL_REQUESTED)

    # Applicant actions

    def apply_for_project(self, applicant: User, project_name: str,
                          flat_type: Union[str, FlatType]) -> Application:
        """
        Create a PENDING application.

        Args:
            applicant: Applicant or officer applying
            project_name: Project to apply for
            flat_type: Requested flat type

        Returns:
            The stored application
        """
        with tracer.start_as_current_span("applications.apply") as span:
            require_role(applicant, UserRole.APPLICANT, UserRole.OFFICER)
            requested_type = parse_flat_type(flat_type)

            span.set_attributes({
                "applicant.nric": applicant.nric,
                "project.name": project_name,
                "flat.type": requested_type.value
            })

            if find_active_application(self.stores, applicant.nric) is not None:
                raise BusinessRuleException(
                    "You already have an existing application. You cannot apply for multiple projects."
                )

            project = require_project(self.stores, project_name)
            today = self.clock()
            if not project.visible or not project.is_open_on(today):
                raise BusinessRuleException(f"Project '{project_name}' is not open for applications.")

            if not project_matches_marital_status(project, applicant):
                raise BusinessRuleException("This project is not available for your application type.")

            eligibility = check_flat_type_eligibility(applicant, requested_type)
            if not eligibility.allowed:
                raise BusinessRuleException(eligibility.reason)

            flat = project.get_flat(requested_type)
            if flat is None:
                raise BusinessRuleException(
                    f"Flat type '{requested_type.value}' is not offered in project '{project_name}'."
                )
            if not flat.has_available_units():
                raise BusinessRuleException(f"No available units for {requested_type.value} flats.")

            if applicant.role == UserRole.OFFICER and self._is_registered_officer(applicant, project_name):
                raise BusinessRuleException("You cannot apply for a project you are registered to handle.")

            application = Application(
                applicant_nric=applicant.nric,
                project_name=project.name,
                flat_type=requested_type,
                applicant_name=applicant.name,
                applicant_age=applicant.age,
                applicant_marital_status=applicant.marital_status,
                applied_on=today,
                updated_by=applicant.nric
            )
            self.stores.applications.save(application)

            logger.info(
                f"Application submitted for '{project_name}'",
                extra={
                    "application_id": application.id,
                    "applicant_nric": applicant.nric,
                    "flat_type": requested_type.value
                }
            )
            return application

    def withdraw_application(self, applicant: User) -> Application:
        """Request withdrawal of the active application; a manager must approve it."""
        application = find_active_application(self.stores, applicant.nric)
        if application is None:
            raise NotFoundException("You have no active application to withdraw.")

        if not application.can_withdraw():
            raise BusinessRuleException(
                f"Applications in status {application.status} cannot be withdrawn."
            )

        application.request_withdrawal(applicant.nric)
        self.stores.applications.save(application)

        logger.info(
            f"Withdrawal requested for application {application.id}",
            extra={"application_id": application.id, "previous_status": application.previous_status}
        )
        return application

    # Manager decisions

    def _managed_application(self, manager: HDBManager, applicant_nric: str, project_name: str):
        require_role(manager, UserRole.MANAGER)
        project = require_project(self.stores, project_name)
        require_project_owner(project, manager)

        application = find_active_application(self.stores, applicant_nric, project_name)
        if application is None:
            raise NotFoundException(
                f"No application found for applicant {applicant_nric} in project '{project_name}'."
            )
        return project, application

    def _save_with_inventory(self, project: Project, application: Application,
                             rollback: Callable[[], None]) -> None:
        """Persist a project inventory change together with the application change."""
        self.stores.projects.save(project)
        try:
            self.stores.applications.save(application)
        except SystemException:
            rollback()
            self.stores.projects.save(project)
            raise

    def approve_application(self, manager: HDBManager, applicant_nric: str, project_name: str) -> Application:
        """Approve a pending application, committing one unit of its flat type."""
        with tracer.start_as_current_span("applications.approve") as span:
            span.set_attributes({"applicant.nric": applicant_nric, "project.name": project_name})
            project, application = self._managed_application(manager, applicant_nric, project_name)

            if not application.can_decide():
                raise BusinessRuleException(
                    f"Only pending applications can be approved (current status: {application.status})."
                )

            flat = project.get_flat(application.flat_type)
            if flat is None or not flat.has_available_units():
                raise BusinessRuleException(f"No {application.flat_type} units left in '{project_name}'.")

            flat.reserve_unit()
            project.update_timestamp(manager.nric)
            application.approve(manager.nric)
            self._save_with_inventory(project, application, flat.release_unit)

            span.set_attribute("flat.available_units", flat.available_units)
            logger.info(
                f"Application {application.id} approved",
                extra={
                    "application_id": application.id,
                    "manager_nric": manager.nric,
                    "available_units": flat.available_units
                }
            )
            return application

    def reject_application(self, manager: HDBManager, applicant_nric: str, project_name: str) -> Application:
        _, application = self._managed_application(manager, applicant_nric, project_name)

        if not application.can_decide():
            raise BusinessRuleException(
                f"Only pending applications can be rejected (current status: {application.status})."
            )

        application.reject(manager.nric)
        self.stores.applications.save(application)
        logger.info(f"Application {application.id} rejected", extra={"application_id": application.id})
        return application

    def approve_withdrawal(self, manager: HDBManager, applicant_nric: str, project_name: str) -> Application:
        """Remove the application, returning any unit it held to the pool."""
        with tracer.start_as_current_span("applications.approve_withdrawal") as span:
            span.set_attributes({"applicant.nric": applicant_nric, "project.name": project_name})
            project, application = self._managed_application(manager, applicant_nric, project_name)

            if application.status != ApplicationStatus.WITHDRAWAL_REQUESTED:
                raise BusinessRuleException("This application has no pending withdrawal request.")

            if application.holds_unit():
                flat = project.get_flat(application.flat_type)
                if flat is not None:
                    if application.previous_status == ApplicationStatus.BOOKED:
                        flat.cancel_booking()
                    else:
                        flat.release_unit()
                    project.update_timestamp(manager.nric)
                    self.stores.projects.save(project)

            self.stores.applications.delete(application.id)

            logger.info(
                f"Withdrawal approved, application {application.id} removed",
                extra={"application_id": application.id, "released_unit": application.holds_unit()}
            )
            return application

    def reject_withdrawal(self, manager: HDBManager, applicant_nric: str, project_name: str) -> Application:
        _, application = self._managed_application(manager, applicant_nric, project_name)

        if application.status != ApplicationStatus.WITHDRAWAL_REQUESTED:
            raise BusinessRuleException("This application has no pending withdrawal request.")

        application.cancel_withdrawal(manager.nric)
        self.stores.applications.save(application)
        logger.info(
            f"Withdrawal rejected, application {application.id} back to {application.status}",
            extra={"application_id": application.id}
        )
        return application

    # Officer booking

    def _is_registered_officer(self, officer: User, project_name: str) -> bool:
        return any(
            registration.officer_nric == officer.nric
            and registration.project_name == project_name
            and registration.status != RegistrationStatus.REJECTED
            for registration in self.stores.registrations.get_all()
        )

    def complete_booking(self, officer: HDBOfficer, applicant_nric: str, project_name: str) -> BookingReceipt:
        """
        Convert an approved application into a booking.

        Args:
            officer: Officer assigned to the project
            applicant_nric: Applicant whose application is booked
            project_name: Project of the application

        Returns:
            Booking receipt for the applicant
        """
        with tracer.start_as_current_span("applications.book") as span:
            span.set_attributes({
                "officer.nric": officer.nric,
                "applicant.nric": applicant_nric,
                "project.name": project_name
            })
            require_role(officer, UserRole.OFFICER)
            project = require_project(self.stores, project_name)

            if officer.nric not in approved_officer_nrics(self.stores, project_name):
                raise AuthorizationException(
                    f"You are not authorized to handle bookings for '{project_name}'."
                )

            application = find_active_application(self.stores, applicant_nric, project_name)
            if application is None:
                raise NotFoundException(
                    f"No application found for applicant {applicant_nric} in project '{project_name}'."
                )
            if not application.can_book():
                raise BusinessRuleException(
                    f"Only approved applications can be booked (current status: {application.status})."
                )

            flat = project.get_flat(application.flat_type)
            if flat is None:
                raise BusinessRuleException(
                    f"Flat type '{application.flat_type}' does not exist in '{project_name}'."
                )

            flat.book_unit()
            project.update_timestamp(officer.nric)
            application.mark_booked(officer.nric, self.clock(), flat.price)
            self._save_with_inventory(
                project, application,
                lambda: setattr(flat, "booked_units", flat.booked_units - 1)
            )

            logger.info(
                f"Booking completed for {applicant_nric} in '{project_name}'",
                extra={
                    "application_id": application.id,
                    "officer_nric": officer.nric,
                    "flat_type": application.flat_type,
                    "price": flat.price
                }
            )
            return self._receipt(application, project)

    def generate_booking_receipt(self, applicant_nric: str, project_name: str) -> BookingReceipt:
        """Receipt of a booked application. Raises NotFoundException if none exists."""
        for application in self.stores.applications.get_all():
            if (application.applicant_nric == applicant_nric
                    and application.project_name == project_name
                    and application.status == ApplicationStatus.BOOKED):
                return self._receipt(application, require_project(self.stores, project_name))

        raise NotFoundException(
            f"No booked application found for applicant {applicant_nric} in project '{project_name}'."
        )

    @staticmethod
    def _receipt(application: Application, project: Project) -> BookingReceipt:
        return BookingReceipt(
            applicant_name=application.applicant_name,
            nric=application.applicant_nric,
            age=application.applicant_age,
            marital_status=application.applicant_marital_status,
            flat_type=application.flat_type,
            project_name=project.name,
            neighborhood=project.neighborhood,
            booking_date=application.booked_on,
            price=application.booked_price
        )
