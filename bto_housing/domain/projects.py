# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Project browsing, manager maintenance of projects and applicant reports.
"""

import logging
from datetime import date
from typing import Callable, List, Optional, Union

from opentelemetry import trace

from ..error_handler import BusinessRuleException, ValidationException
from ..models.entities import Flat, HDBManager, Project, User
from ..models.enums import ApplicationStatus, FlatType, MaritalStatus, UserRole
from ..models.responses import ApplicantReportEntry
from ..services.repository import HousingStores
from .eligibility import project_matches_marital_status
from .lookups import require_project, require_project_owner, require_role
from .validation import (
    MAX_NAME_LENGTH,
    MAX_REPORT_AGE,
    is_blank,
    parse_date,
    parse_flat_type,
    parse_marital_status,
    parse_non_negative_int,
    parse_officer_slots,
    parse_visibility,
    require_text,
    validate_window
)

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DateInput = Union[str, date]


class ProjectController:
    """Visibility filtering and manager-side project maintenance."""

    def __init__(self, stores: HousingStores, clock: Callable[[], date] = date.today):
        self.stores = stores
        self.clock = clock

    # Browsing

    def get_visible_projects(self, applicant: User) -> List[Project]:
        """
        Projects an applicant can browse.

        A project is listed when its visibility is on, its application
        window has opened, and it suits the applicant's marital status.
        """
        today = self.clock()
        projects = [
            project for project in self.stores.projects.get_all()
            if project.visible
            and project.open_date <= today
            and project_matches_marital_status(project, applicant)
        ]
        return sorted(projects, key=lambda project: project.name)

    def get_opening_projects(self, applicant: User) -> List[Project]:
        """Visible projects whose application window contains today."""
        today = self.clock()
        return [project for project in self.get_visible_projects(applicant) if project.is_open_on(today)]

    def get_project(self, project_name: str) -> Project:
        return require_project(self.stores, project_name)

    def get_all_projects(self) -> List[Project]:
        return sorted(self.stores.projects.get_all(), key=lambda project: project.name)

    def get_projects_by_manager(self, manager: HDBManager) -> List[Project]:
        return [project for project in self.get_all_projects() if project.manager_nric == manager.nric]

    # Manager maintenance

    def _check_manager_window(self, manager: HDBManager, open_date: date, close_date: date,
                              exclude: Optional[str] = None) -> None:
        for project in self.get_projects_by_manager(manager):
            if project.name == exclude:
                continue
            if project.overlaps(open_date, close_date):
                raise BusinessRuleException(
                    f"You are already handling project '{project.name}' during this period."
                )

    def create_project(
        self,
        manager: HDBManager,
        name: str,
        neighborhood: str,
        open_date: DateInput,
        close_date: DateInput,
        officer_slots: Union[str, int],
        visible: Union[str, bool] = True
    ) -> Project:
        """
        Create a project owned by the manager.

        Args:
            manager: Manager creating the project
            name: Unique project name
            neighborhood: Neighborhood
            open_date: Window opening date (dd/MM/yyyy or date)
            close_date: Window closing date (dd/MM/yyyy or date)
            officer_slots: Number of officers allowed, 1 to 10
            visible: Initial visibility

        Returns:
            The stored project
        """
        with tracer.start_as_current_span("projects.create") as span:
            require_role(manager, UserRole.MANAGER)

            name = require_text(name, "Project name", MAX_NAME_LENGTH)
            neighborhood = require_text(neighborhood, "Neighborhood", MAX_NAME_LENGTH)
            opens = parse_date(open_date, "Application open date")
            closes = parse_date(close_date, "Application close date")
            validate_window(opens, closes)
            slots = parse_officer_slots(officer_slots)
            is_visible = parse_visibility(visible)

            span.set_attributes({
                "project.name": name,
                "manager.nric": manager.nric
            })

            if self.stores.projects.exists(name):
                raise BusinessRuleException(f"A project with the name '{name}' already exists.")

            self._check_manager_window(manager, opens, closes)

            project = Project(
                name=name,
                neighborhood=neighborhood,
                open_date=opens,
                close_date=closes,
                officer_slots=slots,
                visible=is_visible,
                manager_nric=manager.nric,
                updated_by=manager.nric
            )
            self.stores.projects.save(project)

            logger.info(
                f"Project '{name}' created",
                extra={
                    "project_name": name,
                    "manager_nric": manager.nric,
                    "open_date": opens.isoformat(),
                    "close_date": closes.isoformat()
                }
            )
            return project

    def update_project(
        self,
        manager: HDBManager,
        project_name: str,
        neighborhood: Optional[str] = None,
        open_date: Optional[DateInput] = None,
        close_date: Optional[DateInput] = None,
        officer_slots: Optional[Union[str, int]] = None
    ) -> Project:
        """Update project details. Arguments left as None keep their value."""
        with tracer.start_as_current_span("projects.update") as span:
            span.set_attribute("project.name", project_name)
            require_role(manager, UserRole.MANAGER)
            project = require_project(self.stores, project_name)
            require_project_owner(project, manager)

            changes = {}
            if neighborhood is not None:
                changes["neighborhood"] = require_text(neighborhood, "Neighborhood", MAX_NAME_LENGTH)

            opens = project.open_date if is_blank(open_date) else parse_date(open_date, "Application open date")
            closes = project.close_date if is_blank(close_date) else parse_date(close_date, "Application close date")
            validate_window(opens, closes)
            changes["open_date"] = opens
            changes["close_date"] = closes

            if officer_slots is not None:
                slots = parse_officer_slots(officer_slots)
                if slots < len(project.registered_officers):
                    raise BusinessRuleException(
                        f"Project already has {len(project.registered_officers)} approved officers."
                    )
                changes["officer_slots"] = slots

            self._check_manager_window(manager, opens, closes, exclude=project.name)

            updated = Project.model_validate({**project.model_dump(), **changes})
            updated.update_timestamp(manager.nric)
            self.stores.projects.save(updated)

            logger.info(
                f"Project '{project_name}' updated",
                extra={"project_name": project_name, "changes": sorted(changes)}
            )
            return updated

    def add_flat_to_project(
        self,
        manager: HDBManager,
        project_name: str,
        flat_type: Union[str, FlatType],
        units: Union[str, int],
        price: Union[str, int]
    ) -> Project:
        """Add inventory for one flat type to a project."""
        require_role(manager, UserRole.MANAGER)
        project = require_project(self.stores, project_name)
        require_project_owner(project, manager)

        resolved_type = parse_flat_type(flat_type)
        total_units = parse_non_negative_int(units, "Total units")
        selling_price = parse_non_negative_int(price, "Selling price")

        if project.offers(resolved_type):
            raise BusinessRuleException(
                f"Flat type '{resolved_type.value}' already exists in project '{project_name}'."
            )

        project.flats = [
            *project.flats,
            Flat(
                flat_type=resolved_type,
                total_units=total_units,
                available_units=total_units,
                price=selling_price
            )
        ]
        project.update_timestamp(manager.nric)
        self.stores.projects.save(project)

        logger.info(
            f"Added {resolved_type.value} flats to '{project_name}'",
            extra={"project_name": project_name, "units": total_units, "price": selling_price}
        )
        return project

    def toggle_project_visibility(self, manager: HDBManager, project_name: str,
                                  visible: Union[str, bool]) -> Project:
        """Set project visibility. Setting the current value again is a no-op."""
        require_role(manager, UserRole.MANAGER)
        project = require_project(self.stores, project_name)
        require_project_owner(project, manager)
        is_visible = parse_visibility(visible)

        if project.visible != is_visible:
            project.visible = is_visible
            project.update_timestamp(manager.nric)
            self.stores.projects.save(project)
            logger.info(f"Project '{project_name}' visibility set to {'ON' if is_visible else 'OFF'}")

        return project

    # Reports

    def generate_applicants_report(
        self,
        manager: HDBManager,
        project_name: Optional[str] = None,
        flat_type: Optional[Union[str, FlatType]] = None,
        marital_status: Optional[Union[str, MaritalStatus]] = None,
        min_age: Optional[Union[str, int]] = None,
        max_age: Optional[Union[str, int]] = None,
        status: Optional[ApplicationStatus] = None
    ) -> List[ApplicantReportEntry]:
        """
        Project applications into report entries.

        Args:
            manager: Manager requesting the report
            project_name: Restrict to one project
            flat_type: Restrict to one flat type
            marital_status: Restrict to "single" or "married"
            min_age: Inclusive lower age bound, defaults to 0
            max_age: Inclusive upper age bound, defaults to 150
            status: Restrict to one application status

        Returns:
            Report entries sorted by project then applicant name
        """
        with tracer.start_as_current_span("projects.report") as span:
            require_role(manager, UserRole.MANAGER)

            if not is_blank(project_name):
                require_project(self.stores, project_name)
            wanted_type = None if is_blank(flat_type) else parse_flat_type(flat_type)
            wanted_status = None if is_blank(marital_status) else parse_marital_status(marital_status)
            lower = 0 if is_blank(min_age) else parse_non_negative_int(min_age, "Minimum age")
            upper = MAX_REPORT_AGE if is_blank(max_age) else parse_non_negative_int(max_age, "Maximum age")
            if lower > upper:
                raise ValidationException("Minimum age cannot be greater than maximum age.")

            entries = []
            for application in self.stores.applications.get_all():
                if not is_blank(project_name) and application.project_name != project_name:
                    continue
                if wanted_type is not None and application.flat_type != wanted_type:
                    continue
                if wanted_status is not None and application.applicant_marital_status != wanted_status:
                    continue
                if not lower <= application.applicant_age <= upper:
                    continue
                if status is not None and application.status != status:
                    continue

                entries.append(ApplicantReportEntry(
                    applicant_name=application.applicant_name,
                    nric=application.applicant_nric,
                    age=application.applicant_age,
                    married=application.applicant_marital_status == MaritalStatus.MARRIED,
                    project_name=application.project_name,
                    flat_type=application.flat_type,
                    application_date=application.applied_on,
                    status=application.status,
                    booking_date=application.booked_on
                ))

            span.set_attribute("report.entries", len(entries))
            return sorted(entries, key=lambda entry: (entry.project_name, entry.applicant_name))
