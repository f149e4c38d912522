# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enquiries raised by applicants and answered by project staff.

One controller serves every role. Authors may edit or delete their own
enquiries until the first reply; the project's manager and its approved
officers may reply. Failures always raise:

- unknown enquiry id: NotFoundException
- caller is not the author (edit/delete): AuthorizationException
- caller is not bound to the project (reply): AuthorizationException
- enquiry already answered (edit/delete): BusinessRuleException
"""

import logging
import uuid
from typing import Callable, List

from opentelemetry import trace

from ..error_handler import (
    AuthorizationException,
    BusinessRuleException,
    NotFoundException,
    SystemException
)
from ..models.entities import Enquiry, User
from ..models.enums import EnquiryStatus, RegistrationStatus, UserRole
from ..services.repository import HousingStores
from .eligibility import can_respond_to_enquiry
from .lookups import approved_officer_nrics, require_project, require_role
from .validation import require_text

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000
MAX_ID_ATTEMPTS = 100


def generate_enquiry_id() -> str:
    """Short enquiry identifier such as ENQ-1a2b3c4d."""
    return f"ENQ-{uuid.uuid4().hex[:8]}"


def _message(value: str, field_name: str) -> str:
    return require_text(value, field_name, MAX_MESSAGE_LENGTH)


class EnquiryController:
    """Enquiry CRUD and reply threading for all roles."""

    def __init__(self, stores: HousingStores, id_factory: Callable[[], str] = generate_enquiry_id):
        self.stores = stores
        self.id_factory = id_factory

    def _next_id(self) -> str:
        """Generate an id that no stored enquiry uses yet."""
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = self.id_factory()
            if not self.stores.enquiries.exists(candidate):
                return candidate
            logger.debug(f"Enquiry id {candidate} already taken, regenerating")
        raise SystemException(f"Could not generate a unique enquiry id after {MAX_ID_ATTEMPTS} attempts")

    def submit(self, applicant: User, project_name: str, message: str) -> Enquiry:
        """Create a PENDING enquiry about a project."""
        with tracer.start_as_current_span("enquiries.submit") as span:
            require_role(applicant, UserRole.APPLICANT, UserRole.OFFICER)
            project = require_project(self.stores, project_name)
            text = _message(message, "Enquiry message")

            enquiry = Enquiry(
                id=self._next_id(),
                applicant_nric=applicant.nric,
                project_name=project.name,
                message=text,
                updated_by=applicant.nric
            )
            self.stores.enquiries.save(enquiry)

            span.set_attributes({"enquiry.id": enquiry.id, "project.name": project.name})
            logger.info(
                f"Enquiry {enquiry.id} submitted",
                extra={"enquiry_id": enquiry.id, "applicant_nric": applicant.nric, "project_name": project.name}
            )
            return enquiry

    def get_enquiry(self, enquiry_id: str) -> Enquiry:
        enquiry = self.stores.enquiries.find_by_id(enquiry_id)
        if enquiry is None:
            raise NotFoundException(f"Enquiry '{enquiry_id}' not found.")
        return enquiry

    def _authored_enquiry(self, applicant: User, enquiry_id: str) -> Enquiry:
        enquiry = self.get_enquiry(enquiry_id)
        if not enquiry.is_authored_by(applicant):
            raise AuthorizationException("You can only change your own enquiries.")
        if enquiry.is_answered():
            raise BusinessRuleException("Enquiries that have been answered cannot be changed.")
        return enquiry

    def update(self, applicant: User, enquiry_id: str, new_message: str) -> Enquiry:
        """Edit an unanswered enquiry written by the caller."""
        enquiry = self._authored_enquiry(applicant, enquiry_id)
        enquiry.update_message(applicant.nric, _message(new_message, "Enquiry message"))
        self.stores.enquiries.save(enquiry)
        logger.info(f"Enquiry {enquiry_id} updated", extra={"enquiry_id": enquiry_id})
        return enquiry

    def delete(self, applicant: User, enquiry_id: str) -> Enquiry:
        """Delete an unanswered enquiry written by the caller."""
        enquiry = self._authored_enquiry(applicant, enquiry_id)
        self.stores.enquiries.delete(enquiry_id)
        logger.info(f"Enquiry {enquiry_id} deleted", extra={"enquiry_id": enquiry_id})
        return enquiry

    def add_reply(self, enquiry_id: str, respondent: User, content: str) -> Enquiry:
        """
        Reply to an enquiry as the project's manager or one of its officers.

        Args:
            enquiry_id: Enquiry to answer
            respondent: Manager or officer replying
            content: Reply text

        Returns:
            The answered enquiry
        """
        with tracer.start_as_current_span("enquiries.reply") as span:
            span.set_attributes({"enquiry.id": enquiry_id, "respondent.nric": respondent.nric})
            enquiry = self.get_enquiry(enquiry_id)
            project = require_project(self.stores, enquiry.project_name)

            capability = can_respond_to_enquiry(
                respondent, project, approved_officer_nrics(self.stores, project.name)
            )
            if not capability.allowed:
                raise AuthorizationException(capability.reason)

            enquiry.add_reply(_message(content, "Reply"), respondent)
            self.stores.enquiries.save(enquiry)

            logger.info(
                f"Enquiry {enquiry_id} answered",
                extra={"enquiry_id": enquiry_id, "respondent_nric": respondent.nric, "replies": len(enquiry.replies)}
            )
            return enquiry

    # Queries

    def get_enquiries_for_project(self, project_name: str) -> List[Enquiry]:
        return [enquiry for enquiry in self.stores.enquiries.get_all() if enquiry.project_name == project_name]

    def get_pending_enquiries_for_project(self, project_name: str) -> List[Enquiry]:
        return [
            enquiry for enquiry in self.get_enquiries_for_project(project_name)
            if enquiry.status == EnquiryStatus.PENDING
        ]

    def get_enquiries_by_applicant(self, applicant: User) -> List[Enquiry]:
        return [enquiry for enquiry in self.stores.enquiries.get_all() if enquiry.is_authored_by(applicant)]

    def get_enquiries_for_respondent(self, respondent: User) -> List[Enquiry]:
        """Enquiries about every project the manager owns or the officer handles."""
        require_role(respondent, UserRole.MANAGER, UserRole.OFFICER)

        if respondent.role == UserRole.MANAGER:
            project_names = {
                project.name for project in self.stores.projects.get_all()
                if project.manager_nric == respondent.nric
            }
        else:
            project_names = {
                registration.project_name for registration in self.stores.registrations.get_all()
                if registration.officer_nric == respondent.nric
                and registration.status == RegistrationStatus.APPROVED
            }

        return [enquiry for enquiry in self.stores.enquiries.get_all() if enquiry.project_name in project_names]
