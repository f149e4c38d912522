# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for officer registrations.
"""

import pytest
from datetime import date

from bto_housing.domain import OfficerRegistrationController
from bto_housing.error_handler import (
    AuthorizationException,
    BusinessRuleException,
    NotFoundException
)
from bto_housing.models import RegistrationStatus


@pytest.fixture
def small_project(project_controller, other_manager):
    """Project with a single officer slot, outside the Acacia window."""
    return project_controller.create_project(other_manager, "Cedar Grove", "Bedok", "01/08/2024", "31/08/2024", 1)


class TestRegister:
    """Test registration requests."""

    def test_register(self, registration_controller, acacia, officer):
        registration = registration_controller.register_for_project(officer, acacia.name)

        assert registration.status == RegistrationStatus.PENDING
        assert registration.officer_nric == officer.nric
        assert registration_controller.get_registration_status(officer, acacia.name) == RegistrationStatus.PENDING
        assert registration_controller.get_registration_status(officer, "Cedar Grove") is None

    def test_pending_does_not_take_slot(self, registration_controller, stores, acacia, officer):
        registration_controller.register_for_project(officer, acacia.name)
        assert stores.projects.find_by_id(acacia.name).remaining_officer_slots() == 3

    def test_duplicate_registration(self, registration_controller, acacia, officer):
        registration_controller.register_for_project(officer, acacia.name)

        with pytest.raises(BusinessRuleException):
            registration_controller.register_for_project(officer, acacia.name)

    def test_overlapping_window(self, registration_controller, project_controller, other_manager,
                                acacia, officer):
        """Test an officer cannot handle two projects at the same time."""
        project_controller.create_project(other_manager, "Bayview", "Tampines", "20/06/2024", "20/07/2024", 2)
        registration_controller.register_for_project(officer, acacia.name)

        with pytest.raises(BusinessRuleException) as exc_info:
            registration_controller.register_for_project(officer, "Bayview")

        assert "overlapping" in exc_info.value.message

    def test_separate_windows(self, registration_controller, acacia, small_project, officer):
        registration_controller.register_for_project(officer, acacia.name)
        registration = registration_controller.register_for_project(officer, small_project.name)
        assert registration.project_name == "Cedar Grove"

    def test_register_again_after_rejection(self, registration_controller, acacia, manager, officer):
        registration = registration_controller.register_for_project(officer, acacia.name)
        registration_controller.reject_registration(manager, registration.id)

        again = registration_controller.register_for_project(officer, acacia.name)
        assert again.id != registration.id
        assert registration_controller.get_registration_status(officer, acacia.name) == RegistrationStatus.PENDING

    def test_applied_for_project(self, registration_controller, application_controller, acacia, officer):
        """Test officers cannot handle a project they applied for."""
        application_controller.apply_for_project(officer, acacia.name, "2-Room")
        assert registration_controller.check_applied_for_project(officer, acacia.name)

        with pytest.raises(BusinessRuleException):
            registration_controller.register_for_project(officer, acacia.name)

    def test_full_project(self, registration_controller, small_project, other_manager, officer, other_officer):
        registration = registration_controller.register_for_project(officer, small_project.name)
        registration_controller.approve_registration(other_manager, registration.id)

        with pytest.raises(BusinessRuleException):
            registration_controller.register_for_project(other_officer, small_project.name)

    def test_unknown_project(self, registration_controller, officer):
        with pytest.raises(NotFoundException):
            registration_controller.register_for_project(officer, "Nowhere")

    def test_requires_officer(self, registration_controller, acacia, married_applicant):
        with pytest.raises(AuthorizationException):
            registration_controller.register_for_project(married_applicant, acacia.name)


class TestDecisions:
    """Test manager decisions on registrations."""

    def test_approve(self, registration_controller, stores, acacia, manager, officer):
        registration = registration_controller.register_for_project(officer, acacia.name)

        approved = registration_controller.approve_registration(manager, registration.id)

        assert approved.status == RegistrationStatus.APPROVED
        project = stores.projects.find_by_id(acacia.name)
        assert project.registered_officers == [officer.nric]
        assert project.remaining_officer_slots() == 2

    def test_approve_requires_owner(self, registration_controller, acacia, other_manager, officer):
        registration = registration_controller.register_for_project(officer, acacia.name)

        with pytest.raises(AuthorizationException):
            registration_controller.approve_registration(other_manager, registration.id)

    def test_approve_twice(self, registration_controller, acacia, manager, officer):
        registration = registration_controller.register_for_project(officer, acacia.name)
        registration_controller.approve_registration(manager, registration.id)

        with pytest.raises(BusinessRuleException):
            registration_controller.approve_registration(manager, registration.id)

    def test_approve_unknown(self, registration_controller, manager):
        with pytest.raises(NotFoundException):
            registration_controller.approve_registration(manager, "REG-00000000")

    def test_approve_when_full(self, registration_controller, stores, small_project, other_manager,
                               officer, other_officer):
        """Test the last slot goes to the first approval."""
        first = registration_controller.register_for_project(officer, small_project.name)
        second = registration_controller.register_for_project(other_officer, small_project.name)
        registration_controller.approve_registration(other_manager, first.id)

        with pytest.raises(BusinessRuleException):
            registration_controller.approve_registration(other_manager, second.id)

        assert stores.projects.find_by_id(small_project.name).registered_officers == [officer.nric]
        assert stores.registrations.find_by_id(second.id).status == RegistrationStatus.PENDING

    def test_reject(self, registration_controller, stores, acacia, manager, officer):
        registration = registration_controller.register_for_project(officer, acacia.name)

        rejected = registration_controller.reject_registration(manager, registration.id)

        assert rejected.status == RegistrationStatus.REJECTED
        assert stores.projects.find_by_id(acacia.name).registered_officers == []


class TestQueries:
    """Test registration lookups."""

    def test_handling_project(self, registration_controller, acacia, manager, officer):
        assert registration_controller.get_handling_project(officer) is None

        registration = registration_controller.register_for_project(officer, acacia.name)
        assert registration_controller.get_handling_project(officer) is None

        registration_controller.approve_registration(manager, registration.id)
        assert registration_controller.get_handling_project(officer).name == acacia.name

    def test_handling_project_prefers_earliest_open(self, registration_controller, acacia, small_project,
                                                    manager, other_manager, officer):
        for project, approver in ((small_project, other_manager), (acacia, manager)):
            registration = registration_controller.register_for_project(officer, project.name)
            registration_controller.approve_registration(approver, registration.id)

        assert registration_controller.get_handling_project(officer).name == acacia.name

        later = OfficerRegistrationController(registration_controller.stores, clock=lambda: date(2024, 7, 15))
        assert later.get_handling_project(officer).name == small_project.name

    def test_registrations_for_project(self, registration_controller, acacia, manager, officer, other_officer):
        first = registration_controller.register_for_project(officer, acacia.name)
        registration_controller.register_for_project(other_officer, acacia.name)
        registration_controller.approve_registration(manager, first.id)

        assert len(registration_controller.get_registrations_for_project(acacia.name)) == 2
        approved = registration_controller.get_registrations_for_project(acacia.name, RegistrationStatus.APPROVED)
        assert [r.officer_nric for r in approved] == [officer.nric]

    def test_registrations_for_unknown_project(self, registration_controller):
        with pytest.raises(NotFoundException):
            registration_controller.get_registrations_for_project("Nowhere")
