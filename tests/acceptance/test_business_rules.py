"""
Business rule enforcement acceptance tests.

Tests that eligibility, inventory and visibility rules hold across
the controllers working on shared stores.
"""

import pytest
from datetime import date

from bto_housing import (
    ApplicationController,
    BusinessRuleException,
    HousingStores,
    ProjectController,
    format_error
)
from bto_housing.models import Applicant, FlatType, HDBManager


class TestHousingBusinessRules:
    """Test rules applicants and managers run into."""

    @pytest.fixture(autouse=True)
    def setup_business_rules_test(self):
        """Set up one open project with scarce 2-Room inventory."""
        self.stores = HousingStores.in_memory()
        clock = lambda: date(2024, 6, 10)
        self.projects = ProjectController(self.stores, clock=clock)
        self.applications = ApplicationController(self.stores, clock=clock)

        self.manager = HDBManager(nric="S1111111A", name="Michael", age=45, marital_status="MARRIED")
        self.projects.create_project(self.manager, "Acacia", "Yishun", "01/06/2024", "30/06/2024", 2)
        self.projects.add_flat_to_project(self.manager, "Acacia", "2-Room", 2, 300000)
        self.projects.add_flat_to_project(self.manager, "Acacia", "3-Room", 2, 450000)

    def available(self, flat_type):
        return self.projects.get_project("Acacia").get_flat(flat_type).available_units

    def test_young_single_cannot_apply_for_three_room(self):
        """Test a single applicant aged 30 is refused a 3-Room flat."""
        applicant = Applicant(nric="T6666666F", name="Sarah", age=30, marital_status="SINGLE")

        with pytest.raises(BusinessRuleException) as exc_info:
            self.applications.apply_for_project(applicant, "Acacia", "3-Room")

        problem = format_error(exc_info.value, "applications.apply")
        assert problem['kind'] == "BUSINESS_RULE_ERROR"
        assert self.applications.get_application(applicant) is None

    def test_withdrawal_restores_inventory(self):
        """Test apply, approve, withdraw and approve withdrawal leaves no trace."""
        applicant = Applicant(nric="S4444444D", name="Grace", age=30, marital_status="MARRIED")
        before = self.available(FlatType.THREE_ROOM)

        self.applications.apply_for_project(applicant, "Acacia", "3-Room")
        self.applications.approve_application(self.manager, applicant.nric, "Acacia")
        assert self.available(FlatType.THREE_ROOM) == before - 1

        self.applications.withdraw_application(applicant)
        self.applications.approve_withdrawal(self.manager, applicant.nric, "Acacia")

        assert self.applications.get_application(applicant) is None
        assert self.available(FlatType.THREE_ROOM) == before

    def test_approval_stops_at_zero_units(self):
        """Test no approval succeeds once a flat type is exhausted."""
        applicants = [
            Applicant(nric=f"S100000{i}A", name=f"Applicant {i}", age=30, marital_status="MARRIED")
            for i in range(3)
        ]
        for applicant in applicants:
            self.applications.apply_for_project(applicant, "Acacia", "2-Room")

        self.applications.approve_application(self.manager, applicants[0].nric, "Acacia")
        self.applications.approve_application(self.manager, applicants[1].nric, "Acacia")

        with pytest.raises(BusinessRuleException):
            self.applications.approve_application(self.manager, applicants[2].nric, "Acacia")

        assert self.available(FlatType.TWO_ROOM) == 0

    def test_hidden_projects_never_listed(self):
        """Test a hidden project disappears for every applicant."""
        applicants = [
            Applicant(nric="S4444444D", name="Grace", age=30, marital_status="MARRIED"),
            Applicant(nric="S5555555E", name="John", age=35, marital_status="SINGLE")
        ]
        self.projects.toggle_project_visibility(self.manager, "Acacia", "off")

        for applicant in applicants:
            assert self.projects.get_visible_projects(applicant) == []
            with pytest.raises(BusinessRuleException):
                self.applications.apply_for_project(applicant, "Acacia", "2-Room")
