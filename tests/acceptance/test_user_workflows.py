"""
Acceptance tests for complete BTO housing workflows.

Tests user journeys from project creation to flat booking across all
roles, against fresh in-memory stores.
"""

import pytest
from datetime import date

from bto_housing import (
    ApplicationController,
    EnquiryController,
    HousingStores,
    OfficerRegistrationController,
    ProjectController
)
from bto_housing.models import Applicant, ApplicationStatus, FlatType, HDBManager, HDBOfficer


class TestBookingWorkflowAcceptance:
    """Acceptance tests for the apply, approve and book journey."""

    @pytest.fixture(autouse=True)
    def setup_acceptance_test_environment(self):
        """Set up stores, controllers and users for one scenario."""
        self.today = date(2024, 6, 10)
        self.stores = HousingStores.in_memory()
        clock = lambda: self.today

        self.projects = ProjectController(self.stores, clock=clock)
        self.applications = ApplicationController(self.stores, clock=clock)
        self.enquiries = EnquiryController(self.stores)
        self.registrations = OfficerRegistrationController(self.stores, clock=clock)

        self.manager = HDBManager(nric="S1111111A", name="Michael", age=45, marital_status="MARRIED")
        self.officer = HDBOfficer(nric="T3333333C", name="Daniel", age=36, marital_status="SINGLE")
        self.applicant = Applicant(nric="S4444444D", name="Grace", age=30, marital_status="MARRIED")

    def test_acacia_booking_journey(self):
        """Test manager, officer and applicant together take a flat from listing to booking."""
        # Manager lists the project
        self.projects.create_project(
            self.manager, "Acacia", "Yishun", "01/06/2024", "30/06/2024", 2
        )
        self.projects.add_flat_to_project(self.manager, "Acacia", "2-Room", 10, 300000)

        # Officer is assigned to handle it
        registration = self.registrations.register_for_project(self.officer, "Acacia")
        self.registrations.approve_registration(self.manager, registration.id)
        assert self.registrations.get_handling_project(self.officer).name == "Acacia"

        # Applicant finds and applies for it
        visible = self.projects.get_visible_projects(self.applicant)
        assert [project.name for project in visible] == ["Acacia"]

        application = self.applications.apply_for_project(self.applicant, "Acacia", "2-Room")
        assert application.status == ApplicationStatus.PENDING

        # Manager approves, committing one unit
        approved = self.applications.approve_application(self.manager, self.applicant.nric, "Acacia")
        assert approved.status == ApplicationStatus.APPROVED
        flat = self.projects.get_project("Acacia").get_flat(FlatType.TWO_ROOM)
        assert flat.available_units == 9

        # Officer completes the booking
        receipt = self.applications.complete_booking(self.officer, self.applicant.nric, "Acacia")
        assert receipt.price == 300000
        assert receipt.booking_date == self.today
        assert self.applications.get_application(self.applicant).status == ApplicationStatus.BOOKED

        # Booking shows up in the manager's report
        report = self.projects.generate_applicants_report(self.manager, project_name="Acacia")
        assert len(report) == 1
        assert report[0].status == ApplicationStatus.BOOKED
        assert report[0].booking_date == self.today

    def test_enquiry_journey(self):
        """Test an applicant question answered by the assigned officer."""
        self.projects.create_project(
            self.manager, "Acacia", "Yishun", "01/06/2024", "30/06/2024", 2
        )
        registration = self.registrations.register_for_project(self.officer, "Acacia")
        self.registrations.approve_registration(self.manager, registration.id)

        enquiry = self.enquiries.submit(self.applicant, "Acacia", "When will keys be collected?")
        self.enquiries.update(self.applicant, enquiry.id, "When will keys be collected for 2-Room flats?")

        pending = self.enquiries.get_enquiries_for_respondent(self.officer)
        assert [item.id for item in pending] == [enquiry.id]

        answered = self.enquiries.add_reply(enquiry.id, self.officer, "Around three years after booking.")

        assert answered.is_answered()
        assert answered.reply.responder_nric == self.officer.nric
        assert self.enquiries.get_pending_enquiries_for_project("Acacia") == []
