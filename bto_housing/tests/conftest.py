# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import date

from bto_housing.domain import (
    ApplicationController,
    EnquiryController,
    OfficerRegistrationController,
    ProjectController
)
from bto_housing.models import Applicant, HDBManager, HDBOfficer
from bto_housing.services import HousingStores

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

TODAY = date(2024, 6, 15)


@pytest.fixture
def clock():
    """Fixed clock inside the Acacia application window."""
    return lambda: TODAY


@pytest.fixture
def stores():
    """Fresh in-memory stores."""
    return HousingStores.in_memory()


@pytest.fixture
def manager():
    return HDBManager(nric="S1111111A", name="Michael", age=45, marital_status="MARRIED")


@pytest.fixture
def other_manager():
    return HDBManager(nric="S2222222B", name="Jessica", age=38, marital_status="SINGLE")


@pytest.fixture
def officer():
    return HDBOfficer(nric="T3333333C", name="Daniel", age=36, marital_status="SINGLE")


@pytest.fixture
def other_officer():
    return HDBOfficer(nric="T7777777G", name="Emily", age=28, marital_status="MARRIED")


@pytest.fixture
def married_applicant():
    return Applicant(nric="S4444444D", name="Grace", age=30, marital_status="MARRIED")


@pytest.fixture
def single_applicant():
    return Applicant(nric="S5555555E", name="John", age=35, marital_status="SINGLE")


@pytest.fixture
def young_single_applicant():
    return Applicant(nric="T6666666F", name="Sarah", age=30, marital_status="SINGLE")


@pytest.fixture
def project_controller(stores, clock):
    return ProjectController(stores, clock=clock)


@pytest.fixture
def application_controller(stores, clock):
    return ApplicationController(stores, clock=clock)


@pytest.fixture
def enquiry_controller(stores):
    return EnquiryController(stores)


@pytest.fixture
def registration_controller(stores, clock):
    return OfficerRegistrationController(stores, clock=clock)


@pytest.fixture
def acacia(project_controller, manager):
    """Open project offering 10 2-Room and 5 3-Room flats."""
    project_controller.create_project(manager, "Acacia Breeze", "Yishun", "01/06/2024", "30/06/2024", 3)
    project_controller.add_flat_to_project(manager, "Acacia Breeze", "2-Room", 10, 300000)
    return project_controller.add_flat_to_project(manager, "Acacia Breeze", "3-Room", 5, 450000)


@pytest.fixture
def assigned_officer(acacia, registration_controller, manager, officer):
    """Officer with an approved registration for Acacia Breeze."""
    registration = registration_controller.register_for_project(officer, acacia.name)
    registration_controller.approve_registration(manager, registration.id)
    return officer
