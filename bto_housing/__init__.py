# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
BTO housing workflow: projects, applications, enquiries and officer registrations.
"""

from .domain import (
    ApplicationController,
    EnquiryController,
    OfficerRegistrationController,
    ProjectController
)
from .error_handler import (
    HousingException,
    ValidationException,
    NotFoundException,
    AuthorizationException,
    BusinessRuleException,
    SystemException,
    format_error
)
from .services import HousingStores

__version__ = "1.0.0"

__all__ = [
    "ApplicationController",
    "EnquiryController",
    "OfficerRegistrationController",
    "ProjectController",
    "HousingException",
    "ValidationException",
    "NotFoundException",
    "AuthorizationException",
    "BusinessRuleException",
    "SystemException",
    "format_error",
    "HousingStores",
]
