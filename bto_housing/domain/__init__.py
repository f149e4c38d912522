# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the BTO housing workflow.

Eligibility rules and input parsing are pure functions. The controllers
apply them against the stores they are constructed with.
"""

from .applications import ApplicationController
from .enquiries import EnquiryController
from .projects import ProjectController
from .registrations import OfficerRegistrationController

__all__ = [
    "ApplicationController",
    "EnquiryController",
    "ProjectController",
    "OfficerRegistrationController",
]
