# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas for the BTO housing workflow.
"""

# Base models
from .base import BaseEntity, generate_object_id

# Enumerations
from .enums import (
    UserRole,
    MaritalStatus,
    FlatType,
    ApplicationStatus,
    EnquiryStatus,
    RegistrationStatus,
    ErrorKind
)

# Core entities
from .entities import (
    User,
    Applicant,
    HDBOfficer,
    HDBManager,
    Flat,
    Project,
    Application,
    Reply,
    Enquiry,
    OfficerRegistration
)

# Read-only projections
from .responses import BookingReceipt, ApplicantReportEntry

__all__ = [
    "BaseEntity",
    "generate_object_id",
    "UserRole",
    "MaritalStatus",
    "FlatType",
    "ApplicationStatus",
    "EnquiryStatus",
    "RegistrationStatus",
    "ErrorKind",
    "User",
    "Applicant",
    "HDBOfficer",
    "HDBManager",
    "Flat",
    "Project",
    "Application",
    "Reply",
    "Enquiry",
    "OfficerRegistration",
    "BookingReceipt",
    "ApplicantReportEntry",
]
