# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the BTO housing workflow.
"""

from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    """Role carried by every user."""
    APPLICANT = "APPLICANT"
    OFFICER = "OFFICER"
    MANAGER = "MANAGER"


class MaritalStatus(str, Enum):
    """Applicant marital status."""
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"

    @classmethod
    def parse(cls, value: str) -> Optional["MaritalStatus"]:
        """Case-insensitive lookup, None when unknown."""
        if isinstance(value, cls):
            return value
        for status in cls:
            if status.value.lower() == str(value).strip().lower():
                return status
        return None


class FlatType(str, Enum):
    """Housing unit categories offered by a project."""
    TWO_ROOM = "2-Room"
    THREE_ROOM = "3-Room"

    @classmethod
    def from_display_name(cls, display_name: str) -> Optional["FlatType"]:
        """
        Resolve a flat type from its display name or member name.

        Args:
            display_name: Value such as "2-Room", "2-room" or "TWO_ROOM"

        Returns:
            Matching FlatType or None if no match
        """
        if display_name is None:
            return None
        if isinstance(display_name, cls):
            return display_name
        candidate = str(display_name).strip().lower()
        for flat_type in cls:
            if candidate in (flat_type.value.lower(), flat_type.name.lower()):
                return flat_type
        return None


class ApplicationStatus(str, Enum):
    """Application workflow status enumeration."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    BOOKED = "BOOKED"
    WITHDRAWAL_REQUESTED = "WITHDRAWAL_REQUESTED"


class EnquiryStatus(str, Enum):
    """Enquiry status enumeration."""
    PENDING = "PENDING"
    ANSWERED = "ANSWERED"


class RegistrationStatus(str, Enum):
    """Officer registration status enumeration."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ErrorKind(str, Enum):
    """Failure categories raised by the controllers."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND_ERROR = "NOT_FOUND_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    BUSINESS_RULE_ERROR = "BUSINESS_RULE_ERROR"
    SYSTEM_ERROR = "SYSTEM_ERROR"
