# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Eligibility and capability rules.

This module contains pure functions deciding who may see, apply for, handle
or answer questions about a project. Nothing here touches a store.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Tuple

from ..models.entities import Project, User
from ..models.enums import FlatType, MaritalStatus, UserRole

SINGLE_MIN_AGE = 35
MARRIED_MIN_AGE = 21

ELIGIBLE_FLAT_TYPES = {
    MaritalStatus.SINGLE: (FlatType.TWO_ROOM,),
    MaritalStatus.MARRIED: (FlatType.TWO_ROOM, FlatType.THREE_ROOM),
}

MINIMUM_AGES = {
    MaritalStatus.SINGLE: SINGLE_MIN_AGE,
    MaritalStatus.MARRIED: MARRIED_MIN_AGE,
}


@dataclass
class EligibilityResult:
    """Result of an eligibility or capability check."""
    allowed: bool
    reason: Optional[str] = None


def eligible_flat_types(marital_status: MaritalStatus) -> Tuple[FlatType, ...]:
    """Flat types a marital status may apply for."""
    return ELIGIBLE_FLAT_TYPES[MaritalStatus(marital_status)]


def windows_overlap(first_open: date, first_close: date, second_open: date, second_close: date) -> bool:
    """Inclusive overlap test of two application windows."""
    return not (first_close < second_open or first_open > second_close)


def project_matches_marital_status(project: Project, user: User) -> bool:
    """
    Check if a project is meant for the user's marital status.

    A project qualifies when its eligibility flag allows the status and it
    offers at least one flat type the status may apply for.

    Args:
        project: Project being browsed
        user: Applicant browsing

    Returns:
        True if the project should be listed for the user
    """
    if user.is_married():
        if not project.eligible_for_married:
            return False
    elif not project.eligible_for_singles:
        return False

    return any(project.offers(flat_type) for flat_type in eligible_flat_types(user.marital_status))


def check_flat_type_eligibility(user: User, flat_type: FlatType) -> EligibilityResult:
    """
    Check if a user may apply for a flat type.

    Singles must be at least 35 and may only take 2-Room flats; married
    applicants must be at least 21 and may take any flat type.

    Args:
        user: Applicant
        flat_type: Requested flat type

    Returns:
        EligibilityResult indicating if the application is allowed
    """
    marital_status = MaritalStatus(user.marital_status)
    minimum_age = MINIMUM_AGES[marital_status]

    if user.age < minimum_age:
        return EligibilityResult(
            allowed=False,
            reason=f"{marital_status.value.title()} applicants must be {minimum_age} years old or above to apply"
        )

    if flat_type not in eligible_flat_types(marital_status):
        allowed = ", ".join(ft.value for ft in eligible_flat_types(marital_status))
        return EligibilityResult(
            allowed=False,
            reason=f"{marital_status.value.title()} applicants can only apply for {allowed} flats"
        )

    return EligibilityResult(allowed=True)


def can_respond_to_enquiry(actor: User, project: Project, approved_officers: Iterable[str]) -> EligibilityResult:
    """
    Check if a user may answer enquiries about a project.

    Args:
        actor: User attempting to reply
        project: Project the enquiry is about
        approved_officers: NRICs of officers approved to handle the project

    Returns:
        EligibilityResult indicating if the reply is allowed
    """
    if actor.role == UserRole.MANAGER:
        if project.manager_nric == actor.nric:
            return EligibilityResult(allowed=True)
        return EligibilityResult(
            allowed=False,
            reason=f"Only the manager of {project.name} can reply to its enquiries"
        )

    if actor.role == UserRole.OFFICER:
        if actor.nric in set(approved_officers):
            return EligibilityResult(allowed=True)
        return EligibilityResult(
            allowed=False,
            reason=f"Officer is not assigned to {project.name}"
        )

    return EligibilityResult(
        allowed=False,
        reason="Applicants cannot reply to enquiries"
    )
