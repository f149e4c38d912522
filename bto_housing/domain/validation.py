# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Input parsing shared by the controllers.

Every parser accepts either an already-typed value or the raw string typed
by a user, and raises ValidationException on malformed input.
"""

from datetime import date, datetime
from typing import Any, Optional, Union

from ..error_handler import ValidationException
from ..models.enums import FlatType, MaritalStatus

DATE_FORMAT = "%d/%m/%Y"
DISPLAY_DATE_FORMAT = "dd/MM/yyyy"
MIN_OFFICER_SLOTS = 1
MAX_OFFICER_SLOTS = 10
MAX_REPORT_AGE = 150
MAX_NAME_LENGTH = 200


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_text(value: Optional[str], field_name: str, max_length: Optional[int] = None) -> str:
    """Return the stripped text, rejecting empty or overlong values."""
    if is_blank(value):
        raise ValidationException(f"{field_name} cannot be empty.")
    text = str(value).strip()
    if max_length is not None and len(text) > max_length:
        raise ValidationException(f"{field_name} cannot exceed {max_length} characters.")
    return text


def parse_date(value: Union[str, date, None], field_name: str) -> date:
    """
    Parse a dd/MM/yyyy string into a date.

    Args:
        value: Date string or date object
        field_name: Field name used in the error message

    Returns:
        Parsed date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if is_blank(value):
        raise ValidationException(f"{field_name} cannot be empty.")

    try:
        return datetime.strptime(str(value).strip(), DATE_FORMAT).date()
    except ValueError:
        raise ValidationException(
            f"Invalid {field_name.lower()} '{value}'. Please use {DISPLAY_DATE_FORMAT}."
        )


def validate_window(open_date: date, close_date: date) -> None:
    if close_date < open_date:
        raise ValidationException("Application close date cannot be before application open date.")


def parse_non_negative_int(value: Union[str, int, None], field_name: str) -> int:
    """Parse a whole number that must not be negative."""
    if isinstance(value, bool):
        raise ValidationException(f"{field_name} must be a whole number.")
    if isinstance(value, int):
        number = value
    elif is_blank(value):
        raise ValidationException(f"{field_name} cannot be empty.")
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            raise ValidationException(f"{field_name} must be a whole number, got '{value}'.")

    if number < 0:
        raise ValidationException(f"{field_name} cannot be negative.")
    return number


def parse_officer_slots(value: Union[str, int, None]) -> int:
    slots = parse_non_negative_int(value, "Officer slots")
    if not MIN_OFFICER_SLOTS <= slots <= MAX_OFFICER_SLOTS:
        raise ValidationException(
            f"Officer slots must be between {MIN_OFFICER_SLOTS} and {MAX_OFFICER_SLOTS}."
        )
    return slots


def parse_visibility(value: Union[str, bool, None]) -> bool:
    """Accept a bool or one of on/off/true/false."""
    if isinstance(value, bool):
        return value
    if is_blank(value):
        raise ValidationException("Visibility cannot be empty.")

    normalized = str(value).strip().lower()
    if normalized in ("on", "true"):
        return True
    if normalized in ("off", "false"):
        return False
    raise ValidationException("Visibility must be 'on' or 'off'.")


def parse_flat_type(value: Union[str, FlatType, None]) -> FlatType:
    flat_type = FlatType.from_display_name(value)
    if flat_type is None:
        allowed = "' or '".join(ft.value for ft in FlatType)
        raise ValidationException(f"Flat type must be either '{allowed}'.")
    return flat_type


def parse_marital_status(value: Union[str, MaritalStatus, None]) -> MaritalStatus:
    status = MaritalStatus.parse(value) if not is_blank(value) else None
    if status is None:
        raise ValidationException("Marital status must be 'married' or 'single'.")
    return status
