# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the BTO housing workflow.
"""

import re
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from .base import BaseEntity, generate_object_id
from .enums import (
    UserRole,
    MaritalStatus,
    FlatType,
    ApplicationStatus,
    EnquiryStatus,
    RegistrationStatus
)

NRIC_PATTERN = r'^[ST]\d{7}[A-Z]$'


class User(BaseModel):
    """Identity shared by applicants, officers and managers."""

    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True
    )

    nric: str = Field(..., description="National identity number, used as the user key")
    name: str = Field(..., min_length=1, max_length=200, description="Full name")
    age: int = Field(..., ge=0, le=150, description="Age in years")
    marital_status: MaritalStatus = Field(..., description="Marital status")
    role: UserRole = Field(default=UserRole.APPLICANT, description="User role")

    @field_validator('nric')
    @classmethod
    def validate_nric(cls, v):
        """Validate NRIC format."""
        v = v.strip().upper()
        if not re.match(NRIC_PATTERN, v):
            raise ValueError('NRIC must start with S or T, followed by 7 digits and a letter')
        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate user name."""
        if not v.strip():
            raise ValueError('User name cannot be empty')
        return v.strip()

    def is_married(self) -> bool:
        return self.marital_status == MaritalStatus.MARRIED


class Applicant(User):
    """User who can browse projects, apply and raise enquiries."""

    role: UserRole = Field(default=UserRole.APPLICANT, description="User role")


class HDBOfficer(Applicant):
    """Officer handling a project. Officers may also apply as applicants."""

    role: UserRole = Field(default=UserRole.OFFICER, description="User role")


class HDBManager(User):
    """Manager who creates projects and decides on applications."""

    role: UserRole = Field(default=UserRole.MANAGER, description="User role")


class Flat(BaseModel):
    """Inventory of one flat type within a project."""

    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True
    )

    flat_type: FlatType = Field(..., description="Flat type")
    total_units: int = Field(..., ge=0, description="Total units built")
    available_units: int = Field(..., ge=0, description="Units not committed to an approved application")
    booked_units: int = Field(default=0, ge=0, description="Units converted into bookings")
    price: int = Field(..., ge=0, description="Selling price per unit")

    @model_validator(mode='after')
    def validate_inventory(self):
        """Committed and booked units can never exceed the total."""
        if self.available_units + self.booked_units > self.total_units:
            raise ValueError('Available and booked units cannot exceed total units')
        return self

    def has_available_units(self) -> bool:
        return self.available_units > 0

    def reserve_unit(self) -> None:
        """Commit one unit to an approved application."""
        if not self.has_available_units():
            raise ValueError(f'No {self.flat_type} units left')
        self.available_units -= 1

    def release_unit(self) -> None:
        """Return a committed unit to the available pool."""
        self.available_units += 1

    def book_unit(self) -> None:
        """Convert a committed unit into a booking."""
        self.booked_units += 1

    def cancel_booking(self) -> None:
        """Return a booked unit to the available pool."""
        if self.booked_units <= 0:
            raise ValueError(f'No booked {self.flat_type} units to cancel')
        self.booked_units -= 1
        self.available_units += 1


class Project(BaseEntity):
    """Housing project owned by a manager."""

    name: str = Field(..., min_length=1, max_length=200, description="Project name, unique key")
    neighborhood: str = Field(..., min_length=1, max_length=200, description="Neighborhood")
    open_date: date = Field(..., description="Application window opening date")
    close_date: date = Field(..., description="Application window closing date")
    officer_slots: int = Field(..., ge=1, le=10, description="Number of officers that may handle the project")
    visible: bool = Field(default=True, description="Whether applicants can see the project")
    manager_nric: str = Field(..., description="NRIC of the owning manager")
    flats: List[Flat] = Field(default_factory=list, description="Flat inventory per type")
    registered_officers: List[str] = Field(default_factory=list, description="NRICs of approved officers")
    eligible_for_singles: bool = Field(default=True, description="Whether singles may see the project")
    eligible_for_married: bool = Field(default=True, description="Whether married couples may see the project")

    @field_validator('name', 'neighborhood')
    @classmethod
    def validate_text(cls, v):
        """Validate text fields."""
        if not v.strip():
            raise ValueError('Project text fields cannot be empty')
        return v.strip()

    @model_validator(mode='after')
    def validate_window(self):
        """Validate application window."""
        if self.close_date < self.open_date:
            raise ValueError('Close date cannot be before open date')
        return self

    def get_flat(self, flat_type: FlatType) -> Optional[Flat]:
        """Get the inventory entry of a flat type, if offered."""
        for flat in self.flats:
            if flat.flat_type == flat_type:
                return flat
        return None

    def offers(self, flat_type: FlatType) -> bool:
        return self.get_flat(flat_type) is not None

    def is_open_on(self, day: date) -> bool:
        """Check if the application window contains the given day."""
        return self.open_date <= day <= self.close_date

    def overlaps(self, open_date: date, close_date: date) -> bool:
        """Check if the application window overlaps another window."""
        return not (self.close_date < open_date or self.open_date > close_date)

    def remaining_officer_slots(self) -> int:
        return self.officer_slots - len(self.registered_officers)

    def is_full(self) -> bool:
        return self.remaining_officer_slots() <= 0


class Application(BaseEntity):
    """An applicant's application for one flat type in one project."""

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    applicant_nric: str = Field(..., description="Applicant NRIC")
    project_name: str = Field(..., description="Project applied for")
    flat_type: FlatType = Field(..., description="Requested flat type")
    status: ApplicationStatus = Field(default=ApplicationStatus.PENDING, description="Workflow status")
    previous_status: Optional[ApplicationStatus] = Field(None, description="Status before a withdrawal request")
    applicant_name: str = Field(..., description="Applicant name at the time of applying")
    applicant_age: int = Field(..., ge=0, description="Applicant age at the time of applying")
    applicant_marital_status: MaritalStatus = Field(..., description="Applicant marital status at the time of applying")
    applied_on: date = Field(..., description="Date the application was made")
    booked_on: Optional[date] = Field(None, description="Booking date")
    booked_price: Optional[int] = Field(None, description="Price recorded at booking")

    @model_validator(mode='after')
    def validate_status_fields(self):
        """Validate status-dependent fields."""
        if self.status == ApplicationStatus.WITHDRAWAL_REQUESTED and self.previous_status is None:
            raise ValueError('previous_status is required when a withdrawal is requested')

        if self.status == ApplicationStatus.BOOKED and self.booked_on is None:
            raise ValueError('booked_on is required when status is booked')

        return self

    def is_active(self) -> bool:
        """Rejected applications no longer block a new application."""
        return self.status != ApplicationStatus.REJECTED

    def holds_unit(self) -> bool:
        """Check if the application has consumed a unit of inventory."""
        status = self.status
        if status == ApplicationStatus.WITHDRAWAL_REQUESTED:
            status = self.previous_status
        return status in (ApplicationStatus.APPROVED, ApplicationStatus.BOOKED)

    def can_withdraw(self) -> bool:
        return self.status in (ApplicationStatus.PENDING, ApplicationStatus.APPROVED)

    def can_decide(self) -> bool:
        return self.status == ApplicationStatus.PENDING

    def can_book(self) -> bool:
        return self.status == ApplicationStatus.APPROVED

    def approve(self, user_id: str) -> None:
        """Approve the application."""
        if not self.can_decide():
            raise ValueError('Application cannot be approved in current state')

        self.status = ApplicationStatus.APPROVED
        self.update_timestamp(user_id)

    def reject(self, user_id: str) -> None:
        """Reject the application."""
        if not self.can_decide():
            raise ValueError('Application cannot be rejected in current state')

        self.status = ApplicationStatus.REJECTED
        self.update_timestamp(user_id)

    def request_withdrawal(self, user_id: str) -> None:
        """Request withdrawal, remembering the status to restore on rejection."""
        if not self.can_withdraw():
            raise ValueError('Only pending or approved applications can be withdrawn')

        self.previous_status = self.status
        self.status = ApplicationStatus.WITHDRAWAL_REQUESTED
        self.update_timestamp(user_id)

    def cancel_withdrawal(self, user_id: str) -> None:
        """Restore the status held before the withdrawal request."""
        if self.status != ApplicationStatus.WITHDRAWAL_REQUESTED:
            raise ValueError('No withdrawal request to cancel')

        self.status = self.previous_status
        self.previous_status = None
        self.update_timestamp(user_id)

    def mark_booked(self, user_id: str, booked_on: date, price: int) -> None:
        """Mark application as booked."""
        if not self.can_book():
            raise ValueError('Only approved applications can be booked')

        self.booked_on = booked_on
        self.booked_price = price
        self.status = ApplicationStatus.BOOKED
        self.update_timestamp(user_id)


class Reply(BaseModel):
    """A reply posted on an enquiry by an officer or manager."""

    model_config = ConfigDict(
        use_enum_values=True
    )

    content: str = Field(..., min_length=1, description="Reply text")
    responder_nric: str = Field(..., description="NRIC of the responder")
    responder_role: UserRole = Field(..., description="Role of the responder")
    replied_at: datetime = Field(default_factory=datetime.utcnow, description="Reply timestamp")


class Enquiry(BaseEntity):
    """Question raised by an applicant about a project."""

    id: str = Field(..., description="Unique identifier")
    applicant_nric: str = Field(..., description="Author NRIC")
    project_name: str = Field(..., description="Project the enquiry is about")
    message: str = Field(..., min_length=1, max_length=2000, description="Enquiry text")
    replies: List[Reply] = Field(default_factory=list, description="Replies in posting order")
    status: EnquiryStatus = Field(default=EnquiryStatus.PENDING, description="Enquiry status")
    submitted_at: datetime = Field(default_factory=datetime.utcnow, description="Submission timestamp")

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        """Validate enquiry message."""
        if not v.strip():
            raise ValueError('Enquiry message cannot be empty')
        return v.strip()

    @property
    def reply(self) -> Optional[Reply]:
        """Most recent reply, or None if unanswered."""
        if not self.replies:
            return None
        return self.replies[-1]

    def is_answered(self) -> bool:
        return self.status == EnquiryStatus.ANSWERED

    def is_authored_by(self, user: User) -> bool:
        return self.applicant_nric == user.nric

    def update_message(self, user_id: str, message: str) -> None:
        """Edit the enquiry text before any reply."""
        if self.is_answered():
            raise ValueError('Answered enquiries cannot be edited')

        self.message = message
        self.update_timestamp(user_id)

    def add_reply(self, content: str, responder: User) -> Reply:
        """Append a reply and mark the enquiry answered."""
        reply = Reply(
            content=content,
            responder_nric=responder.nric,
            responder_role=responder.role
        )
        self.replies = [*self.replies, reply]
        self.status = EnquiryStatus.ANSWERED
        self.update_timestamp(responder.nric)
        return reply


class OfficerRegistration(BaseEntity):
    """An officer's request to handle a project."""

    id: str = Field(default_factory=lambda: f"REG-{generate_object_id()}", description="Unique identifier")
    officer_nric: str = Field(..., description="Officer NRIC")
    project_name: str = Field(..., description="Project to handle")
    status: RegistrationStatus = Field(default=RegistrationStatus.PENDING, description="Registration status")
    requested_at: datetime = Field(default_factory=datetime.utcnow, description="Request timestamp")

    def is_pending(self) -> bool:
        return self.status == RegistrationStatus.PENDING

    def is_approved(self) -> bool:
        return self.status == RegistrationStatus.APPROVED

    def approve(self, user_id: str) -> None:
        """Approve the registration."""
        if not self.is_pending():
            raise ValueError('Registration cannot be approved in current state')

        self.status = RegistrationStatus.APPROVED
        self.update_timestamp(user_id)

    def reject(self, user_id: str) -> None:
        """Reject the registration."""
        if not self.is_pending():
            raise ValueError('Registration cannot be rejected in current state')

        self.status = RegistrationStatus.REJECTED
        self.update_timestamp(user_id)
