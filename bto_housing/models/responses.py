# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Read-only projections handed to the presentation layer.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from .enums import ApplicationStatus, FlatType, MaritalStatus


class BookingReceipt(BaseModel):
    """Receipt issued once an officer completes a booking."""

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    applicant_name: str = Field(..., description="Applicant name")
    nric: str = Field(..., description="Applicant NRIC")
    age: int = Field(..., description="Applicant age")
    marital_status: MaritalStatus = Field(..., description="Applicant marital status")
    flat_type: FlatType = Field(..., description="Booked flat type")
    project_name: str = Field(..., description="Project name")
    neighborhood: str = Field(..., description="Project neighborhood")
    booking_date: date = Field(..., description="Booking date")
    price: int = Field(..., description="Selling price recorded at booking")


class ApplicantReportEntry(BaseModel):
    """One application projected into the manager's applicant report."""

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    applicant_name: str = Field(..., description="Applicant name")
    nric: str = Field(..., description="Applicant NRIC")
    age: int = Field(..., description="Applicant age")
    married: bool = Field(..., description="Whether the applicant is married")
    project_name: str = Field(..., description="Project name")
    flat_type: FlatType = Field(..., description="Requested flat type")
    application_date: date = Field(..., description="Date of application")
    status: ApplicationStatus = Field(..., description="Application status")
    booking_date: Optional[date] = Field(None, description="Booking date, if booked")
