"""Visa application Pydantic schemas."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VisaStatus(str, Enum):
    """Visa application status enumeration."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CreateVisaRequest(BaseModel):
    """Request schema for submitting a visa application."""

    user_id: Optional[int] = Field(None, description="Applicant, defaults to the caller")
    visa_type: str = Field(..., min_length=2, max_length=50, description="Visa category, e.g. tourist")
    destination: str = Field(..., min_length=2, max_length=100, description="Destination country")
    travel_date: date = Field(..., description="Intended travel date (YYYY-MM-DD)")
    passport_number: str = Field(..., min_length=6, max_length=20, description="Passport number")
    nationality: str = Field(..., min_length=2, max_length=50, description="Applicant nationality")


class UpdateVisaRequest(BaseModel):
    """Request schema for editing a pending application. Omitted fields are left unchanged."""

    visa_type: Optional[str] = Field(None, min_length=2, max_length=50)
    destination: Optional[str] = Field(None, min_length=2, max_length=100)
    travel_date: Optional[date] = None
    passport_number: Optional[str] = Field(None, min_length=6, max_length=20)
    nationality: Optional[str] = Field(None, min_length=2, max_length=50)


class Visa(BaseModel):
    """Visa application response schema."""

    id: int = Field(..., description="Application ID")
    user_id: int = Field(..., description="Applicant")
    visa_type: str = Field(..., description="Visa category")
    destination: str = Field(..., description="Destination country")
    travel_date: date = Field(..., description="Intended travel date")
    passport_number: str = Field(..., description="Passport number")
    nationality: str = Field(..., description="Applicant nationality")
    status: VisaStatus = Field(..., description="Decision status")
    created_at: datetime = Field(..., description="Submission time (ISO 8601)")

    model_config = ConfigDict(from_attributes=True)


class VisaStatistics(BaseModel):
    """Application counts by status."""

    total: int = Field(..., ge=0)
    pending: int = Field(..., ge=0)
    approved: int = Field(..., ge=0)
    rejected: int = Field(..., ge=0)
