"""Reservation Pydantic schemas."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import Money


class ReservationStatus(str, Enum):
    """Reservation event type."""
    BOOKED = "booked"
    CANCELLED = "cancelled"


class Reservation(BaseModel):
    """Reservation event response schema."""

    id: int = Field(..., description="Event ID")
    user_id: int = Field(..., description="User the event belongs to")
    status: ReservationStatus = Field(..., description="'booked' or 'cancelled'")
    flight_id: Optional[int] = Field(None, description="Booked flight, if any")
    hotel_id: Optional[int] = Field(None, description="Booked hotel, if any")
    check_in: Optional[date] = Field(None, description="Hotel check-in date")
    check_out: Optional[date] = Field(None, description="Hotel check-out date")
    total_price: Optional[Money] = Field(None, description="Listed price at booking time")
    created_at: datetime = Field(..., description="When the event was recorded (ISO 8601)")

    model_config = ConfigDict(from_attributes=True)


class ReservationListResponse(BaseModel):
    """A user's reservation events, newest first."""

    items: list[Reservation] = Field(..., description="Reservation events")
