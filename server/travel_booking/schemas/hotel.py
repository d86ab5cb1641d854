"""Hotel-related Pydantic schemas."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import Money, PaginatedResponse


class HotelSort(str, Enum):
    """Sort orders for hotel listings."""
    ID = "id"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


class CreateHotelRequest(BaseModel):
    """Request schema for creating a hotel listing."""

    name: str = Field(..., min_length=1, max_length=200, description="Hotel name")
    city: str = Field(..., min_length=1, max_length=100, description="City")
    address: str = Field(..., min_length=1, max_length=255, description="Street address")
    description: Optional[str] = Field(None, max_length=5000, description="Free-form description")
    check_in_date: date = Field(..., description="First night of the stay (YYYY-MM-DD)")
    check_out_date: date = Field(..., description="Departure day (YYYY-MM-DD)")
    price_per_night: Money = Field(..., description="Nightly rate")
    free_cancellation: bool = Field(False, description="Whether bookings may be cancelled")
    available_rooms: int = Field(..., description="Bookable rooms")

    @model_validator(mode="after")
    def check_stay(self) -> "CreateHotelRequest":
        if self.check_out_date < self.check_in_date:
            raise ValueError("check_out_date must not be before check_in_date")
        return self


class UpdateHotelRequest(BaseModel):
    """Request schema for updating a hotel. Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    price_per_night: Optional[Money] = None
    free_cancellation: Optional[bool] = None
    available_rooms: Optional[int] = None


class Hotel(BaseModel):
    """Hotel response schema."""

    id: int = Field(..., description="Unique hotel ID")
    name: str = Field(..., description="Hotel name")
    city: str = Field(..., description="City")
    address: str = Field(..., description="Street address")
    description: Optional[str] = Field(None, description="Free-form description")
    check_in_date: date = Field(..., description="First night of the stay")
    check_out_date: date = Field(..., description="Departure day")
    price_per_night: Money = Field(..., description="Nightly rate")
    free_cancellation: bool = Field(..., description="Whether bookings may be cancelled")
    available_rooms: int = Field(..., ge=0, description="Remaining bookable rooms")

    model_config = ConfigDict(from_attributes=True)


class HotelListResponse(PaginatedResponse):
    """Response schema for hotel search."""

    items: list[Hotel] = Field(..., description="Hotels on this page")


class HotelBookingRequest(BaseModel):
    """Request schema for booking or cancelling a room."""

    user_id: Optional[int] = Field(None, description="Booking user, defaults to the caller")
    hotel_id: int = Field(..., description="Hotel to book or cancel")


class SearchHotelsRequest(BaseModel):
    """Filters, ordering and paging for hotel listings."""

    city: Optional[str] = Field(None, description="Filter by city (case-insensitive)")
    check_in_date: Optional[date] = Field(None, description="Filter by check-in date")
    check_out_date: Optional[date] = Field(None, description="Filter by check-out date")
    free_cancellation: Optional[bool] = Field(None, description="Filter by cancellation policy")
    min_price: Optional[int] = Field(None, ge=0, description="Minimum nightly rate in minor units")
    max_price: Optional[int] = Field(None, ge=0, description="Maximum nightly rate in minor units")
    available_only: bool = Field(False, description="Only show hotels with rooms left")
    sort: HotelSort = Field(HotelSort.ID, description="Result ordering")
    page: int = Field(1, ge=1, description="Page number, starting at 1")
    limit: int = Field(20, ge=1, le=100, description="Results per page")
