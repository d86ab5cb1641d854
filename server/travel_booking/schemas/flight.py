"""Flight-related Pydantic schemas."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import Money, PaginatedResponse


class TravelClass(str, Enum):
    """Cabin class enumeration."""
    ECONOMY = "economy"
    BUSINESS = "business"
    FIRST = "first"


class FlightSort(str, Enum):
    """Sort orders for flight listings."""
    ID = "id"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    DEPARTURE = "departure"


class CreateFlightRequest(BaseModel):
    """Request schema for creating a flight."""

    airline: str = Field(..., min_length=2, max_length=100, description="Operating airline")
    origin: str = Field(..., min_length=2, max_length=100, description="Departure airport or city")
    destination: str = Field(..., min_length=2, max_length=100, description="Arrival airport or city")
    city: str = Field(..., min_length=2, max_length=100, description="Destination city used for search")
    departs_at: datetime = Field(..., description="Departure time (ISO 8601)")
    arrives_at: datetime = Field(..., description="Arrival time (ISO 8601)")
    travel_class: TravelClass = Field(TravelClass.ECONOMY, description="Cabin class")
    direct: bool = Field(True, description="True for a non-stop flight")
    price: Money = Field(..., description="Fare per seat")
    seats_available: int = Field(..., description="Bookable seats")

    @model_validator(mode="after")
    def check_schedule(self) -> "CreateFlightRequest":
        if self.arrives_at <= self.departs_at:
            raise ValueError("arrives_at must be after departs_at")
        return self


class UpdateFlightRequest(BaseModel):
    """Request schema for updating a flight. Omitted fields are left unchanged."""

    airline: Optional[str] = Field(None, min_length=2, max_length=100)
    origin: Optional[str] = Field(None, min_length=2, max_length=100)
    destination: Optional[str] = Field(None, min_length=2, max_length=100)
    city: Optional[str] = Field(None, min_length=2, max_length=100)
    departs_at: Optional[datetime] = None
    arrives_at: Optional[datetime] = None
    travel_class: Optional[TravelClass] = None
    direct: Optional[bool] = None
    price: Optional[Money] = None
    seats_available: Optional[int] = None


class Flight(BaseModel):
    """Flight response schema."""

    id: int = Field(..., description="Unique flight ID")
    airline: str = Field(..., description="Operating airline")
    origin: str = Field(..., description="Departure airport or city")
    destination: str = Field(..., description="Arrival airport or city")
    city: str = Field(..., description="Destination city")
    departs_at: datetime = Field(..., description="Departure time (ISO 8601)")
    arrives_at: datetime = Field(..., description="Arrival time (ISO 8601)")
    travel_class: TravelClass = Field(..., description="Cabin class")
    direct: bool = Field(..., description="True for a non-stop flight")
    price: Money = Field(..., description="Fare per seat")
    seats_available: int = Field(..., ge=0, description="Remaining bookable seats")

    model_config = ConfigDict(from_attributes=True)


class FlightListResponse(PaginatedResponse):
    """Response schema for flight search."""

    items: list[Flight] = Field(..., description="Flights on this page")


class FlightBookingRequest(BaseModel):
    """Request schema for booking or cancelling a seat."""

    user_id: Optional[int] = Field(None, description="Booking user, defaults to the caller")
    flight_id: int = Field(..., description="Flight to book or cancel")


class SearchFlightsRequest(BaseModel):
    """Filters, ordering and paging for flight listings."""

    city: Optional[str] = Field(None, description="Filter by destination city (case-insensitive)")
    departure_date: Optional[date] = Field(None, description="Filter by departure day (YYYY-MM-DD)")
    travel_class: Optional[TravelClass] = Field(None, description="Filter by cabin class")
    direct: Optional[bool] = Field(None, description="Filter by non-stop flights")
    available_only: bool = Field(False, description="Only show flights with seats left")
    sort: FlightSort = Field(FlightSort.ID, description="Result ordering")
    page: int = Field(1, ge=1, description="Page number, starting at 1")
    limit: int = Field(20, ge=1, le=100, description="Results per page")
