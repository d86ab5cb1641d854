"""Service layer package."""

from .auth_service import AuthService
from .booking_service import FLIGHTS, HOTELS, BookingService, InventoryKind
from .flight_service import FlightService
from .hotel_service import HotelService
from .support_service import SupportService
from .visa_service import VisaService

__all__ = [
    "AuthService",
    "BookingService",
    "InventoryKind",
    "FLIGHTS",
    "HOTELS",
    "FlightService",
    "HotelService",
    "SupportService",
    "VisaService",
]
