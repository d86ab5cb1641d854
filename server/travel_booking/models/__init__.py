"""Models module exporting all database models."""

from .flight import Flight, TravelClass
from .hotel import Hotel
from .reservation import Reservation, ReservationStatus
from .support import SupportTicket, TicketStatus
from .user import User, UserRole
from .visa import VisaApplication, VisaStatus

__all__ = [
    # Accounts
    "User",
    "UserRole",

    # Inventory
    "Flight",
    "TravelClass",
    "Hotel",

    # Reservation log
    "Reservation",
    "ReservationStatus",

    # Visa workflow
    "VisaApplication",
    "VisaStatus",

    # Support
    "SupportTicket",
    "TicketStatus",
]
