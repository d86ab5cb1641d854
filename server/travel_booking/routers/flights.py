"""Flight router: public search, admin inventory management, and seat booking."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import AdminAuth, Principal, RequiredAuth, ensure_owner_or_admin
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.flight import Flight as FlightModel
from ..schemas.common import Money, PROBLEM_RESPONSES
from ..schemas.flight import (
    CreateFlightRequest,
    Flight,
    FlightBookingRequest,
    FlightListResponse,
    FlightSort,
    SearchFlightsRequest,
    TravelClass,
    UpdateFlightRequest,
)
from ..schemas.reservation import Reservation
from ..services.booking_service import FLIGHTS, BookingService
from ..services.flight_service import FlightService
from .reservations import convert_reservation_to_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/flights", tags=["flights"], responses=PROBLEM_RESPONSES)

DB_DEPENDENCY = Depends(get_db)


def _convert_flight_to_schema(flight: FlightModel) -> Flight:
    """Convert flight model to schema with Money conversion."""
    return Flight(
        id=flight.id,
        airline=flight.airline,
        origin=flight.origin,
        destination=flight.destination,
        city=flight.city,
        departs_at=flight.departs_at,
        arrives_at=flight.arrives_at,
        travel_class=flight.travel_class,
        direct=flight.direct,
        price=Money(amount=flight.price_amount, currency=flight.price_currency),
        seats_available=flight.seats_available,
    )


@router.get("", response_model=FlightListResponse)
async def list_flights(
    city: Optional[str] = Query(None, description="Destination city"),
    departure_date: Optional[date] = Query(None, description="Departure day (YYYY-MM-DD)"),
    travel_class: Optional[TravelClass] = Query(None, description="Cabin class"),
    direct: Optional[bool] = Query(None, description="Non-stop flights only"),
    available_only: bool = Query(False, description="Only flights with seats left"),
    sort: FlightSort = Query(FlightSort.ID, description="Result ordering"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = DB_DEPENDENCY
) -> FlightListResponse:
    """
    Search flights.

    Supports filtering by city, departure day, cabin class and stops, with
    page/limit pagination.
    """
    request = SearchFlightsRequest(
        city=city,
        departure_date=departure_date,
        travel_class=travel_class,
        direct=direct,
        available_only=available_only,
        sort=sort,
        page=page,
        limit=limit,
    )
    flights, total = await FlightService(db).search_flights(request)

    return FlightListResponse(
        items=[_convert_flight_to_schema(f) for f in flights],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/user/{user_id}", response_model=list[Flight])
async def list_user_flights(
    user_id: int,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> list[Flight]:
    """List the flights a user currently holds a booking on."""
    ensure_owner_or_admin(current_user, user_id)

    flights = await BookingService(db).list_held_items(FLIGHTS, user_id)
    return [_convert_flight_to_schema(f) for f in flights]


@router.get("/{flight_id}", response_model=Flight)
async def get_flight(flight_id: int, db: AsyncSession = DB_DEPENDENCY) -> Flight:
    """Get a flight by ID."""
    flight = await FlightService(db).get_flight_by_id_or_raise(flight_id)
    return _convert_flight_to_schema(flight)


@router.post("", response_model=Flight, status_code=201)
async def create_flight(
    request: CreateFlightRequest,
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Flight:
    """Create a flight listing (admin only)."""
    flight = await FlightService(db).create_flight(request)

    logger.info(
        "Flight listing created by admin",
        extra={"flight_id": flight.id, "admin_id": current_user.user_id}
    )

    return _convert_flight_to_schema(flight)


@router.put("/{flight_id}", response_model=Flight)
async def update_flight(
    flight_id: int,
    request: UpdateFlightRequest,
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Flight:
    """Update a flight listing (admin only). Omitted fields are left unchanged."""
    flight = await FlightService(db).update_flight(flight_id, request)
    return _convert_flight_to_schema(flight)


@router.delete("/{flight_id}", status_code=204)
async def delete_flight(
    flight_id: int,
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Response:
    """Delete a flight listing (admin only)."""
    await FlightService(db).delete_flight(flight_id)
    return Response(status_code=204)


@router.post("/book", response_model=Reservation, status_code=201)
async def book_flight(
    request: FlightBookingRequest,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Reservation:
    """
    Book one seat on a flight.

    The booking user defaults to the caller. Only admins may book for another user.
    """
    user_id = request.user_id if request.user_id is not None else current_user.user_id
    ensure_owner_or_admin(current_user, user_id)

    try:
        reservation = await BookingService(db).book_flight(user_id, request.flight_id)
        return convert_reservation_to_schema(reservation)

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error in flight booking",
            extra={
                "user_id": user_id,
                "flight_id": request.flight_id,
                "error_id": error.problem_details["error_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise error


@router.post("/cancel", response_model=Reservation)
async def cancel_flight(
    request: FlightBookingRequest,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Reservation:
    """Cancel a seat booking on a flight, returning the seat to inventory."""
    user_id = request.user_id if request.user_id is not None else current_user.user_id
    ensure_owner_or_admin(current_user, user_id)

    try:
        reservation = await BookingService(db).cancel_flight(user_id, request.flight_id)
        return convert_reservation_to_schema(reservation)

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error in flight cancellation",
            extra={
                "user_id": user_id,
                "flight_id": request.flight_id,
                "error_id": error.problem_details["error_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise error
