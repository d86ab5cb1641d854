"""Hotel router: public search, admin inventory management, and room booking."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import AdminAuth, Principal, RequiredAuth, ensure_owner_or_admin
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.hotel import Hotel as HotelModel
from ..schemas.common import Money, PROBLEM_RESPONSES
from ..schemas.hotel import (
    CreateHotelRequest,
    Hotel,
    HotelBookingRequest,
    HotelListResponse,
    HotelSort,
    SearchHotelsRequest,
    UpdateHotelRequest,
)
from ..schemas.reservation import Reservation
from ..services.booking_service import HOTELS, BookingService
from ..services.hotel_service import HotelService
from .reservations import convert_reservation_to_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/hotels", tags=["hotels"], responses=PROBLEM_RESPONSES)

DB_DEPENDENCY = Depends(get_db)


def _convert_hotel_to_schema(hotel: HotelModel) -> Hotel:
    """Convert hotel model to schema with Money conversion."""
    return Hotel(
        id=hotel.id,
        name=hotel.name,
        city=hotel.city,
        address=hotel.address,
        description=hotel.description,
        check_in_date=hotel.check_in_date,
        check_out_date=hotel.check_out_date,
        price_per_night=Money(amount=hotel.price_per_night, currency=hotel.price_currency),
        free_cancellation=hotel.free_cancellation,
        available_rooms=hotel.available_rooms,
    )


@router.get("", response_model=HotelListResponse)
async def list_hotels(
    city: Optional[str] = Query(None, description="City"),
    check_in_date: Optional[date] = Query(None, description="Check-in date (YYYY-MM-DD)"),
    check_out_date: Optional[date] = Query(None, description="Check-out date (YYYY-MM-DD)"),
    free_cancellation: Optional[bool] = Query(None, description="Cancellation policy"),
    min_price: Optional[int] = Query(None, ge=0, description="Minimum nightly rate in minor units"),
    max_price: Optional[int] = Query(None, ge=0, description="Maximum nightly rate in minor units"),
    available_only: bool = Query(False, description="Only hotels with rooms left"),
    sort: HotelSort = Query(HotelSort.ID, description="Result ordering"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = DB_DEPENDENCY
) -> HotelListResponse:
    """
    Search hotels.

    Supports filtering by city, stay dates, cancellation policy and price
    range, with page/limit pagination.
    """
    request = SearchHotelsRequest(
        city=city,
        check_in_date=check_in_date,
        check_out_date=check_out_date,
        free_cancellation=free_cancellation,
        min_price=min_price,
        max_price=max_price,
        available_only=available_only,
        sort=sort,
        page=page,
        limit=limit,
    )
    hotels, total = await HotelService(db).search_hotels(request)

    return HotelListResponse(
        items=[_convert_hotel_to_schema(h) for h in hotels],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/user/{user_id}", response_model=list[Hotel])
async def list_user_hotels(
    user_id: int,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> list[Hotel]:
    """List the hotels a user currently holds a booking at."""
    ensure_owner_or_admin(current_user, user_id)

    hotels = await BookingService(db).list_held_items(HOTELS, user_id)
    return [_convert_hotel_to_schema(h) for h in hotels]


@router.get("/{hotel_id}", response_model=Hotel)
async def get_hotel(hotel_id: int, db: AsyncSession = DB_DEPENDENCY) -> Hotel:
    """Get a hotel by ID."""
    hotel = await HotelService(db).get_hotel_by_id_or_raise(hotel_id)
    return _convert_hotel_to_schema(hotel)


@router.post("", response_model=Hotel, status_code=201)
async def create_hotel(
    request: CreateHotelRequest,
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Hotel:
    """Create a hotel listing (admin only)."""
    hotel = await HotelService(db).create_hotel(request)

    logger.info(
        "Hotel listing created by admin",
        extra={"hotel_id": hotel.id, "admin_id": current_user.user_id}
    )

    return _convert_hotel_to_schema(hotel)


@router.put("/{hotel_id}", response_model=Hotel)
async def update_hotel(
    hotel_id: int,
    request: UpdateHotelRequest,
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Hotel:
    """Update a hotel listing (admin only). Omitted fields are left unchanged."""
    hotel = await HotelService(db).update_hotel(hotel_id, request)
    return _convert_hotel_to_schema(hotel)


@router.delete("/{hotel_id}", status_code=204)
async def delete_hotel(
    hotel_id: int,
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Response:
    """Delete a hotel listing (admin only)."""
    await HotelService(db).delete_hotel(hotel_id)
    return Response(status_code=204)


@router.post("/book", response_model=Reservation, status_code=201)
async def book_hotel(
    request: HotelBookingRequest,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Reservation:
    """
    Book one room at a hotel for the listed stay.

    The booking user defaults to the caller. Only admins may book for another user.
    """
    user_id = request.user_id if request.user_id is not None else current_user.user_id
    ensure_owner_or_admin(current_user, user_id)

    try:
        reservation = await BookingService(db).book_hotel(user_id, request.hotel_id)
        return convert_reservation_to_schema(reservation)

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error in hotel booking",
            extra={
                "user_id": user_id,
                "hotel_id": request.hotel_id,
                "error_id": error.problem_details["error_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise error


@router.post("/cancel", response_model=Reservation)
async def cancel_hotel(
    request: HotelBookingRequest,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Reservation:
    """
    Cancel a room booking, returning the room to inventory.

    Only hotels offering free cancellation accept this.
    """
    user_id = request.user_id if request.user_id is not None else current_user.user_id
    ensure_owner_or_admin(current_user, user_id)

    try:
        reservation = await BookingService(db).cancel_hotel(user_id, request.hotel_id)
        return convert_reservation_to_schema(reservation)

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error in hotel cancellation",
            extra={
                "user_id": user_id,
                "hotel_id": request.hotel_id,
                "error_id": error.problem_details["error_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise error
