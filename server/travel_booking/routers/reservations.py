"""Reservation log router."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import Principal, RequiredAuth, ensure_owner_or_admin
from ..models.reservation import Reservation as ReservationModel
from ..schemas.common import Money, PROBLEM_RESPONSES
from ..schemas.reservation import Reservation, ReservationListResponse
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/reservations", tags=["reservations"], responses=PROBLEM_RESPONSES)

DB_DEPENDENCY = Depends(get_db)


def convert_reservation_to_schema(reservation: ReservationModel) -> Reservation:
    """Convert reservation model to schema with Money conversion."""
    total_price = None
    if reservation.total_price is not None:
        total_price = Money(
            amount=reservation.total_price,
            currency=reservation.price_currency or "USD"
        )

    return Reservation(
        id=reservation.id,
        user_id=reservation.user_id,
        status=reservation.status,
        flight_id=reservation.flight_id,
        hotel_id=reservation.hotel_id,
        check_in=reservation.check_in,
        check_out=reservation.check_out,
        total_price=total_price,
        created_at=reservation.created_at,
    )


@router.get("/user/{user_id}", response_model=ReservationListResponse)
async def list_user_reservations(
    user_id: int,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> ReservationListResponse:
    """
    List a user's booking and cancellation events, newest first.

    Users may only read their own log; admins may read any.
    """
    ensure_owner_or_admin(current_user, user_id)

    reservations = await BookingService(db).list_reservations(user_id)

    logger.debug(
        "Reservation log listed",
        extra={"user_id": user_id, "count": len(reservations)}
    )

    return ReservationListResponse(
        items=[convert_reservation_to_schema(r) for r in reservations]
    )
