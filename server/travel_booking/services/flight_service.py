"""Flight service for inventory administration and search."""

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationError, NotFoundError
from ..models.flight import Flight
from ..schemas.flight import (
    CreateFlightRequest,
    FlightSort,
    SearchFlightsRequest,
    UpdateFlightRequest,
)

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class FlightService:
    """Service for flight-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _validate_listing(price_amount: int, seats_available: int) -> None:
        errors = {}
        if price_amount <= 0:
            errors["price.amount"] = "must be greater than 0"
        if seats_available < 0:
            errors["seats_available"] = "must not be negative"
        if errors:
            raise ValidationError(detail="Invalid flight listing", errors=errors)

    async def create_flight(self, request: CreateFlightRequest) -> Flight:
        """
        Create a new flight listing.

        Args:
            request: Flight creation request

        Returns:
            Created flight entity

        Raises:
            ValidationError: If the price is not positive or the seat count is negative
        """
        self._validate_listing(request.price.amount, request.seats_available)

        flight = Flight(
            airline=request.airline,
            origin=request.origin,
            destination=request.destination,
            city=request.city,
            departs_at=request.departs_at,
            arrives_at=request.arrives_at,
            travel_class=request.travel_class.value,
            direct=request.direct,
            price_amount=request.price.amount,
            price_currency=request.price.currency,
            seats_available=request.seats_available,
        )

        self.db.add(flight)
        await self.db.commit()
        await self.db.refresh(flight)

        logger.info(
            "Flight created successfully",
            extra={
                "flight_id": flight.id,
                "airline": flight.airline,
                "seats_available": flight.seats_available
            }
        )

        return flight

    async def get_flight_by_id(self, flight_id: int) -> Optional[Flight]:
        """
        Get flight by ID.

        Args:
            flight_id: Flight ID to search for

        Returns:
            Flight if found, None otherwise
        """
        stmt = select(Flight).where(Flight.id == flight_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_flight_by_id_or_raise(self, flight_id: int) -> Flight:
        """
        Get flight by ID or raise NotFoundError.

        Raises:
            NotFoundError: If flight not found
        """
        flight = await self.get_flight_by_id(flight_id)
        if not flight:
            logger.warning(
                "Flight not found",
                extra={"flight_id": flight_id}
            )
            raise NotFoundError(resource_type="flight", resource_id=flight_id)
        return flight

    async def update_flight(self, flight_id: int, request: UpdateFlightRequest) -> Flight:
        """
        Update the provided fields of a flight.

        Capacity set here is an administrative correction; bookings never go
        through this path.

        Raises:
            NotFoundError: If flight not found
            ValidationError: If the result would be an invalid listing
        """
        flight = await self.get_flight_by_id_or_raise(flight_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        price = changes.pop("price", None)
        if price is not None:
            changes["price_amount"] = price["amount"]
            changes["price_currency"] = price["currency"]
        if "travel_class" in changes:
            changes["travel_class"] = request.travel_class.value

        merged = {name: changes.get(name, getattr(flight, name)) for name in (
            "price_amount", "seats_available", "departs_at", "arrives_at"
        )}
        self._validate_listing(merged["price_amount"], merged["seats_available"])
        if _as_utc(merged["arrives_at"]) <= _as_utc(merged["departs_at"]):
            raise ValidationError(
                detail="Invalid flight listing",
                errors={"arrives_at": "must be after departs_at"}
            )

        for name, value in changes.items():
            setattr(flight, name, value)

        await self.db.commit()
        await self.db.refresh(flight)

        logger.info(
            "Flight updated successfully",
            extra={"flight_id": flight.id, "fields": sorted(request.model_fields_set)}
        )

        return flight

    async def delete_flight(self, flight_id: int) -> None:
        """
        Delete a flight listing.

        Raises:
            NotFoundError: If flight not found
        """
        flight = await self.get_flight_by_id_or_raise(flight_id)
        await self.db.delete(flight)
        await self.db.commit()

        logger.info("Flight deleted", extra={"flight_id": flight_id})

    async def search_flights(self, request: SearchFlightsRequest) -> tuple[list[Flight], int]:
        """
        Search flights based on criteria.

        Args:
            request: Filters, ordering and paging

        Returns:
            The requested page of flights and the total number of matches
        """
        conditions = []

        if request.city:
            conditions.append(func.lower(Flight.city) == request.city.strip().lower())

        if request.departure_date:
            day_start = datetime.combine(request.departure_date, time.min, tzinfo=timezone.utc)
            conditions.append(Flight.departs_at >= day_start)
            conditions.append(Flight.departs_at < day_start + timedelta(days=1))

        if request.travel_class:
            conditions.append(Flight.travel_class == request.travel_class.value)

        if request.direct is not None:
            conditions.append(Flight.direct == request.direct)

        if request.available_only:
            conditions.append(Flight.seats_available > 0)

        total = await self.db.scalar(
            select(func.count()).select_from(Flight).where(*conditions)
        )

        order_by = {
            FlightSort.ID: (Flight.id,),
            FlightSort.PRICE_ASC: (Flight.price_amount, Flight.id),
            FlightSort.PRICE_DESC: (Flight.price_amount.desc(), Flight.id),
            FlightSort.DEPARTURE: (Flight.departs_at, Flight.id),
        }[request.sort]

        stmt = (
            select(Flight)
            .where(*conditions)
            .order_by(*order_by)
            .offset((request.page - 1) * request.limit)
            .limit(request.limit)
        )
        result = await self.db.execute(stmt)
        flights = list(result.scalars().all())

        logger.debug(
            "Flight search completed",
            extra={
                "filters": request.model_dump(exclude_none=True, mode="json"),
                "results_count": len(flights),
                "total": total
            }
        )

        return flights, total or 0
