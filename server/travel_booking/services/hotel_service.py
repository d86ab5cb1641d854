"""Hotel service for inventory administration and search."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationError, NotFoundError
from ..models.hotel import Hotel
from ..schemas.hotel import (
    CreateHotelRequest,
    HotelSort,
    SearchHotelsRequest,
    UpdateHotelRequest,
)

logger = logging.getLogger(__name__)


class HotelService:
    """Service for hotel-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _validate_listing(price_per_night: int, available_rooms: int) -> None:
        errors = {}
        if price_per_night <= 0:
            errors["price_per_night.amount"] = "must be greater than 0"
        if available_rooms < 0:
            errors["available_rooms"] = "must not be negative"
        if errors:
            raise ValidationError(detail="Invalid hotel listing", errors=errors)

    async def create_hotel(self, request: CreateHotelRequest) -> Hotel:
        """
        Create a new hotel listing.

        Args:
            request: Hotel creation request

        Returns:
            Created hotel entity

        Raises:
            ValidationError: If the nightly rate is not positive or the room count is negative
        """
        self._validate_listing(request.price_per_night.amount, request.available_rooms)

        hotel = Hotel(
            name=request.name,
            city=request.city,
            address=request.address,
            description=request.description,
            check_in_date=request.check_in_date,
            check_out_date=request.check_out_date,
            price_per_night=request.price_per_night.amount,
            price_currency=request.price_per_night.currency,
            free_cancellation=request.free_cancellation,
            available_rooms=request.available_rooms,
        )

        self.db.add(hotel)
        await self.db.commit()
        await self.db.refresh(hotel)

        logger.info(
            "Hotel created successfully",
            extra={
                "hotel_id": hotel.id,
                "city": hotel.city,
                "available_rooms": hotel.available_rooms
            }
        )

        return hotel

    async def get_hotel_by_id(self, hotel_id: int) -> Optional[Hotel]:
        """Get hotel by ID, or None if it does not exist."""
        stmt = select(Hotel).where(Hotel.id == hotel_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_hotel_by_id_or_raise(self, hotel_id: int) -> Hotel:
        """
        Get hotel by ID or raise NotFoundError.

        Raises:
            NotFoundError: If hotel not found
        """
        hotel = await self.get_hotel_by_id(hotel_id)
        if not hotel:
            logger.warning(
                "Hotel not found",
                extra={"hotel_id": hotel_id}
            )
            raise NotFoundError(resource_type="hotel", resource_id=hotel_id)
        return hotel

    async def update_hotel(self, hotel_id: int, request: UpdateHotelRequest) -> Hotel:
        """
        Update the provided fields of a hotel.

        Raises:
            NotFoundError: If hotel not found
            ValidationError: If the result would be an invalid listing
        """
        hotel = await self.get_hotel_by_id_or_raise(hotel_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        price = changes.pop("price_per_night", None)
        if price is not None:
            changes["price_per_night"] = price["amount"]
            changes["price_currency"] = price["currency"]

        merged = {name: changes.get(name, getattr(hotel, name)) for name in (
            "price_per_night", "available_rooms", "check_in_date", "check_out_date"
        )}
        self._validate_listing(merged["price_per_night"], merged["available_rooms"])
        if merged["check_out_date"] < merged["check_in_date"]:
            raise ValidationError(
                detail="Invalid hotel listing",
                errors={"check_out_date": "must not be before check_in_date"}
            )

        for name, value in changes.items():
            setattr(hotel, name, value)

        await self.db.commit()
        await self.db.refresh(hotel)

        logger.info(
            "Hotel updated successfully",
            extra={"hotel_id": hotel.id, "fields": sorted(request.model_fields_set)}
        )

        return hotel

    async def delete_hotel(self, hotel_id: int) -> None:
        """
        Delete a hotel listing.

        Raises:
            NotFoundError: If hotel not found
        """
        hotel = await self.get_hotel_by_id_or_raise(hotel_id)
        await self.db.delete(hotel)
        await self.db.commit()

        logger.info("Hotel deleted", extra={"hotel_id": hotel_id})

    async def search_hotels(self, request: SearchHotelsRequest) -> tuple[list[Hotel], int]:
        """
        Search hotels based on criteria.

        Args:
            request: Filters, ordering and paging

        Returns:
            The requested page of hotels and the total number of matches
        """
        conditions = []

        if request.city:
            conditions.append(func.lower(Hotel.city) == request.city.strip().lower())

        if request.check_in_date:
            conditions.append(Hotel.check_in_date == request.check_in_date)

        if request.check_out_date:
            conditions.append(Hotel.check_out_date == request.check_out_date)

        if request.free_cancellation is not None:
            conditions.append(Hotel.free_cancellation == request.free_cancellation)

        if request.min_price is not None:
            conditions.append(Hotel.price_per_night >= request.min_price)

        if request.max_price is not None:
            conditions.append(Hotel.price_per_night <= request.max_price)

        if request.available_only:
            conditions.append(Hotel.available_rooms > 0)

        total = await self.db.scalar(
            select(func.count()).select_from(Hotel).where(*conditions)
        )

        order_by = {
            HotelSort.ID: (Hotel.id,),
            HotelSort.PRICE_ASC: (Hotel.price_per_night, Hotel.id),
            HotelSort.PRICE_DESC: (Hotel.price_per_night.desc(), Hotel.id),
        }[request.sort]

        stmt = (
            select(Hotel)
            .where(*conditions)
            .order_by(*order_by)
            .offset((request.page - 1) * request.limit)
            .limit(request.limit)
        )
        result = await self.db.execute(stmt)
        hotels = list(result.scalars().all())

        logger.debug(
            "Hotel search completed",
            extra={
                "filters": request.model_dump(exclude_none=True, mode="json"),
                "results_count": len(hotels),
                "total": total
            }
        )

        return hotels, total or 0
