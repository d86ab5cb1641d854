"""Inventory reservation core: book and cancel flights and hotels against finite capacity."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from sqlalchemy import func, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import (
    CancellationNotAllowedError,
    CapacityExhaustedError,
    DuplicateBookingError,
    InvalidInputError,
    NoActiveBookingError,
    NotFoundError,
    ProblemDetailsException,
    StorageFailureError,
)
from ..core.observability import get_logger, metrics_collector
from ..models.flight import Flight
from ..models.hotel import Hotel
from ..models.reservation import Reservation, ReservationStatus
from ..models.user import User

logger = get_logger(__name__)


def _flight_snapshot(flight: Flight) -> Dict[str, Any]:
    return {
        "total_price": flight.price_amount,
        "price_currency": flight.price_currency,
    }


def _hotel_snapshot(hotel: Hotel) -> Dict[str, Any]:
    return {
        "check_in": hotel.check_in_date,
        "check_out": hotel.check_out_date,
        "total_price": hotel.price_per_night * hotel.nights,
        "price_currency": hotel.price_currency,
    }


@dataclass(frozen=True)
class InventoryKind:
    """
    Describes one kind of bookable inventory.

    Attributes:
        name: Kind name used in errors, logs and metrics
        model: Mapped inventory class
        capacity_column: Column holding the remaining capacity
        reservation_column: Reservation column referencing the item
        cancellation_flag: Boolean column that must be true for a cancellation
            to be allowed, or None when cancellation is unconditional
        snapshot: Builds the listing fields copied onto a booked reservation
    """

    name: str
    model: type
    capacity_column: str
    reservation_column: str
    cancellation_flag: Optional[str] = None
    snapshot: Callable[[Any], Dict[str, Any]] = field(default=lambda item: {})

    @property
    def capacity_attr(self):
        return getattr(self.model, self.capacity_column)

    @property
    def reservation_ref(self):
        return getattr(Reservation, self.reservation_column)

    def capacity_of(self, item) -> int:
        return getattr(item, self.capacity_column)

    def allows_cancellation(self, item) -> bool:
        if self.cancellation_flag is None:
            return True
        return bool(getattr(item, self.cancellation_flag))


FLIGHTS = InventoryKind(
    name="flight",
    model=Flight,
    capacity_column="seats_available",
    reservation_column="flight_id",
    snapshot=_flight_snapshot,
)

HOTELS = InventoryKind(
    name="hotel",
    model=Hotel,
    capacity_column="available_rooms",
    reservation_column="hotel_id",
    cancellation_flag="free_cancellation",
    snapshot=_hotel_snapshot,
)


class BookingService:
    """
    Service for booking and cancelling inventory.

    A booking appends a ``booked`` reservation and takes one unit of capacity;
    a cancellation appends a ``cancelled`` reservation and returns it. Each
    pair of writes commits in a single transaction. The capacity change is a
    conditional UPDATE, so a concurrent booking that took the last unit makes
    this one fail with CapacityExhaustedError instead of overselling.
    """

    def __init__(self, db: AsyncSession, duplicate_policy: Optional[str] = None):
        self.db = db
        self.duplicate_policy = duplicate_policy or settings.duplicate_booking_policy

    async def book_flight(self, user_id: int, flight_id: int) -> Reservation:
        """Book one seat on a flight."""
        return await self._book(FLIGHTS, user_id, flight_id)

    async def cancel_flight(self, user_id: int, flight_id: int) -> Reservation:
        """Cancel the user's seat on a flight."""
        return await self._cancel(FLIGHTS, user_id, flight_id)

    async def book_hotel(self, user_id: int, hotel_id: int) -> Reservation:
        """Book one room at a hotel, copying the stay dates and price onto the reservation."""
        return await self._book(HOTELS, user_id, hotel_id)

    async def cancel_hotel(self, user_id: int, hotel_id: int) -> Reservation:
        """Cancel the user's room at a hotel. Only hotels with free cancellation allow this."""
        return await self._cancel(HOTELS, user_id, hotel_id)

    async def _book(self, kind: InventoryKind, user_id: int, item_id: int) -> Reservation:
        """
        Book one unit of an inventory item for a user.

        Args:
            kind: Inventory kind descriptor
            user_id: Booking user
            item_id: Item to book

        Returns:
            The persisted ``booked`` reservation

        Raises:
            InvalidInputError: If either id is not positive
            NotFoundError: If the user or the item does not exist
            CapacityExhaustedError: If no capacity remains
            DuplicateBookingError: If the user already holds a booking on the item
            StorageFailureError: If the record store fails; nothing is persisted
        """
        log = logger.with_context(operation="book", kind=kind.name, user_id=user_id, item_id=item_id)

        try:
            self._validate_ids(user_id, item_id)
            await self._ensure_user(user_id)
            item = await self._lock_item(kind, item_id)

            if kind.capacity_of(item) <= 0:
                raise CapacityExhaustedError(kind.name, item_id)

            if await self._blocks_rebooking(kind, user_id, item_id):
                raise DuplicateBookingError(kind.name, item_id, user_id)

            reservation = Reservation(
                user_id=user_id,
                status=ReservationStatus.BOOKED.value,
                **{kind.reservation_column: item_id},
                **kind.snapshot(item),
            )
            self.db.add(reservation)
            await self.db.flush()

            if not await self._adjust_capacity(kind, item_id, -1):
                # Another booking took the last unit after our read
                raise CapacityExhaustedError(kind.name, item_id)

            await self.db.refresh(reservation)
            await self.db.commit()

        except ProblemDetailsException as exc:
            await self.db.rollback()
            log.warning("Booking rejected", code=exc.code)
            metrics_collector.record_failure(kind.name, (exc.code or "rejected").lower())
            raise

        except SQLAlchemyError as exc:
            await self.db.rollback()
            log.error("Booking failed in record store", error=str(exc), exc_info=True)
            metrics_collector.record_failure(kind.name, "storage_failure")
            raise StorageFailureError(
                "book",
                {"kind": kind.name, "user_id": user_id, "item_id": item_id},
            ) from exc

        log.info("Booking created", reservation_id=reservation.id)
        metrics_collector.record_booking(kind.name)

        return reservation

    async def _cancel(self, kind: InventoryKind, user_id: int, item_id: int) -> Reservation:
        """
        Cancel a user's booking on an inventory item and release its unit.

        Args:
            kind: Inventory kind descriptor
            user_id: Cancelling user
            item_id: Item to cancel

        Returns:
            The persisted ``cancelled`` reservation

        Raises:
            InvalidInputError: If either id is not positive
            NotFoundError: If the user or the item does not exist
            NoActiveBookingError: If the user holds no booking on the item
            CancellationNotAllowedError: If the item does not allow cancellation
            StorageFailureError: If the record store fails; nothing is persisted
        """
        log = logger.with_context(operation="cancel", kind=kind.name, user_id=user_id, item_id=item_id)

        try:
            self._validate_ids(user_id, item_id)
            await self._ensure_user(user_id)
            item = await self._lock_item(kind, item_id)

            if not await self._has_active_booking(kind, user_id, item_id):
                raise NoActiveBookingError(kind.name, item_id, user_id)

            if not kind.allows_cancellation(item):
                raise CancellationNotAllowedError(kind.name, item_id)

            reservation = Reservation(
                user_id=user_id,
                status=ReservationStatus.CANCELLED.value,
                **{kind.reservation_column: item_id},
            )
            self.db.add(reservation)
            await self.db.flush()

            if not await self._adjust_capacity(kind, item_id, 1):
                raise NotFoundError(resource_type=kind.name, resource_id=item_id)

            await self.db.refresh(reservation)
            await self.db.commit()

        except ProblemDetailsException as exc:
            await self.db.rollback()
            log.warning("Cancellation rejected", code=exc.code)
            metrics_collector.record_failure(kind.name, (exc.code or "rejected").lower())
            raise

        except SQLAlchemyError as exc:
            await self.db.rollback()
            log.error("Cancellation failed in record store", error=str(exc), exc_info=True)
            metrics_collector.record_failure(kind.name, "storage_failure")
            raise StorageFailureError(
                "cancel",
                {"kind": kind.name, "user_id": user_id, "item_id": item_id},
            ) from exc

        log.info("Booking cancelled", reservation_id=reservation.id)
        metrics_collector.record_cancellation(kind.name)

        return reservation

    @staticmethod
    def _validate_ids(user_id: int, item_id: int) -> None:
        if user_id is None or user_id <= 0:
            raise InvalidInputError("user_id", user_id)
        if item_id is None or item_id <= 0:
            raise InvalidInputError("item_id", item_id)

    async def _ensure_user(self, user_id: int) -> None:
        if await self.db.get(User, user_id) is None:
            raise NotFoundError(resource_type="user", resource_id=user_id)

    async def _lock_item(self, kind: InventoryKind, item_id: int):
        """
        Load an inventory item for a capacity change.

        On PostgreSQL a transaction-scoped advisory lock keyed on the kind and
        id serialises concurrent bookings of the same item until commit or
        rollback. SQLite (tests) skips the lock.

        Raises:
            NotFoundError: If the item does not exist
        """
        if self.db.bind and self.db.bind.dialect.name == "postgresql":
            await self.db.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:lock_key))"),
                {"lock_key": f"{kind.name}:{item_id}"}
            )

        stmt = (
            select(kind.model)
            .where(kind.model.id == item_id)
            .execution_options(populate_existing=True)
        )
        item = (await self.db.execute(stmt)).scalar_one_or_none()

        if item is None:
            raise NotFoundError(resource_type=kind.name, resource_id=item_id)

        return item

    async def _has_active_booking(self, kind: InventoryKind, user_id: int, item_id: int) -> bool:
        """Return True if the user's latest reservation event for the item is ``booked``."""
        latest_status = await self.db.scalar(
            select(Reservation.status)
            .where(Reservation.user_id == user_id, kind.reservation_ref == item_id)
            .order_by(Reservation.id.desc())
            .limit(1)
        )
        return latest_status == ReservationStatus.BOOKED.value

    async def _blocks_rebooking(self, kind: InventoryKind, user_id: int, item_id: int) -> bool:
        """
        Return True if the user may not book the item again.

        Under the ``active`` policy only a live booking blocks. Under ``any``
        every reservation row counts, cancelled or not.
        """
        if self.duplicate_policy == "any":
            count = await self.db.scalar(
                select(func.count())
                .select_from(Reservation)
                .where(Reservation.user_id == user_id, kind.reservation_ref == item_id)
            )
            return bool(count)

        return await self._has_active_booking(kind, user_id, item_id)

    async def _adjust_capacity(self, kind: InventoryKind, item_id: int, delta: int) -> bool:
        """
        Atomically change an item's remaining capacity.

        A decrement only applies while enough capacity remains. Returns False
        when no row was updated. A loaded copy of the item in this session
        picks up the new value.
        """
        column = kind.capacity_attr
        stmt = update(kind.model).where(kind.model.id == item_id)
        if delta < 0:
            stmt = stmt.where(column + delta >= 0)
        stmt = (
            stmt.values({kind.capacity_column: column + delta})
            .execution_options(synchronize_session="fetch")
        )

        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def list_held_items(self, kind: InventoryKind, user_id: int) -> list:
        """
        Return the items of a kind the user currently holds a booking on.

        Raises:
            InvalidInputError: If the user id is not positive
        """
        if user_id is None or user_id <= 0:
            raise InvalidInputError("user_id", user_id)

        stmt = (
            select(kind.reservation_ref, Reservation.status)
            .where(Reservation.user_id == user_id, kind.reservation_ref.is_not(None))
            .order_by(Reservation.id)
        )
        rows = (await self.db.execute(stmt)).all()

        latest: Dict[int, str] = {}
        for item_id, status in rows:
            latest[item_id] = status
        held_ids = {
            item_id for item_id, status in latest.items()
            if status == ReservationStatus.BOOKED.value
        }

        if not held_ids:
            return []

        result = await self.db.execute(
            select(kind.model).where(kind.model.id.in_(held_ids)).order_by(kind.model.id)
        )
        return list(result.scalars().all())

    async def list_reservations(self, user_id: int) -> list[Reservation]:
        """Return a user's reservation events, newest first."""
        if user_id is None or user_id <= 0:
            raise InvalidInputError("user_id", user_id)

        stmt = (
            select(Reservation)
            .where(Reservation.user_id == user_id)
            .order_by(Reservation.created_at.desc(), Reservation.id.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
