"""Reservation event model definition."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class ReservationStatus(str, Enum):
    """Reservation event type."""
    BOOKED = "booked"
    CANCELLED = "cancelled"


class Reservation(Base):
    """
    Append-only record of a booking or a cancellation.

    A booking writes a ``booked`` row and a cancellation writes a second
    ``cancelled`` row for the same user and item. Rows are never updated, so
    a user's current holding on an item is read from their latest event.
    """

    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    # Exactly one of these references is set
    hotel_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=True
    )
    flight_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("flights.id", ondelete="CASCADE"),
        nullable=True
    )

    # Snapshot of the listing at booking time
    check_in: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    check_out: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    total_price: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    price_currency: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "(hotel_id IS NULL) <> (flight_id IS NULL)",
            name="ck_reservations_exactly_one_item"
        ),
        CheckConstraint(
            "status IN ('booked', 'cancelled')",
            name="ck_reservations_status_valid"
        ),
        CheckConstraint(
            "total_price IS NULL OR total_price >= 0",
            name="ck_reservations_total_price_non_negative"
        ),
        Index("ix_reservations_user_flight", "user_id", "flight_id"),
        Index("ix_reservations_user_hotel", "user_id", "hotel_id"),
    )

    @property
    def kind(self) -> str:
        return "hotel" if self.hotel_id is not None else "flight"

    @property
    def item_id(self) -> int:
        return self.hotel_id if self.hotel_id is not None else self.flight_id

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, user_id={self.user_id}, "
            f"{self.kind}={self.item_id}, status='{self.status}')>"
        )
