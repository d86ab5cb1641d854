"""Flight model definition."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class TravelClass(str, Enum):
    """Cabin class enumeration."""
    ECONOMY = "economy"
    BUSINESS = "business"
    FIRST = "first"


class Flight(Base):
    """Flight listing with a finite number of bookable seats."""

    __tablename__ = "flights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Route
    airline: Mapped[str] = mapped_column(String(100), nullable=False)
    origin: Mapped[str] = mapped_column(String(100), nullable=False)
    destination: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    departs_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    arrives_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    travel_class: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TravelClass.ECONOMY.value
    )
    direct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Price information (stored as minor units, e.g., cents)
    price_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    price_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    seats_available: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("seats_available >= 0", name="ck_flights_seats_available_non_negative"),
        CheckConstraint("price_amount > 0", name="ck_flights_price_amount_positive"),
        CheckConstraint("length(price_currency) = 3", name="ck_flights_price_currency_length"),
        CheckConstraint(
            "travel_class IN ('economy', 'business', 'first')",
            name="ck_flights_travel_class_valid"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Flight(id={self.id}, airline='{self.airline}', "
            f"{self.origin}->{self.destination}, seats={self.seats_available})>"
        )
