"""Hotel model definition."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class Hotel(Base):
    """Hotel listing for a fixed stay with a finite number of rooms."""

    __tablename__ = "hotels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Stay window offered by the listing
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    check_out_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Price information (stored as minor units, e.g., cents)
    price_per_night: Mapped[int] = mapped_column(Integer, nullable=False)
    price_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    free_cancellation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    available_rooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

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
        CheckConstraint("available_rooms >= 0", name="ck_hotels_available_rooms_non_negative"),
        CheckConstraint("price_per_night > 0", name="ck_hotels_price_per_night_positive"),
        CheckConstraint("length(price_currency) = 3", name="ck_hotels_price_currency_length"),
        CheckConstraint("check_out_date >= check_in_date", name="ck_hotels_stay_dates_ordered"),
    )

    @property
    def nights(self) -> int:
        return max((self.check_out_date - self.check_in_date).days, 1)

    def __repr__(self) -> str:
        return (
            f"<Hotel(id={self.id}, name='{self.name}', city='{self.city}', "
            f"rooms={self.available_rooms})>"
        )
