"""Property-based tests for booking invariants."""

import asyncio
from datetime import date, datetime, timedelta, timezone

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from travel_booking.core.database import Base
from travel_booking.core.exceptions import ConflictError
from travel_booking.models import Flight, Hotel, Reservation, ReservationStatus, User
from travel_booking.services.booking_service import BookingService

# (operation, traveller number) pairs applied in order
operations = st.lists(
    st.tuples(st.sampled_from(["book", "cancel"]), st.integers(min_value=1, max_value=4)),
    min_size=1,
    max_size=25,
)
capacities = st.integers(min_value=0, max_value=3)


async def _run_scenario(capacity: int, steps, policy: str, kind: str):
    """Apply the steps to a fresh item and return the observed capacities and event counts."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    observed = []

    try:
        async with session_factory() as session:
            if kind == "flight":
                departs_at = datetime(2027, 6, 1, 9, 0, tzinfo=timezone.utc)
                item = Flight(
                    airline="KLM", origin="Amsterdam", destination="Oslo", city="Oslo",
                    departs_at=departs_at, arrives_at=departs_at + timedelta(hours=2),
                    price_amount=15000, price_currency="EUR", seats_available=capacity,
                )
            else:
                item = Hotel(
                    name="Fjord Inn", city="Oslo", address="Bryggen 1",
                    check_in_date=date(2027, 6, 1), check_out_date=date(2027, 6, 3),
                    price_per_night=9000, price_currency="EUR",
                    free_cancellation=True, available_rooms=capacity,
                )
            travellers = [
                User(name=f"Traveller {n}", email=f"traveller{n}@example.com", password_hash="unused")
                for n in range(1, 5)
            ]
            session.add_all(travellers)
            session.add(item)
            await session.commit()
            item_id = item.id
            user_ids = [traveller.id for traveller in travellers]
            model = type(item)
            capacity_column = model.seats_available if kind == "flight" else model.available_rooms

            service = BookingService(session, duplicate_policy=policy)
            book = service.book_flight if kind == "flight" else service.book_hotel
            cancel = service.cancel_flight if kind == "flight" else service.cancel_hotel

            for op, traveller in steps:
                try:
                    await (book if op == "book" else cancel)(user_ids[traveller - 1], item_id)
                except ConflictError:
                    pass
                observed.append(
                    await session.scalar(select(capacity_column).where(model.id == item_id))
                )

            booked = await session.scalar(
                select(func.count()).select_from(Reservation)
                .where(Reservation.status == ReservationStatus.BOOKED.value)
            )
            cancelled = await session.scalar(
                select(func.count()).select_from(Reservation)
                .where(Reservation.status == ReservationStatus.CANCELLED.value)
            )
    finally:
        await engine.dispose()

    return observed, booked, cancelled


@settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.too_slow])
@given(
    capacity=capacities,
    steps=operations,
    policy=st.sampled_from(["active", "any"]),
    kind=st.sampled_from(["flight", "hotel"]),
)
def test_capacity_stays_within_bounds(capacity, steps, policy, kind):
    """Test capacity never goes negative or above its initial value."""
    observed, booked, cancelled = asyncio.run(_run_scenario(capacity, steps, policy, kind))

    assert all(0 <= remaining <= capacity for remaining in observed)
    assert observed[-1] == capacity - (booked - cancelled)


@settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.too_slow])
@given(capacity=st.integers(min_value=1, max_value=3), steps=operations)
def test_cancellations_never_exceed_bookings(capacity, steps):
    """Test every cancelled event is matched by an earlier booked event."""
    observed, booked, cancelled = asyncio.run(_run_scenario(capacity, steps, "active", "flight"))

    assert cancelled <= booked
    assert booked - cancelled <= capacity
