"""Concurrency tests for booking operations."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from travel_booking.core.database import Base
from travel_booking.core.exceptions import CapacityExhaustedError, StorageFailureError
from travel_booking.core.observability import REGISTRY
from travel_booking.models import Flight, Reservation, User
from travel_booking.services.booking_service import FLIGHTS, BookingService


@pytest.mark.asyncio
async def test_stale_capacity_read_cannot_oversell(test_session, user, make_flight, count_reservations, monkeypatch):
    """Test the conditional decrement rejects a booking based on a stale seat count."""
    sold_out = await make_flight(seats_available=0)
    flight_id, user_id = sold_out.id, user.id
    service = BookingService(test_session)

    async def stale_lock(kind, item_id):
        # Simulates a read taken before a concurrent booking took the last seat
        return Flight(id=item_id, seats_available=1, price_amount=18900, price_currency="EUR")

    monkeypatch.setattr(service, "_lock_item", stale_lock)

    with pytest.raises(CapacityExhaustedError):
        await service.book_flight(user_id, flight_id)

    await test_session.refresh(sold_out)
    assert sold_out.seats_available == 0
    assert await count_reservations() == 0


@pytest.mark.asyncio
async def test_storage_failure_rolls_back_reservation(test_session, user, flight, count_reservations, monkeypatch):
    """Test a failed capacity write leaves neither a reservation nor a capacity change."""
    flight_id, user_id = flight.id, user.id
    service = BookingService(test_session)
    labels = {"kind": "flight", "reason": "storage_failure"}
    failures_before = REGISTRY.get_sample_value("reservation_failures_total", labels) or 0.0

    async def failing_adjust(kind, item_id, delta):
        raise OperationalError("UPDATE flights", {}, Exception("disk I/O error"))

    monkeypatch.setattr(service, "_adjust_capacity", failing_adjust)

    with pytest.raises(StorageFailureError) as exc_info:
        await service.book_flight(user_id, flight_id)

    assert exc_info.value.status_code == 500
    assert exc_info.value.problem_details["retryable"] is True
    assert exc_info.value.operation == "book"

    await test_session.refresh(flight)
    assert flight.seats_available == 2
    assert await count_reservations() == 0
    assert REGISTRY.get_sample_value("reservation_failures_total", labels) == failures_before + 1


@pytest.mark.asyncio
async def test_storage_failure_during_cancel_keeps_booking(test_session, user, flight, count_reservations, monkeypatch):
    flight_id, user_id = flight.id, user.id
    service = BookingService(test_session)
    await service.book_flight(user_id, flight_id)

    async def failing_adjust(kind, item_id, delta):
        raise OperationalError("UPDATE flights", {}, Exception("database is locked"))

    monkeypatch.setattr(service, "_adjust_capacity", failing_adjust)

    with pytest.raises(StorageFailureError):
        await service.cancel_flight(user_id, flight_id)

    await test_session.refresh(flight)
    assert flight.seats_available == 1
    assert await count_reservations() == 1


@pytest.mark.asyncio
async def test_conditional_decrement_stops_at_zero(test_session, make_flight):
    single = await make_flight(seats_available=1)
    flight_id = single.id
    service = BookingService(test_session)

    assert await service._adjust_capacity(FLIGHTS, flight_id, -1) is True
    assert await service._adjust_capacity(FLIGHTS, flight_id, -1) is False
    await test_session.commit()

    await test_session.refresh(single)
    assert single.seats_available == 0


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """Engine over a file database so each session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.mark.asyncio
async def test_concurrent_bookings_never_oversell(file_engine):
    """Test many users racing for few seats never push capacity below zero."""
    session_factory = async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)
    capacity = 3
    num_users = 12
    departs_at = datetime(2027, 5, 2, 7, 0, tzinfo=timezone.utc)

    async with session_factory() as session:
        flight = Flight(
            airline="Iberia",
            origin="Madrid",
            destination="Porto",
            city="Porto",
            departs_at=departs_at,
            arrives_at=departs_at + timedelta(hours=1, minutes=15),
            travel_class="economy",
            direct=True,
            price_amount=9900,
            price_currency="EUR",
            seats_available=capacity,
        )
        users = [
            User(name=f"Racer {n}", email=f"racer{n}@example.com", password_hash="unused")
            for n in range(num_users)
        ]
        session.add_all(users)
        session.add(flight)
        await session.commit()
        flight_id = flight.id
        user_ids = [u.id for u in users]

    async def attempt(user_id: int) -> str:
        async with session_factory() as session:
            try:
                await BookingService(session).book_flight(user_id, flight_id)
            except CapacityExhaustedError:
                return "exhausted"
            except StorageFailureError:
                return "storage_failure"
            return "booked"

    outcomes = await asyncio.gather(*(attempt(user_id) for user_id in user_ids))

    async with session_factory() as session:
        remaining = await session.scalar(
            select(Flight.seats_available).where(Flight.id == flight_id)
        )
        rows = await session.scalar(select(func.count()).select_from(Reservation))

    booked = outcomes.count("booked")
    assert len(outcomes) == num_users
    assert 0 <= remaining <= capacity
    assert rows == capacity - remaining
    assert booked == rows
