"""Test configuration and fixtures."""

import os

# Settings are read at import time, so point them at SQLite before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-the-travel-booking-suite")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from travel_booking.core.database import Base, build_engine, get_db  # noqa: E402
from travel_booking.core.security import create_access_token  # noqa: E402
from travel_booking.models import Reservation, UserRole  # noqa: E402
from travel_booking.schemas.auth import SignupRequest  # noqa: E402
from travel_booking.schemas.flight import CreateFlightRequest  # noqa: E402
from travel_booking.schemas.hotel import CreateHotelRequest  # noqa: E402
from travel_booking.services.auth_service import AuthService  # noqa: E402
from travel_booking.services.flight_service import FlightService  # noqa: E402
from travel_booking.services.hotel_service import HotelService  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Create a test FastAPI application without the production lifespan."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError

    from travel_booking.core.exceptions import (
        ProblemDetailsException,
        generic_exception_handler,
        problem_details_handler,
        validation_exception_handler,
    )
    from travel_booking.core.middleware import setup_middleware
    from travel_booking.routers import ALL_ROUTERS

    app = FastAPI(title="Travel Booking API (Test)", version="1.0.0-test")

    setup_middleware(app, enable_logging=True)

    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    for router in ALL_ROUTERS:
        app.include_router(router)

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def _create_user(session, name: str, email: str, role: UserRole = UserRole.USER):
    return await AuthService(session).signup(
        SignupRequest(name=name, email=email, password="correct-horse-battery"),
        role=role,
    )


@pytest_asyncio.fixture
async def user(test_session):
    return await _create_user(test_session, "Alice Traveller", "alice@example.com")


@pytest_asyncio.fixture
async def other_user(test_session):
    return await _create_user(test_session, "Bob Traveller", "bob@example.com")


@pytest_asyncio.fixture
async def admin_user(test_session):
    return await _create_user(test_session, "Ada Admin", "admin@example.com", UserRole.ADMIN)


def _bearer(user) -> dict:
    token = create_access_token(user.id, user.role, user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(user):
    return _bearer(user)


@pytest.fixture
def other_headers(other_user):
    return _bearer(other_user)


@pytest.fixture
def admin_headers(admin_user):
    return _bearer(admin_user)


@pytest.fixture
def sample_flight_data():
    """Sample flight data for testing."""
    departs_at = datetime(2027, 3, 14, 8, 30, tzinfo=timezone.utc)
    return {
        "airline": "Lufthansa",
        "origin": "Berlin",
        "destination": "Lisbon",
        "city": "Lisbon",
        "departs_at": departs_at.isoformat(),
        "arrives_at": (departs_at + timedelta(hours=3, minutes=40)).isoformat(),
        "travel_class": "economy",
        "direct": True,
        "price": {"amount": 18900, "currency": "EUR"},
        "seats_available": 2,
    }


@pytest.fixture
def sample_hotel_data():
    """Sample hotel data for testing."""
    return {
        "name": "Casa do Rio",
        "city": "Lisbon",
        "address": "Rua da Alfandega 12",
        "description": "Riverside rooms in Baixa",
        "check_in_date": "2027-03-14",
        "check_out_date": "2027-03-17",
        "price_per_night": {"amount": 12000, "currency": "EUR"},
        "free_cancellation": True,
        "available_rooms": 2,
    }


@pytest.fixture
def make_flight(test_session, sample_flight_data):
    """Factory creating flights through the service with overridable fields."""
    async def _make(**overrides):
        data = {**sample_flight_data, **overrides}
        return await FlightService(test_session).create_flight(CreateFlightRequest(**data))
    return _make


@pytest.fixture
def make_hotel(test_session, sample_hotel_data):
    """Factory creating hotels through the service with overridable fields."""
    async def _make(**overrides):
        data = {**sample_hotel_data, **overrides}
        return await HotelService(test_session).create_hotel(CreateHotelRequest(**data))
    return _make


@pytest_asyncio.fixture
async def flight(make_flight):
    return await make_flight()


@pytest_asyncio.fixture
async def hotel(make_hotel):
    return await make_hotel()


@pytest_asyncio.fixture
async def strict_hotel(make_hotel):
    """Hotel that does not allow free cancellation."""
    return await make_hotel(name="Hotel Sem Reembolso", free_cancellation=False)


@pytest.fixture
def count_reservations(test_session):
    """Count reservation events matching column filters."""
    async def _count(**filters) -> int:
        stmt = select(func.count()).select_from(Reservation).filter_by(**filters)
        return await test_session.scalar(stmt)
    return _count
