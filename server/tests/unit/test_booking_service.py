"""Unit tests for the booking service."""

from datetime import date

import pytest

from travel_booking.core.exceptions import (
    CancellationNotAllowedError,
    CapacityExhaustedError,
    DuplicateBookingError,
    InvalidInputError,
    NoActiveBookingError,
    NotFoundError,
)
from travel_booking.core.observability import REGISTRY
from travel_booking.models.reservation import ReservationStatus
from travel_booking.services.booking_service import FLIGHTS, HOTELS, BookingService
from travel_booking.services.flight_service import FlightService
from travel_booking.services.hotel_service import HotelService


def _sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_book_flight_takes_one_seat(test_session, user, flight, count_reservations):
    """Test booking a flight records a reservation and decrements seats."""
    service = BookingService(test_session)

    reservation = await service.book_flight(user.id, flight.id)

    assert reservation.id is not None
    assert reservation.status == ReservationStatus.BOOKED.value
    assert reservation.flight_id == flight.id
    assert reservation.hotel_id is None
    assert reservation.total_price == 18900
    assert reservation.price_currency == "EUR"
    assert reservation.kind == "flight"
    assert reservation.item_id == flight.id

    await test_session.refresh(flight)
    assert flight.seats_available == 1
    assert await count_reservations(flight_id=flight.id) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id,item_id", [(0, 1), (-3, 1), (1, 0), (1, -1)])
async def test_book_rejects_non_positive_ids(test_session, user_id, item_id, count_reservations):
    service = BookingService(test_session)

    with pytest.raises(InvalidInputError):
        await service.book_flight(user_id, item_id)

    with pytest.raises(InvalidInputError):
        await service.cancel_hotel(user_id, item_id)

    assert await count_reservations() == 0


@pytest.mark.asyncio
async def test_book_unknown_flight(test_session, user):
    service = BookingService(test_session)
    user_id = user.id

    with pytest.raises(NotFoundError):
        await service.book_flight(user_id, 9999)

    with pytest.raises(NotFoundError):
        await service.cancel_flight(user_id, 9999)


@pytest.mark.asyncio
async def test_book_flight_without_seats(test_session, user, make_flight, count_reservations):
    """Test booking a sold-out flight fails and persists nothing."""
    sold_out = await make_flight(seats_available=0)
    flight_id, user_id = sold_out.id, user.id
    service = BookingService(test_session)

    with pytest.raises(CapacityExhaustedError) as exc_info:
        await service.book_flight(user_id, flight_id)

    assert exc_info.value.code == "CAPACITY_EXHAUSTED"
    assert exc_info.value.status_code == 409

    await test_session.refresh(sold_out)
    assert sold_out.seats_available == 0
    assert await count_reservations() == 0


@pytest.mark.asyncio
async def test_duplicate_booking_rejected(test_session, user, flight):
    """Test a user cannot book the same flight twice."""
    flight_id, user_id = flight.id, user.id
    service = BookingService(test_session)

    await service.book_flight(user_id, flight_id)

    with pytest.raises(DuplicateBookingError) as exc_info:
        await service.book_flight(user_id, flight_id)

    assert exc_info.value.code == "DUPLICATE_BOOKING"

    await test_session.refresh(flight)
    assert flight.seats_available == 1


@pytest.mark.asyncio
async def test_cancel_without_booking(test_session, user, flight, count_reservations):
    flight_id, user_id = flight.id, user.id
    service = BookingService(test_session)

    with pytest.raises(NoActiveBookingError):
        await service.cancel_flight(user_id, flight_id)

    await test_session.refresh(flight)
    assert flight.seats_available == 2
    assert await count_reservations() == 0


@pytest.mark.asyncio
async def test_cancel_appends_event_and_releases_seat(test_session, user, flight, count_reservations):
    """Test cancelling keeps the booked row and appends a cancelled one."""
    service = BookingService(test_session)

    booked = await service.book_flight(user.id, flight.id)
    cancelled = await service.cancel_flight(user.id, flight.id)

    assert cancelled.id > booked.id
    assert cancelled.status == ReservationStatus.CANCELLED.value
    assert cancelled.flight_id == flight.id

    await test_session.refresh(booked)
    assert booked.status == ReservationStatus.BOOKED.value

    await test_session.refresh(flight)
    assert flight.seats_available == 2
    assert await count_reservations(flight_id=flight.id) == 2
    assert await count_reservations(status=ReservationStatus.CANCELLED.value) == 1


@pytest.mark.asyncio
async def test_repeated_cancel_does_not_inflate_capacity(test_session, user, flight):
    flight_id, user_id = flight.id, user.id
    service = BookingService(test_session)

    await service.book_flight(user_id, flight_id)
    await service.cancel_flight(user_id, flight_id)

    with pytest.raises(NoActiveBookingError):
        await service.cancel_flight(user_id, flight_id)

    await test_session.refresh(flight)
    assert flight.seats_available == 2


@pytest.mark.asyncio
async def test_rebook_after_cancel_allowed_by_default(test_session, user, flight, count_reservations):
    service = BookingService(test_session, duplicate_policy="active")

    await service.book_flight(user.id, flight.id)
    await service.cancel_flight(user.id, flight.id)
    rebooked = await service.book_flight(user.id, flight.id)

    assert rebooked.status == ReservationStatus.BOOKED.value
    await test_session.refresh(flight)
    assert flight.seats_available == 1
    assert await count_reservations(flight_id=flight.id) == 3


@pytest.mark.asyncio
async def test_any_policy_blocks_rebook_after_cancel(test_session, user, flight):
    """Test the 'any' policy treats every past reservation as a booking."""
    flight_id, user_id = flight.id, user.id
    service = BookingService(test_session, duplicate_policy="any")

    await service.book_flight(user_id, flight_id)
    await service.cancel_flight(user_id, flight_id)

    with pytest.raises(DuplicateBookingError):
        await service.book_flight(user_id, flight_id)

    with pytest.raises(NoActiveBookingError):
        await service.cancel_flight(user_id, flight_id)

    await test_session.refresh(flight)
    assert flight.seats_available == 2


@pytest.mark.asyncio
async def test_last_seat_goes_to_first_user(test_session, user, other_user, make_flight, count_reservations):
    """Test a single seat is booked, lost, released and rebooked by another user."""
    single = await make_flight(seats_available=1)
    flight_id, alice_id, bob_id = single.id, user.id, other_user.id
    service = BookingService(test_session)

    await service.book_flight(alice_id, flight_id)
    await test_session.refresh(single)
    assert single.seats_available == 0

    with pytest.raises(CapacityExhaustedError):
        await service.book_flight(bob_id, flight_id)

    await service.cancel_flight(alice_id, flight_id)
    await test_session.refresh(single)
    assert single.seats_available == 1
    assert await count_reservations(flight_id=flight_id) == 2

    reservation = await service.book_flight(bob_id, flight_id)

    assert reservation.user_id == bob_id
    await test_session.refresh(single)
    assert single.seats_available == 0


@pytest.mark.asyncio
async def test_book_hotel_copies_stay_onto_reservation(test_session, user, hotel):
    """Test a hotel booking snapshots dates and the total stay price."""
    service = BookingService(test_session)

    reservation = await service.book_hotel(user.id, hotel.id)

    assert reservation.hotel_id == hotel.id
    assert reservation.flight_id is None
    assert reservation.check_in == date(2027, 3, 14)
    assert reservation.check_out == date(2027, 3, 17)
    # three nights at 120.00
    assert reservation.total_price == 36000
    assert reservation.price_currency == "EUR"

    await test_session.refresh(hotel)
    assert hotel.available_rooms == 1


@pytest.mark.asyncio
async def test_cancel_hotel_with_free_cancellation(test_session, user, hotel):
    service = BookingService(test_session)

    await service.book_hotel(user.id, hotel.id)
    cancelled = await service.cancel_hotel(user.id, hotel.id)

    assert cancelled.status == ReservationStatus.CANCELLED.value
    assert cancelled.check_in is None
    await test_session.refresh(hotel)
    assert hotel.available_rooms == 2


@pytest.mark.asyncio
async def test_cancel_hotel_without_free_cancellation(test_session, user, strict_hotel, count_reservations):
    """Test a non-refundable hotel keeps its booking and room count."""
    hotel_id, user_id = strict_hotel.id, user.id
    service = BookingService(test_session)

    await service.book_hotel(user_id, hotel_id)

    with pytest.raises(CancellationNotAllowedError) as exc_info:
        await service.cancel_hotel(user_id, hotel_id)

    assert exc_info.value.code == "CANCELLATION_NOT_ALLOWED"

    await test_session.refresh(strict_hotel)
    assert strict_hotel.available_rooms == 1
    assert await count_reservations(hotel_id=hotel_id) == 1
    assert await count_reservations(status=ReservationStatus.CANCELLED.value) == 0


@pytest.mark.asyncio
async def test_no_booking_reported_before_cancellation_policy(test_session, user, strict_hotel):
    service = BookingService(test_session)
    hotel_id, user_id = strict_hotel.id, user.id

    with pytest.raises(NoActiveBookingError):
        await service.cancel_hotel(user_id, hotel_id)


@pytest.mark.asyncio
async def test_list_held_items_follows_latest_event(test_session, user, make_flight):
    first = await make_flight()
    second = await make_flight(airline="TAP Air Portugal")
    service = BookingService(test_session)

    await service.book_flight(user.id, first.id)
    await service.book_flight(user.id, second.id)
    await service.cancel_flight(user.id, first.id)

    held = await service.list_held_items(FLIGHTS, user.id)
    assert [f.id for f in held] == [second.id]

    held_any = await BookingService(test_session, duplicate_policy="any").list_held_items(FLIGHTS, user.id)
    assert [f.id for f in held_any] == [second.id]

    assert await service.list_held_items(HOTELS, user.id) == []


@pytest.mark.asyncio
async def test_list_reservations_newest_first(test_session, user, other_user, flight, hotel):
    service = BookingService(test_session)

    first = await service.book_flight(user.id, flight.id)
    second = await service.book_hotel(user.id, hotel.id)
    await service.book_flight(other_user.id, flight.id)
    third = await service.cancel_flight(user.id, flight.id)

    reservations = await service.list_reservations(user.id)

    assert [r.id for r in reservations] == [third.id, second.id, first.id]

    with pytest.raises(InvalidInputError):
        await service.list_reservations(0)


@pytest.mark.asyncio
async def test_booking_outcomes_are_counted(test_session, user, flight):
    service = BookingService(test_session)
    flight_id, user_id = flight.id, user.id

    booked_before = _sample("reservations_booked_total", {"kind": "flight"})
    duplicate_before = _sample(
        "reservation_failures_total", {"kind": "flight", "reason": "duplicate_booking"}
    )

    await service.book_flight(user_id, flight_id)
    with pytest.raises(DuplicateBookingError):
        await service.book_flight(user_id, flight_id)

    assert _sample("reservations_booked_total", {"kind": "flight"}) == booked_before + 1
    assert _sample(
        "reservation_failures_total", {"kind": "flight", "reason": "duplicate_booking"}
    ) == duplicate_before + 1


@pytest.mark.asyncio
async def test_refetch_on_same_session_sees_new_capacity(test_session, user, flight, hotel):
    """Test a lookup after book and cancel reads the committed capacity, not a cached one."""
    flight_id, hotel_id, user_id = flight.id, hotel.id, user.id
    service = BookingService(test_session)
    flights = FlightService(test_session)
    hotels = HotelService(test_session)

    await service.book_flight(user_id, flight_id)
    assert (await flights.get_flight_by_id(flight_id)).seats_available == 1

    await service.cancel_flight(user_id, flight_id)
    assert (await flights.get_flight_by_id(flight_id)).seats_available == 2

    await service.book_hotel(user_id, hotel_id)
    assert (await hotels.get_hotel_by_id_or_raise(hotel_id)).available_rooms == 1


@pytest.mark.asyncio
async def test_booking_for_unknown_user(test_session, flight, count_reservations):
    """Test a booking for a user that does not exist takes no seat."""
    flight_id = flight.id
    service = BookingService(test_session)

    with pytest.raises(NotFoundError) as exc_info:
        await service.book_flight(9999, flight_id)

    assert exc_info.value.status_code == 404
    assert "user" in exc_info.value.problem_details["detail"]

    with pytest.raises(NotFoundError):
        await service.cancel_flight(9999, flight_id)

    await test_session.refresh(flight)
    assert flight.seats_available == 2
    assert await count_reservations() == 0
