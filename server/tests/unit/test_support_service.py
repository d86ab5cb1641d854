"""Unit tests for the support ticket service."""

import pytest

from travel_booking.core.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from travel_booking.models.support import TicketStatus
from travel_booking.schemas.support import CreateTicketRequest, TicketStatus as TicketStatusSchema
from travel_booking.schemas.support import UpdateTicketRequest
from travel_booking.services.support_service import SupportService


@pytest.fixture
def ticket_request():
    return CreateTicketRequest(
        subject="Wrong hotel dates",
        message="My reservation shows the wrong check-out date.",
    )


@pytest.mark.asyncio
async def test_create_ticket(test_session, user, ticket_request):
    service = SupportService(test_session)

    ticket = await service.create_ticket(user.id, ticket_request)

    assert ticket.id is not None
    assert ticket.user_id == user.id
    assert ticket.status == TicketStatus.OPEN.value
    assert ticket.subject == "Wrong hotel dates"


@pytest.mark.asyncio
async def test_create_ticket_invalid_user(test_session, ticket_request):
    with pytest.raises(InvalidInputError):
        await SupportService(test_session).create_ticket(-1, ticket_request)


@pytest.mark.asyncio
async def test_update_ticket_status_flow(test_session, user, ticket_request):
    """Test a ticket moves forward and a closed ticket stays closed."""
    service = SupportService(test_session)
    ticket = await service.create_ticket(user.id, ticket_request)

    ticket = await service.update_ticket(
        ticket.id, UpdateTicketRequest(status=TicketStatusSchema.IN_PROGRESS)
    )
    assert ticket.status == TicketStatus.IN_PROGRESS.value

    ticket = await service.update_ticket(ticket.id, UpdateTicketRequest(status=TicketStatusSchema.CLOSED))
    assert ticket.status == TicketStatus.CLOSED.value

    with pytest.raises(InvalidStateError):
        await service.update_ticket(ticket.id, UpdateTicketRequest(status=TicketStatusSchema.OPEN))

    # Editing text on a closed ticket is still allowed
    ticket = await service.update_ticket(
        ticket.id, UpdateTicketRequest(message="Resolved by phone, closing the ticket.")
    )
    assert ticket.status == TicketStatus.CLOSED.value


@pytest.mark.asyncio
async def test_list_and_delete_tickets(test_session, user, other_user, ticket_request):
    service = SupportService(test_session)
    first = await service.create_ticket(user.id, ticket_request)
    second = await service.create_ticket(other_user.id, ticket_request)

    assert [t.id for t in await service.list_tickets()] == [second.id, first.id]
    assert [t.id for t in await service.list_tickets(user.id)] == [first.id]

    await service.delete_ticket(first.id)

    with pytest.raises(NotFoundError):
        await service.get_ticket_by_id_or_raise(first.id)
