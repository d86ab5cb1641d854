"""Support ticket router."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import AdminAuth, Principal, RequiredAuth, ensure_owner_or_admin
from ..schemas.common import PROBLEM_RESPONSES
from ..schemas.support import CreateTicketRequest, Ticket, UpdateTicketRequest
from ..services.support_service import SupportService

router = APIRouter(prefix="/v1/support", tags=["support"], responses=PROBLEM_RESPONSES)

DB_DEPENDENCY = Depends(get_db)


@router.post("", response_model=Ticket, status_code=201)
async def create_ticket(
    request: CreateTicketRequest,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Ticket:
    """Open a support ticket."""
    user_id = request.user_id if request.user_id is not None else current_user.user_id
    ensure_owner_or_admin(current_user, user_id)

    ticket = await SupportService(db).create_ticket(user_id, request)
    return Ticket.model_validate(ticket)


@router.get("", response_model=list[Ticket])
async def list_tickets(
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> list[Ticket]:
    """List every ticket (admin only)."""
    tickets = await SupportService(db).list_tickets()
    return [Ticket.model_validate(t) for t in tickets]


@router.get("/user/{user_id}", response_model=list[Ticket])
async def list_user_tickets(
    user_id: int,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> list[Ticket]:
    ensure_owner_or_admin(current_user, user_id)

    tickets = await SupportService(db).list_tickets(user_id)
    return [Ticket.model_validate(t) for t in tickets]


@router.get("/{ticket_id}", response_model=Ticket)
async def get_ticket(
    ticket_id: int,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Ticket:
    ticket = await SupportService(db).get_ticket_by_id_or_raise(ticket_id)
    ensure_owner_or_admin(current_user, ticket.user_id)
    return Ticket.model_validate(ticket)


@router.put("/{ticket_id}", response_model=Ticket)
async def update_ticket(
    ticket_id: int,
    request: UpdateTicketRequest,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Ticket:
    """Edit a ticket. A closed ticket cannot be reopened."""
    service = SupportService(db)
    ticket = await service.get_ticket_by_id_or_raise(ticket_id)
    ensure_owner_or_admin(current_user, ticket.user_id)

    ticket = await service.update_ticket(ticket_id, request)
    return Ticket.model_validate(ticket)


@router.delete("/{ticket_id}", status_code=204)
async def delete_ticket(
    ticket_id: int,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Response:
    service = SupportService(db)
    ticket = await service.get_ticket_by_id_or_raise(ticket_id)
    ensure_owner_or_admin(current_user, ticket.user_id)

    await service.delete_ticket(ticket_id)
    return Response(status_code=204)
