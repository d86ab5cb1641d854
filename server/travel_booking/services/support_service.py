"""Support ticket service."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from ..models.support import SupportTicket, TicketStatus
from ..schemas.support import CreateTicketRequest, UpdateTicketRequest

logger = logging.getLogger(__name__)


class SupportService:
    """Service for support ticket operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_ticket(self, user_id: int, request: CreateTicketRequest) -> SupportTicket:
        """
        Open a support ticket.

        Raises:
            InvalidInputError: If the user id is not positive
        """
        if user_id <= 0:
            raise InvalidInputError("user_id", user_id)

        ticket = SupportTicket(
            user_id=user_id,
            subject=request.subject,
            message=request.message,
            status=TicketStatus.OPEN.value,
        )

        self.db.add(ticket)
        await self.db.commit()
        await self.db.refresh(ticket)

        logger.info(
            "Support ticket opened",
            extra={"ticket_id": ticket.id, "user_id": user_id}
        )

        return ticket

    async def get_ticket_by_id(self, ticket_id: int) -> Optional[SupportTicket]:
        stmt = select(SupportTicket).where(SupportTicket.id == ticket_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_ticket_by_id_or_raise(self, ticket_id: int) -> SupportTicket:
        """
        Get ticket by ID or raise NotFoundError.

        Raises:
            NotFoundError: If the ticket does not exist
        """
        ticket = await self.get_ticket_by_id(ticket_id)
        if not ticket:
            logger.warning("Support ticket not found", extra={"ticket_id": ticket_id})
            raise NotFoundError(resource_type="support ticket", resource_id=ticket_id)
        return ticket

    async def list_tickets(self, user_id: Optional[int] = None) -> list[SupportTicket]:
        """Return tickets newest first, optionally only one user's."""
        stmt = select(SupportTicket).order_by(SupportTicket.id.desc())
        if user_id is not None:
            stmt = stmt.where(SupportTicket.user_id == user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_ticket(self, ticket_id: int, request: UpdateTicketRequest) -> SupportTicket:
        """
        Change the provided fields of a ticket.

        Raises:
            NotFoundError: If the ticket does not exist
            InvalidStateError: If a closed ticket would be moved to another status
        """
        ticket = await self.get_ticket_by_id_or_raise(ticket_id)

        if (
            ticket.status == TicketStatus.CLOSED.value
            and request.status is not None
            and request.status != TicketStatus.CLOSED
        ):
            logger.warning(
                "Support ticket update rejected - ticket closed",
                extra={"ticket_id": ticket_id, "requested_status": request.status.value}
            )
            raise InvalidStateError("support ticket", ticket_id, ticket.status, "reopen")

        if request.subject is not None:
            ticket.subject = request.subject
        if request.message is not None:
            ticket.message = request.message
        if request.status is not None:
            ticket.status = request.status.value

        await self.db.commit()
        await self.db.refresh(ticket)

        logger.info(
            "Support ticket updated",
            extra={"ticket_id": ticket_id, "status": ticket.status}
        )

        return ticket

    async def delete_ticket(self, ticket_id: int) -> None:
        """
        Delete a ticket.

        Raises:
            NotFoundError: If the ticket does not exist
        """
        ticket = await self.get_ticket_by_id_or_raise(ticket_id)
        await self.db.delete(ticket)
        await self.db.commit()

        logger.info("Support ticket deleted", extra={"ticket_id": ticket_id})
