"""Visa application service: submission, edits and the approval workflow."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from ..core.observability import metrics_collector
from ..models.visa import VisaApplication, VisaStatus
from ..schemas.visa import CreateVisaRequest, UpdateVisaRequest

logger = logging.getLogger(__name__)


class VisaService:
    """
    Service for visa applications.

    Applications start pending and move once, to approved or rejected.
    Both decisions are final. Applicants may edit an application only while it
    is pending, and an approved application can no longer be deleted.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_visa(self, user_id: int, request: CreateVisaRequest) -> VisaApplication:
        """
        Submit a new visa application.

        Args:
            user_id: Applicant
            request: Application fields

        Returns:
            The pending application

        Raises:
            InvalidInputError: If the user id is not positive
        """
        if user_id <= 0:
            raise InvalidInputError("user_id", user_id)

        visa = VisaApplication(
            user_id=user_id,
            visa_type=request.visa_type,
            destination=request.destination,
            travel_date=request.travel_date,
            passport_number=request.passport_number,
            nationality=request.nationality,
            status=VisaStatus.PENDING.value,
        )

        self.db.add(visa)
        await self.db.commit()
        await self.db.refresh(visa)

        logger.info(
            "Visa application submitted",
            extra={
                "visa_id": visa.id,
                "user_id": user_id,
                "destination": visa.destination
            }
        )

        return visa

    async def get_visa_by_id(self, visa_id: int) -> Optional[VisaApplication]:
        stmt = select(VisaApplication).where(VisaApplication.id == visa_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_visa_by_id_or_raise(self, visa_id: int) -> VisaApplication:
        """
        Get visa application by ID or raise NotFoundError.

        Raises:
            NotFoundError: If the application does not exist
        """
        visa = await self.get_visa_by_id(visa_id)
        if not visa:
            logger.warning("Visa application not found", extra={"visa_id": visa_id})
            raise NotFoundError(resource_type="visa application", resource_id=visa_id)
        return visa

    async def list_visas_for_user(self, user_id: int) -> list[VisaApplication]:
        """Return a user's applications, newest first."""
        stmt = (
            select(VisaApplication)
            .where(VisaApplication.user_id == user_id)
            .order_by(VisaApplication.id.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_visas(self, status: Optional[VisaStatus] = None) -> list[VisaApplication]:
        """Return all applications, optionally only those in one status."""
        stmt = select(VisaApplication).order_by(VisaApplication.id.desc())
        if status is not None:
            stmt = stmt.where(VisaApplication.status == status.value)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def approve_visa(self, visa_id: int) -> VisaApplication:
        """
        Approve a pending application.

        Raises:
            NotFoundError: If the application does not exist
            InvalidStateError: If the application is not pending
        """
        return await self._decide(visa_id, VisaStatus.APPROVED, action="approve")

    async def reject_visa(self, visa_id: int) -> VisaApplication:
        """
        Reject a pending application.

        Raises:
            NotFoundError: If the application does not exist
            InvalidStateError: If the application is not pending
        """
        return await self._decide(visa_id, VisaStatus.REJECTED, action="reject")

    async def _decide(self, visa_id: int, decision: VisaStatus, action: str) -> VisaApplication:
        visa = await self.get_visa_by_id_or_raise(visa_id)

        if visa.status != VisaStatus.PENDING.value:
            logger.warning(
                "Visa decision rejected - application not pending",
                extra={"visa_id": visa_id, "status": visa.status, "action": action}
            )
            raise InvalidStateError("visa application", visa_id, visa.status, action)

        visa.status = decision.value
        await self.db.commit()
        await self.db.refresh(visa)

        metrics_collector.record_visa_decision(decision.value)
        logger.info(
            "Visa application decided",
            extra={"visa_id": visa_id, "status": visa.status}
        )

        return visa

    async def update_visa(self, visa_id: int, request: UpdateVisaRequest) -> VisaApplication:
        """
        Change the provided fields of a pending application.

        Args:
            visa_id: Application to edit
            request: Fields to change; omitted fields keep their values

        Returns:
            The updated application

        Raises:
            NotFoundError: If the application does not exist
            InvalidStateError: If the application was already decided
        """
        visa = await self.get_visa_by_id_or_raise(visa_id)

        if visa.status != VisaStatus.PENDING.value:
            logger.warning(
                "Visa update rejected - application already decided",
                extra={"visa_id": visa_id, "status": visa.status}
            )
            raise InvalidStateError("visa application", visa_id, visa.status, "update")

        for name, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(visa, name, value)

        await self.db.commit()
        await self.db.refresh(visa)

        logger.info(
            "Visa application updated",
            extra={"visa_id": visa_id, "fields": sorted(request.model_fields_set)}
        )

        return visa

    async def delete_visa(self, visa_id: int) -> None:
        """
        Delete an application that has not been approved.

        Raises:
            NotFoundError: If the application does not exist
            InvalidStateError: If the application was approved
        """
        visa = await self.get_visa_by_id_or_raise(visa_id)

        if visa.status == VisaStatus.APPROVED.value:
            logger.warning(
                "Visa deletion rejected - application approved",
                extra={"visa_id": visa_id}
            )
            raise InvalidStateError("visa application", visa_id, visa.status, "delete")

        await self.db.delete(visa)
        await self.db.commit()

        logger.info("Visa application deleted", extra={"visa_id": visa_id})

    async def get_statistics(self) -> dict[str, int]:
        """Count applications by status."""
        stmt = select(VisaApplication.status, func.count()).group_by(VisaApplication.status)
        rows = (await self.db.execute(stmt)).all()

        counts = {status.value: 0 for status in VisaStatus}
        counts.update({status: count for status, count in rows})

        return {"total": sum(counts.values()), **counts}
