"""Visa application router."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import AdminAuth, Principal, RequiredAuth, ensure_owner_or_admin
from ..schemas.common import PROBLEM_RESPONSES
from ..schemas.visa import CreateVisaRequest, UpdateVisaRequest, Visa, VisaStatistics, VisaStatus
from ..services.visa_service import VisaService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/visas", tags=["visas"], responses=PROBLEM_RESPONSES)

DB_DEPENDENCY = Depends(get_db)


@router.post("", response_model=Visa, status_code=201)
async def create_visa(
    request: CreateVisaRequest,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Visa:
    """Submit a visa application. New applications are always pending."""
    user_id = request.user_id if request.user_id is not None else current_user.user_id
    ensure_owner_or_admin(current_user, user_id)

    visa = await VisaService(db).create_visa(user_id, request)
    return Visa.model_validate(visa)


@router.get("", response_model=list[Visa])
async def list_visas(
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> list[Visa]:
    """List all visa applications (admin only)."""
    visas = await VisaService(db).list_visas()
    return [Visa.model_validate(v) for v in visas]


@router.get("/statistics", response_model=VisaStatistics)
async def visa_statistics(
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> VisaStatistics:
    """Count applications by status (admin only)."""
    return VisaStatistics(**await VisaService(db).get_statistics())


@router.get("/status/{status}", response_model=list[Visa])
async def list_visas_by_status(
    status: VisaStatus,
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> list[Visa]:
    """List applications in one status (admin only)."""
    visas = await VisaService(db).list_visas(status)
    return [Visa.model_validate(v) for v in visas]


@router.get("/user/{user_id}", response_model=list[Visa])
async def list_user_visas(
    user_id: int,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> list[Visa]:
    """List a user's applications, newest first."""
    ensure_owner_or_admin(current_user, user_id)

    visas = await VisaService(db).list_visas_for_user(user_id)
    return [Visa.model_validate(v) for v in visas]


@router.get("/{visa_id}", response_model=Visa)
async def get_visa(
    visa_id: int,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Visa:
    """Get a visa application by ID."""
    visa = await VisaService(db).get_visa_by_id_or_raise(visa_id)
    ensure_owner_or_admin(current_user, visa.user_id)
    return Visa.model_validate(visa)


@router.put("/{visa_id}", response_model=Visa)
async def update_visa(
    visa_id: int,
    request: UpdateVisaRequest,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Visa:
    """Edit a pending application. Decided applications cannot be changed."""
    service = VisaService(db)
    visa = await service.get_visa_by_id_or_raise(visa_id)
    ensure_owner_or_admin(current_user, visa.user_id)

    visa = await service.update_visa(visa_id, request)
    return Visa.model_validate(visa)


@router.delete("/{visa_id}", status_code=204)
async def delete_visa(
    visa_id: int,
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Response:
    """Withdraw an application. Approved applications cannot be deleted."""
    service = VisaService(db)
    visa = await service.get_visa_by_id_or_raise(visa_id)
    ensure_owner_or_admin(current_user, visa.user_id)

    await service.delete_visa(visa_id)
    return Response(status_code=204)


@router.post("/{visa_id}/approve", response_model=Visa)
async def approve_visa(
    visa_id: int,
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Visa:
    """Approve a pending application (admin only)."""
    visa = await VisaService(db).approve_visa(visa_id)

    logger.info(
        "Visa approved",
        extra={"visa_id": visa_id, "admin_id": current_user.user_id}
    )

    return Visa.model_validate(visa)


@router.post("/{visa_id}/reject", response_model=Visa)
async def reject_visa(
    visa_id: int,
    current_user: Principal = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> Visa:
    """Reject a pending application (admin only)."""
    visa = await VisaService(db).reject_visa(visa_id)

    logger.info(
        "Visa rejected",
        extra={"visa_id": visa_id, "admin_id": current_user.user_id}
    )

    return Visa.model_validate(visa)
