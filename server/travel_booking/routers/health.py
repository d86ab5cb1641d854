"""Health, readiness and service information endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_db
from ..core.observability import SERVICE_NAME, SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus, InfoResponse, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

FEATURES = [
    "authentication",
    "flights",
    "hotels",
    "reservations",
    "visas",
    "support",
    "problem_details",
    "tracing",
    "metrics",
]


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the service is healthy and responsive",
)
async def health_check() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=datetime.now(timezone.utc),
        version=SERVICE_VERSION,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness Check",
    description="Check if the service can reach its database",
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness probe.

    Returns 503 with the failing check when the database does not answer.
    """
    checks = {"database": "ok"}

    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Readiness check failed", extra={"error": str(e)})
        checks["database"] = "unavailable"

    ready = all(value == "ok" for value in checks.values())
    body = ReadinessResponse(
        status="ready" if ready else "not_ready",
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(mode="json"),
    )


@router.get(
    "/info",
    response_model=InfoResponse,
    tags=["Info"],
    summary="Service Information",
)
async def service_info() -> InfoResponse:
    return InfoResponse(
        name=SERVICE_NAME,
        version=SERVICE_VERSION,
        environment=settings.environment,
        features=FEATURES,
    )
