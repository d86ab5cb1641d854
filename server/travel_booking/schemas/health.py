"""Health-related Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health status enumeration."""
    HEALTHY = "healthy"


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: HealthStatus = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current server time (ISO 8601)")
    version: str = Field("1.0.0", description="API version")


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    status: str = Field(..., description="'ready' or 'not_ready'")
    timestamp: datetime = Field(..., description="Current server time (ISO 8601)")
    checks: Dict[str, str] = Field(..., description="Status of each dependency")


class InfoResponse(BaseModel):
    """Service information response schema."""

    name: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    environment: str = Field(..., description="Deployment environment")
    features: List[str] = Field(..., description="Enabled feature areas")
