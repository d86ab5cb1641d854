"""Support ticket Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TicketStatus(str, Enum):
    """Support ticket status enumeration."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class CreateTicketRequest(BaseModel):
    """Request schema for opening a support ticket."""

    user_id: Optional[int] = Field(None, description="Ticket owner, defaults to the caller")
    subject: str = Field(..., min_length=5, max_length=200, description="Short summary")
    message: str = Field(..., min_length=10, max_length=2000, description="Problem description")


class UpdateTicketRequest(BaseModel):
    """Request schema for editing a ticket. Omitted fields are left unchanged."""

    subject: Optional[str] = Field(None, min_length=5, max_length=200)
    message: Optional[str] = Field(None, min_length=10, max_length=2000)
    status: Optional[TicketStatus] = None


class Ticket(BaseModel):
    """Support ticket response schema."""

    id: int = Field(..., description="Ticket ID")
    user_id: int = Field(..., description="Ticket owner")
    subject: str = Field(..., description="Short summary")
    message: str = Field(..., description="Problem description")
    status: TicketStatus = Field(..., description="Workflow status")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")
    updated_at: datetime = Field(..., description="Last change (ISO 8601)")

    model_config = ConfigDict(from_attributes=True)
