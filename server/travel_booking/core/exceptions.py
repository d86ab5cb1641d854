"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://travel-booking.example.com/problems"


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if detail:
            self.problem_details["detail"] = detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )

    @property
    def code(self) -> Optional[str]:
        """Application-specific error code, if any."""
        return self.problem_details.get("code")


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        errors: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if errors:
            extensions["errors"] = errors

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception for authentication errors."""

    def __init__(
        self,
        detail: str = "Authentication credentials are required",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/authentication-required",
            instance=instance,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Exception for authorization errors."""

    def __init__(
        self,
        detail: str = "Insufficient permissions to access this resource",
        required_role: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if required_role:
            extensions["required_role"] = required_role

        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/access-forbidden",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[Any] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id is not None:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "code": "NOT_FOUND",
            "retryable": False,
            "resource_type": resource_type,
        }
        if resource_id is not None:
            extensions["resource_id"] = str(resource_id)

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        title: str = "Resource Conflict",
        type_uri: str = f"{PROBLEM_BASE_URI}/resource-conflict",
        instance: Optional[str] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title=title,
            detail=detail,
            type_uri=type_uri,
            instance=instance,
            extensions=extensions,
        )


class InternalServerError(ProblemDetailsException):
    """Exception for internal server errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not error_id:
            error_id = str(uuid.uuid4())

        extensions = {
            "error_id": error_id,
            "timestamp": _utc_timestamp(),
        }

        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/internal-server-error",
            instance=instance,
            extensions=extensions,
        )


# Business logic exceptions

class InvalidInputError(ProblemDetailsException):
    """Exception when an identifier is zero, negative or missing."""

    def __init__(self, field: str, value: Any = None, detail: Optional[str] = None):
        super().__init__(
            status_code=400,
            title="Invalid Input",
            detail=detail or f"Invalid {field}: {value!r}",
            type_uri=f"{PROBLEM_BASE_URI}/invalid-input",
            extensions={
                "code": "INVALID_INPUT",
                "retryable": False,
                "field": field,
            },
        )


class CapacityExhaustedError(ConflictError):
    """Exception when an inventory item has no remaining capacity."""

    def __init__(self, kind: str, item_id: int, remaining: int = 0):
        super().__init__(
            detail=f"No capacity remaining on {kind} {item_id}",
            conflicting_resource={
                "kind": kind,
                "id": item_id,
                "capacity_remaining": remaining,
            },
            title="Capacity Exhausted",
            type_uri=f"{PROBLEM_BASE_URI}/capacity-exhausted",
        )
        self.problem_details.update({
            "code": "CAPACITY_EXHAUSTED",
            "retryable": False
        })


class DuplicateBookingError(ConflictError):
    """Exception when the user already holds a booking on the item."""

    def __init__(self, kind: str, item_id: int, user_id: int):
        super().__init__(
            detail=f"User {user_id} already has a booking for {kind} {item_id}",
            conflicting_resource={"kind": kind, "id": item_id, "user_id": user_id},
            title="Duplicate Booking",
            type_uri=f"{PROBLEM_BASE_URI}/duplicate-booking",
        )
        self.problem_details.update({
            "code": "DUPLICATE_BOOKING",
            "retryable": False
        })


class NoActiveBookingError(ConflictError):
    """Exception when a cancellation has no booking to cancel."""

    def __init__(self, kind: str, item_id: int, user_id: int):
        super().__init__(
            detail=f"No active booking found for user {user_id} on {kind} {item_id}",
            conflicting_resource={"kind": kind, "id": item_id, "user_id": user_id},
            title="No Active Booking",
            type_uri=f"{PROBLEM_BASE_URI}/no-active-booking",
        )
        self.problem_details.update({
            "code": "NO_ACTIVE_BOOKING",
            "retryable": False
        })


class CancellationNotAllowedError(ConflictError):
    """Exception when the item does not offer free cancellation."""

    def __init__(self, kind: str, item_id: int):
        super().__init__(
            detail=f"{kind.capitalize()} {item_id} does not allow free cancellation",
            conflicting_resource={"kind": kind, "id": item_id},
            title="Cancellation Not Allowed",
            type_uri=f"{PROBLEM_BASE_URI}/cancellation-not-allowed",
        )
        self.problem_details.update({
            "code": "CANCELLATION_NOT_ALLOWED",
            "retryable": False
        })


class InvalidStateError(ConflictError):
    """Exception when a status transition is attempted from the wrong state."""

    def __init__(self, resource_type: str, resource_id: int, current_status: str, action: str):
        super().__init__(
            detail=(
                f"Cannot {action} {resource_type} {resource_id} "
                f"(current status: {current_status})"
            ),
            conflicting_resource={
                "resource_type": resource_type,
                "id": resource_id,
                "status": current_status,
            },
            title="Invalid State",
            type_uri=f"{PROBLEM_BASE_URI}/invalid-state",
        )
        self.problem_details.update({
            "code": "INVALID_STATE",
            "retryable": False
        })


class StorageFailureError(InternalServerError):
    """Exception when the record store rejects or fails an operation."""

    def __init__(self, operation: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(detail="The request could not be completed due to a storage error")
        self.operation = operation
        self.context = context or {}
        self.problem_details.update({
            "code": "STORAGE_FAILURE",
            "retryable": True
        })


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    content = dict(exc.problem_details)
    content.setdefault("instance", request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Convert FastAPI request validation errors to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Request validation error raised by FastAPI

    Returns:
        JSONResponse: Problem Details response listing each violation
    """
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "invalid value"),
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{PROBLEM_BASE_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "The request data failed validation",
            "instance": request.url.path,
            "violations": violations,
        },
        media_type="application/problem+json",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "error": str(exc),
        },
        exc_info=exc,
    )

    problem_details = {
        "type": f"{PROBLEM_BASE_URI}/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "instance": str(request.url),
        "error_id": error_id,
        "timestamp": _utc_timestamp(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
        media_type="application/problem+json",
    )
