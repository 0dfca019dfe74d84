# backend/swiftslot/core/exceptions.py
"""
Domain-specific exceptions for the SwiftSlot booking engine.

These exceptions carry a classified reason (message, code, details) that the
API layer converts into an HTTP response. Internal storage detail never
travels inside them.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised when input is malformed or missing."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails unexpectedly."""

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message or "An error occurred processing your request",
            code=code,
            details=details,
        )


# Specific business exceptions


class SlotConflictException(ConflictException):
    """Raised when one or more requested slots are already claimed."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message
            or "One or more time slots are no longer available. Please refresh and try again.",
            code="SLOT_CONFLICT",
            details=details or {},
        )


class LeadTimeViolationException(BusinessRuleException):
    """Raised when a same-day booking starts too soon after now (local time)."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, required_hours: int, current_local_time: str, minimum_local_time: str):
        super().__init__(
            message=(
                f"Booking must be at least {required_hours} hours from now. "
                f"Current time: {current_local_time}, minimum booking time: {minimum_local_time}"
            ),
            code="LEAD_TIME_VIOLATION",
            details={
                "required_hours": required_hours,
                "current_local_time": current_local_time,
                "minimum_local_time": minimum_local_time,
            },
        )


class IdempotencyKeyReuseException(ValidationException):
    """Raised when an idempotency key is replayed with a different request payload."""

    def __init__(self, key: str, scope: str):
        super().__init__(
            message="Idempotency key reused with different request data",
            code="IDEMPOTENCY_KEY_REUSE",
            details={"idempotency_key": key, "scope": scope},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues or
    query failures. Services translate it into a classified DomainException.
    """
