# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the TutorConnect platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.

Propagation rules:
- ValidationException / PolicyViolationException abort the triggering
  action and surface to the caller.
- DeliveryException is caught per channel by the notification dispatcher.
- DataException marks a missing related entity; display code resolves it
  with fallback labels instead of letting it escape.
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

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when input has the wrong shape or violates a field rule."""

    status_code = status.HTTP_400_BAD_REQUEST


class TimeParseError(ValidationException):
    """Raised when a session time string cannot be parsed."""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid time value: {value!r}",
            code="TIME_PARSE_ERROR",
            details={"value": str(value)},
        )


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class InvalidBookingTransitionException(BusinessRuleException):
    """Raised when a booking action is not legal from its current status."""

    def __init__(self, from_status: str, action: str):
        super().__init__(
            message=f"Cannot {action} a booking that is {from_status}",
            code="INVALID_BOOKING_TRANSITION",
            details={"from_status": from_status, "action": action},
        )


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class PolicyViolationException(ForbiddenException):
    """Raised when an actor is not allowed to perform a transition."""

    def __init__(self, action: str, role: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"A {role} may not {action} this booking",
            code="POLICY_VIOLATION",
            details={"action": action, "role": role},
        )


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


class DeliveryException(ServiceException):
    """Raised by a channel adapter when its transport rejects a delivery."""

    def __init__(self, channel: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.channel = channel
        super().__init__(
            message=f"{channel} delivery failed: {message}",
            code="DELIVERY_FAILED",
            details={"channel": channel, **(details or {})},
        )


class DataException(DomainException):
    """Raised when a related entity needed for display is missing."""

    status_code = HTTP_422_UNPROCESSABLE


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
