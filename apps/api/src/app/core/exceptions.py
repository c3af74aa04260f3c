"""
Service Exceptions

Error types raised by the service layer. Each carries a stable error code and
the HTTP status the routers should respond with.
"""

from typing import NoReturn

from fastapi import HTTPException


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


# ============================================
# Authorization
# ============================================


class AuthorizationError(ServiceError):
    """Raised when the caller's role is insufficient for an operation."""

    def __init__(self, message: str = "You have insufficient permissions to perform this action."):
        super().__init__(
            message=message,
            error_code="INSUFFICIENT_PERMISSIONS",
            status_code=403,
        )


# ============================================
# Not Found
# ============================================


class NotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""

    def __init__(self, message: str, error_code: str = "NOT_FOUND"):
        super().__init__(message=message, error_code=error_code, status_code=404)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int | None = None):
        message = f"User {user_id} not found" if user_id is not None else "User not found"
        super().__init__(message, error_code="USER_NOT_FOUND")


class DecisionNotFoundError(NotFoundError):
    def __init__(self, user_id: int):
        super().__init__(
            f"No pending decision for user {user_id}",
            error_code="DECISION_NOT_FOUND",
        )


class AnnouncementNotFoundError(NotFoundError):
    def __init__(self, announcement_id: int):
        super().__init__(
            f"Announcement {announcement_id} not found",
            error_code="ANNOUNCEMENT_NOT_FOUND",
        )


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} not found", error_code="EVENT_NOT_FOUND")


# ============================================
# Business Rules
# ============================================


class BusinessRuleError(ServiceError):
    """Raised when an operation is refused by an admissions rule."""


class ApplicationsClosedError(BusinessRuleError):
    def __init__(self):
        super().__init__(
            message="Sorry, applications are closed.",
            error_code="APPLICATIONS_CLOSED",
            status_code=409,
        )


class AlreadySubmittedError(BusinessRuleError):
    def __init__(self):
        super().__init__(
            message="You have already submitted your application.",
            error_code="ALREADY_SUBMITTED",
            status_code=409,
        )


class InvalidEmailDomainError(BusinessRuleError):
    def __init__(self, domain: str):
        super().__init__(
            message=f"Please use your {domain} email address.",
            error_code="INVALID_EMAIL_DOMAIN",
            status_code=400,
        )


class UserAlreadyExistsError(BusinessRuleError):
    def __init__(self):
        super().__init__(
            message="User with this email already exists.",
            error_code="USER_ALREADY_EXISTS",
            status_code=409,
        )


def raise_http_error(e: ServiceError) -> NoReturn:
    """Convert a service error to an HTTPException."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e
