"""
Custom exception classes for the application.

Every error raised by the trend engine derives from AppError so routes can
log a stable code before answering with the generic failure body.
"""

from typing import Optional, Any


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "INVALID_RANGE")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# QUERY ERRORS
# ===================

class InvalidDateFormatError(ValidationError):
    """startDate or endDate could not be parsed."""

    def __init__(self, field: str, value: str):
        super().__init__(
            code="INVALID_DATE_FORMAT",
            message=f"{field} must be an ISO date (YYYY-MM-DD)",
            details={"field": field, "provided": value}
        )


class InvalidRangeError(ValidationError):
    """Range start falls after range end."""

    def __init__(self, start: Any, end: Any):
        super().__init__(
            code="INVALID_RANGE",
            message="Range start must not be after range end",
            details={"start": str(start), "end": str(end)}
        )


# ===================
# DATA ERRORS
# ===================

class DataIntegrityError(AppError):
    """Stored data contradicts an invariant the engine relies on."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="DATA_INTEGRITY_ERROR",
            message=message,
            status_code=500,
            details=details
        )


class StoreUnavailableError(ExternalServiceError):
    """Event store query failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            service="event_store",
            code="STORE_UNAVAILABLE",
            message=f"Event store {operation} failed: {message}",
            details={"operation": operation}
        )
