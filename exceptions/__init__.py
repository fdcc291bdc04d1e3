"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,

    # Trend queries
    InvalidDateFormatError,
    InvalidRangeError,

    # Data
    DataIntegrityError,
    StoreUnavailableError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",

    # Trend queries
    "InvalidDateFormatError",
    "InvalidRangeError",

    # Data
    "DataIntegrityError",
    "StoreUnavailableError",
]
