"""
Custom exceptions for the horse recovery package.

Each exception carries a descriptive message, an error code and optional
details so callers can map failures to their own responses.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error responses."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ACTIVITIES = "INVALID_ACTIVITIES"
    DATA_SOURCE_ERROR = "DATA_SOURCE_ERROR"


class HorseRecoveryError(Exception):
    """
    Base exception for all horse recovery errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for error responses."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class ValidationError(HorseRecoveryError):
    """Raised when a recommendation request is invalid."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=error_details,
        )


class InvalidActivitiesError(HorseRecoveryError):
    """Raised when the calculator is handed something other than a sequence of activities."""

    def __init__(self, message: str = "Activities must be a sequence, not None") -> None:
        super().__init__(message=message, code=ErrorCode.INVALID_ACTIVITIES)


class DataSourceError(HorseRecoveryError):
    """Raised when activities cannot be fetched or parsed."""

    def __init__(
        self,
        message: str,
        horse_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if horse_id:
            error_details["horse_id"] = horse_id
        super().__init__(
            message=message,
            code=ErrorCode.DATA_SOURCE_ERROR,
            details=error_details,
        )
