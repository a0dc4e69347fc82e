"""Error taxonomy for the compliance cost engine.

Only ValidationError (and its InvalidInputError subclass) is raised to callers.
Insufficient-data and corrected-invariant conditions are never raised: the
engine logs them with the matching ErrorCode and returns a documented fallback.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable machine-readable codes attached to errors and log events."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    INVARIANT_CORRECTED = "INVARIANT_CORRECTED"


class ComplianceCostError(Exception):
    """Base class for all engine errors.

    Args:
        message: Human-readable description of the failure.
        code: Machine-readable error code.
        details: Optional structured context (field names, offending values).
    """

    code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details: dict[str, Any] = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a JSON-serializable client-error body."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ComplianceCostError):
    """Malformed company profile, cost driver, or scoring input."""

    code = ErrorCode.VALIDATION_ERROR


class InvalidInputError(ValidationError):
    """A cost driver carries a negative cost or an out-of-range confidence."""

    code = ErrorCode.INVALID_INPUT


__all__ = [
    "ErrorCode",
    "ComplianceCostError",
    "ValidationError",
    "InvalidInputError",
]
