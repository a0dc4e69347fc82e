"""Tests for the error taxonomy and logging helpers.

Covers:
  - ErrorCode values are stable strings
  - InvalidInputError is a ValidationError with its own code
  - to_dict() renders a client-error body
  - An explicit code overrides the class default
  - get_logger() returns a usable structlog logger
"""

from __future__ import annotations

from compliance_cost_engine.errors import (
    ComplianceCostError,
    ErrorCode,
    InvalidInputError,
    ValidationError,
)
from compliance_cost_engine.observability import get_logger


def test_error_codes_are_strings() -> None:
    assert ErrorCode.INSUFFICIENT_DATA == "INSUFFICIENT_DATA"
    assert {code.value for code in ErrorCode} == {
        "VALIDATION_ERROR",
        "INVALID_INPUT",
        "INSUFFICIENT_DATA",
        "INVARIANT_CORRECTED",
    }


def test_invalid_input_is_a_validation_error() -> None:
    error = InvalidInputError("bad driver", details={"driver_id": "d-1"})

    assert isinstance(error, ValidationError)
    assert isinstance(error, ComplianceCostError)
    assert error.code == ErrorCode.INVALID_INPUT
    assert str(error) == "bad driver"


def test_to_dict() -> None:
    error = ValidationError("Unknown Industry value", details={"field": "industry"})
    assert error.to_dict() == {
        "error_code": "VALIDATION_ERROR",
        "message": "Unknown Industry value",
        "details": {"field": "industry"},
    }


def test_explicit_code_overrides_default() -> None:
    error = ComplianceCostError("no history", code=ErrorCode.INSUFFICIENT_DATA)
    assert error.code == ErrorCode.INSUFFICIENT_DATA
    assert error.details == {}


def test_get_logger_accepts_events() -> None:
    logger = get_logger("tests.errors")
    logger.info("test_event_logged", error_code=ErrorCode.INVARIANT_CORRECTED.value)
