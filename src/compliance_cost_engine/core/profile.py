"""Company profile resolution with documented defaults."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import fields
from typing import Any

from compliance_cost_engine.core.models import CompanyProfile, Industry, RiskLevel, TechMaturity
from compliance_cost_engine.errors import ValidationError

_PROFILE_FIELDS: frozenset[str] = frozenset(f.name for f in fields(CompanyProfile))
_DEFAULTS = CompanyProfile()


def resolve_profile(partial: Mapping[str, Any] | CompanyProfile | None = None) -> CompanyProfile:
    """Normalize caller-supplied company attributes into a CompanyProfile.

    Unset or None fields take the documented defaults: TECHNOLOGY, 100
    employees, no revenue, 1 jurisdiction, MEDIUM tech maturity, LOW risk
    appetite. Enum fields accept members or their string values.

    Args:
        partial: Mapping of snake_case profile fields, an existing profile, or None.

    Returns:
        A fully populated, immutable CompanyProfile.

    Raises:
        ValidationError: On unknown keys, unknown enum values, non-positive
            employee_count, geographic_complexity below 1, or negative revenue.
    """
    if partial is None:
        return _DEFAULTS
    if isinstance(partial, CompanyProfile):
        values: dict[str, Any] = {f: getattr(partial, f) for f in _PROFILE_FIELDS}
    elif isinstance(partial, Mapping):
        unknown = sorted(set(partial) - _PROFILE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Unknown company profile field(s): {', '.join(map(str, unknown))}",
                details={"fields": unknown},
            )
        values = dict(partial)
    else:
        raise ValidationError(
            "Company profile must be a mapping",
            details={"type": type(partial).__name__},
        )

    def pick(name: str) -> Any:
        value = values.get(name)
        return getattr(_DEFAULTS, name) if value is None else value

    return CompanyProfile(
        industry=Industry.parse(pick("industry"), "industry"),
        employee_count=_positive_int(pick("employee_count"), "employee_count", minimum=1),
        revenue=_optional_revenue(values.get("revenue")),
        geographic_complexity=_positive_int(
            pick("geographic_complexity"), "geographic_complexity", minimum=1
        ),
        tech_maturity=TechMaturity.parse(pick("tech_maturity"), "tech_maturity"),
        risk_appetite=RiskLevel.parse(pick("risk_appetite"), "risk_appetite"),
    )


def _positive_int(value: Any, field_name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"{field_name} must be an integer",
            details={"field": field_name, "value": repr(value)},
        )
    if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
        raise ValidationError(
            f"{field_name} must be a whole number",
            details={"field": field_name, "value": value},
        )
    if value < minimum:
        raise ValidationError(
            f"{field_name} must be at least {minimum}",
            details={"field": field_name, "value": value},
        )
    return int(value)


def _optional_revenue(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError("revenue must be a number", details={"field": "revenue", "value": repr(value)})
    if value < 0:
        raise ValidationError("revenue must not be negative", details={"field": "revenue", "value": value})
    return value
