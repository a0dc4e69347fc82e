"""Deterministic implementation-cost calculator.

Turns a classified driver list plus a company profile into a one-time cost
range, a single-point recurring cost, a department breakdown and a base
confidence. Each driver's cost is scaled by one multiplier:

    size × geography × industry × tech maturity (system/infrastructure only)

The one-time range is then built from per-driver confidence:

    low  = Σ c × (1 − low_factor × (1 − p))
    high = Σ c + Σ c × high_factor × (1 − p)

so a fully confident driver contributes a zero-width range and an uncertain
one widens the range, more on the high side than the low side.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from compliance_cost_engine.core.aggregation import COST_PER_FTE, aggregate_by_department
from compliance_cost_engine.core.models import (
    CompanyProfile,
    CostCategory,
    CostDriver,
    CostEstimateResult,
    EstimationMethod,
    Industry,
    TechMaturity,
)
from compliance_cost_engine.errors import ErrorCode, InvalidInputError
from compliance_cost_engine.observability import get_logger

logger = get_logger(__name__)

# Headcount at which the size multiplier equals 1.0
SIZE_REFERENCE_HEADCOUNT: int = 100

# Multiplier increment per additional jurisdiction
GEO_STEP: float = 0.1

# Range construction
LOW_UNCERTAINTY_FACTOR: float = 0.5
HIGH_UNCERTAINTY_FACTOR: float = 1.0

# Confidence reported when there are no drivers to average
DEFAULT_CONFIDENCE: float = 0.5

INDUSTRY_MULTIPLIERS: dict[Industry, float] = {
    Industry.TECHNOLOGY: 1.0,
    Industry.HEALTHCARE: 1.4,
    Industry.FINANCE: 1.3,
    Industry.MANUFACTURING: 1.1,
    Industry.RETAIL: 1.0,
    Industry.OTHER: 1.0,
}

TECH_MATURITY_MULTIPLIERS: dict[TechMaturity, float] = {
    TechMaturity.LOW: 1.2,
    TechMaturity.MEDIUM: 1.0,
    TechMaturity.HIGH: 0.85,
}

# Only technology-bound work gets cheaper (or dearer) with tech maturity
TECH_SENSITIVE_CATEGORIES: frozenset[CostCategory] = frozenset(
    {CostCategory.SYSTEM_CHANGES, CostCategory.INFRASTRUCTURE}
)


def size_multiplier(employee_count: int, reference_headcount: int = SIZE_REFERENCE_HEADCOUNT) -> float:
    """Log-scaled company-size multiplier.

    Strictly increasing in employee_count, always positive, and 1.0 at the
    reference headcount. A 100x larger company pays roughly 2x, not 100x.
    """
    return math.log10(employee_count + 10) / math.log10(reference_headcount + 10)


def geo_multiplier(geographic_complexity: int, step: float = GEO_STEP) -> float:
    return 1 + step * (geographic_complexity - 1)


def driver_multiplier(
    driver: CostDriver,
    profile: CompanyProfile,
    *,
    reference_headcount: int = SIZE_REFERENCE_HEADCOUNT,
    geo_step: float = GEO_STEP,
) -> float:
    """Combined profile multiplier applied to a single driver's estimated cost."""
    multiplier = (
        size_multiplier(profile.employee_count, reference_headcount)
        * geo_multiplier(profile.geographic_complexity, geo_step)
        * INDUSTRY_MULTIPLIERS[profile.industry]
    )
    if driver.category in TECH_SENSITIVE_CATEGORIES:
        multiplier *= TECH_MATURITY_MULTIPLIERS[profile.tech_maturity]
    return multiplier


def validate_drivers(drivers: Sequence[CostDriver]) -> None:
    """Reject drivers with a negative or non-finite cost or an out-of-range confidence.

    Raises:
        InvalidInputError: Naming the first offending driver.
    """
    for index, driver in enumerate(drivers):
        cost = driver.estimated_cost
        if isinstance(cost, bool) or not isinstance(cost, (int, float)) or not math.isfinite(cost) or cost < 0:
            raise InvalidInputError(
                f"Cost driver '{driver.id}' has an invalid estimated_cost: {cost!r}",
                details={"driver_id": driver.id, "index": index, "field": "estimated_cost"},
            )
        confidence = driver.confidence
        if (
            isinstance(confidence, bool)
            or not isinstance(confidence, (int, float))
            or not 0.0 <= confidence <= 1.0
        ):
            raise InvalidInputError(
                f"Cost driver '{driver.id}' has a confidence outside [0, 1]: {confidence!r}",
                details={"driver_id": driver.id, "index": index, "field": "confidence"},
            )


def calculate_implementation_cost(
    drivers: Sequence[CostDriver],
    profile: CompanyProfile,
    *,
    method: EstimationMethod = EstimationMethod.DETERMINISTIC,
    cost_per_fte: float = COST_PER_FTE,
    reference_headcount: int = SIZE_REFERENCE_HEADCOUNT,
    geo_step: float = GEO_STEP,
    low_uncertainty_factor: float = LOW_UNCERTAINTY_FACTOR,
    high_uncertainty_factor: float = HIGH_UNCERTAINTY_FACTOR,
    default_confidence: float = DEFAULT_CONFIDENCE,
) -> CostEstimateResult:
    """Compute a calibration-ready cost estimate from drivers and a profile.

    Args:
        drivers: Classified cost drivers. Order does not affect the result.
        profile: Resolved company profile.
        method: Estimation method label to carry on the result.
        cost_per_fte: Annual cost of one FTE for department staffing impact.
        reference_headcount: Headcount at which the size multiplier is 1.0.
        geo_step: Multiplier increment per additional jurisdiction.
        low_uncertainty_factor: Share of (1 - confidence) taken off the low bound.
        high_uncertainty_factor: Share of (1 - confidence) added to the high bound.
        default_confidence: Confidence reported when drivers is empty.

    Returns:
        CostEstimateResult with one_time_cost_low <= one_time_cost_high.

    Raises:
        InvalidInputError: If any driver has a negative cost or an
            out-of-range confidence.
    """
    drivers = tuple(drivers)
    validate_drivers(drivers)

    if not drivers:
        logger.info(
            "cost_estimate_without_drivers",
            error_code=ErrorCode.INSUFFICIENT_DATA.value,
            confidence=default_confidence,
        )
        return CostEstimateResult(
            one_time_cost_low=0,
            one_time_cost_high=0,
            recurring_cost_annual=0,
            department_breakdown=(),
            estimation_method=method,
            confidence=default_confidence,
        )

    def multiplier_for(driver: CostDriver) -> float:
        return driver_multiplier(
            driver, profile, reference_headcount=reference_headcount, geo_step=geo_step
        )

    low_terms: list[float] = []
    mid_terms: list[float] = []
    margin_terms: list[float] = []
    recurring_terms: list[float] = []
    for driver in drivers:
        adjusted = driver.estimated_cost * multiplier_for(driver)
        if driver.is_one_time:
            uncertainty = 1.0 - driver.confidence
            mid_terms.append(adjusted)
            low_terms.append(adjusted * (1.0 - low_uncertainty_factor * uncertainty))
            margin_terms.append(adjusted * high_uncertainty_factor * uncertainty)
        else:
            recurring_terms.append(adjusted)

    low = round(math.fsum(low_terms))
    high = round(math.fsum(mid_terms) + math.fsum(margin_terms))
    if high < low:
        logger.warning(
            "cost_range_inverted",
            error_code=ErrorCode.INVARIANT_CORRECTED.value,
            one_time_cost_low=low,
            one_time_cost_high=high,
        )
        high = low

    confidence = math.fsum(d.confidence for d in drivers) / len(drivers)
    confidence = min(1.0, max(0.0, confidence))

    breakdown = aggregate_by_department(
        drivers, cost_per_fte=cost_per_fte, cost_multiplier=multiplier_for
    )

    result = CostEstimateResult(
        one_time_cost_low=low,
        one_time_cost_high=high,
        recurring_cost_annual=round(math.fsum(recurring_terms)),
        department_breakdown=tuple(breakdown.values()),
        estimation_method=method,
        confidence=confidence,
    )

    logger.info(
        "cost_estimate_calculated",
        driver_count=len(drivers),
        department_count=len(result.department_breakdown),
        one_time_cost_low=result.one_time_cost_low,
        one_time_cost_high=result.one_time_cost_high,
        recurring_cost_annual=result.recurring_cost_annual,
        confidence=round(confidence, 4),
        estimation_method=method.value,
    )

    return result
