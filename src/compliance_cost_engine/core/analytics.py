"""Portfolio analytics over cost estimates.

Sensitivity analysis re-runs the calculator with one profile parameter
varied at a time. Portfolio trends roll a customer's estimates into totals,
and the forecast projects those totals forward with recurring-cost inflation.
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Sequence

from compliance_cost_engine.core.aggregation import COST_PER_FTE
from compliance_cost_engine.core.calculator import (
    GEO_STEP,
    HIGH_UNCERTAINTY_FACTOR,
    LOW_UNCERTAINTY_FACTOR,
    SIZE_REFERENCE_HEADCOUNT,
    TECH_MATURITY_MULTIPLIERS,
    calculate_implementation_cost,
    geo_multiplier,
    size_multiplier,
)
from compliance_cost_engine.core.models import (
    CompanyProfile,
    CostDriver,
    CostEstimateResult,
    Department,
    PortfolioForecast,
    PortfolioProjection,
    PortfolioTrend,
    SensitivityAnalysis,
    SensitivityFactor,
    SensitivityImpact,
    TechMaturity,
    TopDriver,
)
from compliance_cost_engine.observability import get_logger

logger = get_logger(__name__)

DEFAULT_INFLATION_RATE: float = 0.02
DEFAULT_FORECAST_YEARS: int = 3

# Forecast risk-factor thresholds
MIN_ESTIMATES_FOR_FORECAST: int = 5
LOW_CONFIDENCE_THRESHOLD: float = 0.7
IT_ONE_TIME_SHARE_THRESHOLD: float = 0.6


def calculate_sensitivity_analysis(
    drivers: Sequence[CostDriver],
    profile: CompanyProfile,
    *,
    cost_per_fte: float = COST_PER_FTE,
    reference_headcount: int = SIZE_REFERENCE_HEADCOUNT,
    geo_step: float = GEO_STEP,
    low_uncertainty_factor: float = LOW_UNCERTAINTY_FACTOR,
    high_uncertainty_factor: float = HIGH_UNCERTAINTY_FACTOR,
) -> SensitivityAnalysis:
    """Measure how the estimate responds to company size, geography and tech maturity.

    Each factor is varied over three values while the rest of the profile is
    held fixed:

    - employee count ×0.5, ×1, ×2
    - jurisdictions 1, current, 2× current
    - tech maturity LOW, MEDIUM, HIGH

    Args:
        drivers: Validated cost drivers.
        profile: Resolved company profile used as the baseline.

    The keyword arguments are the calculator tunables; they apply to the
    baseline and every variant, so the baseline equals the estimate produced
    with the same settings.

    Returns:
        SensitivityAnalysis with one entry per factor.
    """

    def estimate(variant: CompanyProfile) -> CostEstimateResult:
        return calculate_implementation_cost(
            drivers,
            variant,
            cost_per_fte=cost_per_fte,
            reference_headcount=reference_headcount,
            geo_step=geo_step,
            low_uncertainty_factor=low_uncertainty_factor,
            high_uncertainty_factor=high_uncertainty_factor,
        )

    baseline = estimate(profile)

    size_variants = [
        max(1, round(profile.employee_count * 0.5)),
        profile.employee_count,
        profile.employee_count * 2,
    ]
    geo_variants = [1, profile.geographic_complexity, profile.geographic_complexity * 2]
    maturity_variants = [TechMaturity.LOW, TechMaturity.MEDIUM, TechMaturity.HIGH]

    factors = (
        _factor(
            "sizeMultiplier",
            size_multiplier(profile.employee_count, reference_headcount),
            baseline,
            [
                estimate(dataclasses.replace(profile, employee_count=count))
                for count in size_variants
            ],
            "Consider economies of scale at this size" if profile.employee_count > 500 else None,
        ),
        _factor(
            "geoMultiplier",
            geo_multiplier(profile.geographic_complexity, geo_step),
            baseline,
            [
                estimate(dataclasses.replace(profile, geographic_complexity=geo))
                for geo in geo_variants
            ],
            "Multi-jurisdiction complexity is driving costs"
            if profile.geographic_complexity > 10
            else None,
        ),
        _factor(
            "techMaturity",
            TECH_MATURITY_MULTIPLIERS[profile.tech_maturity],
            baseline,
            [
                estimate(dataclasses.replace(profile, tech_maturity=maturity))
                for maturity in maturity_variants
            ],
            "Investing in tech infrastructure could reduce long-term costs"
            if profile.tech_maturity == TechMaturity.LOW
            else None,
        ),
    )

    return SensitivityAnalysis(
        baseline_one_time=baseline.one_time_cost_low,
        baseline_recurring=baseline.recurring_cost_annual,
        factors=factors,
    )


def _factor(
    name: str,
    current_value: float,
    baseline: CostEstimateResult,
    variants: Sequence[CostEstimateResult],
    recommendation: str | None,
) -> SensitivityFactor:
    return SensitivityFactor(
        factor=name,
        current_value=round(current_value, 4),
        impact_on_one_time=tuple(
            SensitivityImpact(
                low=v.one_time_cost_low,
                high=v.one_time_cost_high,
                percent_change=_percent_change(baseline.one_time_cost_high, v.one_time_cost_high),
            )
            for v in variants
        ),
        impact_on_recurring=tuple(
            SensitivityImpact(
                low=v.recurring_cost_annual,
                high=v.recurring_cost_annual,
                percent_change=_percent_change(baseline.recurring_cost_annual, v.recurring_cost_annual),
            )
            for v in variants
        ),
        recommendation=recommendation,
    )


def _percent_change(baseline: float, value: float) -> int:
    if baseline == 0:
        return 0
    return round((value / baseline - 1) * 100)


def aggregate_portfolio_trends(
    estimates: Sequence[CostEstimateResult],
    *,
    top_n: int = 10,
) -> PortfolioTrend:
    """Roll a customer's estimates into portfolio totals.

    Args:
        estimates: The customer's estimates.
        top_n: Number of largest drivers to report.

    Returns:
        PortfolioTrend; all-zero when estimates is empty.
    """
    if not estimates:
        return PortfolioTrend(
            total_one_time_low=0,
            total_one_time_high=0,
            total_recurring_annual=0,
            estimate_count=0,
            average_confidence=0.0,
            three_year_exposure_low=0,
            three_year_exposure_high=0,
        )

    total_low = math.fsum(e.one_time_cost_low for e in estimates)
    total_high = math.fsum(e.one_time_cost_high for e in estimates)
    total_recurring = math.fsum(e.recurring_cost_annual for e in estimates)
    average_confidence = math.fsum(e.confidence for e in estimates) / len(estimates)

    costs_by_department: dict[Department, dict[str, float]] = {}
    all_drivers: list[CostDriver] = []
    for estimate in estimates:
        for dept in estimate.department_breakdown:
            bucket = costs_by_department.setdefault(dept.department, {"one_time": 0.0, "recurring": 0.0})
            bucket["one_time"] += dept.one_time_cost
            bucket["recurring"] += dept.recurring_cost_annual
            all_drivers.extend(dept.line_items)

    ranked = sorted(all_drivers, key=lambda d: (-d.estimated_cost, d.id))[:top_n]
    top_drivers = tuple(
        TopDriver(
            description=d.description,
            category=d.category,
            total_cost=d.estimated_cost,
            confidence=d.confidence,
        )
        for d in ranked
    )

    return PortfolioTrend(
        total_one_time_low=total_low,
        total_one_time_high=total_high,
        total_recurring_annual=total_recurring,
        estimate_count=len(estimates),
        average_confidence=average_confidence,
        three_year_exposure_low=total_low + total_recurring * 3,
        three_year_exposure_high=total_high + total_recurring * 3,
        costs_by_department=costs_by_department,
        top_drivers=top_drivers,
    )


def forecast_portfolio_trends(
    trend: PortfolioTrend,
    *,
    years: int = DEFAULT_FORECAST_YEARS,
    inflation_rate: float = DEFAULT_INFLATION_RATE,
) -> PortfolioForecast:
    """Project portfolio cost forward year by year.

    One-time cost lands in year one; recurring cost compounds at
    ``inflation_rate`` from year two onward. ``cumulative`` tracks the low
    one-time bound plus recurring cost to date.
    """
    projections: list[PortfolioProjection] = []
    cumulative = 0.0
    for year in range(1, years + 1):
        recurring = round(trend.total_recurring_annual * (1 + inflation_rate) ** (year - 1))
        one_time_low = trend.total_one_time_low if year == 1 else 0
        one_time_high = trend.total_one_time_high if year == 1 else 0
        cumulative += one_time_low + recurring
        projections.append(
            PortfolioProjection(
                year=year,
                one_time_low=one_time_low,
                one_time_high=one_time_high,
                recurring_annual=recurring,
                cumulative=cumulative,
            )
        )

    risk_factors: list[str] = []
    if trend.estimate_count < MIN_ESTIMATES_FOR_FORECAST:
        risk_factors.append("Limited estimate dataset - forecast may be inaccurate")
    if trend.average_confidence < LOW_CONFIDENCE_THRESHOLD:
        risk_factors.append("Low average confidence scores - verify key assumptions")
    it_costs = trend.costs_by_department.get(Department.IT)
    if it_costs and it_costs["one_time"] > trend.total_one_time_low * IT_ONE_TIME_SHARE_THRESHOLD:
        risk_factors.append("IT implementation costs are high - consider phased approach")

    logger.info(
        "portfolio_forecast_generated",
        years=years,
        estimate_count=trend.estimate_count,
        risk_factor_count=len(risk_factors),
    )

    return PortfolioForecast(
        current_one_time_low=trend.total_one_time_low,
        current_one_time_high=trend.total_one_time_high,
        current_recurring_annual=trend.total_recurring_annual,
        projections=tuple(projections),
        risk_factors=tuple(risk_factors),
    )
