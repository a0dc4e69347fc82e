"""Domain records for compliance cost estimation and health scoring.

All records are frozen dataclasses: inputs (CompanyProfile, CostDriver) are
read-only, and every derived record is rebuilt on each call. Monetary amounts
are whole currency units.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from compliance_cost_engine.errors import ValidationError


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class _ClosedEnum(str, Enum):
    """String enum that fails validation on unknown values."""

    @classmethod
    def parse(cls, value: Any, field_name: str | None = None) -> Any:
        """Resolve a member from a member or its (case-insensitive) string value.

        Raises:
            ValidationError: If the value is not a member of the enum.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValidationError(
            f"Unknown {cls.__name__} value: {value!r}",
            details={
                "field": field_name or cls.__name__,
                "value": repr(value),
                "allowed": [member.value for member in cls],
            },
        )


class Industry(_ClosedEnum):
    TECHNOLOGY = "TECHNOLOGY"
    HEALTHCARE = "HEALTHCARE"
    FINANCE = "FINANCE"
    MANUFACTURING = "MANUFACTURING"
    RETAIL = "RETAIL"
    OTHER = "OTHER"


class TechMaturity(_ClosedEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RiskLevel(_ClosedEnum):
    """Risk levels, ordered from MINIMAL (safest) to HIGH."""

    MINIMAL = "MINIMAL"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)

    def raised(self) -> RiskLevel:
        """One notch riskier, capped at HIGH."""
        return _RISK_ORDER[min(self.rank + 1, len(_RISK_ORDER) - 1)]

    def lowered(self) -> RiskLevel:
        """One notch safer, floored at MINIMAL."""
        return _RISK_ORDER[max(self.rank - 1, 0)]


_RISK_ORDER: tuple[RiskLevel, ...] = (
    RiskLevel.MINIMAL,
    RiskLevel.LOW,
    RiskLevel.MEDIUM,
    RiskLevel.HIGH,
)


class Department(_ClosedEnum):
    LEGAL = "LEGAL"
    IT = "IT"
    HR = "HR"
    FINANCE = "FINANCE"
    OPERATIONS = "OPERATIONS"
    COMPLIANCE = "COMPLIANCE"
    OTHER = "OTHER"

    @classmethod
    def coerce(cls, value: Any) -> Department:
        """Resolve a department, falling back to OTHER for unknown or missing values."""
        try:
            return cls.parse(value, "department")
        except ValidationError:
            return cls.OTHER


class CostCategory(_ClosedEnum):
    LEGAL_REVIEW = "LEGAL_REVIEW"
    SYSTEM_CHANGES = "SYSTEM_CHANGES"
    TRAINING = "TRAINING"
    CONSULTING = "CONSULTING"
    AUDIT = "AUDIT"
    PERSONNEL = "PERSONNEL"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    OTHER = "OTHER"


class EstimationMethod(_ClosedEnum):
    DETERMINISTIC = "DETERMINISTIC"
    AI_CALIBRATED = "AI_CALIBRATED"
    HISTORICAL_ADJUSTED = "HISTORICAL_ADJUSTED"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompanyProfile:
    """Company attributes used to scale driver costs.

    Attributes:
        industry: Industry vertical.
        employee_count: Headcount (> 0).
        revenue: Annual revenue, if known.
        geographic_complexity: Number of jurisdictions the company operates in (>= 1).
        tech_maturity: Technology maturity, which scales system/infrastructure work.
        risk_appetite: Highest risk level the company accepts for a recommendation.
    """

    industry: Industry = Industry.TECHNOLOGY
    employee_count: int = 100
    revenue: float | None = None
    geographic_complexity: int = 1
    tech_maturity: TechMaturity = TechMaturity.MEDIUM
    risk_appetite: RiskLevel = RiskLevel.LOW


@dataclass(frozen=True)
class CostDriver:
    """A discrete, attributable cause of compliance cost.

    The category is a closed set; the department falls back to OTHER when it is
    unknown or missing. Numeric ranges are checked by the calculator, not here.

    Attributes:
        id: Driver identifier supplied by the upstream classifier.
        category: Cost category.
        description: Human-readable description.
        is_one_time: True for one-time implementation cost, False for annual recurring cost.
        estimated_cost: Point estimate in whole currency units.
        confidence: Classifier confidence in the estimate (0..1).
        department: Department that owns the cost.
    """

    id: str
    category: CostCategory
    description: str
    is_one_time: bool
    estimated_cost: float
    confidence: float
    department: Department | None = Department.OTHER

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", CostCategory.parse(self.category, "category"))
        object.__setattr__(self, "department", Department.coerce(self.department))


@dataclass(frozen=True)
class HistoricalVariance:
    """Outcome of a past estimate: variance = (actual - estimated) / estimated."""

    estimated: float
    actual: float
    variance: float

    @classmethod
    def from_outcome(cls, estimated: float, actual: float) -> HistoricalVariance:
        """Build a variance record from an estimate and its confirmed actual.

        Raises:
            ValidationError: If estimated is not positive or actual is negative.
        """
        if not math.isfinite(estimated) or estimated <= 0:
            raise ValidationError(
                "Historical estimate must be a positive amount",
                details={"field": "estimated", "value": estimated},
            )
        if not math.isfinite(actual) or actual < 0:
            raise ValidationError(
                "Historical actual must be a non-negative amount",
                details={"field": "actual", "value": actual},
            )
        return cls(estimated=estimated, actual=actual, variance=(actual - estimated) / estimated)


@dataclass(frozen=True)
class DeadlineRecord:
    """A regulatory deadline as seen by the health score composer."""

    deadline_date: datetime
    notification_sent: bool


# ---------------------------------------------------------------------------
# Derived cost records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DepartmentCostBreakdown:
    """Per-department rollup of one-time and recurring cost."""

    department: Department
    one_time_cost: float
    recurring_cost_annual: float
    fte_impact: float
    budget_code: str | None = None
    line_items: tuple[CostDriver, ...] = ()


@dataclass(frozen=True)
class CostEstimateResult:
    """Calibration-ready cost estimate for one regulation and one company.

    Attributes:
        one_time_cost_low: Lower bound of one-time implementation cost.
        one_time_cost_high: Upper bound of one-time implementation cost (>= low).
        recurring_cost_annual: Single-point annual recurring cost.
        department_breakdown: Per-department rollups in Department order.
        estimation_method: How the estimate was produced.
        confidence: Overall confidence (0..1).
    """

    one_time_cost_low: float
    one_time_cost_high: float
    recurring_cost_annual: float
    department_breakdown: tuple[DepartmentCostBreakdown, ...]
    estimation_method: EstimationMethod
    confidence: float

    @property
    def one_time_cost_mid(self) -> float:
        return (self.one_time_cost_low + self.one_time_cost_high) / 2

    @property
    def three_year_exposure(self) -> float:
        """Upper-bound exposure over three years of operation."""
        return self.one_time_cost_high + self.recurring_cost_annual * 3


@dataclass(frozen=True)
class CalibratedRange:
    """One-time cost range and confidence after learning feedback."""

    one_time_cost_low: float
    one_time_cost_high: float
    confidence: float

    @classmethod
    def of(cls, base: Any) -> CalibratedRange:
        """Extract the calibratable fields from any estimate-like object."""
        if isinstance(base, cls):
            return base
        return cls(
            one_time_cost_low=base.one_time_cost_low,
            one_time_cost_high=base.one_time_cost_high,
            confidence=base.confidence,
        )

    @property
    def midpoint(self) -> float:
        return (self.one_time_cost_low + self.one_time_cost_high) / 2


@dataclass(frozen=True)
class FeedbackVariance:
    """Actual-versus-estimate comparison for a single completed estimate."""

    one_time_variance: float
    recurring_variance: float
    one_time_accuracy: float
    recurring_accuracy: float


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CostScenario:
    """A named hypothetical cost trajectory derived from the base estimate."""

    name: str
    description: str
    one_time_cost: float
    recurring_cost_annual: float
    three_year_total: float
    risk_level: RiskLevel
    assumptions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScenarioAnalysis:
    """The four implementation scenarios and the recommended one."""

    minimal: CostScenario
    standard: CostScenario
    best_in_class: CostScenario
    delay_90_days: CostScenario
    recommended: str

    @property
    def scenarios(self) -> dict[str, CostScenario]:
        """Scenarios keyed by their recommendation key, in declaration order."""
        return {
            "minimal": self.minimal,
            "standard": self.standard,
            "bestInClass": self.best_in_class,
            "delay90Days": self.delay_90_days,
        }

    @property
    def recommended_scenario(self) -> CostScenario:
        return self.scenarios[self.recommended]


@dataclass(frozen=True)
class CostEstimateReport:
    """Estimate, calibration and scenarios produced for one request.

    Attributes:
        profile: The resolved company profile.
        base_estimate: Estimate before learning feedback.
        estimate: Estimate after learning feedback (equal to base_estimate
            when there was no history).
        scenarios: Scenario analysis derived from the base estimate.
        calibration_applied: True when historical variances adjusted the range.
    """

    profile: CompanyProfile
    base_estimate: CostEstimateResult
    estimate: CostEstimateResult
    scenarios: ScenarioAnalysis
    calibration_applied: bool


# ---------------------------------------------------------------------------
# Health score
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HealthScoreComponents:
    """The three 0..100 signals combined into the health score."""

    deadline_adherence: float
    cost_predictability: float
    risk_exposure_inverse: float


@dataclass(frozen=True)
class TrendPoint:
    label: str
    score: int


@dataclass(frozen=True)
class ComplianceHealthScore:
    """Composite 0..100 compliance posture score with a short trend."""

    score: int
    components: HealthScoreComponents
    trend: tuple[TrendPoint, ...] = ()
    industry_benchmark: float | None = None


# ---------------------------------------------------------------------------
# Portfolio analytics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SensitivityImpact:
    low: float
    high: float
    percent_change: int


@dataclass(frozen=True)
class SensitivityFactor:
    """Impact of varying one profile parameter on the estimate."""

    factor: str
    current_value: float
    impact_on_one_time: tuple[SensitivityImpact, ...]
    impact_on_recurring: tuple[SensitivityImpact, ...]
    recommendation: str | None = None


@dataclass(frozen=True)
class SensitivityAnalysis:
    baseline_one_time: float
    baseline_recurring: float
    factors: tuple[SensitivityFactor, ...]


@dataclass(frozen=True)
class TopDriver:
    description: str
    category: CostCategory
    total_cost: float
    confidence: float


@dataclass(frozen=True)
class PortfolioTrend:
    """Aggregated totals across a customer's estimates."""

    total_one_time_low: float
    total_one_time_high: float
    total_recurring_annual: float
    estimate_count: int
    average_confidence: float
    three_year_exposure_low: float
    three_year_exposure_high: float
    costs_by_department: dict[Department, dict[str, float]] = field(default_factory=dict)
    top_drivers: tuple[TopDriver, ...] = ()


@dataclass(frozen=True)
class PortfolioProjection:
    year: int
    one_time_low: float
    one_time_high: float
    recurring_annual: float
    cumulative: float


@dataclass(frozen=True)
class PortfolioForecast:
    current_one_time_low: float
    current_one_time_high: float
    current_recurring_annual: float
    projections: tuple[PortfolioProjection, ...]
    risk_factors: tuple[str, ...] = ()


__all__ = [
    "Industry",
    "TechMaturity",
    "RiskLevel",
    "Department",
    "CostCategory",
    "EstimationMethod",
    "CompanyProfile",
    "CostDriver",
    "HistoricalVariance",
    "DeadlineRecord",
    "DepartmentCostBreakdown",
    "CostEstimateResult",
    "CalibratedRange",
    "FeedbackVariance",
    "CostScenario",
    "ScenarioAnalysis",
    "CostEstimateReport",
    "HealthScoreComponents",
    "TrendPoint",
    "ComplianceHealthScore",
    "SensitivityImpact",
    "SensitivityFactor",
    "SensitivityAnalysis",
    "TopDriver",
    "PortfolioTrend",
    "PortfolioProjection",
    "PortfolioForecast",
]
