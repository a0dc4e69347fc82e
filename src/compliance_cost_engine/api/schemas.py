"""Pydantic request and response schemas for the compliance cost engine.

These are the JSON-serializable records used when estimates, drivers and
scores cross a process boundary (request bodies, persisted breakdown
documents). Each schema converts to and from the frozen domain records in
``compliance_cost_engine.core.models``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from compliance_cost_engine.core.models import (
    CompanyProfile,
    ComplianceHealthScore,
    CostCategory,
    CostDriver,
    CostEstimateReport,
    CostEstimateResult,
    CostScenario,
    Department,
    DepartmentCostBreakdown,
    EstimationMethod,
    HistoricalVariance,
    Industry,
    RiskLevel,
    ScenarioAnalysis,
    TechMaturity,
    TrendPoint,
)
from compliance_cost_engine.core.profile import resolve_profile
from compliance_cost_engine.errors import ValidationError


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CompanyProfileInput(BaseModel):
    """Caller-supplied company attributes; omitted fields take engine defaults."""

    model_config = ConfigDict(extra="forbid")

    industry: Industry | None = None
    employee_count: int | None = Field(default=None, gt=0)
    revenue: float | None = Field(default=None, ge=0)
    geographic_complexity: int | None = Field(default=None, ge=1)
    tech_maturity: TechMaturity | None = None
    risk_appetite: RiskLevel | None = None

    def to_domain(self) -> CompanyProfile:
        return resolve_profile(self.model_dump(exclude_none=True))


class CostDriverPayload(BaseModel):
    """A classified cost driver as produced by the upstream classifier.

    Category values match case-insensitively. Unknown or missing departments
    fall back to OTHER; every other enum is strict.
    """

    id: str
    category: CostCategory
    description: str = ""
    is_one_time: bool
    estimated_cost: float = Field(..., ge=0, allow_inf_nan=False)
    confidence: float = Field(..., ge=0, le=1)
    department: Department = Department.OTHER

    model_config = {"from_attributes": True}

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: Any) -> CostCategory:
        try:
            return CostCategory.parse(value, "category")
        except ValidationError as exc:
            raise ValueError(exc.message) from exc

    @field_validator("department", mode="before")
    @classmethod
    def _fallback_department(cls, value: Any) -> Department:
        return Department.coerce(value)

    def to_domain(self) -> CostDriver:
        return CostDriver(
            id=self.id,
            category=self.category,
            description=self.description,
            is_one_time=self.is_one_time,
            estimated_cost=self.estimated_cost,
            confidence=self.confidence,
            department=self.department,
        )


class HistoricalVarianceInput(BaseModel):
    """A past estimate and its confirmed actual cost."""

    estimated: float = Field(..., gt=0, allow_inf_nan=False)
    actual: float = Field(..., ge=0, allow_inf_nan=False)

    def to_domain(self) -> HistoricalVariance:
        return HistoricalVariance.from_outcome(estimated=self.estimated, actual=self.actual)


class CostEstimateRequest(BaseModel):
    """Request body for a cost estimate.

    Attributes:
        drivers: Classified cost drivers.
        company_profile: Optional partial company profile.
        historical_variances: The customer's past estimate outcomes.
        ai_classified: True when the drivers came from a model classifier;
            the uncalibrated estimate is then labelled AI_CALIBRATED.
    """

    drivers: list[CostDriverPayload] = Field(default_factory=list)
    company_profile: CompanyProfileInput | None = None
    historical_variances: list[HistoricalVarianceInput] = Field(default_factory=list)
    ai_classified: bool = False

    @property
    def method(self) -> EstimationMethod:
        return EstimationMethod.AI_CALIBRATED if self.ai_classified else EstimationMethod.DETERMINISTIC

    def domain_drivers(self) -> list[CostDriver]:
        return [d.to_domain() for d in self.drivers]

    def domain_profile(self) -> CompanyProfile:
        if self.company_profile is None:
            return resolve_profile(None)
        return self.company_profile.to_domain()

    def domain_history(self) -> list[HistoricalVariance]:
        return [h.to_domain() for h in self.historical_variances]


class TrendPointSchema(BaseModel):
    label: str
    score: int = Field(..., ge=0, le=100)

    model_config = {"from_attributes": True}


class HealthScoreRequest(BaseModel):
    """Already-fetched customer data for the dashboard health score."""

    deadlines_met: int = Field(default=0, ge=0)
    deadlines_total: int = Field(default=0, ge=0)
    estimates: list[CostEstimateResponse] = Field(default_factory=list)
    prior_trend: list[TrendPointSchema] = Field(default_factory=list)
    industry_benchmark: float | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class DepartmentBreakdownResponse(BaseModel):
    """Per-department rollup, persisted as a document blob."""

    department: Department
    one_time_cost: float
    recurring_cost_annual: float
    fte_impact: float
    budget_code: str | None = None
    line_items: list[CostDriverPayload] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, breakdown: DepartmentCostBreakdown) -> DepartmentBreakdownResponse:
        return cls(
            department=breakdown.department,
            one_time_cost=breakdown.one_time_cost,
            recurring_cost_annual=breakdown.recurring_cost_annual,
            fte_impact=breakdown.fte_impact,
            budget_code=breakdown.budget_code,
            line_items=[CostDriverPayload.model_validate(d) for d in breakdown.line_items],
        )

    def to_domain(self) -> DepartmentCostBreakdown:
        return DepartmentCostBreakdown(
            department=self.department,
            one_time_cost=self.one_time_cost,
            recurring_cost_annual=self.recurring_cost_annual,
            fte_impact=self.fte_impact,
            budget_code=self.budget_code,
            line_items=tuple(d.to_domain() for d in self.line_items),
        )


class CostEstimateResponse(BaseModel):
    """A cost estimate with its department breakdown."""

    one_time_cost_low: float
    one_time_cost_high: float
    recurring_cost_annual: float
    department_breakdown: list[DepartmentBreakdownResponse] = Field(default_factory=list)
    estimation_method: EstimationMethod = EstimationMethod.DETERMINISTIC
    confidence: float = Field(..., ge=0, le=1)

    @classmethod
    def from_domain(cls, estimate: CostEstimateResult) -> CostEstimateResponse:
        return cls(
            one_time_cost_low=estimate.one_time_cost_low,
            one_time_cost_high=estimate.one_time_cost_high,
            recurring_cost_annual=estimate.recurring_cost_annual,
            department_breakdown=[
                DepartmentBreakdownResponse.from_domain(b) for b in estimate.department_breakdown
            ],
            estimation_method=estimate.estimation_method,
            confidence=estimate.confidence,
        )

    def to_domain(self) -> CostEstimateResult:
        return CostEstimateResult(
            one_time_cost_low=self.one_time_cost_low,
            one_time_cost_high=self.one_time_cost_high,
            recurring_cost_annual=self.recurring_cost_annual,
            department_breakdown=tuple(b.to_domain() for b in self.department_breakdown),
            estimation_method=self.estimation_method,
            confidence=self.confidence,
        )


class CostScenarioResponse(BaseModel):
    name: str
    description: str
    one_time_cost: float
    recurring_cost_annual: float
    three_year_total: float
    risk_level: RiskLevel
    assumptions: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, scenario: CostScenario) -> CostScenarioResponse:
        return cls(
            name=scenario.name,
            description=scenario.description,
            one_time_cost=scenario.one_time_cost,
            recurring_cost_annual=scenario.recurring_cost_annual,
            three_year_total=scenario.three_year_total,
            risk_level=scenario.risk_level,
            assumptions=list(scenario.assumptions),
        )


class ScenarioAnalysisResponse(BaseModel):
    minimal: CostScenarioResponse
    standard: CostScenarioResponse
    best_in_class: CostScenarioResponse
    delay_90_days: CostScenarioResponse
    recommended: Literal["minimal", "standard", "bestInClass", "delay90Days"]

    @classmethod
    def from_domain(cls, analysis: ScenarioAnalysis) -> ScenarioAnalysisResponse:
        return cls(
            minimal=CostScenarioResponse.from_domain(analysis.minimal),
            standard=CostScenarioResponse.from_domain(analysis.standard),
            best_in_class=CostScenarioResponse.from_domain(analysis.best_in_class),
            delay_90_days=CostScenarioResponse.from_domain(analysis.delay_90_days),
            recommended=analysis.recommended,
        )


class CostEstimateReportResponse(BaseModel):
    """Full response for a cost estimate request."""

    estimate: CostEstimateResponse
    base_estimate: CostEstimateResponse
    scenarios: ScenarioAnalysisResponse
    calibration_applied: bool

    @classmethod
    def from_domain(cls, report: CostEstimateReport) -> CostEstimateReportResponse:
        return cls(
            estimate=CostEstimateResponse.from_domain(report.estimate),
            base_estimate=CostEstimateResponse.from_domain(report.base_estimate),
            scenarios=ScenarioAnalysisResponse.from_domain(report.scenarios),
            calibration_applied=report.calibration_applied,
        )


class HealthScoreComponentsResponse(BaseModel):
    deadline_adherence: float = Field(..., ge=0, le=100)
    cost_predictability: float = Field(..., ge=0, le=100)
    risk_exposure_inverse: float = Field(..., ge=0, le=100)

    model_config = {"from_attributes": True}


class HealthScoreResponse(BaseModel):
    """Dashboard compliance health score."""

    score: int = Field(..., ge=0, le=100)
    components: HealthScoreComponentsResponse
    trend: list[TrendPointSchema] = Field(default_factory=list)
    industry_benchmark: float | None = None

    @classmethod
    def from_domain(cls, health: ComplianceHealthScore) -> HealthScoreResponse:
        return cls(
            score=health.score,
            components=HealthScoreComponentsResponse.model_validate(health.components),
            trend=[TrendPointSchema.model_validate(p) for p in health.trend],
            industry_benchmark=health.industry_benchmark,
        )


HealthScoreRequest.model_rebuild()


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def parse_estimate_request(payload: Mapping[str, Any]) -> CostEstimateRequest:
    """Validate a raw request body, raising the engine's ValidationError on failure."""
    return _parse(CostEstimateRequest, payload)


def parse_health_score_request(payload: Mapping[str, Any]) -> HealthScoreRequest:
    """Validate a raw health score body, raising the engine's ValidationError on failure."""
    return _parse(HealthScoreRequest, payload)


def _parse(schema: type[Any], payload: Mapping[str, Any]) -> Any:
    try:
        return schema.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            f"Invalid {schema.__name__} payload",
            details={
                "errors": [
                    {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                    for err in exc.errors()
                ]
            },
        ) from exc


def trend_points(request: HealthScoreRequest) -> list[TrendPoint]:
    return [TrendPoint(label=p.label, score=p.score) for p in request.prior_trend]


__all__ = [
    "CompanyProfileInput",
    "CostDriverPayload",
    "HistoricalVarianceInput",
    "CostEstimateRequest",
    "HealthScoreRequest",
    "TrendPointSchema",
    "DepartmentBreakdownResponse",
    "CostEstimateResponse",
    "CostScenarioResponse",
    "ScenarioAnalysisResponse",
    "CostEstimateReportResponse",
    "HealthScoreComponentsResponse",
    "HealthScoreResponse",
    "parse_estimate_request",
    "parse_health_score_request",
    "trend_points",
]
