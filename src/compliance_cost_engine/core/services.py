"""Engine façade consumed by the cost-estimate and dashboard request handlers.

ComplianceCostEngine threads EngineSettings into the pure core functions and
runs the estimate pipeline in order:

    resolve profile -> calculate cost -> generate scenarios -> learning feedback

It holds nothing but immutable settings, so one instance can be shared
across concurrent requests. History, deadlines and prior scores arrive as
already-fetched arguments; the engine never touches storage.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import structlog

from compliance_cost_engine.core.analytics import calculate_sensitivity_analysis
from compliance_cost_engine.core.calculator import calculate_implementation_cost
from compliance_cost_engine.core.calibration import apply_learning_feedback, compute_feedback_variance
from compliance_cost_engine.core.health_score import compose_health_score
from compliance_cost_engine.core.models import (
    CompanyProfile,
    ComplianceHealthScore,
    CostDriver,
    CostEstimateReport,
    CostEstimateResult,
    EstimationMethod,
    FeedbackVariance,
    HistoricalVariance,
    SensitivityAnalysis,
    TrendPoint,
)
from compliance_cost_engine.core.profile import resolve_profile
from compliance_cost_engine.core.scenarios import generate_scenarios
from compliance_cost_engine.observability import configure_logging
from compliance_cost_engine.settings import EngineSettings

logger = structlog.get_logger(__name__)


class ComplianceCostEngine:
    """Stateless cost-estimation and health-scoring pipeline.

    Args:
        settings: Engine configuration. Defaults to EngineSettings() when omitted.
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self._settings = settings or EngineSettings()

    @classmethod
    def from_env(cls) -> ComplianceCostEngine:
        """Load settings from COMPLIANCE_COST_* variables and configure logging.

        Intended for host process startup; tests construct the engine directly.
        """
        settings = EngineSettings()
        configure_logging(level=settings.log_level, json_logs=settings.json_logs)
        logger.info("compliance_cost_engine_configured", service=settings.service_name)
        return cls(settings)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Cost estimation
    # ------------------------------------------------------------------

    def estimate(
        self,
        drivers: Sequence[CostDriver],
        profile: Mapping[str, Any] | CompanyProfile | None = None,
        historical_variances: Sequence[HistoricalVariance] = (),
        *,
        method: EstimationMethod = EstimationMethod.DETERMINISTIC,
    ) -> CostEstimateReport:
        """Produce a calibrated estimate and scenario analysis for one regulation.

        Scenarios are derived from the uncalibrated estimate: the midpoint of
        the one-time range and the recurring cost. When history is supplied,
        the returned estimate carries the calibrated range and confidence and
        is labelled HISTORICAL_ADJUSTED; the department breakdown is kept as
        calculated.

        Args:
            drivers: Classified cost drivers from the upstream classifier.
            profile: Partial or complete company profile.
            historical_variances: The customer's past estimate outcomes.
            method: Method label for the uncalibrated estimate.

        Returns:
            CostEstimateReport with the base and final estimates.

        Raises:
            ValidationError: On a malformed profile, driver, or history entry.
        """
        settings = self._settings
        resolved = resolve_profile(profile)

        base = calculate_implementation_cost(
            drivers,
            resolved,
            method=method,
            cost_per_fte=settings.cost_per_fte,
            reference_headcount=settings.size_reference_headcount,
            geo_step=settings.geo_step,
            low_uncertainty_factor=settings.low_uncertainty_factor,
            high_uncertainty_factor=settings.high_uncertainty_factor,
            default_confidence=settings.default_confidence,
        )

        scenarios = generate_scenarios(
            {
                "one_time_cost": base.one_time_cost_mid,
                "recurring_cost_annual": base.recurring_cost_annual,
            },
            resolved,
            late_penalty_rate=settings.late_penalty_rate,
        )

        history = tuple(historical_variances)
        final = base
        if history:
            calibrated = apply_learning_feedback(
                base,
                history,
                spread_threshold=settings.calibration_spread_threshold,
                max_confidence_boost=settings.max_confidence_boost,
                max_confidence_penalty=settings.max_confidence_penalty,
                prior_strength=settings.calibration_prior_strength,
                confidence_ceiling=settings.calibrated_confidence_ceiling,
                confidence_floor=settings.calibrated_confidence_floor,
            )
            final = dataclasses.replace(
                base,
                one_time_cost_low=calibrated.one_time_cost_low,
                one_time_cost_high=calibrated.one_time_cost_high,
                confidence=calibrated.confidence,
                estimation_method=EstimationMethod.HISTORICAL_ADJUSTED,
            )

        logger.info(
            "cost_estimate_report_built",
            driver_count=len(drivers),
            history_count=len(history),
            calibration_applied=bool(history),
            recommended_scenario=scenarios.recommended,
            estimation_method=final.estimation_method.value,
        )

        return CostEstimateReport(
            profile=resolved,
            base_estimate=base,
            estimate=final,
            scenarios=scenarios,
            calibration_applied=bool(history),
        )

    def record_feedback(
        self,
        estimate: CostEstimateResult,
        actual_one_time_cost: float,
        actual_recurring_cost_annual: float,
    ) -> FeedbackVariance:
        """Compare a completed estimate with reported actuals.

        The caller persists the result; its one-time variance becomes a
        HistoricalVariance for the customer's next estimate.
        """
        return compute_feedback_variance(
            estimate,
            actual_one_time_cost=actual_one_time_cost,
            actual_recurring_cost_annual=actual_recurring_cost_annual,
        )

    def sensitivity(
        self,
        drivers: Sequence[CostDriver],
        profile: Mapping[str, Any] | CompanyProfile | None = None,
    ) -> SensitivityAnalysis:
        """Sensitivity of the estimate to size, geography and tech maturity under configured settings."""
        settings = self._settings
        return calculate_sensitivity_analysis(
            drivers,
            resolve_profile(profile),
            cost_per_fte=settings.cost_per_fte,
            reference_headcount=settings.size_reference_headcount,
            geo_step=settings.geo_step,
            low_uncertainty_factor=settings.low_uncertainty_factor,
            high_uncertainty_factor=settings.high_uncertainty_factor,
        )

    # ------------------------------------------------------------------
    # Health score
    # ------------------------------------------------------------------

    def health_score(
        self,
        *,
        deadlines_met: int,
        deadlines_total: int,
        estimates: Sequence[CostEstimateResult],
        prior_trend: Iterable[TrendPoint | tuple[str, int]] = (),
        industry_benchmark: float | None = None,
    ) -> ComplianceHealthScore:
        """Compose the customer's compliance health score using configured weights."""
        settings = self._settings
        return compose_health_score(
            deadlines_met=deadlines_met,
            deadlines_total=deadlines_total,
            estimates=estimates,
            prior_trend=prior_trend,
            industry_benchmark=industry_benchmark,
            window=settings.trend_window,
            deadline_weight=settings.deadline_weight,
            predictability_weight=settings.predictability_weight,
            exposure_weight=settings.exposure_weight,
            default_cost_predictability=settings.default_cost_predictability,
            exposure_saturation=settings.exposure_saturation,
        )
