"""Pure cost-estimation and scoring functions plus the engine service."""

from compliance_cost_engine.core.aggregation import aggregate_by_department
from compliance_cost_engine.core.analytics import (
    aggregate_portfolio_trends,
    calculate_sensitivity_analysis,
    forecast_portfolio_trends,
)
from compliance_cost_engine.core.calculator import calculate_implementation_cost, validate_drivers
from compliance_cost_engine.core.calibration import (
    apply_learning_feedback,
    compute_feedback_variance,
    derive_historical_variances,
)
from compliance_cost_engine.core.health_score import compose_health_score, compute_health_score
from compliance_cost_engine.core.profile import resolve_profile
from compliance_cost_engine.core.scenarios import generate_scenarios
from compliance_cost_engine.core.services import ComplianceCostEngine

__all__ = [
    "ComplianceCostEngine",
    "aggregate_by_department",
    "aggregate_portfolio_trends",
    "apply_learning_feedback",
    "calculate_implementation_cost",
    "calculate_sensitivity_analysis",
    "compose_health_score",
    "compute_feedback_variance",
    "compute_health_score",
    "derive_historical_variances",
    "forecast_portfolio_trends",
    "generate_scenarios",
    "resolve_profile",
    "validate_drivers",
]
