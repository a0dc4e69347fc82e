"""Compliance cost estimation engine.

Turns classified regulatory cost drivers and a company profile into a cost
estimate with a department breakdown, four implementation scenarios, a
history-calibrated range, and a 0..100 compliance health score.

Modules:
    core.calculator - calculate_implementation_cost: driver list -> cost range
    core.scenarios - generate_scenarios: minimal/standard/best-in-class/delay
    core.calibration - apply_learning_feedback: range and confidence from history
    core.health_score - compose_health_score: dashboard posture score
    core.services - ComplianceCostEngine: settings-aware pipeline
    api.schemas - pydantic records for the JSON boundary
"""

from compliance_cost_engine.core.services import ComplianceCostEngine
from compliance_cost_engine.errors import (
    ComplianceCostError,
    ErrorCode,
    InvalidInputError,
    ValidationError,
)
from compliance_cost_engine.settings import EngineSettings

__all__ = [
    "ComplianceCostEngine",
    "EngineSettings",
    "ComplianceCostError",
    "ErrorCode",
    "InvalidInputError",
    "ValidationError",
]
