"""Engine settings loaded from COMPLIANCE_COST_* environment variables."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Configuration for the compliance cost engine.

    Every field mirrors a module-level default used by the pure functions in
    ``compliance_cost_engine.core``; the settings object only matters when a
    host process wants to override those defaults through the environment.
    """

    service_name: str = "compliance-cost-engine"

    # Staffing impact
    cost_per_fte: float = Field(default=100_000.0, gt=0)  # Fully-loaded annual cost of one FTE

    # Company-size scaling (log-scaled, 1.0 at the reference headcount)
    size_reference_headcount: int = Field(default=100, gt=0)

    # Geographic multiplier step per additional jurisdiction
    geo_step: float = Field(default=0.1, ge=0)

    # Range construction from per-driver confidence
    low_uncertainty_factor: float = Field(default=0.5, ge=0, le=1)
    high_uncertainty_factor: float = Field(default=1.0, ge=0)
    default_confidence: float = Field(default=0.5, ge=0, le=1)

    # Scenario generation
    late_penalty_rate: float = Field(default=0.15, ge=0)  # 90-day delay penalty as share of one-time cost

    # Learning feedback
    calibration_spread_threshold: float = Field(default=0.25, gt=0)
    max_confidence_boost: float = Field(default=0.2, ge=0, le=1)
    max_confidence_penalty: float = Field(default=0.2, ge=0, le=1)
    calibration_prior_strength: float = Field(default=4.0, gt=0)
    calibrated_confidence_ceiling: float = Field(default=0.95, ge=0, le=1)
    calibrated_confidence_floor: float = Field(default=0.3, ge=0, le=1)

    # Health score weights and defaults
    deadline_weight: float = Field(default=0.4, ge=0)
    predictability_weight: float = Field(default=0.4, ge=0)
    exposure_weight: float = Field(default=0.2, ge=0)
    default_cost_predictability: float = Field(default=80.0, ge=0, le=100)
    exposure_saturation: float = Field(default=1_000_000.0, gt=0)  # Aggregate exposure that scores 0
    trend_window: int = Field(default=3, ge=1)

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    model_config = SettingsConfigDict(env_prefix="COMPLIANCE_COST_")

    @model_validator(mode="after")
    def _single_point_shift_is_bounded(self) -> "EngineSettings":
        # One historical point keeps 1 / (1 + prior_strength) of the largest adjustment.
        largest = max(self.max_confidence_boost, self.max_confidence_penalty)
        if largest / (1.0 + self.calibration_prior_strength) > 0.05:
            raise ValueError(
                "max confidence boost/penalty divided by (1 + calibration_prior_strength) "
                "must not exceed 0.05"
            )
        return self
