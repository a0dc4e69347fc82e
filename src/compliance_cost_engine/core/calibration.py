"""Learning feedback: calibrate an estimate against a customer's history.

Historical variances are (actual - estimated) / estimated for the customer's
past estimates. Their mean shifts the one-time range; their spread decides
whether the range keeps its width (history agrees) or widens (history
disagrees). Confidence moves up only for tightly clustered history, and every
confidence adjustment is shrunk by n / (n + prior_strength) so sparse history
cannot produce a large swing.

Only the aggregate one-time range is calibrated; department attribution and
recurring cost are left as estimated.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Any

import structlog

from compliance_cost_engine.core.models import (
    CalibratedRange,
    CostEstimateResult,
    FeedbackVariance,
    HistoricalVariance,
)
from compliance_cost_engine.errors import ErrorCode, ValidationError

logger = structlog.get_logger(__name__)

# Variance spread above which history is treated as disagreement
SPREAD_THRESHOLD: float = 0.25

# Upper bounds on confidence movement before sample-size shrinkage
MAX_CONFIDENCE_BOOST: float = 0.2
MAX_CONFIDENCE_PENALTY: float = 0.2

# Pseudo-count of the uncalibrated estimate; n=1 keeps 1/(1+4) of the adjustment
PRIOR_STRENGTH: float = 4.0

CONFIDENCE_CEILING: float = 0.95
CONFIDENCE_FLOOR: float = 0.3

# Widening is capped at this much excess spread
MAX_EXCESS_SPREAD: float = 1.0

# Largest confidence move a single historical point may cause, whatever the tunables
SINGLE_POINT_MAX_SHIFT: float = 0.05


def apply_learning_feedback(
    base_cost: CalibratedRange | CostEstimateResult | Any,
    historical_variances: Sequence[HistoricalVariance],
    *,
    spread_threshold: float = SPREAD_THRESHOLD,
    max_confidence_boost: float = MAX_CONFIDENCE_BOOST,
    max_confidence_penalty: float = MAX_CONFIDENCE_PENALTY,
    prior_strength: float = PRIOR_STRENGTH,
    confidence_ceiling: float = CONFIDENCE_CEILING,
    confidence_floor: float = CONFIDENCE_FLOOR,
) -> CalibratedRange:
    """Adjust a one-time cost range and confidence using historical variance.

    Args:
        base_cost: Any object exposing one_time_cost_low, one_time_cost_high
            and confidence (usually a CostEstimateResult).
        historical_variances: The customer's past estimate outcomes.
        spread_threshold: Variance spread (max - min) above which the range
            is widened and confidence is reduced.
        max_confidence_boost: Largest confidence increase for perfectly
            clustered history, before sample-size shrinkage.
        max_confidence_penalty: Largest confidence decrease for highly
            dispersed history, before sample-size shrinkage.
        prior_strength: Pseudo-count weighting the uncalibrated confidence.
        confidence_ceiling: Calibrated confidence never rises above this.
        confidence_floor: Decreases stop here (or at the base confidence if
            it is already lower).

    Returns:
        CalibratedRange with low <= high and confidence in [0, 1]. With empty
        history the base range is returned unchanged.

    Raises:
        ValidationError: If a historical variance is not a finite number.
    """
    base = CalibratedRange.of(base_cost)
    history = tuple(historical_variances)

    if not history:
        logger.debug(
            "learning_feedback_skipped",
            error_code=ErrorCode.INSUFFICIENT_DATA.value,
            reason="empty_history",
        )
        return base

    variances = [_finite_variance(entry, index) for index, entry in enumerate(history)]
    n = len(variances)
    mean_variance = math.fsum(variances) / n
    variance_spread = max(variances) - min(variances)
    midpoint = base.midpoint

    # Shift both bounds by the mean historical error.
    shift = mean_variance * midpoint
    low = base.one_time_cost_low + shift
    high = base.one_time_cost_high + shift

    # History that disagrees with itself widens the range.
    widened = variance_spread > spread_threshold
    if widened:
        excess = min(variance_spread - spread_threshold, MAX_EXCESS_SPREAD)
        half_widening = 0.5 * midpoint * excess
        low -= half_widening
        high += half_widening

    if low < 0:
        low = 0.0
    low = round(low)
    high = round(high)
    if high < low:
        logger.warning(
            "calibrated_range_inverted",
            error_code=ErrorCode.INVARIANT_CORRECTED.value,
            one_time_cost_low=low,
            one_time_cost_high=high,
        )
        high = low

    confidence = _calibrated_confidence(
        base.confidence,
        variances,
        spread_threshold=spread_threshold,
        max_confidence_boost=max_confidence_boost,
        max_confidence_penalty=max_confidence_penalty,
        prior_strength=prior_strength,
        confidence_ceiling=confidence_ceiling,
        confidence_floor=confidence_floor,
    )

    logger.info(
        "learning_feedback_applied",
        sample_count=n,
        mean_variance=round(mean_variance, 4),
        variance_spread=round(variance_spread, 4),
        range_widened=widened,
        one_time_cost_low=low,
        one_time_cost_high=high,
        base_confidence=round(base.confidence, 4),
        confidence=round(confidence, 4),
    )

    return CalibratedRange(one_time_cost_low=low, one_time_cost_high=high, confidence=confidence)


def _calibrated_confidence(
    base_confidence: float,
    variances: Sequence[float],
    *,
    spread_threshold: float,
    max_confidence_boost: float,
    max_confidence_penalty: float,
    prior_strength: float,
    confidence_ceiling: float,
    confidence_floor: float,
) -> float:
    n = len(variances)
    if n > 1:
        dispersion = max(variances) - min(variances)
    else:
        # A lone data point has no spread; its own magnitude is the only signal.
        dispersion = abs(variances[0])

    if dispersion <= spread_threshold:
        delta = max_confidence_boost * (1.0 - dispersion / spread_threshold)
    else:
        delta = -max_confidence_penalty * min(1.0, (dispersion - spread_threshold) / spread_threshold)

    delta *= n / (n + prior_strength)
    if n == 1:
        delta = max(-SINGLE_POINT_MAX_SHIFT, min(SINGLE_POINT_MAX_SHIFT, delta))
    confidence = base_confidence + delta

    if delta > 0:
        confidence = min(confidence, max(confidence_ceiling, base_confidence))
    else:
        confidence = max(confidence, min(confidence_floor, base_confidence))
    return min(1.0, max(0.0, confidence))


def _finite_variance(entry: HistoricalVariance, index: int) -> float:
    variance = entry.variance
    if isinstance(variance, bool) or not isinstance(variance, (int, float)) or not math.isfinite(variance):
        raise ValidationError(
            "Historical variance must be a finite number",
            details={"index": index, "value": repr(variance)},
        )
    return float(variance)


def compute_feedback_variance(
    estimate: CostEstimateResult | CalibratedRange | Any,
    actual_one_time_cost: float,
    actual_recurring_cost_annual: float,
) -> FeedbackVariance:
    """Compare a completed estimate with the actual costs the customer reported.

    The estimated one-time cost is the midpoint of the range. Recurring
    variance is zero when the estimate carried no recurring cost.

    Raises:
        ValidationError: If the actual one-time cost is not positive, the
            actual recurring cost is negative, or the estimate midpoint is zero.
    """
    if not math.isfinite(actual_one_time_cost) or actual_one_time_cost <= 0:
        raise ValidationError(
            "actual_one_time_cost must be positive",
            details={"field": "actual_one_time_cost", "value": actual_one_time_cost},
        )
    if not math.isfinite(actual_recurring_cost_annual) or actual_recurring_cost_annual < 0:
        raise ValidationError(
            "actual_recurring_cost_annual must not be negative",
            details={"field": "actual_recurring_cost_annual", "value": actual_recurring_cost_annual},
        )

    estimated_one_time = CalibratedRange.of(estimate).midpoint
    if estimated_one_time <= 0:
        raise ValidationError(
            "Cannot compute variance against an estimate with no one-time cost",
            details={"field": "one_time_cost_mid", "value": estimated_one_time},
        )
    one_time_variance = (actual_one_time_cost - estimated_one_time) / estimated_one_time

    estimated_recurring = getattr(estimate, "recurring_cost_annual", 0) or 0
    recurring_variance = (
        (actual_recurring_cost_annual - estimated_recurring) / estimated_recurring
        if estimated_recurring > 0
        else 0.0
    )

    feedback = FeedbackVariance(
        one_time_variance=one_time_variance,
        recurring_variance=recurring_variance,
        one_time_accuracy=100.0 - abs(one_time_variance * 100.0),
        recurring_accuracy=100.0 - abs(recurring_variance * 100.0),
    )

    logger.info(
        "cost_feedback_computed",
        one_time_variance=round(one_time_variance, 4),
        recurring_variance=round(recurring_variance, 4),
        one_time_accuracy=round(feedback.one_time_accuracy, 1),
    )
    return feedback


def derive_historical_variances(
    base_cost: CostEstimateResult | CalibratedRange | Any,
    prior_estimates: Iterable[CostEstimateResult | CalibratedRange | Any],
) -> list[HistoricalVariance]:
    """Build variance records using prior estimate midpoints as proxy actuals.

    Used when a customer has earlier estimates but no confirmed actuals yet.
    Priors with a non-finite midpoint are skipped, and nothing is derived when
    the current midpoint is zero.
    """
    base_mid = CalibratedRange.of(base_cost).midpoint
    if base_mid <= 0:
        return []

    variances: list[HistoricalVariance] = []
    for prior in prior_estimates:
        prior_mid = CalibratedRange.of(prior).midpoint
        if not math.isfinite(prior_mid) or prior_mid < 0:
            continue
        variances.append(HistoricalVariance.from_outcome(estimated=base_mid, actual=prior_mid))
    return variances


__all__ = [
    "apply_learning_feedback",
    "compute_feedback_variance",
    "derive_historical_variances",
]
