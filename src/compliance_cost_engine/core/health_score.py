"""Compliance health score composition.

score = round(0.4 × deadline adherence
              + 0.4 × cost predictability
              + 0.2 × inverse risk exposure)

Each component is a 0..100 signal and is clamped before weighting, so the
score stays in [0, 100] for any input, including no deadlines, no estimates
and zero exposure. Fetching deadlines, estimates and prior scores is the
caller's job; everything here is a pure combination step.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

import structlog

from compliance_cost_engine.core.models import (
    ComplianceHealthScore,
    DeadlineRecord,
    HealthScoreComponents,
    TrendPoint,
)
from compliance_cost_engine.errors import ErrorCode, ValidationError

logger = structlog.get_logger(__name__)

DEADLINE_WEIGHT: float = 0.4
PREDICTABILITY_WEIGHT: float = 0.4
EXPOSURE_WEIGHT: float = 0.2

# No deadlines on record is treated as perfect adherence
NO_DEADLINES_ADHERENCE: float = 100.0

# Predictability reported before a customer has any estimates
DEFAULT_COST_PREDICTABILITY: float = 80.0

# Aggregate exposure at which the inverse exposure component reaches 0
EXPOSURE_SATURATION: float = 1_000_000.0

TREND_WINDOW: int = 3
CURRENT_TREND_LABEL: str = "Current"


def _clamp_score(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return min(100.0, max(0.0, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_health_score(
    components: HealthScoreComponents,
    *,
    deadline_weight: float = DEADLINE_WEIGHT,
    predictability_weight: float = PREDICTABILITY_WEIGHT,
    exposure_weight: float = EXPOSURE_WEIGHT,
) -> int:
    """Combine the three components into a single 0..100 integer score."""
    weighted = (
        _clamp_score(components.deadline_adherence) * deadline_weight
        + _clamp_score(components.cost_predictability) * predictability_weight
        + _clamp_score(components.risk_exposure_inverse) * exposure_weight
    )
    return int(_clamp_score(_round_half_up(weighted)))


def deadline_adherence(met: int, total: int) -> float:
    """Share of deadlines met, as 0..100. No deadlines scores 100.

    Raises:
        ValidationError: If either count is negative.
    """
    if met < 0 or total < 0:
        raise ValidationError(
            "Deadline counts must not be negative",
            details={"met": met, "total": total},
        )
    if total == 0:
        return NO_DEADLINES_ADHERENCE
    return _clamp_score(100.0 * min(met, total) / total)


def deadline_adherence_from_records(
    deadlines: Sequence[DeadlineRecord],
    as_of: datetime,
) -> float:
    """Adherence over deadline records: a deadline is met when its
    notification went out and it is still ahead of ``as_of``.

    Raises:
        ValidationError: If a deadline date cannot be compared with ``as_of``
            (naive and timezone-aware datetimes mixed, or not a datetime).
    """
    met = 0
    for index, deadline in enumerate(deadlines):
        try:
            ahead = deadline.deadline_date > as_of
        except TypeError as exc:
            raise ValidationError(
                "Deadline date is not comparable with the reference time",
                details={
                    "field": "deadline_date",
                    "index": index,
                    "value": repr(deadline.deadline_date),
                    "as_of": repr(as_of),
                },
            ) from exc
        if deadline.notification_sent and ahead:
            met += 1
    return deadline_adherence(met, len(deadlines))


def cost_predictability(
    estimates: Iterable[Any],
    *,
    default: float = DEFAULT_COST_PREDICTABILITY,
) -> float:
    """100 minus the mean relative width of the customer's one-time ranges.

    Args:
        estimates: Objects exposing one_time_cost_low and one_time_cost_high.
        default: Score returned when there are no estimates.
    """
    widths: list[float] = []
    for estimate in estimates:
        high = estimate.one_time_cost_high
        low = estimate.one_time_cost_low
        widths.append(abs(high - low) / high if high else 0.0)

    if not widths:
        logger.debug(
            "cost_predictability_default",
            error_code=ErrorCode.INSUFFICIENT_DATA.value,
            default=default,
        )
        return _clamp_score(default)
    return _clamp_score(100.0 - math.fsum(widths) / len(widths) * 100.0)


def total_exposure(estimates: Iterable[Any]) -> float:
    """Aggregate exposure: upper one-time bound plus annual recurring cost."""
    return math.fsum(e.one_time_cost_high + e.recurring_cost_annual for e in estimates)


def risk_exposure_inverse(
    exposure: float,
    *,
    saturation: float = EXPOSURE_SATURATION,
) -> float:
    """100 for no exposure, falling linearly to 0 at the saturation amount."""
    scaled = max(0.0, exposure) / (saturation / 100.0)
    return max(0.0, 100.0 - min(100.0, scaled))


def build_trend(
    current_score: int,
    prior_points: Iterable[TrendPoint | tuple[str, int]],
    *,
    window: int = TREND_WINDOW,
) -> tuple[TrendPoint, ...]:
    """Fixed-window trend: the latest ``window - 1`` prior points plus the current score."""
    prior = [
        p if isinstance(p, TrendPoint) else TrendPoint(label=p[0], score=p[1])
        for p in prior_points
    ]
    keep = max(0, window - 1)
    recent = prior[-keep:] if keep else []
    points = [
        TrendPoint(label=p.label, score=int(_clamp_score(p.score))) for p in recent
    ]
    points.append(TrendPoint(label=CURRENT_TREND_LABEL, score=int(_clamp_score(current_score))))
    return tuple(points)


def compose_health_score(
    *,
    deadlines_met: int,
    deadlines_total: int,
    estimates: Sequence[Any],
    prior_trend: Iterable[TrendPoint | tuple[str, int]] = (),
    industry_benchmark: float | None = None,
    window: int = TREND_WINDOW,
    deadline_weight: float = DEADLINE_WEIGHT,
    predictability_weight: float = PREDICTABILITY_WEIGHT,
    exposure_weight: float = EXPOSURE_WEIGHT,
    default_cost_predictability: float = DEFAULT_COST_PREDICTABILITY,
    exposure_saturation: float = EXPOSURE_SATURATION,
) -> ComplianceHealthScore:
    """Build the full health score record from already-fetched customer data.

    Args:
        deadlines_met: Number of deadlines met.
        deadlines_total: Number of deadlines tracked.
        estimates: The customer's calibrated cost estimates.
        prior_trend: Earlier scores, oldest first.
        industry_benchmark: Optional peer benchmark passed through unchanged.
        window: Number of trend points including the current score.

    Returns:
        ComplianceHealthScore with clamped components and trend.
    """
    components = HealthScoreComponents(
        deadline_adherence=deadline_adherence(deadlines_met, deadlines_total),
        cost_predictability=cost_predictability(estimates, default=default_cost_predictability),
        risk_exposure_inverse=risk_exposure_inverse(
            total_exposure(estimates), saturation=exposure_saturation
        ),
    )
    score = compute_health_score(
        components,
        deadline_weight=deadline_weight,
        predictability_weight=predictability_weight,
        exposure_weight=exposure_weight,
    )
    trend = build_trend(score, prior_trend, window=window)

    logger.info(
        "health_score_composed",
        score=score,
        deadline_adherence=round(components.deadline_adherence, 1),
        cost_predictability=round(components.cost_predictability, 1),
        risk_exposure_inverse=round(components.risk_exposure_inverse, 1),
        estimate_count=len(estimates),
        trend_points=len(trend),
    )

    return ComplianceHealthScore(
        score=score,
        components=components,
        trend=trend,
        industry_benchmark=industry_benchmark,
    )
