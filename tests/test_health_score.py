"""Tests for the compliance health score.

Covers:
  - Worked example: components (100, 80, 100) score 92
  - Components are clamped to [0, 100] before weighting; NaN counts as 0
  - Half-up rounding of the weighted sum
  - deadline_adherence(): no deadlines, partial, over-count, negative counts
  - deadline_adherence_from_records() against a reference time
  - Naive and timezone-aware deadline dates cannot be mixed
  - cost_predictability(): default with no estimates, relative range width
  - risk_exposure_inverse() saturation
  - build_trend() fixed window
  - compose_health_score() empty-input defaults and bounds
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from compliance_cost_engine.core.calculator import calculate_implementation_cost
from compliance_cost_engine.core.health_score import (
    build_trend,
    compose_health_score,
    compute_health_score,
    cost_predictability,
    deadline_adherence,
    deadline_adherence_from_records,
    risk_exposure_inverse,
    total_exposure,
)
from compliance_cost_engine.core.models import DeadlineRecord, HealthScoreComponents, TrendPoint
from compliance_cost_engine.errors import ValidationError


def _estimate(low: float, high: float, recurring: float = 0.0) -> SimpleNamespace:
    return SimpleNamespace(one_time_cost_low=low, one_time_cost_high=high, recurring_cost_annual=recurring)


@pytest.fixture
def now() -> datetime:
    """Provide a consistent reference time."""
    return datetime(2026, 2, 26, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# compute_health_score
# ---------------------------------------------------------------------------


def test_worked_example_scores_92() -> None:
    components = HealthScoreComponents(
        deadline_adherence=100, cost_predictability=80, risk_exposure_inverse=100
    )
    assert compute_health_score(components) == 92


def test_components_are_clamped_before_weighting() -> None:
    components = HealthScoreComponents(
        deadline_adherence=150, cost_predictability=-20, risk_exposure_inverse=math.nan
    )
    assert compute_health_score(components) == 40


@pytest.mark.parametrize(
    "values",
    [(0, 0, 0), (100, 100, 100), (1e9, 1e9, 1e9), (-1e9, -1e9, -1e9), (33.3, 66.6, 99.9)],
)
def test_score_always_within_bounds(values: tuple) -> None:
    score = compute_health_score(HealthScoreComponents(*values))
    assert isinstance(score, int)
    assert 0 <= score <= 100


def test_weighted_sum_rounds_half_up() -> None:
    components = HealthScoreComponents(
        deadline_adherence=2.5, cost_predictability=0, risk_exposure_inverse=0
    )
    score = compute_health_score(
        components, deadline_weight=1.0, predictability_weight=0.0, exposure_weight=0.0
    )
    assert score == 3


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


def test_no_deadlines_is_full_adherence() -> None:
    assert deadline_adherence(0, 0) == 100.0


def test_partial_adherence() -> None:
    assert deadline_adherence(3, 4) == pytest.approx(75.0)


def test_adherence_is_capped_when_met_exceeds_total() -> None:
    assert deadline_adherence(5, 4) == 100.0


@pytest.mark.parametrize("met, total", [(-1, 3), (1, -3)])
def test_negative_deadline_counts_are_rejected(met: int, total: int) -> None:
    with pytest.raises(ValidationError):
        deadline_adherence(met, total)


def test_adherence_from_records(now: datetime) -> None:
    records = [
        DeadlineRecord(deadline_date=now + timedelta(days=30), notification_sent=True),
        DeadlineRecord(deadline_date=now + timedelta(days=60), notification_sent=False),
        DeadlineRecord(deadline_date=now - timedelta(days=1), notification_sent=True),
        DeadlineRecord(deadline_date=now + timedelta(days=90), notification_sent=True),
    ]
    assert deadline_adherence_from_records(records, now) == pytest.approx(50.0)
    assert deadline_adherence_from_records([], now) == 100.0


def test_adherence_rejects_mixed_naive_and_aware_dates(now: datetime) -> None:
    records = [
        DeadlineRecord(deadline_date=now + timedelta(days=30), notification_sent=True),
        DeadlineRecord(deadline_date=datetime(2026, 6, 1, 12, 0, 0), notification_sent=True),
    ]
    with pytest.raises(ValidationError) as exc_info:
        deadline_adherence_from_records(records, now)

    assert exc_info.value.details["field"] == "deadline_date"
    assert exc_info.value.details["index"] == 1
    assert isinstance(exc_info.value.__cause__, TypeError)


def test_predictability_defaults_without_estimates() -> None:
    assert cost_predictability([]) == 80.0
    assert cost_predictability([], default=65.0) == 65.0


def test_predictability_from_range_width() -> None:
    estimates = [_estimate(90_000, 110_000), _estimate(50_000, 50_000)]
    expected = 100 - ((20_000 / 110_000) + 0) / 2 * 100
    assert cost_predictability(estimates) == pytest.approx(expected)


def test_zero_high_estimates_are_fully_predictable() -> None:
    assert cost_predictability([_estimate(0, 0)]) == 100.0


def test_total_exposure_sums_high_and_recurring() -> None:
    assert total_exposure([_estimate(1, 100, 10), _estimate(5, 50, 0)]) == 160


@pytest.mark.parametrize(
    "exposure, expected",
    [(0, 100.0), (-500, 100.0), (250_000, 75.0), (1_000_000, 0.0), (5_000_000, 0.0)],
)
def test_risk_exposure_inverse(exposure: float, expected: float) -> None:
    assert risk_exposure_inverse(exposure) == pytest.approx(expected)


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------


def test_trend_keeps_latest_points_and_appends_current() -> None:
    trend = build_trend(81, [("Jan", 70), ("Feb", 75), TrendPoint(label="Mar", score=80)])
    assert [(p.label, p.score) for p in trend] == [("Feb", 75), ("Mar", 80), ("Current", 81)]


def test_trend_window_of_one_is_current_only() -> None:
    trend = build_trend(50, [("Jan", 70)], window=1)
    assert trend == (TrendPoint(label="Current", score=50),)


def test_trend_scores_are_clamped() -> None:
    trend = build_trend(40, [("Jan", 140), ("Feb", -3)])
    assert [p.score for p in trend] == [100, 0, 40]


# ---------------------------------------------------------------------------
# compose_health_score
# ---------------------------------------------------------------------------


def test_compose_with_no_data_uses_defaults() -> None:
    health = compose_health_score(deadlines_met=0, deadlines_total=0, estimates=[])

    assert health.components.deadline_adherence == 100.0
    assert health.components.cost_predictability == 80.0
    assert health.components.risk_exposure_inverse == 100.0
    assert health.score == 92
    assert health.trend == (TrendPoint(label="Current", score=92),)
    assert health.industry_benchmark is None


def test_compose_from_calculated_estimates(make_drivers, default_profile) -> None:
    estimates = [
        calculate_implementation_cost(make_drivers(6, seed=seed), default_profile)
        for seed in (1, 2, 3)
    ]
    health = compose_health_score(
        deadlines_met=2,
        deadlines_total=3,
        estimates=estimates,
        prior_trend=[("Q1", 60), ("Q2", 65)],
        industry_benchmark=72.5,
    )

    assert 0 <= health.score <= 100
    for value in (
        health.components.deadline_adherence,
        health.components.cost_predictability,
        health.components.risk_exposure_inverse,
    ):
        assert 0.0 <= value <= 100.0
    assert [p.label for p in health.trend] == ["Q1", "Q2", "Current"]
    assert health.trend[-1].score == health.score
    assert health.industry_benchmark == 72.5


def test_compose_is_deterministic() -> None:
    estimates = [_estimate(10_000, 15_000, 2_000)]
    first = compose_health_score(deadlines_met=1, deadlines_total=2, estimates=estimates)
    second = compose_health_score(deadlines_met=1, deadlines_total=2, estimates=estimates)
    assert first == second
