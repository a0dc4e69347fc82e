"""Tests for the implementation-cost calculator.

Covers:
  - Worked example: one HR training driver on the default profile
  - low <= high for synthetic driver sets
  - Identical inputs produce identical results; driver order is irrelevant
  - Empty driver list returns zero costs with default confidence
  - Negative, non-finite or boolean costs and out-of-range confidence raise InvalidInputError
  - Industry, geography, size and tech-maturity multipliers
  - Fully confident drivers produce a zero-width range
  - Estimation method label is carried through
"""

from __future__ import annotations

import dataclasses

import pytest

from compliance_cost_engine.core.calculator import (
    DEFAULT_CONFIDENCE,
    calculate_implementation_cost,
    driver_multiplier,
    geo_multiplier,
    size_multiplier,
    validate_drivers,
)
from compliance_cost_engine.core.models import (
    CompanyProfile,
    CostCategory,
    CostDriver,
    Department,
    EstimationMethod,
    Industry,
    TechMaturity,
)
from compliance_cost_engine.errors import ErrorCode, InvalidInputError, ValidationError


def _certain(category: CostCategory, cost: float = 10_000, *, one_time: bool = True) -> CostDriver:
    return CostDriver(
        id=f"drv-{category.value.lower()}",
        category=category,
        description=category.value,
        is_one_time=one_time,
        estimated_cost=cost,
        confidence=1.0,
        department=Department.IT,
    )


# ---------------------------------------------------------------------------
# Worked example
# ---------------------------------------------------------------------------


def test_single_training_driver_example(training_driver: CostDriver, default_profile: CompanyProfile) -> None:
    """10,000 one-time at 0.9 confidence gives a 9,500..11,000 range and no recurring cost."""
    result = calculate_implementation_cost([training_driver], default_profile)

    assert result.recurring_cost_annual == 0
    assert result.one_time_cost_low == 9_500
    assert result.one_time_cost_high == 11_000
    assert result.one_time_cost_low < 10_000 < result.one_time_cost_high
    assert result.confidence == pytest.approx(0.9)
    assert result.estimation_method == EstimationMethod.DETERMINISTIC

    assert len(result.department_breakdown) == 1
    hr = result.department_breakdown[0]
    assert hr.department == Department.HR
    assert hr.one_time_cost == 10_000
    assert hr.recurring_cost_annual == 0
    assert hr.fte_impact == 0


# ---------------------------------------------------------------------------
# Structural properties
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_low_never_exceeds_high(make_drivers, default_profile: CompanyProfile, seed: int) -> None:
    result = calculate_implementation_cost(make_drivers(30, seed=seed), default_profile)
    assert 0 <= result.one_time_cost_low <= result.one_time_cost_high
    assert 0.0 <= result.confidence <= 1.0


def test_identical_inputs_identical_outputs(make_drivers, default_profile: CompanyProfile) -> None:
    drivers = make_drivers(20, seed=42)
    first = calculate_implementation_cost(drivers, default_profile)
    second = calculate_implementation_cost(make_drivers(20, seed=42), default_profile)
    shuffled = calculate_implementation_cost(list(reversed(drivers)), default_profile)

    assert first == second
    assert first.one_time_cost_low == shuffled.one_time_cost_low
    assert first.one_time_cost_high == shuffled.one_time_cost_high
    assert first.recurring_cost_annual == shuffled.recurring_cost_annual
    assert first.confidence == pytest.approx(shuffled.confidence)


def test_empty_drivers_use_defaults(default_profile: CompanyProfile) -> None:
    result = calculate_implementation_cost([], default_profile)

    assert result.one_time_cost_low == 0
    assert result.one_time_cost_high == 0
    assert result.recurring_cost_annual == 0
    assert result.department_breakdown == ()
    assert result.confidence == DEFAULT_CONFIDENCE == 0.5


def test_fully_confident_drivers_have_zero_width(default_profile: CompanyProfile) -> None:
    result = calculate_implementation_cost(
        [_certain(CostCategory.LEGAL_REVIEW, 25_000), _certain(CostCategory.AUDIT, 5_000)],
        default_profile,
    )
    assert result.one_time_cost_low == result.one_time_cost_high == 30_000


def test_recurring_drivers_do_not_touch_range(default_profile: CompanyProfile) -> None:
    result = calculate_implementation_cost(
        [_certain(CostCategory.PERSONNEL, 80_000, one_time=False)], default_profile
    )
    assert result.recurring_cost_annual == 80_000
    assert result.one_time_cost_low == result.one_time_cost_high == 0
    assert result.department_breakdown[0].fte_impact == pytest.approx(0.8)


def test_method_label_is_carried(training_driver: CostDriver, default_profile: CompanyProfile) -> None:
    result = calculate_implementation_cost(
        [training_driver], default_profile, method=EstimationMethod.AI_CALIBRATED
    )
    assert result.estimation_method == EstimationMethod.AI_CALIBRATED


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "changes",
    [
        {"estimated_cost": -1},
        {"estimated_cost": float("inf")},
        {"estimated_cost": float("nan")},
        {"estimated_cost": True},
        {"confidence": 1.5},
        {"confidence": -0.1},
    ],
)
def test_invalid_driver_raises(training_driver: CostDriver, default_profile: CompanyProfile, changes: dict) -> None:
    bad = dataclasses.replace(training_driver, **changes)
    with pytest.raises(InvalidInputError) as exc_info:
        calculate_implementation_cost([training_driver, bad], default_profile)

    error = exc_info.value
    assert isinstance(error, ValidationError)
    assert error.code == ErrorCode.INVALID_INPUT
    assert error.details["index"] == 1


def test_validate_drivers_accepts_boundaries(training_driver: CostDriver) -> None:
    validate_drivers(
        [
            dataclasses.replace(training_driver, estimated_cost=0, confidence=0.0),
            dataclasses.replace(training_driver, confidence=1.0),
        ]
    )


def test_unknown_category_is_rejected() -> None:
    with pytest.raises(ValidationError):
        CostDriver(
            id="x",
            category="MARKETING",  # type: ignore[arg-type]
            description="",
            is_one_time=True,
            estimated_cost=1.0,
            confidence=0.5,
        )


# ---------------------------------------------------------------------------
# Multipliers
# ---------------------------------------------------------------------------


def test_size_multiplier_is_one_at_reference_and_increasing() -> None:
    assert size_multiplier(100) == pytest.approx(1.0)
    values = [size_multiplier(n) for n in (1, 10, 100, 1_000, 10_000)]
    assert values == sorted(values)
    assert all(v > 0 for v in values)
    assert size_multiplier(10_000) < 3


def test_geo_multiplier_steps_per_jurisdiction() -> None:
    assert geo_multiplier(1) == pytest.approx(1.0)
    assert geo_multiplier(3) == pytest.approx(1.2)


def test_industry_multiplier_applies(default_profile: CompanyProfile) -> None:
    healthcare = dataclasses.replace(default_profile, industry=Industry.HEALTHCARE)
    result = calculate_implementation_cost([_certain(CostCategory.LEGAL_REVIEW)], healthcare)
    assert result.one_time_cost_low == 14_000


def test_geography_multiplier_applies(default_profile: CompanyProfile) -> None:
    multi = dataclasses.replace(default_profile, geographic_complexity=3)
    result = calculate_implementation_cost([_certain(CostCategory.AUDIT)], multi)
    assert result.one_time_cost_high == 12_000


def test_tech_maturity_only_affects_technology_work(default_profile: CompanyProfile) -> None:
    mature = dataclasses.replace(default_profile, tech_maturity=TechMaturity.HIGH)

    system = calculate_implementation_cost([_certain(CostCategory.SYSTEM_CHANGES)], mature)
    training = calculate_implementation_cost([_certain(CostCategory.TRAINING)], mature)

    assert system.one_time_cost_low == 8_500
    assert training.one_time_cost_low == 10_000


def test_larger_company_costs_more(make_drivers, default_profile: CompanyProfile) -> None:
    drivers = make_drivers(10, seed=3)
    small = calculate_implementation_cost(drivers, dataclasses.replace(default_profile, employee_count=20))
    large = calculate_implementation_cost(drivers, dataclasses.replace(default_profile, employee_count=5_000))
    assert large.three_year_exposure > small.three_year_exposure


def test_driver_multiplier_combines_factors(default_profile: CompanyProfile) -> None:
    profile = dataclasses.replace(
        default_profile,
        industry=Industry.FINANCE,
        geographic_complexity=2,
        tech_maturity=TechMaturity.LOW,
    )
    multiplier = driver_multiplier(_certain(CostCategory.INFRASTRUCTURE), profile)
    assert multiplier == pytest.approx(1.3 * 1.1 * 1.2)
