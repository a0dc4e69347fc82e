"""Implementation scenario generation.

Four fixed multiplier sets are applied to the base one-time and recurring
cost. The recommendation never exceeds the company's risk appetite: among the
scenarios at or below that appetite, the cheapest three-year total wins.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from compliance_cost_engine.core.models import CompanyProfile, CostScenario, RiskLevel, ScenarioAnalysis
from compliance_cost_engine.errors import ValidationError
from compliance_cost_engine.observability import get_logger

logger = get_logger(__name__)

# 90-day delay penalty as a share of the one-time cost
LATE_PENALTY_RATE: float = 0.15

# Horizon used for scenario comparison
THREE_YEARS: int = 3


@dataclass(frozen=True)
class _ScenarioTemplate:
    key: str
    name: str
    description: str
    one_time_factor: float
    recurring_factor: float
    assumptions: tuple[str, ...]


_MINIMAL = _ScenarioTemplate(
    key="minimal",
    name="Minimal Compliance",
    description="Basic compliance with manual processes",
    one_time_factor=0.7,
    recurring_factor=0.8,
    assumptions=(
        "Manual processes where possible",
        "Reactive compliance approach",
        "Minimal tooling investment",
    ),
)
_STANDARD = _ScenarioTemplate(
    key="standard",
    name="Standard Compliance",
    description="Recommended baseline compliance approach",
    one_time_factor=1.0,
    recurring_factor=1.0,
    assumptions=(
        "Industry-standard tools and processes",
        "Proactive compliance monitoring",
        "Regular audits and assessments",
    ),
)
_BEST_IN_CLASS = _ScenarioTemplate(
    key="bestInClass",
    name="Best-in-Class",
    description="Industry-leading compliance program",
    one_time_factor=1.4,
    recurring_factor=1.2,
    assumptions=(
        "Premium compliance platforms",
        "Dedicated compliance team",
        "Continuous monitoring and improvement",
        "Third-party validation",
    ),
)
_DELAY_90_DAYS = _ScenarioTemplate(
    key="delay90Days",
    name="90-Day Delay",
    description="Delayed implementation with potential penalties",
    one_time_factor=1.0,
    recurring_factor=1.0,
    assumptions=(
        "Implementation starts 90 days late",
        "Late-compliance penalties and rush fees",
        "Higher risk of violations",
    ),
)


def generate_scenarios(
    base_cost: Mapping[str, Any] | Any,
    profile: CompanyProfile,
    *,
    late_penalty_rate: float = LATE_PENALTY_RATE,
) -> ScenarioAnalysis:
    """Derive the four named implementation scenarios from a base cost.

    Args:
        base_cost: Mapping or object exposing one_time_cost and
            recurring_cost_annual. A CostEstimateResult is accepted as is;
            its one_time_cost_mid stands in for one_time_cost.
        profile: Resolved company profile; its risk_appetite anchors the
            standard scenario and caps the recommendation.
        late_penalty_rate: Late penalty for the 90-day delay scenario, as a
            share of the one-time cost.

    Returns:
        ScenarioAnalysis with all four scenarios and the recommended key.

    Raises:
        ValidationError: If either base amount is negative or not finite.
    """
    one_time = _base_amount(base_cost, "one_time_cost")
    recurring = _base_amount(base_cost, "recurring_cost_annual")
    appetite = profile.risk_appetite

    minimal = _build(_MINIMAL, one_time, recurring, appetite.raised())
    standard = _build(_STANDARD, one_time, recurring, appetite)
    best_in_class = _build(_BEST_IN_CLASS, one_time, recurring, appetite.lowered())
    delay_90_days = _build(
        _DELAY_90_DAYS,
        one_time,
        recurring,
        RiskLevel.HIGH,
        late_penalty=one_time * late_penalty_rate,
    )

    ordered = (
        (_MINIMAL.key, minimal),
        (_STANDARD.key, standard),
        (_BEST_IN_CLASS.key, best_in_class),
        (_DELAY_90_DAYS.key, delay_90_days),
    )
    eligible = [
        (scenario.three_year_total, scenario.risk_level.rank, position, key)
        for position, (key, scenario) in enumerate(ordered)
        if scenario.risk_level.rank <= appetite.rank
    ]
    recommended = min(eligible)[3] if eligible else _STANDARD.key

    logger.info(
        "scenarios_generated",
        risk_appetite=appetite.value,
        recommended=recommended,
        standard_three_year_total=standard.three_year_total,
    )

    return ScenarioAnalysis(
        minimal=minimal,
        standard=standard,
        best_in_class=best_in_class,
        delay_90_days=delay_90_days,
        recommended=recommended,
    )


def _build(
    template: _ScenarioTemplate,
    one_time: float,
    recurring: float,
    risk_level: RiskLevel,
    late_penalty: float = 0.0,
) -> CostScenario:
    scenario_one_time = round(one_time * template.one_time_factor + late_penalty)
    scenario_recurring = round(recurring * template.recurring_factor)
    assumptions = template.assumptions
    if late_penalty:
        assumptions = assumptions + (f"Late penalty of {round(late_penalty):,} added to one-time cost",)
    return CostScenario(
        name=template.name,
        description=template.description,
        one_time_cost=scenario_one_time,
        recurring_cost_annual=scenario_recurring,
        three_year_total=scenario_one_time + scenario_recurring * THREE_YEARS,
        risk_level=risk_level,
        assumptions=assumptions,
    )


def _base_amount(base_cost: Mapping[str, Any] | Any, name: str) -> float:
    if isinstance(base_cost, Mapping):
        value = base_cost.get(name)
    elif name == "one_time_cost" and not hasattr(base_cost, name) and hasattr(base_cost, "one_time_cost_mid"):
        # A cost estimate contributes the midpoint of its one-time range.
        value = base_cost.one_time_cost_mid
    else:
        value = getattr(base_cost, name, None)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
        raise ValidationError(
            f"Base cost {name} must be a non-negative amount",
            details={"field": name, "value": repr(value)},
        )
    return float(value)
