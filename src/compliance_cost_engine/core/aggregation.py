"""Department-level rollup of cost drivers.

One-time drivers feed a department's one_time_cost and all other drivers feed
its recurring_cost_annual. Staffing impact is recurring cost expressed in
fully-loaded FTEs. Drivers whose department is unknown are grouped under
OTHER rather than dropped.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable

import structlog

from compliance_cost_engine.core.models import CostDriver, Department, DepartmentCostBreakdown
from compliance_cost_engine.errors import ValidationError

logger = structlog.get_logger(__name__)

# Fully-loaded annual cost of one full-time employee
COST_PER_FTE: float = 100_000.0


def aggregate_by_department(
    drivers: Iterable[CostDriver],
    *,
    cost_per_fte: float = COST_PER_FTE,
    cost_multiplier: Callable[[CostDriver], float] | None = None,
) -> dict[Department, DepartmentCostBreakdown]:
    """Bucket drivers by department, separating one-time from recurring cost.

    Args:
        drivers: Cost drivers to aggregate. Order does not affect the totals.
        cost_per_fte: Annual cost of one FTE used to derive fte_impact.
        cost_multiplier: Optional per-driver multiplier applied to
            estimated_cost before summing (used by the calculator to roll up
            profile-adjusted costs).

    Returns:
        Mapping of department to breakdown, in Department declaration order,
        containing only departments that have at least one driver.

    Raises:
        ValidationError: If cost_per_fte is not a positive finite amount.
    """
    if (
        isinstance(cost_per_fte, bool)
        or not isinstance(cost_per_fte, (int, float))
        or not math.isfinite(cost_per_fte)
        or cost_per_fte <= 0
    ):
        raise ValidationError(
            "cost_per_fte must be a positive amount",
            details={"field": "cost_per_fte", "value": repr(cost_per_fte)},
        )

    buckets: dict[Department, list[CostDriver]] = {}
    for driver in drivers:
        department = Department.coerce(driver.department)
        buckets.setdefault(department, []).append(driver)

    breakdown: dict[Department, DepartmentCostBreakdown] = {}
    for department in Department:
        line_items = buckets.get(department)
        if not line_items:
            continue

        one_time = math.fsum(
            _adjusted(d, cost_multiplier) for d in line_items if d.is_one_time
        )
        recurring = math.fsum(
            _adjusted(d, cost_multiplier) for d in line_items if not d.is_one_time
        )

        breakdown[department] = DepartmentCostBreakdown(
            department=department,
            one_time_cost=round(one_time),
            recurring_cost_annual=round(recurring),
            fte_impact=round(max(0.0, recurring) / cost_per_fte, 2),
            budget_code=f"{department.value[:4]}-COMP-001",
            line_items=tuple(line_items),
        )

    if Department.OTHER in buckets:
        logger.debug(
            "drivers_grouped_under_other",
            driver_count=len(buckets[Department.OTHER]),
        )

    return breakdown


def _adjusted(driver: CostDriver, cost_multiplier: Callable[[CostDriver], float] | None) -> float:
    if cost_multiplier is None:
        return driver.estimated_cost
    return driver.estimated_cost * cost_multiplier(driver)
