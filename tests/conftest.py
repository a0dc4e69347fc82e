"""Shared test fixtures for compliance-cost-engine tests."""

import sys
from pathlib import Path

# Ensure the src/ layout is importable without installing the package.
_SRC_PATH = Path(__file__).parent.parent / "src"
if str(_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(_SRC_PATH))

import random
from collections.abc import Callable

import pytest

from compliance_cost_engine.core.models import (
    CompanyProfile,
    CostCategory,
    CostDriver,
    Department,
)
from compliance_cost_engine.core.profile import resolve_profile
from compliance_cost_engine.settings import EngineSettings

DriverFactory = Callable[..., list[CostDriver]]


@pytest.fixture
def settings() -> EngineSettings:
    """Provide engine settings with the documented defaults."""
    return EngineSettings()


@pytest.fixture
def default_profile() -> CompanyProfile:
    """Default profile: TECHNOLOGY, 100 employees, 1 jurisdiction, MEDIUM, LOW."""
    return resolve_profile(None)


@pytest.fixture
def training_driver() -> CostDriver:
    """A single HR training driver used in the worked example."""
    return CostDriver(
        id="drv-training",
        category=CostCategory.TRAINING,
        description="Annual privacy awareness training rollout",
        is_one_time=True,
        estimated_cost=10_000,
        confidence=0.9,
        department=Department.HR,
    )


@pytest.fixture
def make_drivers() -> DriverFactory:
    """Deterministic synthetic driver generator standing in for the classifier.

    Call as ``make_drivers(count, seed=...)``; the same seed always yields the
    same driver list.
    """

    def _factory(count: int = 8, seed: int = 7) -> list[CostDriver]:
        rng = random.Random(seed)
        categories = list(CostCategory)
        departments = list(Department)
        drivers: list[CostDriver] = []
        for index in range(count):
            drivers.append(
                CostDriver(
                    id=f"drv-{seed}-{index:03d}",
                    category=rng.choice(categories),
                    description=f"Synthetic driver {index}",
                    is_one_time=rng.random() < 0.7,
                    estimated_cost=float(rng.randrange(1_000, 250_000, 500)),
                    confidence=round(rng.uniform(0.3, 1.0), 2),
                    department=rng.choice(departments),
                )
            )
        return drivers

    return _factory
