"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- A manually advanced clock for credential timing tests
- Auto-skip of integration tests when no API key is configured
- Common domain fixtures
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from dotenv import load_dotenv

from hydroplan.config import get_available_llm_providers

if TYPE_CHECKING:
    from hydroplan.domain import LayoutAnalysis, LayoutRequest, VirtualEnvironment

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    """Skip integration tests when no LLM provider has an API key."""
    if get_available_llm_providers():
        return

    skip_integration = pytest.mark.skip(reason="No LLM API key configured")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# =============================================================================
# Clock
# =============================================================================


class ManualClock:
    """Monotonic clock that only moves when told to.

    Example:
        >>> clock = ManualClock()
        >>> clock.advance(61)
        >>> clock()
        61.0
    """

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def manual_clock() -> ManualClock:
    """Provide a clock starting at zero for rate window and cooldown tests."""
    return ManualClock()


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def sample_request() -> LayoutRequest:
    """A small horizontal request for lettuce and basil from the catalog."""
    from hydroplan.domain import DEFAULT_PLANT_CATALOG, LayoutRequest

    return LayoutRequest(
        space_size=4,
        selected_plants={"4": 6, "5": 4},
        plant_data=list(DEFAULT_PLANT_CATALOG),
    )


@pytest.fixture
def sample_layout(sample_request: LayoutRequest) -> LayoutAnalysis:
    """A 2x2 single-level layout with a pump, lettuce, basil and a light."""
    from hydroplan.domain import LayoutAnalysis

    return LayoutAnalysis.model_validate(
        {
            "matrix": [[[1, 13], [14, 5]]],
            "waterFlow": [{"from": [1, 0, 0], "to": [0, 0, 0]}],
            "selectedPlants": sample_request.selected_plants,
        }
    )


@pytest.fixture
def sample_environment(sample_layout: LayoutAnalysis) -> VirtualEnvironment:
    """An environment with one monitoring task and default schedule."""
    from hydroplan.domain import AutomationTask, VirtualEnvironment

    return VirtualEnvironment(
        layout=sample_layout,
        automation_tasks=[AutomationTask(id="ph-check", name="Check pH")],
    )
