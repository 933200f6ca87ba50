"""Tests for PromptBuilder."""

import pytest

from hydroplan.domain import (
    DEFAULT_PLANT_CATALOG,
    LayoutAnalysis,
    LayoutRequest,
    VirtualEnvironment,
)

from .lib import PromptBuilder, PromptConfig


@pytest.fixture
def request_horizontal() -> LayoutRequest:
    return LayoutRequest(
        space_size=4,
        selected_plants={"1": 3, "99": 2},
        plant_data=list(DEFAULT_PLANT_CATALOG),
        setup_type="horizontal",
    )


@pytest.fixture
def environment() -> VirtualEnvironment:
    layout = LayoutAnalysis(matrix=[[[10, 0], [0, 1]]])
    return VirtualEnvironment(layout=layout)


class TestLayoutPrompt:
    """Tests for layout prompt assembly."""

    @pytest.mark.unit
    def test_contains_legend_and_request(self, request_horizontal):
        """The prompt carries the code legend and the request details."""
        prompt = PromptBuilder().build_layout_prompt(request_horizontal)

        assert "## Component Codes" in prompt
        assert "12: TOMATO" in prompt
        assert "Space size: 4m²" in prompt
        assert "Setup type: horizontal" in prompt
        assert "Max height" not in prompt

    @pytest.mark.unit
    def test_plant_lines(self, request_horizontal):
        """Known plants list details and matrix code; unknown ids fall back."""
        prompt = PromptBuilder().build_layout_prompt(request_horizontal)

        assert (
            "- Cucumber (ID: 1, matrix code 10): 3 plants, "
            "growth time 55 days, space required 0.4m²"
        ) in prompt
        assert "- 99 (ID: 99): 2 plants" in prompt

    @pytest.mark.unit
    def test_vertical_default_height(self):
        """Vertical requests without a height assume 3 m."""
        request = LayoutRequest(space_size=9, setup_type="vertical")
        assert "Max height: 3m" in PromptBuilder().build_layout_prompt(request)

    @pytest.mark.unit
    def test_vertical_given_height(self):
        """A stated height is used as given."""
        request = LayoutRequest(space_size=9, setup_type="vertical", max_height=2.5)
        assert "Max height: 2.5m" in PromptBuilder().build_layout_prompt(request)

    @pytest.mark.unit
    def test_deterministic(self, request_horizontal):
        """The same request always yields the same prompt."""
        builder = PromptBuilder()
        assert builder.build_layout_prompt(
            request_horizontal
        ) == builder.build_layout_prompt(request_horizontal)

    @pytest.mark.unit
    def test_sections_can_be_disabled(self, request_horizontal):
        """Optional sections are omitted when disabled."""
        config = PromptConfig(
            include_legend=False, include_example=False, include_guidelines=False
        )
        prompt = PromptBuilder(config).build_layout_prompt(request_horizontal)
        assert "## Component Codes" not in prompt
        assert "## Response Format" not in prompt
        assert "## Consider" not in prompt
        assert "Space size" in prompt


class TestEnvironmentPrompt:
    """Tests for automation plan prompts."""

    @pytest.mark.unit
    def test_serializes_layout(self, environment):
        """The layout is embedded using wire field names."""
        prompt = PromptBuilder().build_environment_prompt(environment.layout)
        assert '"waterFlow"' in prompt
        assert '"automationTasks"' in prompt


class TestSchedulePrompt:
    """Tests for schedule optimization prompts."""

    @pytest.mark.unit
    def test_includes_current_schedule_and_layout(self, environment):
        """The current schedule and layout are both embedded."""
        prompt = PromptBuilder().build_schedule_prompt(environment)
        assert "## Current Schedule" in prompt
        assert '"startTime": "08:00"' in prompt
        assert "## Layout" in prompt
        assert '"matrix"' in prompt

    @pytest.mark.unit
    def test_legend_explains_matrix_codes(self, environment):
        """The embedded matrix comes with the component code legend."""
        prompt = PromptBuilder().build_schedule_prompt(environment)
        assert "## Component Codes" in prompt
        assert "10: CUCUMBER" in prompt

        plain = PromptBuilder(PromptConfig(include_legend=False))
        assert "## Component Codes" not in plain.build_schedule_prompt(environment)
