"""Tests for planner wiring."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hydroplan.config import EnvVar
from hydroplan.domain import LayoutRequest
from hydroplan.llm import GenerationResult, GeneratorConfig, LLMModel

from .lib import create_planner, resolve_model


@pytest.fixture
def clean_env(monkeypatch):
    """Remove credential and tuning variables from the environment."""
    for var in EnvVar:
        monkeypatch.delenv(var.value.name, raising=False)


def _backend(content: str = '{"recommendations": ["ok"]}') -> MagicMock:
    backend = MagicMock()
    backend.name = "mock/model"
    backend.generate = AsyncMock(
        return_value=GenerationResult(
            content=content, finish_reason="stop", usage={}, model="mock"
        )
    )
    return backend


class TestResolveModel:
    """Tests for model resolution."""

    @pytest.mark.unit
    def test_default_from_environment(self, clean_env, monkeypatch):
        """LLM_MODEL picks the model when none is given."""
        monkeypatch.setenv("LLM_MODEL", "gpt-4.1-mini")
        assert resolve_model().name == "gpt-4.1-mini"

    @pytest.mark.unit
    def test_builtin_default(self, clean_env):
        """Without LLM_MODEL the Gemini default is used."""
        assert resolve_model().name == "gemini-2.0-flash"

    @pytest.mark.unit
    def test_unknown_model(self, clean_env):
        """Unknown model names are rejected."""
        with pytest.raises(ValueError, match="Unknown model"):
            resolve_model("not-a-model")


class TestCreatePlanner:
    """Tests for create_planner."""

    @pytest.mark.unit
    def test_no_keys(self, clean_env):
        """A provider without keys cannot be wired."""
        with pytest.raises(ValueError, match="GEMINI_API_KEYS"):
            create_planner()

    @pytest.mark.unit
    def test_environment_settings_applied(self, clean_env, monkeypatch):
        """Generation settings come from the environment."""
        monkeypatch.setenv("GEMINI_API_KEY", "AIza-test")
        monkeypatch.setenv("GENERATION_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("GENERATION_TIMEOUT", "30")

        planner = create_planner()

        assert planner.config.max_attempts == 5
        assert planner.config.timeout == 30.0
        assert planner.config.temperature == 0.6

    @pytest.mark.unit
    def test_explicit_config_wins(self, clean_env):
        """An explicit GeneratorConfig is used as given."""
        config = GeneratorConfig(max_attempts=1)
        planner = create_planner(
            "gemini-2.0-flash", api_keys=["k"], generator_config=config
        )
        assert planner.config is config

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rotates_environment_keys(self, clean_env, monkeypatch):
        """Calls rotate through the provider's configured keys."""
        monkeypatch.setenv("OPENAI_API_KEYS", "sk-one,sk-two")

        with patch(
            "hydroplan.planner.lib.create_llm_backend", return_value=_backend()
        ) as factory:
            planner = create_planner(LLMModel.GPT_4_1_MINI)
            request = LayoutRequest(spaceSize=2, selectedPlants={"4": 2})
            await planner.generate_layout(request)
            await planner.generate_layout(request)

        keys = [call.kwargs["api_key"] for call in factory.call_args_list]
        assert keys == ["sk-one", "sk-two"]
        assert factory.call_args.args[0].name == "gpt-4.1-mini"

    @pytest.mark.unit
    def test_max_attempts_override(self, clean_env, monkeypatch):
        """An explicit attempt budget beats the environment."""
        monkeypatch.setenv("GENERATION_MAX_ATTEMPTS", "5")
        planner = create_planner("claude-haiku-4-5", api_keys=["k"], max_attempts=2)
        assert planner.config.max_attempts == 2


# =============================================================================
# Integration Tests (requires real API key)
# =============================================================================


@pytest.mark.integration
class TestPlannerIntegration:
    """Integration tests against the configured provider."""

    @pytest.mark.asyncio
    async def test_real_layout_generation(self, sample_request):
        """Generate a small layout with the configured model."""
        planner = create_planner()

        layout = await planner.generate_layout(sample_request)

        assert layout.levels == 1
        assert layout.selected_plants == sample_request.selected_plants
        print(f"Layout shape: {layout.shape}")
        print(f"Stats: {planner.last_stats}")
