"""Tests for configuration management."""

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_api_keys,
    get_available_llm_providers,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

_KEY_VARS = [
    "GEMINI_API_KEYS",
    "GEMINI_API_KEY",
    "OPENAI_API_KEYS",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEYS",
    "ANTHROPIC_API_KEY",
]


@pytest.fixture
def clean_keys(monkeypatch):
    """Remove every credential variable from the environment."""
    for name in _KEY_VARS:
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("CREDENTIAL_RATE_LIMIT", raising=False)
        assert get_environment(EnvVar.CREDENTIAL_RATE_LIMIT) == 60

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("GENERATION_MAX_ATTEMPTS", "9")
        assert get_environment(EnvVar.GENERATION_MAX_ATTEMPTS, override=5) == 5

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("CREDENTIAL_RATE_LIMIT", "15")
        result = get_environment(EnvVar.CREDENTIAL_RATE_LIMIT)
        assert result == 15
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("CREDENTIAL_RATE_WINDOW", "12.5")
        result = get_environment(EnvVar.CREDENTIAL_RATE_WINDOW)
        assert result == 12.5
        assert isinstance(result, float)

    @pytest.mark.unit
    def test_list_type_conversion(self, monkeypatch):
        """Comma-separated values become a list without blanks."""
        monkeypatch.setenv("GEMINI_API_KEYS", " key-a, key-b ,,key-c ")
        assert get_environment(EnvVar.GEMINI_API_KEYS) == ["key-a", "key-b", "key-c"]

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("CLIENT_MAX_ATTEMPTS", "not-a-number")
        assert get_environment(EnvVar.CLIENT_MAX_ATTEMPTS) == 3

    @pytest.mark.unit
    def test_invalid_float_returns_default(self, monkeypatch):
        """Invalid float value returns default."""
        monkeypatch.setenv("GENERATION_TIMEOUT", "soon")
        assert get_environment(EnvVar.GENERATION_TIMEOUT) == 120.0

    @pytest.mark.unit
    def test_none_default_for_api_keys(self, clean_keys):
        """API keys default to None when not set."""
        assert get_environment(EnvVar.GEMINI_API_KEY) is None
        assert get_environment(EnvVar.GEMINI_API_KEYS) is None


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.CREDENTIAL_FAILURE_COOLDOWN)
        assert isinstance(info, EnvConfig)
        assert info.name == "CREDENTIAL_FAILURE_COOLDOWN"
        assert info.default == 60.0
        assert info.var_type is float
        assert info.category == "credentials"

    @pytest.mark.unit
    def test_description_present(self):
        """Description field is populated."""
        info = get_environment_info(EnvVar.GEMINI_API_KEYS)
        assert "Gemini" in info.description


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_returns_all_variables(self):
        """Returns all EnvVar members when no category."""
        result = list_environment_variables()
        assert len(result) == len(EnvVar)

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Filters by category correctly."""
        credential_vars = list_environment_variables("credentials")
        assert EnvVar.CREDENTIAL_RATE_LIMIT in credential_vars
        assert EnvVar.CREDENTIAL_FAILURE_COOLDOWN in credential_vars
        assert EnvVar.GEMINI_API_KEY not in credential_vars


# =============================================================================
# Tests for credential helpers
# =============================================================================


class TestGetApiKeys:
    """Tests for provider credential resolution."""

    @pytest.mark.unit
    def test_empty_when_unset(self, clean_keys):
        """No configured keys yields an empty list."""
        assert get_api_keys("gemini") == []

    @pytest.mark.unit
    def test_plural_then_singular(self, clean_keys, monkeypatch):
        """Plural keys come first, singular key is appended."""
        monkeypatch.setenv("GEMINI_API_KEYS", "k1,k2")
        monkeypatch.setenv("GEMINI_API_KEY", "k3")
        assert get_api_keys("gemini") == ["k1", "k2", "k3"]

    @pytest.mark.unit
    def test_duplicates_removed(self, clean_keys, monkeypatch):
        """Repeated keys keep their first position only."""
        monkeypatch.setenv("OPENAI_API_KEYS", "k1,k2,k1")
        monkeypatch.setenv("OPENAI_API_KEY", "k2")
        assert get_api_keys("openai") == ["k1", "k2"]

    @pytest.mark.unit
    def test_unknown_provider(self):
        """Unknown providers are rejected."""
        with pytest.raises(ValueError, match="Unknown provider"):
            get_api_keys("nope")

    @pytest.mark.unit
    def test_available_providers(self, clean_keys, monkeypatch):
        """Only providers with credentials are reported."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
        assert get_available_llm_providers() == ["anthropic"]
