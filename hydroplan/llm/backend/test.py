"""Tests for LLM backend implementations."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from .base import (
    AuthenticationError,
    ContextLengthError,
    GenerationConfig,
    GenerationFailedError,
    LLMError,
    MalformedResponseError,
    RateLimitError,
)
from .factory import create_llm_backend
from .model_spec import (
    DEFAULT_MODEL,
    LLMCapability,
    LLMModel,
    LLMProviderType,
    LLMSpec,
    get_llm_spec,
)


class TestLLMModel:
    """Tests for LLMModel enum registry."""

    @pytest.mark.unit
    def test_default_is_gemini(self):
        """The default model is served by Gemini."""
        assert DEFAULT_MODEL.spec.provider == LLMProviderType.GEMINI

    @pytest.mark.unit
    def test_by_name_lookup(self):
        """Models can be looked up by their API name."""
        assert LLMModel.by_name("gpt-4.1-mini") == LLMModel.GPT_4_1_MINI
        assert (
            LLMModel.by_name("gemini-2.0-flash-thinking-exp-01-21")
            == LLMModel.GEMINI_2_0_FLASH_THINKING
        )
        assert LLMModel.by_name("nonexistent") is None

    @pytest.mark.unit
    def test_list_by_provider(self):
        """Each provider has at least one model."""
        for provider in LLMProviderType:
            models = LLMModel.list_by_provider(provider)
            assert models
            assert all(m.spec.provider == provider for m in models)

    @pytest.mark.unit
    def test_thinking_model_has_no_json_mode(self):
        """The experimental thinking model is prompted for JSON instead."""
        spec = LLMModel.GEMINI_2_0_FLASH_THINKING.spec
        assert not spec.supports(LLMCapability.JSON_MODE)


class TestGetLLMSpec:
    """Tests for get_llm_spec function."""

    @pytest.mark.unit
    def test_resolves_all_forms(self):
        """Strings, enum members and specs all resolve."""
        spec = LLMModel.CLAUDE_HAIKU_4_5.spec
        assert get_llm_spec("claude-haiku-4-5") == spec
        assert get_llm_spec(LLMModel.CLAUDE_HAIKU_4_5) == spec
        assert get_llm_spec(spec) is spec

    @pytest.mark.unit
    def test_unknown_model_raises(self):
        """Unknown model names are rejected."""
        with pytest.raises(ValueError, match="Unknown model"):
            get_llm_spec("not-a-model")


class TestGenerationConfig:
    """Tests for GenerationConfig defaults."""

    @pytest.mark.unit
    def test_defaults(self):
        """Defaults match the planner's sampling settings."""
        config = GenerationConfig()
        assert config.temperature == 0.6
        assert config.top_p == 0.9
        assert config.max_tokens == 8192
        assert config.json_mode is True


class TestCreateLLMBackend:
    """Tests for the backend factory."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "model,provider",
        [
            ("gemini-2.0-flash", "gemini"),
            ("gpt-4.1-mini", "openai"),
            ("claude-sonnet-4-5", "anthropic"),
        ],
    )
    def test_routes_by_provider(self, model, provider, mock_api_key):
        """The factory picks the backend for the model's provider."""
        backend = create_llm_backend(model, api_key=mock_api_key)
        assert backend.provider == provider
        assert backend.model_name == model
        assert backend.name == f"{provider}:{model}"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "model", ["gemini-2.0-flash", "gpt-4.1", "claude-haiku-4-5"]
    )
    def test_requires_api_key(self, model):
        """Every backend needs a key at construction time."""
        with pytest.raises(AuthenticationError):
            create_llm_backend(model, api_key=None)

    @pytest.mark.unit
    def test_unknown_model(self, mock_api_key):
        """Unknown models fail before any backend is built."""
        with pytest.raises(ValueError):
            create_llm_backend("nope", api_key=mock_api_key)

    @pytest.mark.unit
    def test_sdk_client_built_at_construction(self, mock_api_key):
        """The SDK client exists as soon as the backend does."""
        with patch(
            "hydroplan.llm.backend.openai.OpenAIBackend._create_client",
            return_value=MagicMock(),
        ) as create:
            backend = create_llm_backend("gpt-4.1-mini", api_key=mock_api_key)

        create.assert_called_once_with()
        assert backend._client is create.return_value

    @pytest.mark.unit
    def test_sdk_client_failure_raised_by_constructor(self, mock_api_key):
        """An SDK client that cannot be built fails backend construction."""
        with patch(
            "hydroplan.llm.backend.anthropic.AnthropicBackend._create_client",
            side_effect=ValueError("bad client options"),
        ):
            with pytest.raises(ValueError, match="bad client options"):
                create_llm_backend("claude-haiku-4-5", api_key=mock_api_key)


class TestErrorTranslation:
    """Tests for SDK error mapping."""

    @pytest.fixture
    def backend(self, mock_api_key):
        return create_llm_backend("gpt-4.1-mini", api_key=mock_api_key)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error,expected",
        [
            (Exception("Rate limit reached"), RateLimitError),
            (Exception("429 RESOURCE_EXHAUSTED"), RateLimitError),
            (Exception("maximum context length is 128000"), ContextLengthError),
            (
                Exception("API key not valid. Please pass a valid API key."),
                AuthenticationError,
            ),
            (Exception("connection reset"), LLMError),
        ],
    )
    def test_maps_by_message(self, backend, error, expected):
        """Error text selects the translated exception type."""
        with pytest.raises(expected) as exc_info:
            backend._handle_error(error)
        assert exc_info.value.__cause__ is error

    @pytest.mark.unit
    def test_maps_by_status(self, backend):
        """HTTP status codes on SDK errors take precedence."""
        error = Exception("nope")
        error.status_code = 401
        with pytest.raises(AuthenticationError):
            backend._handle_error(error)

        error.status_code = 429
        with pytest.raises(RateLimitError):
            backend._handle_error(error)

    @pytest.mark.unit
    def test_generation_failed_carries_attempts(self):
        """GenerationFailedError exposes the last error and attempt count."""
        cause = MalformedResponseError("bad", content="x" * 1000)
        error = GenerationFailedError("failed", last_error=cause, attempts=3)
        assert error.last_error is cause
        assert error.attempts == 3
        assert len(cause.content) == 500


class TestBackendGenerate:
    """Tests for backend request building against mocked SDK clients."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_openai_generate(self, mock_api_key):
        """OpenAI backend sends chat messages and unpacks the reply."""
        backend = create_llm_backend("gpt-4.1-mini", api_key=mock_api_key)
        response = SimpleNamespace(
            choices=[
                SimpleNamespace(
                    message=SimpleNamespace(content='{"ok": true}'),
                    finish_reason="stop",
                )
            ],
            usage=SimpleNamespace(
                prompt_tokens=10, completion_tokens=5, total_tokens=15
            ),
            model="gpt-4.1-mini",
        )
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=response)
        backend._client = client

        result = await backend.generate("hello", system_prompt="be terse")

        assert result.content == '{"ok": true}'
        assert result.usage["total_tokens"] == 15
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": "be terse"}
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_anthropic_generate(self, mock_api_key):
        """Anthropic backend joins text blocks and appends a JSON instruction."""
        backend = create_llm_backend("claude-haiku-4-5", api_key=mock_api_key)
        response = SimpleNamespace(
            content=[SimpleNamespace(text='{"a": '), SimpleNamespace(text="1}")],
            stop_reason="end_turn",
            usage=SimpleNamespace(input_tokens=3, output_tokens=4),
            model="claude-haiku-4-5",
        )
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=response)
        backend._client = client

        result = await backend.generate("hello")

        assert result.content == '{"a": 1}'
        assert result.usage["total_tokens"] == 7
        prompt = client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert "valid JSON only" in prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_gemini_generate(self, mock_api_key):
        """Gemini backend calls the async models API."""
        backend = create_llm_backend("gemini-2.0-flash", api_key=mock_api_key)
        response = SimpleNamespace(
            text='{"matrix": []}',
            candidates=[SimpleNamespace(finish_reason="STOP")],
            usage_metadata=SimpleNamespace(
                prompt_token_count=7,
                candidates_token_count=3,
                total_token_count=10,
            ),
        )
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(return_value=response)
        backend._client = client

        result = await backend.generate("hello")

        assert result.content == '{"matrix": []}'
        assert result.finish_reason == "stop"
        assert result.usage["total_tokens"] == 10
        call = client.aio.models.generate_content.call_args.kwargs
        assert call["model"] == "gemini-2.0-flash"
        assert call["contents"] == "hello"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sdk_error_translated(self, mock_api_key):
        """SDK exceptions surface as backend errors."""
        backend = create_llm_backend("gemini-2.0-flash", api_key=mock_api_key)
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(
            side_effect=Exception("429 RESOURCE_EXHAUSTED")
        )
        backend._client = client

        with pytest.raises(RateLimitError):
            await backend.generate("hello")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_output_tokens_capped(self, mock_api_key):
        """Requested output is capped at the model's limit."""
        backend = create_llm_backend("claude-haiku-4-5", api_key=mock_api_key)
        response = SimpleNamespace(
            content=[SimpleNamespace(text="{}")],
            stop_reason="end_turn",
            usage=SimpleNamespace(input_tokens=1, output_tokens=1),
            model="claude-haiku-4-5",
        )
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=response)
        backend._client = client

        await backend.generate(
            "hello", config=GenerationConfig(max_tokens=500_000, json_mode=False)
        )

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["max_tokens"] == 64_000
        assert kwargs["messages"][0]["content"] == "hello"


class TestLLMSpec:
    """Tests for LLMSpec dataclass."""

    @pytest.mark.unit
    def test_spec_capabilities(self):
        """Capabilities are checked by membership."""
        spec = LLMSpec(
            name="test",
            provider=LLMProviderType.OPENAI,
            context_window=128000,
            max_output_tokens=4096,
            capabilities=frozenset({LLMCapability.JSON_MODE}),
        )
        assert spec.supports(LLMCapability.JSON_MODE)
        assert not spec.supports(LLMCapability.SEED)
