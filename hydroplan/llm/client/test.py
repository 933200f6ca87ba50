"""Tests for the model client factory."""

from unittest.mock import MagicMock, patch

import pytest

from hydroplan.credentials import (
    CredentialPool,
    CredentialSelector,
    ExhaustedCredentialsError,
)
from hydroplan.llm.backend import (
    AuthenticationError,
    ClientConstructionError,
    LLMError,
    MalformedResponseError,
    RateLimitError,
    create_llm_backend,
)

from .lib import ModelClient, ModelClientFactory


@pytest.fixture
def selector(manual_clock) -> CredentialSelector:
    return CredentialSelector(
        CredentialPool(["key-1", "key-2", "key-3"], clock=manual_clock)
    )


def _failed(selector: CredentialSelector) -> list[bool]:
    return [status.failed for status in selector.pool.snapshot()]


class TestCreateClient:
    """Tests for client construction."""

    @pytest.mark.unit
    def test_binds_selected_key(self, selector, scripted_transport):
        """The client carries the key the selector picked."""
        transport = scripted_transport("{}")
        factory = ModelClientFactory(selector, transport.backend_factory)

        client = factory.create_client()

        assert client.credential == "key-1"
        assert client.backend.api_key == "key-1"
        assert factory.acquire().credential == "key-2"

    @pytest.mark.unit
    def test_construction_error_marks_key_and_retries(self, selector):
        """A key whose backend cannot be built is failed and skipped."""
        backend = MagicMock()

        def build(key):
            if key == "key-1":
                raise AuthenticationError("bad key")
            return backend

        factory = ModelClientFactory(selector, build)
        client = factory.create_client()

        assert client.credential == "key-2"
        assert _failed(selector) == [True, False, False]

    @pytest.mark.unit
    def test_construction_budget_exhausted(self, selector):
        """After the budget the last construction error is raised."""
        cause = RuntimeError("sdk missing")

        def build(key):
            raise cause

        factory = ModelClientFactory(selector, build, max_attempts=2)
        with pytest.raises(ClientConstructionError) as exc_info:
            factory.create_client()

        assert exc_info.value.__cause__ is cause
        assert _failed(selector) == [True, True, False]

    @pytest.mark.unit
    def test_exhausted_selector(self, manual_clock):
        """With no usable key the selector's error surfaces."""
        pool = CredentialPool(["only"], clock=manual_clock)
        pool.mark_failed("only")
        factory = ModelClientFactory(CredentialSelector(pool), MagicMock())

        with pytest.raises(ExhaustedCredentialsError):
            factory.create_client(max_attempts=3)

    @pytest.mark.unit
    def test_invalid_budget(self, selector):
        """A budget below one is rejected."""
        with pytest.raises(ValueError):
            ModelClientFactory(selector, MagicMock(), max_attempts=0)

    @pytest.mark.unit
    def test_sdk_client_failure_marks_key(self, selector):
        """A provider SDK client that cannot be built fails its key."""

        def create(backend):
            if backend._api_key == "key-1":
                raise ValueError("invalid client options")
            return MagicMock()

        factory = ModelClientFactory(
            selector, lambda key: create_llm_backend("gpt-4.1-mini", api_key=key)
        )
        with patch(
            "hydroplan.llm.backend.openai.OpenAIBackend._create_client",
            autospec=True,
            side_effect=create,
        ):
            client = factory.create_client()

        assert client.credential == "key-2"
        assert _failed(selector) == [True, False, False]


class TestReportFailure:
    """Tests for failure attribution."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error", [AuthenticationError("401"), RateLimitError("429")]
    )
    def test_credential_errors_mark_key(self, selector, error):
        """Auth and rate limit errors mark the key failed."""
        factory = ModelClientFactory(selector, MagicMock())
        factory.report_failure(ModelClient(MagicMock(), "key-2"), error)
        assert _failed(selector) == [False, True, False]

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error",
        [MalformedResponseError("not json"), TimeoutError(), LLMError("reset")],
    )
    def test_other_errors_leave_key(self, selector, error):
        """Parse, timeout and transport errors do not blame the key."""
        factory = ModelClientFactory(selector, MagicMock())
        factory.report_failure(ModelClient(MagicMock(), "key-2"), error)
        assert _failed(selector) == [False, False, False]


class TestModelClient:
    """Tests for the client wrapper."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_complete_returns_text(self, scripted_transport):
        """complete() returns the backend's raw text."""
        transport = scripted_transport('{"ok": 1}')
        client = ModelClient(transport.backend_factory("key-x"), "key-x")

        assert await client.complete("prompt") == '{"ok": 1}'
        assert transport.prompts == ["prompt"]

    @pytest.mark.unit
    def test_repr_masks_key(self):
        """The repr never shows the full key."""
        backend = MagicMock()
        backend.name = "fake:model"
        client = ModelClient(backend, "AIzaSyExampleKey123")
        assert "AIzaSyExampleKey123" not in repr(client)
        assert "AIzaSyEx..." in repr(client)
