"""LLM module test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from hydroplan.llm.backend import GenerationConfig, GenerationResult, LLMBackend


# =============================================================================
# Scripted LLM Backend
# =============================================================================


class ScriptedTransport:
    """Shared script of responses consumed by every backend it builds.

    Each call pops the next item. The final item repeats once the script
    runs out. Exceptions in the script are raised instead of returned.

    Attributes:
        keys: API key used for each call, in order.
        prompts: Prompt sent on each call, in order.
    """

    def __init__(self, responses: list[str | Exception]):
        if not responses:
            raise ValueError("script needs at least one response")
        self._responses = list(responses)
        self.keys: list[str] = []
        self.prompts: list[str] = []

    def next_response(self) -> str | Exception:
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]

    def backend_factory(self, api_key: str) -> FakeBackend:
        return FakeBackend(self, api_key)


class FakeBackend(LLMBackend):
    """Backend that answers from a ScriptedTransport."""

    def __init__(self, transport: ScriptedTransport, api_key: str):
        self.transport = transport
        self.api_key = api_key

    @property
    def model_name(self) -> str:
        return "fake-model"

    @property
    def provider(self) -> str:
        return "fake"

    @property
    def supports_json_mode(self) -> bool:
        return True

    @property
    def context_window(self) -> int:
        return 4096

    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        self.transport.keys.append(self.api_key)
        self.transport.prompts.append(prompt)
        item = self.transport.next_response()
        if isinstance(item, Exception):
            raise item
        return GenerationResult(
            content=item,
            finish_reason="stop",
            usage={"total_tokens": 100},
            model=self.model_name,
        )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def scripted_transport() -> Callable[..., ScriptedTransport]:
    """Build a ScriptedTransport from positional responses.

    Example:
        >>> transport = scripted_transport("not json", '{"matrix": []}')
    """

    def make(*responses: Any) -> ScriptedTransport:
        return ScriptedTransport(list(responses))

    return make


@pytest.fixture
def mock_api_key() -> str:
    """Provide a mock API key for testing."""
    return "test-api-key-12345"
