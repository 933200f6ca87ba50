"""Abstract base class for LLM backends.

Defines the interface that all LLM provider implementations must follow,
together with the error taxonomy shared by backends, the client factory and
the generation orchestrator.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from .model_spec import LLMCapability, LLMSpec, get_llm_spec

logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Configuration for LLM text generation.

    Attributes:
        temperature: Sampling temperature (0.0-2.0). Lower = more deterministic.
        max_tokens: Maximum tokens to generate in response.
        json_mode: Whether to request JSON output where the provider supports it.
        stop_sequences: Optional sequences that stop generation.
        top_p: Nucleus sampling parameter (0.0-1.0).
        seed: Optional seed for reproducible generation.
    """

    temperature: float = 0.6
    max_tokens: int = 8192
    json_mode: bool = True
    stop_sequences: list[str] = field(default_factory=list)
    top_p: float = 0.9
    seed: int | None = None


@dataclass
class GenerationResult:
    """Result from LLM text generation.

    Attributes:
        content: Generated text content.
        finish_reason: Why generation stopped ('stop', 'length', 'content_filter').
        usage: Token usage dict (prompt_tokens, completion_tokens, total_tokens).
        model: Model identifier that was used.
        raw_response: Provider-specific raw response for debugging.
    """

    content: str
    finish_reason: str
    usage: dict[str, int]
    model: str
    raw_response: Any = None


class LLMBackend(ABC):
    """Abstract interface for LLM text generation backends.

    A backend is bound to one model and one API key. It turns a prompt into
    raw text and translates provider SDK errors into the exceptions below.

    Example:
        >>> backend = GeminiBackend(api_key="...", model="gemini-2.0-flash")
        >>> result = await backend.generate("Design a hydroponic layout")
        >>> print(result.content)
    """

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Generate text from a prompt.

        Args:
            prompt: User prompt text.
            system_prompt: Optional system instruction for context.
            config: Generation configuration options.

        Returns:
            GenerationResult with generated content and metadata.

        Raises:
            LLMError: If generation fails.
            RateLimitError: If API rate limit is exceeded.
            AuthenticationError: If the API key is rejected.
            ContextLengthError: If prompt exceeds context window.
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model identifier (e.g., 'gemini-2.0-flash')."""

    @property
    @abstractmethod
    def provider(self) -> str:
        """Get the provider identifier (e.g., 'gemini', 'openai')."""

    @property
    def name(self) -> str:
        """Get backend identifier for logging.

        Returns:
            String in format 'provider:model'.
        """
        return f"{self.provider}:{self.model_name}"

    @property
    @abstractmethod
    def supports_json_mode(self) -> bool:
        """Check if backend natively supports JSON mode."""

    @property
    @abstractmethod
    def context_window(self) -> int:
        """Get maximum context window size in tokens."""

    def _handle_error(self, error: Exception) -> None:
        """Convert provider errors to standard exceptions.

        Uses the HTTP status carried by the SDK exception when present and
        falls back to matching the error text.

        Args:
            error: The caught exception.

        Raises:
            RateLimitError: For rate limit errors.
            ContextLengthError: For context length errors.
            AuthenticationError: For auth errors.
            LLMError: For other errors.
        """
        status = getattr(error, "status_code", None) or getattr(error, "code", None)
        error_str = str(error).lower()

        if status == 429 or "rate limit" in error_str or "rate_limit" in error_str:
            raise RateLimitError(str(error)) from error
        if "resource_exhausted" in error_str or "quota" in error_str:
            raise RateLimitError(str(error)) from error
        if "context length" in error_str or "maximum context" in error_str:
            raise ContextLengthError(str(error)) from error
        if status in (401, 403) or "authentication" in error_str:
            raise AuthenticationError(str(error)) from error
        if "invalid api key" in error_str or "api key not valid" in error_str:
            raise AuthenticationError(str(error)) from error
        raise LLMError(str(error)) from error


class ProviderBackend(LLMBackend):
    """Backend for a hosted provider reached through its async SDK client.

    Subclasses build the SDK client, turn a prompt into request keyword
    arguments, send it, and unpack the reply. ``generate`` ties these steps
    together and translates SDK exceptions.

    Args:
        api_key: Provider API key. Required.
        model: Model name, LLMModel or LLMSpec.
        timeout: Per-request timeout passed to the SDK, in seconds.
        max_retries: SDK-level retries. Zero by default since retries are
            driven by the generator with a fresh key each time.

    Raises:
        AuthenticationError: If no API key is given.
    """

    display_name = "LLM"

    def __init__(
        self,
        api_key: str | None,
        model: "str | LLMSpec",
        *,
        timeout: float = 60.0,
        max_retries: int = 0,
    ):
        if not api_key:
            raise AuthenticationError(f"{self.display_name} API key required")
        self._api_key = api_key
        self._spec = get_llm_spec(model)
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: Any = self._create_client()

    @property
    def model_name(self) -> str:
        return self._spec.name

    @property
    def supports_json_mode(self) -> bool:
        return self._spec.supports(LLMCapability.JSON_MODE)

    @property
    def context_window(self) -> int:
        return self._spec.context_window

    def _output_limit(self, config: GenerationConfig) -> int:
        return min(config.max_tokens, self._spec.max_output_tokens)

    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        config = config or GenerationConfig()
        request = self._build_request(prompt, system_prompt, config)
        try:
            response = await self._send(self._client, request)
        except Exception as e:
            self._handle_error(e)
            raise

        result = self._parse_response(response)
        logger.debug(
            f"{self.name}: finish_reason={result.finish_reason}, usage={result.usage}"
        )
        return result

    @abstractmethod
    def _create_client(self) -> Any:
        """Build the provider's async SDK client."""

    @abstractmethod
    def _build_request(
        self, prompt: str, system_prompt: str | None, config: GenerationConfig
    ) -> dict[str, Any]:
        """Translate a prompt and config into SDK call arguments."""

    @abstractmethod
    async def _send(self, client: Any, request: dict[str, Any]) -> Any:
        """Perform the SDK call."""

    @abstractmethod
    def _parse_response(self, response: Any) -> GenerationResult:
        """Unpack the SDK response."""


# =============================================================================
# Errors
# =============================================================================


class LLMError(Exception):
    """Base exception for LLM backend and generation errors."""


class RateLimitError(LLMError):
    """Raised when API rate limit is exceeded.

    Attributes:
        retry_after: Suggested wait time in seconds before retry.
    """

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class ContextLengthError(LLMError):
    """Raised when prompt exceeds the model's context window."""


class AuthenticationError(LLMError):
    """Raised when API authentication fails (invalid or missing key)."""


class ClientConstructionError(LLMError):
    """Raised when a backend cannot be built for a selected API key."""


class MalformedResponseError(LLMError):
    """Raised when model output is not a JSON object.

    Attributes:
        content: The offending text, truncated for logging.
    """

    def __init__(self, message: str, content: str = ""):
        super().__init__(message)
        self.content = content[:500]


class GenerationFailedError(LLMError):
    """Raised when every generation attempt has failed.

    The last underlying error is chained as ``__cause__``.

    Attributes:
        last_error: The error from the final attempt.
        attempts: Number of attempts made.
    """

    def __init__(self, message: str, last_error: Exception | None, attempts: int):
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts


__all__ = [
    "LLMBackend",
    "ProviderBackend",
    "GenerationConfig",
    "GenerationResult",
    "LLMError",
    "RateLimitError",
    "ContextLengthError",
    "AuthenticationError",
    "ClientConstructionError",
    "MalformedResponseError",
    "GenerationFailedError",
]
