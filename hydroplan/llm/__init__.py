"""LLM integration layer for hydroponic planning.

This module provides multi-provider LLM support and the retrying
generator that turns plant selections into layouts, automation plans
and schedules.

Main components:
- PlanGenerator: Orchestrates prompt building, LLM calls and normalization
- ModelClientFactory: Binds rotating credentials to fresh backends
- LLMBackend: Abstract interface for LLM providers
- create_llm_backend: Factory function for creating backends

Supported providers:
- Google Gemini (2.0, 2.5)
- OpenAI (GPT-4.1)
- Anthropic (Claude 4.5)

Example:
    >>> from hydroplan.llm import ModelClientFactory, PlanGenerator
    >>> factory = ModelClientFactory(
    ...     selector, lambda key: create_llm_backend(api_key=key)
    ... )
    >>> generator = PlanGenerator(factory)
    >>> layout = await generator.generate_layout(request)
"""

from .backend import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_MODEL,
    DEFAULT_OPENAI_MODEL,
    AuthenticationError,
    ClientConstructionError,
    ContextLengthError,
    GenerationConfig,
    GenerationFailedError,
    GenerationResult,
    LLMBackend,
    LLMCapability,
    LLMError,
    LLMModel,
    LLMProviderType,
    LLMSpec,
    MalformedResponseError,
    RateLimitError,
    create_llm_backend,
    get_llm_spec,
)
from .client import (
    CREDENTIAL_ERRORS,
    BackendFactory,
    ClientProvider,
    ModelClient,
    ModelClientFactory,
)
from .generator import (
    SYSTEM_PROMPT,
    GenerationStats,
    GeneratorConfig,
    PlanGenerator,
    RetryConfig,
    RetryStrategy,
    parse_json_object,
    strip_code_fences,
)

__all__ = [
    # Main API
    "PlanGenerator",
    "ModelClientFactory",
    "create_llm_backend",
    # Generator types
    "GeneratorConfig",
    "GenerationStats",
    "RetryConfig",
    "RetryStrategy",
    "SYSTEM_PROMPT",
    "parse_json_object",
    "strip_code_fences",
    # Client types
    "BackendFactory",
    "ClientProvider",
    "ModelClient",
    "CREDENTIAL_ERRORS",
    # Backend types
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    # Model specification
    "LLMModel",
    "LLMSpec",
    "LLMCapability",
    "LLMProviderType",
    "get_llm_spec",
    # Defaults
    "DEFAULT_MODEL",
    "DEFAULT_GEMINI_MODEL",
    "DEFAULT_OPENAI_MODEL",
    "DEFAULT_ANTHROPIC_MODEL",
    # Exceptions
    "LLMError",
    "RateLimitError",
    "ContextLengthError",
    "AuthenticationError",
    "ClientConstructionError",
    "MalformedResponseError",
    "GenerationFailedError",
]
