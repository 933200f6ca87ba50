"""LLM backend implementations.

Provides the abstract base class, the shared error taxonomy and concrete
async implementations for Gemini, OpenAI and Anthropic.
"""

from .base import (
    AuthenticationError,
    ClientConstructionError,
    ContextLengthError,
    GenerationConfig,
    GenerationFailedError,
    GenerationResult,
    LLMBackend,
    LLMError,
    MalformedResponseError,
    ProviderBackend,
    RateLimitError,
)
from .factory import create_llm_backend
from .model_spec import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_MODEL,
    DEFAULT_OPENAI_MODEL,
    LLMCapability,
    LLMModel,
    LLMProviderType,
    LLMSpec,
    get_llm_spec,
)

__all__ = [
    # Base classes and types
    "LLMBackend",
    "ProviderBackend",
    "GenerationConfig",
    "GenerationResult",
    # Exceptions
    "LLMError",
    "RateLimitError",
    "ContextLengthError",
    "AuthenticationError",
    "ClientConstructionError",
    "MalformedResponseError",
    "GenerationFailedError",
    # Model specification
    "LLMCapability",
    "LLMProviderType",
    "LLMSpec",
    "LLMModel",
    "get_llm_spec",
    # Defaults
    "DEFAULT_MODEL",
    "DEFAULT_GEMINI_MODEL",
    "DEFAULT_OPENAI_MODEL",
    "DEFAULT_ANTHROPIC_MODEL",
    # Factory
    "create_llm_backend",
]
