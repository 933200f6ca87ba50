"""Backend factory for creating LLM backends from model specifications."""

from .base import LLMBackend
from .model_spec import (
    DEFAULT_MODEL,
    LLMModel,
    LLMProviderType,
    LLMSpec,
    get_llm_spec,
)


def create_llm_backend(
    model: str | LLMModel | LLMSpec = DEFAULT_MODEL,
    *,
    api_key: str | None = None,
    **kwargs,
) -> LLMBackend:
    """Create an LLM backend from a model specification.

    Routes to the backend class for the model's provider. The backend is
    bound to exactly one API key; key rotation happens above this layer.

    Args:
        model: Model name string, LLMModel enum value, or LLMSpec.
        api_key: API key for the provider.
        **kwargs: Additional arguments passed to backend constructor
            (e.g., timeout).

    Returns:
        Configured LLMBackend instance.

    Raises:
        ValueError: If model is unknown.
        AuthenticationError: If no API key is given.

    Example:
        >>> backend = create_llm_backend("gemini-2.0-flash", api_key="AIza...")
        >>> backend = create_llm_backend(LLMModel.GPT_4_1_MINI, api_key="sk-...")
    """
    spec = get_llm_spec(model)

    if spec.provider == LLMProviderType.GEMINI:
        from .gemini import GeminiBackend

        return GeminiBackend(api_key=api_key, model=spec.name, **kwargs)

    if spec.provider == LLMProviderType.OPENAI:
        from .openai import OpenAIBackend

        return OpenAIBackend(api_key=api_key, model=spec.name, **kwargs)

    if spec.provider == LLMProviderType.ANTHROPIC:
        from .anthropic import AnthropicBackend

        return AnthropicBackend(api_key=api_key, model=spec.name, **kwargs)

    raise ValueError(f"Unsupported provider type: {spec.provider}")


__all__ = ["create_llm_backend"]
