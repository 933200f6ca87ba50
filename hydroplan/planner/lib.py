"""Wiring helper that builds a ready PlanGenerator from configuration.

Resolves the model, its provider's API keys and the credential and
generation settings, then assembles pool, selector, client factory and
generator in that order.
"""

import logging
import time
from collections.abc import Callable, Iterable

from hydroplan.config import EnvVar, get_api_keys, get_environment
from hydroplan.credentials import CredentialPool, CredentialSelector
from hydroplan.llm import (
    GeneratorConfig,
    LLMModel,
    LLMSpec,
    ModelClientFactory,
    PlanGenerator,
    create_llm_backend,
    get_llm_spec,
)

logger = logging.getLogger(__name__)


def resolve_model(model: str | LLMModel | LLMSpec | None = None) -> LLMSpec:
    """Resolve a model reference, falling back to ``LLM_MODEL``.

    Raises:
        ValueError: If the model is unknown.
    """
    return get_llm_spec(model or get_environment(EnvVar.LLM_MODEL))


def create_planner(
    model: str | LLMModel | LLMSpec | None = None,
    *,
    api_keys: Iterable[str] | None = None,
    max_attempts: int | None = None,
    generator_config: GeneratorConfig | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> PlanGenerator:
    """Build a PlanGenerator backed by a rotating credential pool.

    Args:
        model: Model to generate with. Defaults to ``LLM_MODEL``.
        api_keys: Credentials to rotate through. Defaults to the keys
            configured for the model's provider.
        max_attempts: Override for ``GENERATION_MAX_ATTEMPTS``. Ignored when
            ``generator_config`` is given.
        generator_config: Generator settings. Defaults to the
            ``GENERATION_*`` environment variables.
        clock: Time source for rate windows and cooldowns.

    Returns:
        A ready PlanGenerator.

    Raises:
        ValueError: If the model is unknown or no API key is available.

    Example:
        >>> planner = create_planner("gemini-2.0-flash")
        >>> layout = await planner.generate_layout(request)
    """
    spec = resolve_model(model)
    provider = spec.provider.value
    keys = list(api_keys) if api_keys is not None else get_api_keys(provider)
    if not keys:
        raise ValueError(
            f"No API key configured for {provider}; set "
            f"{provider.upper()}_API_KEYS or {provider.upper()}_API_KEY"
        )

    pool = CredentialPool(
        keys,
        cooldown=get_environment(EnvVar.CREDENTIAL_FAILURE_COOLDOWN),
        clock=clock,
    )
    selector = CredentialSelector(
        pool,
        rate_limit=get_environment(EnvVar.CREDENTIAL_RATE_LIMIT),
        window=get_environment(EnvVar.CREDENTIAL_RATE_WINDOW),
    )
    factory = ModelClientFactory(
        selector,
        lambda key: create_llm_backend(spec, api_key=key),
        max_attempts=get_environment(EnvVar.CLIENT_MAX_ATTEMPTS),
    )

    if generator_config is None:
        generator_config = GeneratorConfig(
            max_attempts=get_environment(
                EnvVar.GENERATION_MAX_ATTEMPTS, override=max_attempts
            ),
            timeout=get_environment(EnvVar.GENERATION_TIMEOUT),
            temperature=get_environment(EnvVar.GENERATION_TEMPERATURE),
            max_tokens=min(GeneratorConfig.max_tokens, spec.max_output_tokens),
        )

    logger.info(f"Planner ready: model={spec.name}, {len(pool)} API key(s)")
    return PlanGenerator(factory, generator_config)


__all__ = ["create_planner", "resolve_model"]
