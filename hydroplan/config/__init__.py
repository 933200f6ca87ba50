"""Centralized configuration management for hydroplan.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from hydroplan.config import EnvVar, get_environment
    >>>
    >>> limit = get_environment(EnvVar.CREDENTIAL_RATE_LIMIT)  # Returns int: 60
    >>> keys = get_api_keys("gemini")  # Returns list[str]
    >>>
    >>> # List available variables by category
    >>> for var in list_environment_variables("credentials"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    llm: API keys for LLM providers (Gemini, OpenAI, Anthropic) and model name
    credentials: Rate ceiling, rate window and failure cooldown
    generation: Retry budgets, timeout and temperature
    logging: Log level
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Main interface
    get_api_keys,
    get_available_llm_providers,
    get_environment,
    get_environment_info,
    # Introspection
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_api_keys",
    "get_available_llm_providers",
    # Introspection
    "list_environment_variables",
]
