"""Centralized environment configuration management for hydroplan.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from hydroplan.config import EnvVar, get_environment
    >>>
    >>> # Get values with automatic type conversion
    >>> limit = get_environment(EnvVar.CREDENTIAL_RATE_LIMIT)  # Returns int
    >>> keys = get_environment(EnvVar.GEMINI_API_KEYS)  # Returns list[str]
    >>>
    >>> # Override at runtime
    >>> attempts = get_environment(EnvVar.GENERATION_MAX_ATTEMPTS, override=5)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from collections.abc import Callable
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "CREDENTIAL_RATE_LIMIT").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float, bool,
            Path, list).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by hydroplan.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - llm: LLM provider credentials and model selection
        - credentials: Credential pool rate limiting and cooldown
        - generation: Retry budget and per-call limits
        - logging: Log output
    """

    # -------------------------------------------------------------------------
    # LLM Credentials
    # -------------------------------------------------------------------------
    GEMINI_API_KEYS = EnvConfig(
        name="GEMINI_API_KEYS",
        default=None,
        var_type=list,
        description="Comma-separated Gemini API keys, rotated round-robin",
        category="llm",
    )
    GEMINI_API_KEY = EnvConfig(
        name="GEMINI_API_KEY",
        default=None,
        var_type=str,
        description="Single Gemini API key (appended after GEMINI_API_KEYS)",
        category="llm",
    )
    OPENAI_API_KEYS = EnvConfig(
        name="OPENAI_API_KEYS",
        default=None,
        var_type=list,
        description="Comma-separated OpenAI API keys, rotated round-robin",
        category="llm",
    )
    OPENAI_API_KEY = EnvConfig(
        name="OPENAI_API_KEY",
        default=None,
        var_type=str,
        description="Single OpenAI API key (appended after OPENAI_API_KEYS)",
        category="llm",
    )
    ANTHROPIC_API_KEYS = EnvConfig(
        name="ANTHROPIC_API_KEYS",
        default=None,
        var_type=list,
        description="Comma-separated Anthropic API keys, rotated round-robin",
        category="llm",
    )
    ANTHROPIC_API_KEY = EnvConfig(
        name="ANTHROPIC_API_KEY",
        default=None,
        var_type=str,
        description="Single Anthropic API key (appended after ANTHROPIC_API_KEYS)",
        category="llm",
    )
    LLM_MODEL = EnvConfig(
        name="LLM_MODEL",
        default="gemini-2.0-flash",
        var_type=str,
        description="Model name used for generation (see `models` command)",
        category="llm",
    )

    # -------------------------------------------------------------------------
    # Credential Pool
    # -------------------------------------------------------------------------
    CREDENTIAL_RATE_LIMIT = EnvConfig(
        name="CREDENTIAL_RATE_LIMIT",
        default=60,
        var_type=int,
        description="Maximum requests per credential within one rate window",
        category="credentials",
    )
    CREDENTIAL_RATE_WINDOW = EnvConfig(
        name="CREDENTIAL_RATE_WINDOW",
        default=60.0,
        var_type=float,
        description="Length of a credential's rate window in seconds",
        category="credentials",
    )
    CREDENTIAL_FAILURE_COOLDOWN = EnvConfig(
        name="CREDENTIAL_FAILURE_COOLDOWN",
        default=60.0,
        var_type=float,
        description="Seconds before all-failed credentials are reset",
        category="credentials",
    )

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------
    CLIENT_MAX_ATTEMPTS = EnvConfig(
        name="CLIENT_MAX_ATTEMPTS",
        default=3,
        var_type=int,
        description="Attempts to build a model client before giving up",
        category="generation",
    )
    GENERATION_MAX_ATTEMPTS = EnvConfig(
        name="GENERATION_MAX_ATTEMPTS",
        default=3,
        var_type=int,
        description="Attempts per generation call before failing",
        category="generation",
    )
    GENERATION_TIMEOUT = EnvConfig(
        name="GENERATION_TIMEOUT",
        default=120.0,
        var_type=float,
        description="Timeout in seconds for a single model call",
        category="generation",
    )
    GENERATION_TEMPERATURE = EnvConfig(
        name="GENERATION_TEMPERATURE",
        default=0.6,
        var_type=float,
        description="Sampling temperature for generation",
        category="generation",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )


# =============================================================================
# Type Conversion
# =============================================================================


def _parse_bool(value: str) -> bool | None:
    """Read true/false, 1/0 or yes/no. Anything else is None."""
    return {
        "true": True,
        "1": True,
        "yes": True,
        "false": False,
        "0": False,
        "no": False,
    }.get(value.strip().lower())


def _parse_list(value: str) -> list[str]:
    """Split a comma-separated value, dropping blank items."""
    return [item.strip() for item in value.split(",") if item.strip()]


_CONVERTERS: dict[type, Callable[[str], Any]] = {
    str: str,
    int: int,
    float: float,
    bool: _parse_bool,
    Path: Path,
    list: _parse_list,
}


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert a raw environment string to ``var_type``.

    Unset values and values that fail to convert yield ``default``.
    Types without a converter are returned unchanged.
    """
    if value is None:
        return default

    converter = _CONVERTERS.get(var_type)
    if converter is None:
        return value

    try:
        converted = converter(value)
    except ValueError:
        return default
    return default if converted is None else converted


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: float) -> float: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: list) -> list: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type.

    Example:
        >>> get_environment(EnvVar.CREDENTIAL_RATE_LIMIT)
        60
        >>> get_environment(EnvVar.CREDENTIAL_RATE_LIMIT, override=10)
        10
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


# =============================================================================
# Convenience Functions
# =============================================================================

_PROVIDER_KEY_VARS: dict[str, tuple[EnvVar, EnvVar]] = {
    "gemini": (EnvVar.GEMINI_API_KEYS, EnvVar.GEMINI_API_KEY),
    "openai": (EnvVar.OPENAI_API_KEYS, EnvVar.OPENAI_API_KEY),
    "anthropic": (EnvVar.ANTHROPIC_API_KEYS, EnvVar.ANTHROPIC_API_KEY),
}


def get_api_keys(provider: str) -> list[str]:
    """Get the ordered credential list for a provider.

    Keys from the plural variable come first, followed by the singular one.
    Duplicates are dropped while preserving first-seen order.

    Args:
        provider: Provider name ("gemini", "openai", "anthropic").

    Returns:
        List of API keys, possibly empty.

    Raises:
        ValueError: If the provider is unknown.
    """
    try:
        plural, singular = _PROVIDER_KEY_VARS[provider]
    except KeyError:
        raise ValueError(f"Unknown provider: {provider}") from None

    keys: list[str] = list(get_environment(plural) or [])
    single = get_environment(singular)
    if single and single.strip():
        keys.append(single.strip())

    return list(dict.fromkeys(keys))


def get_available_llm_providers() -> list[str]:
    """Get list of providers that have at least one credential configured.

    Returns:
        List of provider names (e.g., ["gemini", "openai"]).
    """
    return [provider for provider in _PROVIDER_KEY_VARS if get_api_keys(provider)]


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (llm, credentials, generation, logging).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


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
