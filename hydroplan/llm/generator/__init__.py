"""Plan generation orchestrator.

Provides the PlanGenerator class that integrates PromptBuilder, rotating
model clients and the response normalizer to produce hydroponic layouts,
automation plans and schedules.
"""

from .lib import (
    SYSTEM_PROMPT,
    GenerationStats,
    GeneratorConfig,
    PlanGenerator,
)
from .retry import RetryConfig, RetryStrategy, parse_json_object, strip_code_fences

__all__ = [
    "PlanGenerator",
    "GeneratorConfig",
    "GenerationStats",
    "SYSTEM_PROMPT",
    "RetryConfig",
    "RetryStrategy",
    "parse_json_object",
    "strip_code_fences",
]
