"""Retry policy and response parsing for plan generation.

Model responses are parsed strictly. The only cleanup applied is removal of
a surrounding markdown code fence; anything else that fails to decode is a
malformed response and triggers a retry with a fresh client.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from ..backend.base import MalformedResponseError

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")


@dataclass
class RetryConfig:
    """Configuration for the retry loop.

    Attributes:
        max_attempts: Total attempts per generation call.
        exponential_backoff: Double the delay after each failed attempt.
        initial_delay: Delay before the second attempt (seconds).
        max_delay: Upper bound for any single delay (seconds).
    """

    max_attempts: int = 3
    exponential_backoff: bool = True
    initial_delay: float = 0.0
    max_delay: float = 30.0


def strip_code_fences(content: str) -> str:
    """Remove a leading and trailing markdown fence plus outer whitespace.

    Example:
        >>> strip_code_fences('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    cleaned = content.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_object(content: str) -> dict[str, Any]:
    """Decode a model response into a JSON object.

    Args:
        content: Raw response text, optionally fenced.

    Returns:
        The decoded top-level object.

    Raises:
        MalformedResponseError: If the text is not JSON or its top-level
            value is not an object.
    """
    cleaned = strip_code_fences(content)
    try:
        data = json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}", content) from e

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(data).__name__}", content
        )
    return data


class RetryStrategy:
    """Backoff schedule for the generation loop.

    Example:
        >>> strategy = RetryStrategy(RetryConfig(initial_delay=1.0))
        >>> [strategy.get_backoff_delay(n) for n in range(3)]
        [1.0, 2.0, 4.0]
    """

    def __init__(self, config: RetryConfig | None = None):
        self._config = config or RetryConfig()

    @property
    def max_attempts(self) -> int:
        return self._config.max_attempts

    def get_backoff_delay(self, attempt: int) -> float:
        """Delay in seconds before the retry following ``attempt`` (0-based)."""
        if not self._config.exponential_backoff:
            return self._config.initial_delay

        delay = self._config.initial_delay * (2**attempt)
        return min(delay, self._config.max_delay)


__all__ = [
    "RetryConfig",
    "RetryStrategy",
    "parse_json_object",
    "strip_code_fences",
]
