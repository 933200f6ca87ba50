"""PlanGenerator orchestrator for LLM-powered hydroponic planning.

Integrates PromptBuilder, rotating model clients and the response
normalizer to produce validated layouts, automation plans and schedules.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from hydroplan.credentials import ExhaustedCredentialsError
from hydroplan.domain import (
    LayoutAnalysis,
    LayoutRequest,
    VirtualEnvironment,
)
from hydroplan.prompt import PromptBuilder
from hydroplan.validation import (
    normalize_environment,
    normalize_layout,
    normalize_schedule,
)

from ..backend.base import (
    GenerationConfig,
    GenerationFailedError,
    LLMError,
    MalformedResponseError,
)
from ..client import ClientProvider, ModelClient
from .retry import RetryConfig, RetryStrategy, parse_json_object

logger = logging.getLogger(__name__)

T = TypeVar("T")

SYSTEM_PROMPT = (
    "You are an expert hydroponic systems engineer. "
    "Respond with a single JSON object and nothing else."
)


@dataclass
class GeneratorConfig:
    """Configuration for PlanGenerator.

    Attributes:
        max_attempts: Generation attempts per call before failing.
        timeout: Seconds to wait for one model call. None disables it.
        temperature: Sampling temperature.
        top_p: Nucleus sampling threshold.
        max_tokens: Output token ceiling per call.
        retry_delay: Delay before the second attempt (seconds).
        max_retry_delay: Upper bound on the backoff delay (seconds).
    """

    max_attempts: int = 3
    timeout: float | None = 120.0
    temperature: float = 0.6
    top_p: float = 0.9
    max_tokens: int = 8192
    retry_delay: float = 0.0
    max_retry_delay: float = 30.0


@dataclass
class GenerationStats:
    """Statistics from the most recent generation call.

    Attributes:
        operation: Name of the generator operation.
        attempts: Number of attempts made.
        parse_failures: Attempts whose response was not a JSON object.
        transport_failures: Attempts that failed at the model call.
        client_failures: Attempts that could not obtain a client.
        credentials: Masked key used on each attempt that got a client.
    """

    operation: str = ""
    attempts: int = 0
    parse_failures: int = 0
    transport_failures: int = 0
    client_failures: int = 0
    credentials: list[str] = field(default_factory=list)


class PlanGenerator:
    """Generates hydroponic plans with retries across rotating credentials.

    Every attempt acquires a fresh client, so a retry goes out with a new
    credential whenever the pool has one. Parse failures, transport errors
    and timeouts are all retried the same way.

    Example:
        >>> generator = PlanGenerator(client_factory)
        >>> layout = await generator.generate_layout(
        ...     LayoutRequest(spaceSize=4, selectedPlants={"1": 3})
        ... )
        >>> environment = await generator.generate_virtual_environment(layout)
    """

    def __init__(
        self,
        client_provider: ClientProvider,
        config: GeneratorConfig | None = None,
        prompt_builder: PromptBuilder | None = None,
    ):
        self._provider = client_provider
        self._config = config or GeneratorConfig()
        if self._config.max_attempts < 1:
            raise ValueError(
                f"max_attempts must be at least 1, got {self._config.max_attempts}"
            )
        self._prompt_builder = prompt_builder or PromptBuilder()
        self._retry = RetryStrategy(
            RetryConfig(
                max_attempts=self._config.max_attempts,
                initial_delay=self._config.retry_delay,
                max_delay=self._config.max_retry_delay,
            )
        )
        self._last_stats = GenerationStats()

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def last_stats(self) -> GenerationStats:
        """Statistics for the most recently started call."""
        return self._last_stats

    async def generate_layout(self, request: LayoutRequest) -> LayoutAnalysis:
        """Generate a system layout for a plant selection.

        Args:
            request: Space, plant selection and setup type.

        Returns:
            A normalized LayoutAnalysis. Its selectedPlants and plantData
            always come from ``request``.

        Raises:
            GenerationFailedError: If every attempt failed.
        """
        prompt = self._prompt_builder.build_layout_prompt(request)
        return await self._run(
            "layout", prompt, lambda data: normalize_layout(data, request)
        )

    async def generate_virtual_environment(
        self, layout: LayoutAnalysis
    ) -> VirtualEnvironment:
        """Generate the automation plan for a layout.

        Raises:
            GenerationFailedError: If every attempt failed.
        """
        prompt = self._prompt_builder.build_environment_prompt(layout)
        return await self._run(
            "environment", prompt, lambda data: normalize_environment(data, layout)
        )

    async def optimize_schedule(
        self, environment: VirtualEnvironment
    ) -> VirtualEnvironment:
        """Ask the model for an improved schedule.

        Only the schedule changes. Fields the model omits or gets wrong keep
        their current values.

        Raises:
            GenerationFailedError: If every attempt failed.
        """
        prompt = self._prompt_builder.build_schedule_prompt(environment)

        def apply(data: dict) -> VirtualEnvironment:
            schedule = normalize_schedule(data, fallback=environment.schedule)
            return environment.model_copy(update={"schedule": schedule})

        return await self._run("schedule", prompt, apply)

    async def _run(
        self,
        operation: str,
        prompt: str,
        normalize: Callable[[dict], T],
    ) -> T:
        """Shared acquire, complete, parse and normalize loop."""
        stats = GenerationStats(operation=operation)
        self._last_stats = stats
        budget = self._retry.max_attempts
        generation_config = GenerationConfig(
            temperature=self._config.temperature,
            top_p=self._config.top_p,
            max_tokens=self._config.max_tokens,
            json_mode=True,
        )
        last_error: Exception | None = None

        for attempt in range(1, budget + 1):
            if attempt > 1:
                delay = self._retry.get_backoff_delay(attempt - 2)
                if delay > 0:
                    await asyncio.sleep(delay)

            stats.attempts = attempt

            try:
                client = self._provider.acquire()
            except (ExhaustedCredentialsError, LLMError) as e:
                stats.client_failures += 1
                last_error = e
                logger.error(f"{operation}: no client on attempt {attempt}: {e}")
                continue

            stats.credentials.append(client.label)

            try:
                content = await self._complete(client, prompt, generation_config)
            except asyncio.TimeoutError as e:
                stats.transport_failures += 1
                last_error = e
                logger.warning(
                    f"{operation}: attempt {attempt} with key {client.label} "
                    f"timed out after {self._config.timeout}s"
                )
                self._provider.report_failure(client, e)
                continue
            except Exception as e:
                stats.transport_failures += 1
                last_error = e
                logger.warning(
                    f"{operation}: LLM error on attempt {attempt} "
                    f"with key {client.label}: {e}"
                )
                self._provider.report_failure(client, e)
                continue

            logger.debug(f"{operation}: raw response ({len(content)} chars): {content}")

            try:
                data = parse_json_object(content)
            except MalformedResponseError as e:
                stats.parse_failures += 1
                last_error = e
                logger.warning(f"{operation}: parse error on attempt {attempt}: {e}")
                continue

            result = normalize(data)
            logger.info(
                f"Generated {operation} successfully after {attempt} attempt(s)"
            )
            return result

        logger.error(f"{operation}: all {budget} attempts failed")
        raise GenerationFailedError(
            f"Failed to generate {operation} after {budget} attempts: {last_error}",
            last_error=last_error,
            attempts=budget,
        ) from last_error

    async def _complete(
        self, client: ModelClient, prompt: str, config: GenerationConfig
    ) -> str:
        return await asyncio.wait_for(
            client.complete(prompt, system_prompt=SYSTEM_PROMPT, config=config),
            timeout=self._config.timeout,
        )


__all__ = [
    "SYSTEM_PROMPT",
    "GeneratorConfig",
    "GenerationStats",
    "PlanGenerator",
]
