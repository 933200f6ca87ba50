"""Tests for the plan generator.

Covers:
- Response parsing: fence stripping and strict JSON decoding
- RetryStrategy: backoff schedule
- PlanGenerator: retry loop over rotating credentials with a scripted backend
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hydroplan.credentials import (
    CredentialPool,
    CredentialSelector,
    ExhaustedCredentialsError,
)
from hydroplan.domain import (
    AutomationTask,
    LayoutAnalysis,
    LayoutRequest,
    Schedule,
    VirtualEnvironment,
)
from hydroplan.schema import HydroComponentType

from ..backend.base import (
    AuthenticationError,
    GenerationFailedError,
    GenerationResult,
    LLMError,
    MalformedResponseError,
)
from ..client import ModelClient, ModelClientFactory
from .lib import GeneratorConfig, PlanGenerator
from .retry import RetryConfig, RetryStrategy, parse_json_object, strip_code_fences

LAYOUT_RESPONSE = """```json
{
  "setupType": "vertical",
  "levels": 5,
  "waterFlow": [{"from": [0, 0], "to": [1, 1, 1]}, {"from": "tank"}],
  "recommendations": ["Keep the reservoir shaded"]
}
```"""


def _planner(
    transport, keys, manual_clock, **config
) -> tuple[PlanGenerator, CredentialPool]:
    pool = CredentialPool(keys, clock=manual_clock)
    factory = ModelClientFactory(CredentialSelector(pool), transport.backend_factory)
    return PlanGenerator(factory, GeneratorConfig(**config)), pool


def _request() -> LayoutRequest:
    return LayoutRequest(spaceSize=4, selectedPlants={"1": 3}, setupType="horizontal")


def _layout() -> LayoutAnalysis:
    return LayoutAnalysis.model_validate({"matrix": [[[1, 2], [3, 0]]]})


# =============================================================================
# Response parsing
# =============================================================================


class TestResponseParsing:
    """Tests for fence stripping and strict decoding."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "content",
        [
            '```json\n{"a": 1}\n```',
            '```\n{"a": 1}\n```',
            '  ```JSON\n{"a": 1}```  ',
            '\n{"a": 1}\n',
        ],
    )
    def test_fences_and_whitespace_removed(self, content):
        """Leading and trailing fences are removed with or without a tag."""
        assert strip_code_fences(content) == '{"a": 1}'

    @pytest.mark.unit
    def test_inner_backticks_kept(self):
        """Only the outer fence is stripped."""
        content = '```json\n{"note": "use ```code```"}\n```'
        assert parse_json_object(content) == {"note": "use ```code```"}

    @pytest.mark.unit
    def test_invalid_json(self):
        """Undecodable text raises MalformedResponseError."""
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_json_object("Here is your layout: {")
        assert exc_info.value.content.startswith("Here is")

    @pytest.mark.unit
    @pytest.mark.parametrize("content", ["[1, 2]", '"text"', "null", "42"])
    def test_non_object_rejected(self, content):
        """The top-level value must be an object."""
        with pytest.raises(MalformedResponseError, match="JSON object"):
            parse_json_object(content)

    @pytest.mark.unit
    def test_no_repair_attempted(self):
        """Trailing commas are not repaired."""
        with pytest.raises(MalformedResponseError):
            parse_json_object('{"a": 1,}')

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "content",
        ["[" * 100_000, '{"levels": ' + "1" * 5000 + "}"],
        ids=["deep-nesting", "oversized-integer"],
    )
    def test_decoder_limits_are_malformed(self, content):
        """Input the decoder refuses to build is a malformed response."""
        with pytest.raises(MalformedResponseError, match="not valid JSON"):
            parse_json_object(content)


class TestRetryStrategy:
    """Tests for the backoff schedule."""

    @pytest.mark.unit
    def test_default_has_no_delay(self):
        """By default retries are immediate."""
        strategy = RetryStrategy()
        assert strategy.max_attempts == 3
        assert strategy.get_backoff_delay(0) == 0.0

    @pytest.mark.unit
    def test_exponential_backoff_capped(self):
        """Delays double per attempt up to max_delay."""
        strategy = RetryStrategy(RetryConfig(initial_delay=1.0, max_delay=5.0))
        delays = [strategy.get_backoff_delay(n) for n in range(5)]
        assert delays == [1.0, 2.0, 4.0, 5.0, 5.0]

    @pytest.mark.unit
    def test_constant_backoff(self):
        """Without exponential backoff the delay stays constant."""
        strategy = RetryStrategy(
            RetryConfig(initial_delay=2.0, exponential_backoff=False)
        )
        assert strategy.get_backoff_delay(4) == 2.0


# =============================================================================
# PlanGenerator
# =============================================================================


class TestGenerateLayout:
    """End-to-end layout generation through the client factory."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fenced_response_normalized(self, scripted_transport, manual_clock):
        """A fenced response becomes a normalized horizontal layout."""
        transport = scripted_transport(LAYOUT_RESPONSE)
        generator, _ = _planner(transport, ["key-a"], manual_clock)

        layout = await generator.generate_layout(_request())

        assert layout.levels == 1
        assert layout.setup_type == "horizontal"
        assert layout.water_flow == []
        assert layout.matrix == [[[HydroComponentType.EMPTY] * 2] * 2]
        assert layout.selected_plants == {"1": 3}
        assert layout.recommendations == ["Keep the reservoir shaded"]
        assert generator.last_stats.attempts == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_prompt_describes_request(self, scripted_transport, manual_clock):
        """The request details reach the model."""
        transport = scripted_transport(LAYOUT_RESPONSE)
        generator, _ = _planner(transport, ["key-a"], manual_clock)

        await generator.generate_layout(_request())

        assert "Space size: 4m²" in transport.prompts[0]
        assert "3 plants" in transport.prompts[0]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_retries_rotate_credentials(self, scripted_transport, manual_clock):
        """Two invalid responses then a valid one use three distinct keys."""
        transport = scripted_transport("not json", "[]", LAYOUT_RESPONSE)
        generator, pool = _planner(transport, ["k1", "k2", "k3"], manual_clock)

        layout = await generator.generate_layout(_request())

        assert layout.levels == 1
        assert transport.keys == ["k1", "k2", "k3"]
        assert len(set(transport.prompts)) == 1
        # Parse failures are not the key's fault
        assert not any(status.failed for status in pool.snapshot())
        stats = generator.last_stats
        assert stats.attempts == 3
        assert stats.parse_failures == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "bad",
        ["[" * 100_000, '{"levels": ' + "1" * 5000 + "}"],
        ids=["deep-nesting", "oversized-integer"],
    )
    async def test_decoder_limits_retried(
        self, scripted_transport, manual_clock, bad
    ):
        """Responses that overflow the decoder are retried on the next key."""
        transport = scripted_transport(bad, bad, LAYOUT_RESPONSE)
        generator, _ = _planner(transport, ["k1", "k2", "k3"], manual_clock)

        layout = await generator.generate_layout(_request())

        assert layout.levels == 1
        assert transport.keys == ["k1", "k2", "k3"]
        assert generator.last_stats.parse_failures == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_always_invalid_fails(self, scripted_transport, manual_clock):
        """An exhausted budget raises GenerationFailedError with the parse cause."""
        transport = scripted_transport("still not json")
        generator, _ = _planner(transport, ["k1", "k2"], manual_clock)

        with pytest.raises(GenerationFailedError) as exc_info:
            await generator.generate_layout(_request())

        error = exc_info.value
        assert error.attempts == 3
        assert isinstance(error.last_error, MalformedResponseError)
        assert isinstance(error.__cause__, MalformedResponseError)
        assert len(transport.keys) == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_custom_budget(self, scripted_transport, manual_clock):
        """max_attempts bounds the number of model calls."""
        transport = scripted_transport("nope")
        generator, _ = _planner(transport, ["k1"], manual_clock, max_attempts=5)

        with pytest.raises(GenerationFailedError) as exc_info:
            await generator.generate_layout(_request())

        assert exc_info.value.attempts == 5
        assert len(transport.keys) == 5

    @pytest.mark.unit
    def test_invalid_budget_rejected(self):
        """A budget below one is rejected."""
        with pytest.raises(ValueError):
            PlanGenerator(MagicMock(), GeneratorConfig(max_attempts=0))


class TestTransportFailures:
    """Tests for transport errors, timeouts and cancellation."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_auth_error_marks_key(self, scripted_transport, manual_clock):
        """A rejected key is marked failed and the retry uses another key."""
        transport = scripted_transport(
            AuthenticationError("API key not valid"), LAYOUT_RESPONSE
        )
        generator, pool = _planner(transport, ["bad-key", "good-key"], manual_clock)

        await generator.generate_layout(_request())

        assert transport.keys == ["bad-key", "good-key"]
        assert [s.failed for s in pool.snapshot()] == [True, False]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generic_error_retried(self, scripted_transport, manual_clock):
        """A generic transport error is retried without marking the key."""
        transport = scripted_transport(LLMError("502 bad gateway"), LAYOUT_RESPONSE)
        generator, pool = _planner(transport, ["k1"], manual_clock)

        await generator.generate_layout(_request())

        assert transport.keys == ["k1", "k1"]
        assert not pool.snapshot()[0].failed
        assert generator.last_stats.transport_failures == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_exhausted_credentials(self, scripted_transport, manual_clock):
        """Running out of keys ends in GenerationFailedError."""
        transport = scripted_transport(AuthenticationError("revoked"))
        generator, _ = _planner(transport, ["only"], manual_clock)

        with pytest.raises(GenerationFailedError) as exc_info:
            await generator.generate_layout(_request())

        assert isinstance(exc_info.value.__cause__, ExhaustedCredentialsError)
        assert transport.keys == ["only"]
        assert generator.last_stats.client_failures == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout_is_transport_failure(self):
        """A call exceeding the timeout is retried and the key stays healthy."""
        calls = 0

        async def generate(*args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 1:
                await asyncio.sleep(10)
            return GenerationResult(
                content=LAYOUT_RESPONSE, finish_reason="stop", usage={}, model="mock"
            )

        backend = MagicMock()
        backend.generate = AsyncMock(side_effect=generate)
        provider = MagicMock()
        provider.acquire.return_value = ModelClient(backend, "key-1")

        generator = PlanGenerator(provider, GeneratorConfig(timeout=0.05))
        layout = await generator.generate_layout(_request())

        assert layout.levels == 1
        assert calls == 2
        error = provider.report_failure.call_args.args[1]
        assert isinstance(error, asyncio.TimeoutError)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """Cancelling the call aborts it without reporting a failure."""
        started = asyncio.Event()

        async def generate(*args, **kwargs):
            started.set()
            await asyncio.Event().wait()

        backend = MagicMock()
        backend.generate = AsyncMock(side_effect=generate)
        provider = MagicMock()
        provider.acquire.return_value = ModelClient(backend, "key-1")
        generator = PlanGenerator(provider, GeneratorConfig(timeout=None))

        task = asyncio.create_task(generator.generate_layout(_request()))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        provider.report_failure.assert_not_called()
        assert provider.acquire.call_count == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_backoff_between_attempts(self, scripted_transport, manual_clock):
        """Configured backoff sleeps between attempts only."""
        transport = scripted_transport("bad", "bad", LAYOUT_RESPONSE)
        generator, _ = _planner(
            transport, ["k1"], manual_clock, retry_delay=1.0, max_retry_delay=10.0
        )

        with patch(
            "hydroplan.llm.generator.lib.asyncio.sleep", new_callable=AsyncMock
        ) as sleep:
            await generator.generate_layout(_request())

        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]


class TestEnvironmentAndSchedule:
    """Tests for automation plan and schedule generation."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_environment_bound_to_layout(
        self, scripted_transport, manual_clock, sample_layout
    ):
        """The plan keeps the given layout and gets synthesized task ids."""
        transport = scripted_transport(
            '{"automationTasks": [{"name": "Check pH"}, {"name": "Flush"}],'
            ' "monitoringPoints": [{"position": [0, 0, 0], "type": "pH",'
            ' "frequency": 99999}]}'
        )
        generator, _ = _planner(transport, ["k1"], manual_clock)

        environment = await generator.generate_virtual_environment(sample_layout)

        assert environment.layout == sample_layout
        ids = [task.id for task in environment.automation_tasks]
        assert len(set(ids)) == 2
        assert all(task_id.startswith("task-") for task_id in ids)
        assert environment.monitoring_points[0].frequency == 3600
        assert environment.schedule == Schedule()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_optimize_only_changes_schedule(
        self, scripted_transport, manual_clock
    ):
        """Optimization replaces the schedule and keeps everything else."""
        transport = scripted_transport(
            '```json\n{"schedule": {"lighting": {"on": "5:30"},'
            ' "watering": {"frequency": 6}}}\n```'
        )
        generator, _ = _planner(transport, ["k1"], manual_clock)
        current = VirtualEnvironment(
            layout=_layout(),
            automation_tasks=[AutomationTask(id="t1", name="Check pH")],
            schedule=Schedule.model_validate({"lighting": {"off": "20:00"}}),
        )

        optimized = await generator.optimize_schedule(current)

        assert optimized.schedule.lighting.on == "05:30"
        assert optimized.schedule.lighting.off == "20:00"
        assert optimized.schedule.watering.frequency == 6
        assert optimized.automation_tasks == current.automation_tasks
        assert optimized.layout == current.layout
        assert current.schedule.lighting.on == "06:00"
        assert "## Current Schedule" in transport.prompts[0]
