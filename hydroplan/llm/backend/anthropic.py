"""Anthropic Claude backend implementation.

Supports Claude 4.5 models via the Anthropic async messages API.
"""

from typing import Any

from .base import GenerationConfig, GenerationResult, ProviderBackend
from .model_spec import DEFAULT_ANTHROPIC_MODEL

JSON_INSTRUCTION = (
    "IMPORTANT: Respond with valid JSON only. "
    "Do not include any text before or after the JSON object."
)


class AnthropicBackend(ProviderBackend):
    """Anthropic Claude backend.

    Claude has no native JSON mode, so JSON output is requested with an
    instruction appended to the prompt.
    """

    display_name = "Anthropic"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_ANTHROPIC_MODEL.spec.name,
        **kwargs: Any,
    ):
        super().__init__(api_key, model, **kwargs)

    @property
    def provider(self) -> str:
        return "anthropic"

    def _create_client(self) -> Any:
        import anthropic

        return anthropic.AsyncAnthropic(
            api_key=self._api_key,
            timeout=self._timeout,
            max_retries=self._max_retries,
        )

    def _build_request(
        self, prompt: str, system_prompt: str | None, config: GenerationConfig
    ) -> dict[str, Any]:
        if config.json_mode:
            prompt = f"{prompt}\n\n{JSON_INSTRUCTION}"

        request: dict[str, Any] = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self._output_limit(config),
            "temperature": config.temperature,
        }
        if system_prompt:
            request["system"] = system_prompt
        if config.stop_sequences:
            request["stop_sequences"] = config.stop_sequences
        return request

    async def _send(self, client: Any, request: dict[str, Any]) -> Any:
        return await client.messages.create(**request)

    def _parse_response(self, response: Any) -> GenerationResult:
        text = "".join(
            block.text for block in response.content if getattr(block, "text", None)
        )
        usage = response.usage
        return GenerationResult(
            content=text,
            finish_reason=response.stop_reason or "unknown",
            usage={
                "prompt_tokens": usage.input_tokens,
                "completion_tokens": usage.output_tokens,
                "total_tokens": usage.input_tokens + usage.output_tokens,
            },
            model=response.model,
            raw_response=response,
        )


__all__ = ["AnthropicBackend"]
