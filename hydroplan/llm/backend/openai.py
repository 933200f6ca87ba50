"""OpenAI GPT backend implementation.

Supports GPT-4.1 models through the chat completions endpoint of the
OpenAI async client.
"""

from typing import Any

from .base import GenerationConfig, GenerationResult, ProviderBackend
from .model_spec import DEFAULT_OPENAI_MODEL, LLMCapability


class OpenAIBackend(ProviderBackend):
    """OpenAI GPT backend.

    Example:
        >>> backend = OpenAIBackend(api_key="sk-...", model="gpt-4.1")
        >>> result = await backend.generate("Design a hydroponic layout")
    """

    display_name = "OpenAI"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_OPENAI_MODEL.spec.name,
        base_url: str | None = None,
        **kwargs: Any,
    ):
        self._base_url = base_url
        super().__init__(api_key, model, **kwargs)

    @property
    def provider(self) -> str:
        return "openai"

    def _create_client(self) -> Any:
        from openai import AsyncOpenAI

        return AsyncOpenAI(
            api_key=self._api_key,
            base_url=self._base_url,
            timeout=self._timeout,
            max_retries=self._max_retries,
        )

    def _build_request(
        self, prompt: str, system_prompt: str | None, config: GenerationConfig
    ) -> dict[str, Any]:
        messages = [{"role": "user", "content": prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})

        request: dict[str, Any] = {
            "model": self.model_name,
            "messages": messages,
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": self._output_limit(config),
        }
        if config.json_mode and self.supports_json_mode:
            request["response_format"] = {"type": "json_object"}
        if config.stop_sequences:
            request["stop"] = config.stop_sequences
        if config.seed is not None and self._spec.supports(LLMCapability.SEED):
            request["seed"] = config.seed
        return request

    async def _send(self, client: Any, request: dict[str, Any]) -> Any:
        return await client.chat.completions.create(**request)

    def _parse_response(self, response: Any) -> GenerationResult:
        choice = response.choices[0]
        usage = response.usage
        return GenerationResult(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "unknown",
            usage={
                "prompt_tokens": usage.prompt_tokens,
                "completion_tokens": usage.completion_tokens,
                "total_tokens": usage.total_tokens,
            },
            model=response.model,
            raw_response=response,
        )


__all__ = ["OpenAIBackend"]
