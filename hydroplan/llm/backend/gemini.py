"""Google Gemini backend implementation.

Supports Gemini 2.x models via the google-genai SDK async client.
"""

from typing import Any

from .base import GenerationConfig, GenerationResult, ProviderBackend
from .model_spec import DEFAULT_GEMINI_MODEL, LLMCapability


def _token_count(usage: Any, name: str) -> int:
    if usage is None:
        return 0
    return getattr(usage, name, None) or 0


class GeminiBackend(ProviderBackend):
    """Google Gemini backend.

    Example:
        >>> backend = GeminiBackend(api_key="AIza...")
        >>> result = await backend.generate("Design a hydroponic layout")
        >>> print(result.content)
    """

    display_name = "Gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_GEMINI_MODEL.spec.name,
        **kwargs: Any,
    ):
        super().__init__(api_key, model, **kwargs)

    @property
    def provider(self) -> str:
        return "gemini"

    def _create_client(self) -> Any:
        from google import genai
        from google.genai import types

        return genai.Client(
            api_key=self._api_key,
            http_options=types.HttpOptions(timeout=int(self._timeout * 1000)),
        )

    def _build_request(
        self, prompt: str, system_prompt: str | None, config: GenerationConfig
    ) -> dict[str, Any]:
        from google.genai import types

        options: dict[str, Any] = {
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_output_tokens": self._output_limit(config),
        }
        if system_prompt:
            options["system_instruction"] = system_prompt
        if config.stop_sequences:
            options["stop_sequences"] = config.stop_sequences
        # Thinking models reject a JSON response mime type
        if config.json_mode and self.supports_json_mode:
            options["response_mime_type"] = "application/json"
        if config.seed is not None and self._spec.supports(LLMCapability.SEED):
            options["seed"] = config.seed

        return {
            "model": self.model_name,
            "contents": prompt,
            "config": types.GenerateContentConfig(**options),
        }

    async def _send(self, client: Any, request: dict[str, Any]) -> Any:
        return await client.aio.models.generate_content(**request)

    def _parse_response(self, response: Any) -> GenerationResult:
        finish_reason = "unknown"
        if response.candidates and response.candidates[0].finish_reason:
            reason = response.candidates[0].finish_reason
            finish_reason = str(getattr(reason, "value", reason)).lower()

        usage = response.usage_metadata
        return GenerationResult(
            content=response.text or "",
            finish_reason=finish_reason,
            usage={
                "prompt_tokens": _token_count(usage, "prompt_token_count"),
                "completion_tokens": _token_count(usage, "candidates_token_count"),
                "total_tokens": _token_count(usage, "total_token_count"),
            },
            model=self.model_name,
            raw_response=response,
        )


__all__ = ["GeminiBackend"]
