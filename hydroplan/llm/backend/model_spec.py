"""Model registry for LLM backends.

Each supported model is an LLMModel member carrying an LLMSpec: provider,
context and output token limits, and the request features it accepts.
"""

from dataclasses import dataclass, field
from enum import Enum


class LLMCapability(Enum):
    """Request features a model may accept."""

    JSON_MODE = "json_mode"  # native JSON output
    SYSTEM_PROMPT = "system_prompt"
    SEED = "seed"
    EXTENDED_THINKING = "extended_thinking"


class LLMProviderType(Enum):
    """Hosted providers with a backend implementation."""

    GEMINI = "gemini"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


@dataclass(frozen=True)
class LLMSpec:
    """Static description of one model.

    Attributes:
        name: Model identifier sent to the provider, e.g. 'gemini-2.0-flash'.
        provider: Provider serving the model.
        context_window: Maximum prompt plus output size in tokens.
        max_output_tokens: Largest output a single call may request.
        capabilities: Request features the model accepts.
        description: Short note shown by the CLI.
    """

    name: str
    provider: LLMProviderType
    context_window: int
    max_output_tokens: int
    capabilities: frozenset[LLMCapability] = field(default_factory=frozenset)
    description: str = ""

    def supports(self, capability: LLMCapability) -> bool:
        return capability in self.capabilities


_STRUCTURED = frozenset(
    {LLMCapability.JSON_MODE, LLMCapability.SYSTEM_PROMPT, LLMCapability.SEED}
)
_REASONING = _STRUCTURED | {LLMCapability.EXTENDED_THINKING}
# Experimental thinking models reject a JSON response mime type
_REASONING_EXP = frozenset(
    {LLMCapability.SYSTEM_PROMPT, LLMCapability.EXTENDED_THINKING}
)
_CLAUDE = frozenset({LLMCapability.SYSTEM_PROMPT, LLMCapability.EXTENDED_THINKING})


def _gemini(
    name: str, output: int, capabilities: frozenset, description: str
) -> LLMSpec:
    return LLMSpec(
        name, LLMProviderType.GEMINI, 1_048_576, output, capabilities, description
    )


def _openai(name: str, description: str) -> LLMSpec:
    return LLMSpec(
        name, LLMProviderType.OPENAI, 128_000, 16_384, _STRUCTURED, description
    )


def _claude(name: str, description: str) -> LLMSpec:
    return LLMSpec(
        name, LLMProviderType.ANTHROPIC, 200_000, 64_000, _CLAUDE, description
    )


class LLMModel(Enum):
    """Registry of supported models."""

    GEMINI_2_0_FLASH = _gemini(
        "gemini-2.0-flash", 8192, _STRUCTURED, "Fast general purpose Gemini"
    )
    GEMINI_2_0_FLASH_EXP = _gemini(
        "gemini-2.0-flash-exp", 8192, _STRUCTURED, "Experimental Gemini flash"
    )
    GEMINI_2_0_FLASH_THINKING = _gemini(
        "gemini-2.0-flash-thinking-exp-01-21",
        8192,
        _REASONING_EXP,
        "Gemini flash with reasoning, good at spatial layouts",
    )
    GEMINI_2_5_FLASH = _gemini(
        "gemini-2.5-flash", 65_536, _REASONING, "Gemini 2.5 fast reasoning"
    )
    GEMINI_2_5_PRO = _gemini(
        "gemini-2.5-pro", 65_536, _REASONING, "Gemini 2.5 most capable"
    )

    GPT_4_1 = _openai("gpt-4.1", "OpenAI flagship GPT-4.1")
    GPT_4_1_MINI = _openai("gpt-4.1-mini", "OpenAI small and fast")

    CLAUDE_SONNET_4_5 = _claude("claude-sonnet-4-5", "Anthropic balanced model")
    CLAUDE_HAIKU_4_5 = _claude("claude-haiku-4-5", "Anthropic fastest model")

    @property
    def spec(self) -> LLMSpec:
        return self.value

    @classmethod
    def by_name(cls, name: str) -> "LLMModel | None":
        """Find a model by its provider identifier, or None."""
        return next((m for m in cls if m.spec.name == name), None)

    @classmethod
    def list_by_provider(cls, provider: LLMProviderType) -> list["LLMModel"]:
        return [m for m in cls if m.spec.provider == provider]


DEFAULT_GEMINI_MODEL = LLMModel.GEMINI_2_0_FLASH
DEFAULT_OPENAI_MODEL = LLMModel.GPT_4_1_MINI
DEFAULT_ANTHROPIC_MODEL = LLMModel.CLAUDE_SONNET_4_5
DEFAULT_MODEL = DEFAULT_GEMINI_MODEL


def get_llm_spec(model: "str | LLMModel | LLMSpec") -> LLMSpec:
    """Resolve a model name, LLMModel or LLMSpec to an LLMSpec.

    Raises:
        ValueError: If a model name is not in the registry.
    """
    if isinstance(model, LLMSpec):
        return model
    if isinstance(model, LLMModel):
        return model.spec
    found = LLMModel.by_name(model)
    if found is None:
        raise ValueError(f"Unknown model: {model}")
    return found.spec


__all__ = [
    "LLMCapability",
    "LLMProviderType",
    "LLMSpec",
    "LLMModel",
    "DEFAULT_GEMINI_MODEL",
    "DEFAULT_OPENAI_MODEL",
    "DEFAULT_ANTHROPIC_MODEL",
    "DEFAULT_MODEL",
    "get_llm_spec",
]
