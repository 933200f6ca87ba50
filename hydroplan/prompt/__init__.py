"""Prompt assembly for layout, automation and schedule generation.

Example usage:
    >>> from hydroplan.prompt import PromptBuilder
    >>> prompt = PromptBuilder().build_layout_prompt(request)
"""

from .lib import DEFAULT_MAX_HEIGHT, PromptBuilder, PromptConfig

__all__ = [
    "DEFAULT_MAX_HEIGHT",
    "PromptBuilder",
    "PromptConfig",
]
