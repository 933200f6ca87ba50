"""hydroplan: LLM-driven hydroponic layout and automation planning."""

from hydroplan.domain import (
    LayoutAnalysis,
    LayoutRequest,
    Schedule,
    VirtualEnvironment,
)
from hydroplan.llm import GenerationFailedError, GeneratorConfig, PlanGenerator
from hydroplan.planner import create_planner
from hydroplan.tasks import add_task, remove_task, update_task

__all__ = [
    # Domain
    "LayoutRequest",
    "LayoutAnalysis",
    "VirtualEnvironment",
    "Schedule",
    # Generation
    "PlanGenerator",
    "GeneratorConfig",
    "GenerationFailedError",
    "create_planner",
    # Task management
    "add_task",
    "update_task",
    "remove_task",
]
