"""PromptBuilder for hydroponic planning prompts.

Each prompt is assembled from fixed sections: the task description, the
component code legend, an example of the expected JSON shape, planning
guidelines, and the serialized request or current state. Output is
deterministic for a given input.
"""

import json
from dataclasses import dataclass

from hydroplan.domain import LayoutAnalysis, LayoutRequest, VirtualEnvironment
from hydroplan.schema import SetupType, export_component_legend, plant_code

# Height assumed for vertical setups that do not state one, in meters
DEFAULT_MAX_HEIGHT = 3

LAYOUT_EXAMPLE = {
    "matrix": [
        [[0, 1, 10, 0, 6], [2, 0, 12, 0, 0], [0, 11, 0, 3, 6]],
        [[0, 5, 13, 0, 0], [3, 0, 14, 0, 7], [0, 15, 0, 5, 0]],
    ],
    "recommendations": [
        "Keep plants with similar nutrient needs on the same loop",
        "Cover every growing row with at least one camera",
    ],
    "waterFlow": [{"from": [0, 0, 0], "to": [2, 0, 1]}],
    "nutrientDistribution": {"primary": [[0, 0, 0]], "secondary": [[1, 0, 1]]},
    "environmentalZones": {
        "temperature": {"high": [[0, 0, 0]], "low": [[2, 0, 2]]},
        "humidity": {"high": [[0, 0, 0]], "low": [[2, 0, 2]]},
        "lighting": {"direct": [[0, 0, 0]], "indirect": [[2, 0, 2]]},
    },
    "maintenanceRoutes": [[0, 0, 0], [1, 0, 1], [2, 0, 2]],
    "setupType": "vertical",
    "levels": 2,
    "monitoringDevices": {"cameras": [[0, 0, 4]], "drones": [[1, 1, 1]]},
}

ENVIRONMENT_EXAMPLE = {
    "automationTasks": [
        {
            "id": "ph-check",
            "name": "Check reservoir pH",
            "type": "monitoring|maintenance|alert|control",
            "schedule": {
                "frequency": "hourly|daily|weekly|monthly|on_demand",
                "timeOfDay": "HH:MM (optional)",
                "daysOfWeek": "[0-6] (optional)",
                "dayOfMonth": "1-31 (optional)",
            },
            "conditions": [
                {"sensor": "ph", "operator": ">|<|=|>=|<=", "value": 6.5, "unit": "pH"}
            ],
            "actions": [
                {"component": 2, "action": "dose", "value": 5, "unit": "ml"}
            ],
            "priority": "low|medium|high|critical",
        }
    ],
    "monitoringPoints": [
        {
            "position": [0, 0, 0],
            "type": "temperature|humidity|pH|nutrient|light",
            "frequency": "seconds between samples, 1-3600",
        }
    ],
    "maintenanceRoutes": [
        {
            "name": "Weekly inspection",
            "points": [[0, 0, 0]],
            "frequency": "daily|weekly|monthly",
        }
    ],
    "alerts": [
        {
            "condition": "ph > 7",
            "severity": "info|warning|error|critical",
            "message": "Reservoir pH too high",
            "actions": ["dose pH down"],
        }
    ],
    "schedule": {
        "lighting": {"on": "HH:MM", "off": "HH:MM", "intensity": "0-100"},
        "watering": {
            "frequency": "times per day",
            "duration": "minutes",
            "startTime": "HH:MM",
        },
        "nutrients": {"schedule": [{"time": "HH:MM", "formula": "A+B", "amount": 10}]},
    },
}

LAYOUT_GUIDELINES = [
    "Group plants with similar needs together",
    "Place water pumps and nutrient pumps where they can reach every row",
    "Spread sensor nodes evenly",
    "Leave room between plants for growth",
    "For vertical setups use several levels and add vertical supports",
    "Plan light distribution, especially across vertical levels",
    "Keep water flow and nutrient paths short",
    "Route maintenance access to every plant and component",
    "Place about one camera per square meter on small setups",
    "Use drones on larger setups to reach distant areas",
]

ENVIRONMENT_GUIDELINES = [
    "Place sensors so every zone is covered",
    "Keep maintenance routes short",
    "Respect the needs of each plant type",
    "Prefer energy efficient schedules",
    "Warn early before conditions become critical",
    "Automate responses to common issues",
    "Include failsafe procedures for pump and sensor failures",
]

SCHEDULE_GUIDELINES = [
    "Plant types and their light and nutrient needs",
    "Energy use and peak tariff hours",
    "Water conservation",
    "Growth cycles",
    "Maintenance windows",
    "System stability",
]


@dataclass
class PromptConfig:
    """Configuration for prompt building.

    Attributes:
        include_legend: Whether to include the component code legend.
        include_example: Whether to include an example response.
        include_guidelines: Whether to include planning guidelines.
        indent: JSON indent for serialized state.
    """

    include_legend: bool = True
    include_example: bool = True
    include_guidelines: bool = True
    indent: int = 2


class PromptBuilder:
    """Builds generation prompts for layouts, automation plans and schedules.

    Example:
        >>> builder = PromptBuilder()
        >>> prompt = builder.build_layout_prompt(request)
    """

    def __init__(self, config: PromptConfig | None = None):
        self._config = config or PromptConfig()

    def build_layout_prompt(self, request: LayoutRequest) -> str:
        """Build the prompt asking for a spatial layout.

        Args:
            request: Space, plants and setup type to plan for.

        Returns:
            Prompt text.
        """
        parts = [
            "## Role\n\n"
            "You design hydroponic growing systems. Return one JSON object "
            "describing a 3D matrix that places plants, equipment and "
            "monitoring devices in the available space, along with water "
            "flow, nutrient distribution, environmental zones and "
            "maintenance routes."
        ]
        if self._config.include_legend:
            parts.append(self._format_legend())
        if self._config.include_example:
            parts.append(self._format_example(LAYOUT_EXAMPLE))
        if self._config.include_guidelines:
            parts.append(self._format_guidelines(LAYOUT_GUIDELINES))
        parts.append(self._format_layout_request(request))
        return "\n\n".join(parts)

    def build_environment_prompt(self, layout: LayoutAnalysis) -> str:
        """Build the prompt asking for an automation plan for a layout."""
        parts = [
            "## Role\n\n"
            "You automate hydroponic systems. Given a layout, return one "
            "JSON object with automation tasks, monitoring points, "
            "maintenance routes, alerts and a schedule."
        ]
        if self._config.include_legend:
            parts.append(self._format_legend())
        if self._config.include_example:
            parts.append(self._format_example(ENVIRONMENT_EXAMPLE))
        if self._config.include_guidelines:
            parts.append(self._format_guidelines(ENVIRONMENT_GUIDELINES))
        parts.append(
            "## Your Task\n\n"
            "Generate the automation plan for this layout:\n\n"
            f"{self._dump(layout.to_json_dict())}\n\n"
            "Base monitoring points and routes on the actual component "
            "positions. Use realistic values for schedules and thresholds.\n\n"
            "Return ONLY the JSON object, no additional text."
        )
        return "\n\n".join(parts)

    def build_schedule_prompt(self, environment: VirtualEnvironment) -> str:
        """Build the prompt asking for an optimized schedule."""
        parts = [
            "## Role\n\n"
            "You optimize hydroponic schedules for plant growth and "
            "efficiency. Return one JSON object with the same shape as the "
            "current schedule: lighting, watering and nutrients."
        ]
        if self._config.include_legend:
            parts.append(self._format_legend())
        if self._config.include_guidelines:
            parts.append(self._format_guidelines(SCHEDULE_GUIDELINES))
        parts.append(
            "## Current Schedule\n\n"
            f"{self._dump(environment.schedule.to_json_dict())}"
        )
        parts.append(
            "## Layout\n\n" f"{self._dump(environment.layout.to_json_dict())}"
        )
        parts.append("Return ONLY the JSON object, no additional text.")
        return "\n\n".join(parts)

    def _format_legend(self) -> str:
        return (
            "## Component Codes\n\n"
            "Each matrix cell holds one of these codes:\n\n"
            f"{export_component_legend()}"
        )

    def _format_example(self, example: dict) -> str:
        return f"## Response Format\n\n{self._dump(example)}"

    def _format_guidelines(self, guidelines: list[str]) -> str:
        lines = [f"{i}. {text}" for i, text in enumerate(guidelines, start=1)]
        return "## Consider\n\n" + "\n".join(lines)

    def _format_layout_request(self, request: LayoutRequest) -> str:
        lines = [
            "## Your Task",
            "",
            f"Space size: {request.space_size:g}m²",
            f"Setup type: {request.setup_type}",
        ]
        if request.setup_type == SetupType.VERTICAL:
            lines.append(f"Max height: {request.max_height or DEFAULT_MAX_HEIGHT:g}m")

        lines += ["", "Selected plants:"]
        lines += [
            self._format_plant(request, plant_id, quantity)
            for plant_id, quantity in request.selected_plants.items()
        ]
        lines += ["", "Return ONLY the JSON object, no additional text."]
        return "\n".join(lines)

    def _format_plant(
        self, request: LayoutRequest, plant_id: str, quantity: int
    ) -> str:
        for index, plant in enumerate(request.plant_data):
            if plant.id == plant_id:
                try:
                    code = f", matrix code {int(plant_code(index))}"
                except ValueError:
                    code = ""
                return (
                    f"- {plant.name} (ID: {plant_id}{code}): {quantity} plants, "
                    f"growth time {plant.growth_time:g} days, "
                    f"space required {plant.space_required:g}m²"
                )
        return f"- {plant_id} (ID: {plant_id}): {quantity} plants"

    def _dump(self, data: dict) -> str:
        return json.dumps(data, indent=self._config.indent, ensure_ascii=False)


__all__ = [
    "DEFAULT_MAX_HEIGHT",
    "PromptBuilder",
    "PromptConfig",
]
