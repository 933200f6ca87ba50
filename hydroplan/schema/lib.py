"""Authoritative component code registry for hydroponic layouts.

This module is the single source of truth for the integer codes stored in a
layout matrix and for the string vocabularies used by automation plans. It
provides:
- The HydroComponentType code set and its rich metadata
- Plant catalog index to code mapping
- Code validation used by the normalizer
- The code legend injected into generation prompts
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any


class ComponentCategory(str, Enum):
    """High-level groupings of matrix codes."""

    EMPTY = "empty"
    INFRASTRUCTURE = "infrastructure"
    MONITORING = "monitoring"
    PLANT = "plant"


class HydroComponentType(IntEnum):
    """Codes stored in a layout matrix cell.

    Ranges:
    - 0: empty cell
    - 1..9: structural and monitoring equipment (8 and 9 are reserved
      and not defined)
    - 10 and above: plants, where catalog index ``i`` maps to ``i + 10``
    """

    EMPTY = 0

    # Infrastructure
    WATER_PUMP = 1
    NUTRIENT_PUMP = 2
    SENSOR_NODE = 3
    VERTICAL_SUPPORT = 4
    LIGHT_PANEL = 5

    # Monitoring devices
    CAMERA = 6
    DRONE = 7

    # Plants
    CUCUMBER = 10
    STRAWBERRY = 11
    TOMATO = 12
    LETTUCE = 13
    BASIL = 14
    BELL_PEPPER = 15
    SPINACH = 16
    KALE = 17
    MINT = 18
    CHERRY_TOMATOES = 19
    ARUGULA = 20
    HERBS_MIX = 21


PLANT_CODE_OFFSET = 10


class SetupType(str, Enum):
    """Physical arrangement of the growing system."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class TaskType(str, Enum):
    """Kind of automation task."""

    MONITORING = "monitoring"
    MAINTENANCE = "maintenance"
    ALERT = "alert"
    CONTROL = "control"


class TaskFrequency(str, Enum):
    """Recurrence of an automation task."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ON_DEMAND = "on_demand"


class RouteFrequency(str, Enum):
    """Recurrence of a maintenance route."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ConditionOperator(str, Enum):
    """Comparison used by a task trigger condition."""

    GT = ">"
    LT = "<"
    EQ = "="
    GE = ">="
    LE = "<="


class Priority(str, Enum):
    """Automation task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Severity(str, Enum):
    """Alert severity."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class SensorType(str, Enum):
    """Quantity sampled at a monitoring point."""

    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    PH = "pH"
    NUTRIENT = "nutrient"
    LIGHT = "light"


@dataclass(frozen=True)
class ComponentMeta:
    """Metadata for a matrix code.

    Attributes:
        type: The code this entry describes.
        category: Grouping for the code.
        description: Short human-readable description used in prompts.
    """

    type: HydroComponentType
    category: ComponentCategory
    description: str

    def to_dict(self) -> dict[str, Any]:
        """Convert metadata to dictionary for schema export."""
        return {
            "code": int(self.type),
            "name": self.type.name,
            "category": self.category.value,
            "description": self.description,
        }


def _plant(code: HydroComponentType, description: str) -> ComponentMeta:
    return ComponentMeta(code, ComponentCategory.PLANT, description)


COMPONENT_REGISTRY: dict[HydroComponentType, ComponentMeta] = {
    HydroComponentType.EMPTY: ComponentMeta(
        HydroComponentType.EMPTY, ComponentCategory.EMPTY, "Unused cell"
    ),
    HydroComponentType.WATER_PUMP: ComponentMeta(
        HydroComponentType.WATER_PUMP,
        ComponentCategory.INFRASTRUCTURE,
        "Circulates water through the system",
    ),
    HydroComponentType.NUTRIENT_PUMP: ComponentMeta(
        HydroComponentType.NUTRIENT_PUMP,
        ComponentCategory.INFRASTRUCTURE,
        "Doses nutrient solution into the water loop",
    ),
    HydroComponentType.SENSOR_NODE: ComponentMeta(
        HydroComponentType.SENSOR_NODE,
        ComponentCategory.INFRASTRUCTURE,
        "Measures temperature, humidity, pH and nutrient levels",
    ),
    HydroComponentType.VERTICAL_SUPPORT: ComponentMeta(
        HydroComponentType.VERTICAL_SUPPORT,
        ComponentCategory.INFRASTRUCTURE,
        "Structural column carrying upper levels",
    ),
    HydroComponentType.LIGHT_PANEL: ComponentMeta(
        HydroComponentType.LIGHT_PANEL,
        ComponentCategory.INFRASTRUCTURE,
        "Grow light panel",
    ),
    HydroComponentType.CAMERA: ComponentMeta(
        HydroComponentType.CAMERA,
        ComponentCategory.MONITORING,
        "Fixed camera for visual plant monitoring",
    ),
    HydroComponentType.DRONE: ComponentMeta(
        HydroComponentType.DRONE,
        ComponentCategory.MONITORING,
        "Mobile drone for hard-to-reach areas",
    ),
    HydroComponentType.CUCUMBER: _plant(HydroComponentType.CUCUMBER, "Cucumber"),
    HydroComponentType.STRAWBERRY: _plant(HydroComponentType.STRAWBERRY, "Strawberry"),
    HydroComponentType.TOMATO: _plant(HydroComponentType.TOMATO, "Tomato"),
    HydroComponentType.LETTUCE: _plant(HydroComponentType.LETTUCE, "Lettuce"),
    HydroComponentType.BASIL: _plant(HydroComponentType.BASIL, "Basil"),
    HydroComponentType.BELL_PEPPER: _plant(
        HydroComponentType.BELL_PEPPER, "Bell pepper"
    ),
    HydroComponentType.SPINACH: _plant(HydroComponentType.SPINACH, "Spinach"),
    HydroComponentType.KALE: _plant(HydroComponentType.KALE, "Kale"),
    HydroComponentType.MINT: _plant(HydroComponentType.MINT, "Mint"),
    HydroComponentType.CHERRY_TOMATOES: _plant(
        HydroComponentType.CHERRY_TOMATOES, "Cherry tomatoes"
    ),
    HydroComponentType.ARUGULA: _plant(HydroComponentType.ARUGULA, "Arugula"),
    HydroComponentType.HERBS_MIX: _plant(HydroComponentType.HERBS_MIX, "Herbs mix"),
}

_DEFINED_CODES: frozenset[int] = frozenset(int(code) for code in HydroComponentType)


def get_component_meta(component_type: HydroComponentType) -> ComponentMeta:
    """Get metadata for a matrix code.

    Raises:
        KeyError: If the code is not in the registry.
    """
    return COMPONENT_REGISTRY[component_type]


def get_components_by_category(
    category: ComponentCategory,
) -> list[HydroComponentType]:
    """Get all codes in a category, in ascending order."""
    return [
        meta.type for meta in COMPONENT_REGISTRY.values() if meta.category == category
    ]


def is_valid_code(value: Any) -> bool:
    """Check whether a raw JSON value is a defined matrix code.

    Booleans are rejected even though they compare equal to 0 and 1.
    Integral floats such as ``10.0`` are accepted.

    Args:
        value: Any decoded JSON value.

    Returns:
        True if the value names a defined HydroComponentType.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        if not value.is_integer():
            return False
        value = int(value)
    return isinstance(value, int) and value in _DEFINED_CODES


def coerce_code(value: Any) -> HydroComponentType:
    """Map a raw JSON value to a code, using EMPTY for anything undefined."""
    if is_valid_code(value):
        return HydroComponentType(int(value))
    return HydroComponentType.EMPTY


def plant_code(catalog_index: int) -> HydroComponentType:
    """Get the matrix code for a plant at a catalog position.

    Args:
        catalog_index: Zero-based index into the plant catalog.

    Returns:
        The plant's HydroComponentType.

    Raises:
        ValueError: If the index has no defined plant code.
    """
    if catalog_index < 0 or not is_valid_code(catalog_index + PLANT_CODE_OFFSET):
        raise ValueError(f"No plant code for catalog index {catalog_index}")
    return HydroComponentType(catalog_index + PLANT_CODE_OFFSET)


def export_component_legend() -> str:
    """Render the code legend for prompt injection.

    Returns:
        One ``code: NAME - description`` line per defined code, ascending.
    """
    return "\n".join(
        f"{int(code)}: {code.name} - {get_component_meta(code).description}"
        for code in HydroComponentType
    )


def export_component_schema() -> list[dict[str, Any]]:
    """Export the registry as a list of plain dictionaries."""
    return [COMPONENT_REGISTRY[code].to_dict() for code in HydroComponentType]


__all__ = [
    "COMPONENT_REGISTRY",
    "PLANT_CODE_OFFSET",
    "ComponentCategory",
    "ComponentMeta",
    "ConditionOperator",
    "HydroComponentType",
    "Priority",
    "RouteFrequency",
    "SensorType",
    "SetupType",
    "Severity",
    "TaskFrequency",
    "TaskType",
    "coerce_code",
    "export_component_legend",
    "export_component_schema",
    "get_component_meta",
    "get_components_by_category",
    "is_valid_code",
    "plant_code",
]
