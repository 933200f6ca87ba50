"""Component code registry and shared vocabularies.

Example usage:
    >>> from hydroplan.schema import HydroComponentType, coerce_code
    >>> coerce_code(12)
    <HydroComponentType.TOMATO: 12>
    >>> coerce_code(8)
    <HydroComponentType.EMPTY: 0>
"""

from .lib import (
    COMPONENT_REGISTRY,
    PLANT_CODE_OFFSET,
    ComponentCategory,
    ComponentMeta,
    ConditionOperator,
    HydroComponentType,
    Priority,
    RouteFrequency,
    SensorType,
    SetupType,
    Severity,
    TaskFrequency,
    TaskType,
    coerce_code,
    export_component_legend,
    export_component_schema,
    get_component_meta,
    get_components_by_category,
    is_valid_code,
    plant_code,
)

__all__ = [
    # Codes
    "HydroComponentType",
    "ComponentCategory",
    "ComponentMeta",
    "COMPONENT_REGISTRY",
    "PLANT_CODE_OFFSET",
    # Vocabularies
    "SetupType",
    "TaskType",
    "TaskFrequency",
    "RouteFrequency",
    "ConditionOperator",
    "Priority",
    "Severity",
    "SensorType",
    # Functions
    "coerce_code",
    "is_valid_code",
    "plant_code",
    "get_component_meta",
    "get_components_by_category",
    "export_component_legend",
    "export_component_schema",
]
