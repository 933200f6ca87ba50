"""Domain model for layouts, automation plans and schedules.

Example usage:
    >>> from hydroplan.domain import LayoutRequest
    >>> request = LayoutRequest(spaceSize=10, selectedPlants={"1": 3})
    >>> request.space_size
    10.0
"""

from .lib import (
    DEFAULT_PLANT_CATALOG,
    MAX_SAMPLING_INTERVAL,
    MIN_SAMPLING_INTERVAL,
    TIME_PATTERN,
    Alert,
    AutomationTask,
    Coordinate3D,
    DomainModel,
    EnvironmentalZones,
    HumidityZones,
    LayoutAnalysis,
    LayoutRequest,
    LightingSchedule,
    LightingZones,
    MaintenanceRoute,
    MonitoringDevices,
    MonitoringPoint,
    NutrientDistribution,
    NutrientDose,
    NutrientSchedule,
    PlantInfo,
    Schedule,
    TaskAction,
    TaskCondition,
    TaskSchedule,
    TemperatureZones,
    VirtualEnvironment,
    WateringSchedule,
    WaterFlow,
)

__all__ = [
    "DEFAULT_PLANT_CATALOG",
    "MIN_SAMPLING_INTERVAL",
    "MAX_SAMPLING_INTERVAL",
    "TIME_PATTERN",
    "Coordinate3D",
    "DomainModel",
    # Layout
    "PlantInfo",
    "LayoutRequest",
    "WaterFlow",
    "NutrientDistribution",
    "TemperatureZones",
    "HumidityZones",
    "LightingZones",
    "EnvironmentalZones",
    "MonitoringDevices",
    "LayoutAnalysis",
    # Automation plan
    "TaskSchedule",
    "TaskCondition",
    "TaskAction",
    "AutomationTask",
    "MonitoringPoint",
    "MaintenanceRoute",
    "Alert",
    "LightingSchedule",
    "WateringSchedule",
    "NutrientDose",
    "NutrientSchedule",
    "Schedule",
    "VirtualEnvironment",
]
