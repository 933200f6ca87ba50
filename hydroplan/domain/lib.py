"""Validated domain model for hydroponic plans.

These models are the contract between the generation pipeline and its
callers. Every instance is immutable and fully populated: optional sections
are always present as empty collections, never absent keys.

Field names are snake_case in Python and camelCase on the wire
(``water_flow`` <-> ``waterFlow``). Both spellings are accepted on input.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from hydroplan.schema import (
    ConditionOperator,
    HydroComponentType,
    Priority,
    RouteFrequency,
    SensorType,
    SetupType,
    Severity,
    TaskFrequency,
    TaskType,
)

# Sampling interval bounds for monitoring points, in seconds
MIN_SAMPLING_INTERVAL = 1
MAX_SAMPLING_INTERVAL = 3600

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

FiniteFloat = Annotated[float, Field(allow_inf_nan=False)]
Coordinate3D = tuple[FiniteFloat, FiniteFloat, FiniteFloat]
TimeOfDay = Annotated[str, Field(pattern=TIME_PATTERN)]


class DomainModel(BaseModel):
    """Base for all domain models: frozen, camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=True,
    )

    def to_json_dict(self) -> dict:
        """Dump to a JSON-compatible dict using wire (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Layout
# =============================================================================


class PlantInfo(DomainModel):
    """A plant catalog entry supplied by the caller.

    Attributes:
        id: Catalog identifier.
        name: Display name.
        growth_time: Days from planting to harvest.
        space_required: Growing area per plant in square meters.
    """

    id: str
    name: str
    growth_time: Annotated[float, Field(ge=0)] = 0
    space_required: Annotated[float, Field(ge=0)] = 0


class LayoutRequest(DomainModel):
    """Parameters for a layout generation request."""

    space_size: Annotated[float, Field(gt=0)]
    selected_plants: dict[str, Annotated[int, Field(ge=0)]] = Field(
        default_factory=dict
    )
    plant_data: list[PlantInfo] = Field(default_factory=list)
    setup_type: SetupType = SetupType.HORIZONTAL
    max_height: Annotated[float, Field(gt=0)] | None = None


class WaterFlow(DomainModel):
    """A directed water-flow edge between two grid positions."""

    source: Coordinate3D = Field(alias="from")
    target: Coordinate3D = Field(alias="to")


class NutrientDistribution(DomainModel):
    primary: list[Coordinate3D] = Field(default_factory=list)
    secondary: list[Coordinate3D] = Field(default_factory=list)


class TemperatureZones(DomainModel):
    high: list[Coordinate3D] = Field(default_factory=list)
    low: list[Coordinate3D] = Field(default_factory=list)


class HumidityZones(DomainModel):
    high: list[Coordinate3D] = Field(default_factory=list)
    low: list[Coordinate3D] = Field(default_factory=list)


class LightingZones(DomainModel):
    direct: list[Coordinate3D] = Field(default_factory=list)
    indirect: list[Coordinate3D] = Field(default_factory=list)


class EnvironmentalZones(DomainModel):
    temperature: TemperatureZones = Field(default_factory=TemperatureZones)
    humidity: HumidityZones = Field(default_factory=HumidityZones)
    lighting: LightingZones = Field(default_factory=LightingZones)


class MonitoringDevices(DomainModel):
    cameras: list[Coordinate3D] = Field(default_factory=list)
    drones: list[Coordinate3D] = Field(default_factory=list)


class LayoutAnalysis(DomainModel):
    """A generated spatial plan.

    Attributes:
        matrix: Component codes indexed as ``matrix[level][row][col]``.
        recommendations: Free-text advice from the model.
        water_flow: Directed flow edges.
        nutrient_distribution: Primary and secondary dosing positions.
        environmental_zones: Temperature, humidity and lighting zones.
        maintenance_routes: Waypoints for maintenance access.
        setup_type: Horizontal or vertical arrangement.
        levels: Number of growing levels (always 1 when horizontal).
        monitoring_devices: Camera and drone positions.
        selected_plants: Caller's plant id -> quantity map.
        plant_data: Caller's plant catalog.
    """

    matrix: list[list[list[HydroComponentType]]]
    recommendations: list[str] = Field(default_factory=list)
    water_flow: list[WaterFlow] = Field(default_factory=list)
    nutrient_distribution: NutrientDistribution = Field(
        default_factory=NutrientDistribution
    )
    environmental_zones: EnvironmentalZones = Field(default_factory=EnvironmentalZones)
    maintenance_routes: list[Coordinate3D] = Field(default_factory=list)
    setup_type: SetupType = SetupType.HORIZONTAL
    levels: Annotated[int, Field(ge=1)] = 1
    monitoring_devices: MonitoringDevices = Field(default_factory=MonitoringDevices)
    selected_plants: dict[str, int] = Field(default_factory=dict)
    plant_data: list[PlantInfo] = Field(default_factory=list)

    @model_validator(mode="after")
    def _horizontal_is_single_level(self) -> "LayoutAnalysis":
        if self.setup_type == SetupType.HORIZONTAL and self.levels != 1:
            raise ValueError("horizontal layouts must have exactly 1 level")
        return self

    @property
    def shape(self) -> tuple[int, int, int]:
        """Matrix dimensions as (levels, rows, widest row)."""
        rows = max((len(level) for level in self.matrix), default=0)
        cols = max((len(row) for level in self.matrix for row in level), default=0)
        return len(self.matrix), rows, cols


# =============================================================================
# Automation plan
# =============================================================================


class TaskSchedule(DomainModel):
    frequency: TaskFrequency = TaskFrequency.ON_DEMAND
    time_of_day: TimeOfDay | None = None
    days_of_week: list[Annotated[int, Field(ge=0, le=6)]] | None = None
    day_of_month: Annotated[int, Field(ge=1, le=31)] | None = None


class TaskCondition(DomainModel):
    """Sensor threshold that triggers a task."""

    sensor: str
    operator: ConditionOperator
    value: FiniteFloat
    unit: str = ""


class TaskAction(DomainModel):
    """Action performed against one physical component."""

    component: HydroComponentType
    action: str
    value: FiniteFloat | None = None
    unit: str | None = None


class AutomationTask(DomainModel):
    """A scheduled or condition-triggered automation task."""

    id: Annotated[str, Field(min_length=1)]
    name: str
    type: TaskType = TaskType.MONITORING
    schedule: TaskSchedule = Field(default_factory=TaskSchedule)
    conditions: list[TaskCondition] = Field(default_factory=list)
    actions: list[TaskAction] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM


class MonitoringPoint(DomainModel):
    position: Coordinate3D
    type: SensorType
    frequency: Annotated[
        float, Field(ge=MIN_SAMPLING_INTERVAL, le=MAX_SAMPLING_INTERVAL)
    ] = 30
    last_value: FiniteFloat | None = None


class MaintenanceRoute(DomainModel):
    name: str
    points: list[Coordinate3D] = Field(default_factory=list)
    frequency: RouteFrequency = RouteFrequency.WEEKLY


class Alert(DomainModel):
    condition: str = ""
    severity: Severity = Severity.INFO
    message: str = ""
    actions: list[str] = Field(default_factory=list)


class LightingSchedule(DomainModel):
    on: TimeOfDay = "06:00"
    off: TimeOfDay = "18:00"
    intensity: Annotated[float, Field(ge=0, le=100)] = 80


class WateringSchedule(DomainModel):
    """Watering cadence: ``frequency`` times per day for ``duration`` minutes."""

    frequency: Annotated[float, Field(ge=0)] = 4
    duration: Annotated[float, Field(ge=0)] = 15
    start_time: TimeOfDay = "08:00"


class NutrientDose(DomainModel):
    time: TimeOfDay
    formula: str
    amount: Annotated[float, Field(ge=0)]


class NutrientSchedule(DomainModel):
    schedule: list[NutrientDose] = Field(default_factory=list)


class Schedule(DomainModel):
    """Combined lighting, watering and nutrient timetable."""

    lighting: LightingSchedule = Field(default_factory=LightingSchedule)
    watering: WateringSchedule = Field(default_factory=WateringSchedule)
    nutrients: NutrientSchedule = Field(default_factory=NutrientSchedule)


class VirtualEnvironment(DomainModel):
    """A layout together with its automation plan."""

    layout: LayoutAnalysis
    automation_tasks: list[AutomationTask] = Field(default_factory=list)
    monitoring_points: list[MonitoringPoint] = Field(default_factory=list)
    maintenance_routes: list[MaintenanceRoute] = Field(default_factory=list)
    alerts: list[Alert] = Field(default_factory=list)
    schedule: Schedule = Field(default_factory=Schedule)

    @model_validator(mode="after")
    def _task_ids_unique(self) -> "VirtualEnvironment":
        seen: set[str] = set()
        for task in self.automation_tasks:
            if task.id in seen:
                raise ValueError(f"duplicate automation task id '{task.id}'")
            seen.add(task.id)
        return self

    def get_task(self, task_id: str) -> AutomationTask | None:
        """Find a task by id."""
        for task in self.automation_tasks:
            if task.id == task_id:
                return task
        return None


# =============================================================================
# Plant catalog
# =============================================================================

DEFAULT_PLANT_CATALOG: tuple[PlantInfo, ...] = tuple(
    PlantInfo(id=str(index + 1), name=name, growth_time=days, space_required=area)
    for index, (name, days, area) in enumerate(
        [
            ("Cucumber", 55, 0.4),
            ("Strawberry", 60, 0.3),
            ("Tomato", 65, 0.5),
            ("Lettuce", 30, 0.2),
            ("Basil", 25, 0.1),
            ("Bell Pepper", 70, 0.4),
            ("Spinach", 40, 0.2),
            ("Kale", 45, 0.3),
            ("Mint", 30, 0.15),
            ("Cherry Tomatoes", 55, 0.3),
            ("Arugula", 35, 0.2),
            ("Herbs Mix", 28, 0.25),
        ]
    )
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
