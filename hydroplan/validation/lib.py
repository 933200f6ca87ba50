"""Normalization of untrusted model output into domain objects.

Model responses are decoded JSON of unknown shape. The functions here map
any JSON object onto a fully populated, valid domain object:

- Missing or malformed sections become empty collections or documented
  fallback scalars.
- Invalid matrix cells become EMPTY; malformed coordinates are dropped.
- Caller-owned data (setup type, selected plants, plant catalog) always
  comes from the request, never from the response.

All public functions are total: they never raise on decoded JSON input.
Normalizing the JSON dump of a normalized object yields an equal object.
"""

import logging
import math
import re
import uuid
from collections.abc import Collection, Iterable
from enum import Enum
from typing import Any, TypeVar

from hydroplan.domain import (
    MAX_SAMPLING_INTERVAL,
    MIN_SAMPLING_INTERVAL,
    Alert,
    AutomationTask,
    Coordinate3D,
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
    Schedule,
    TaskAction,
    TaskCondition,
    TaskSchedule,
    TemperatureZones,
    VirtualEnvironment,
    WateringSchedule,
    WaterFlow,
)
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
    coerce_code,
    is_valid_code,
)

logger = logging.getLogger(__name__)

DEFAULT_SAMPLING_INTERVAL = 30.0

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

E = TypeVar("E", bound=Enum)


# =============================================================================
# Primitive helpers
# =============================================================================


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _field(raw: dict, name: str, snake_name: str | None = None) -> Any:
    """Read a wire (camelCase) field, accepting the snake_case spelling too."""
    if name in raw:
        return raw[name]
    if snake_name is not None:
        return raw.get(snake_name)
    return None


def _finite(value: Any) -> float | None:
    """Return value as a finite float, or None for anything else."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _integer(value: Any) -> int | None:
    number = _finite(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _strings(value: Any) -> list[str]:
    return [item for item in _as_list(value) if isinstance(item, str)]


def _enum(value: Any, enum_cls: type[E], default: E) -> E:
    """Match a string against enum values, case-insensitively."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return default
    wanted = value.strip().lower()
    for member in enum_cls:
        if str(member.value).lower() == wanted:
            return member
    return default


def _time_of_day(value: Any, default: str | None) -> str | None:
    """Normalize ``H:MM`` or ``HH:MM`` to zero-padded ``HH:MM``."""
    if not isinstance(value, str):
        return default
    match = _TIME_RE.match(value)
    if not match:
        return default
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return default
    return f"{hours:02d}:{minutes:02d}"


# =============================================================================
# Coordinates and matrix
# =============================================================================


def is_coordinate(value: Any) -> bool:
    """Check for exactly three finite, non-boolean numbers."""
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        return False
    return all(_finite(component) is not None for component in value)


def _coordinates(value: Any) -> list[Coordinate3D]:
    return [
        tuple(float(component) for component in item)
        for item in _as_list(value)
        if is_coordinate(item)
    ]


def _empty_matrix(space_size: float) -> list[list[list[HydroComponentType]]]:
    side = max(1, math.ceil(math.sqrt(space_size))) if space_size > 0 else 1
    return [[[HydroComponentType.EMPTY] * side for _ in range(side)]]


def normalize_matrix(
    raw: Any, space_size: float
) -> list[list[list[HydroComponentType]]]:
    """Normalize a layout matrix.

    A missing, empty or shallow matrix is replaced by a single level of
    ``ceil(sqrt(space_size))`` squared EMPTY cells. Otherwise every cell is
    mapped through ``coerce_code`` and non-list levels or rows are dropped.

    Args:
        raw: The decoded ``matrix`` value.
        space_size: Floor area in square meters, used to size a fallback.

    Returns:
        A matrix of valid codes indexed as ``[level][row][col]``.
    """
    levels = [
        [
            [coerce_code(cell) for cell in row]
            for row in level
            if isinstance(row, list)
        ]
        for level in _as_list(raw)
        if isinstance(level, list)
    ]
    if not any(levels):
        logger.debug("Matrix missing or malformed; using empty grid")
        return _empty_matrix(space_size)
    return levels


def normalize_water_flow(raw: Any) -> list[WaterFlow]:
    """Keep only water-flow entries whose endpoints are both coordinates."""
    flows = [
        WaterFlow(
            source=tuple(map(float, item["from"])),
            target=tuple(map(float, item["to"])),
        )
        for item in _as_list(raw)
        if isinstance(item, dict)
        and is_coordinate(item.get("from"))
        and is_coordinate(item.get("to"))
    ]
    dropped = len(_as_list(raw)) - len(flows)
    if dropped:
        logger.debug(f"Dropped {dropped} malformed water flow entries")
    return flows


def clamp_frequency(value: Any, default: float = DEFAULT_SAMPLING_INTERVAL) -> float:
    """Clamp a sampling interval to 1..3600 seconds.

    Missing, zero and non-numeric values use ``default``.
    """
    number = _finite(value)
    if not number:
        return default
    return min(max(number, MIN_SAMPLING_INTERVAL), MAX_SAMPLING_INTERVAL)


# =============================================================================
# Layout
# =============================================================================


def _levels(raw: Any, setup_type: SetupType, matrix: list) -> int:
    if setup_type != SetupType.VERTICAL:
        return 1
    levels = _integer(raw)
    if levels is not None and levels >= 1:
        return levels
    return max(1, len(matrix))


def normalize_layout(raw: Any, request: LayoutRequest) -> LayoutAnalysis:
    """Build a LayoutAnalysis from a decoded model response.

    Args:
        raw: Decoded JSON response. Non-objects are treated as empty.
        request: The request the layout answers.

    Returns:
        A fully populated LayoutAnalysis.
    """
    raw = _as_dict(raw)
    setup_type = SetupType(request.setup_type)
    matrix = normalize_matrix(raw.get("matrix"), request.space_size)

    nutrients = _as_dict(_field(raw, "nutrientDistribution", "nutrient_distribution"))
    zones = _as_dict(_field(raw, "environmentalZones", "environmental_zones"))
    temperature = _as_dict(zones.get("temperature"))
    humidity = _as_dict(zones.get("humidity"))
    lighting = _as_dict(zones.get("lighting"))
    devices = _as_dict(_field(raw, "monitoringDevices", "monitoring_devices"))

    return LayoutAnalysis(
        matrix=matrix,
        recommendations=_strings(raw.get("recommendations")),
        water_flow=normalize_water_flow(_field(raw, "waterFlow", "water_flow")),
        nutrient_distribution=NutrientDistribution(
            primary=_coordinates(nutrients.get("primary")),
            secondary=_coordinates(nutrients.get("secondary")),
        ),
        environmental_zones=EnvironmentalZones(
            temperature=TemperatureZones(
                high=_coordinates(temperature.get("high")),
                low=_coordinates(temperature.get("low")),
            ),
            humidity=HumidityZones(
                high=_coordinates(humidity.get("high")),
                low=_coordinates(humidity.get("low")),
            ),
            lighting=LightingZones(
                direct=_coordinates(lighting.get("direct")),
                indirect=_coordinates(lighting.get("indirect")),
            ),
        ),
        maintenance_routes=_coordinates(
            _field(raw, "maintenanceRoutes", "maintenance_routes")
        ),
        setup_type=setup_type,
        levels=_levels(raw.get("levels"), setup_type, matrix),
        monitoring_devices=MonitoringDevices(
            cameras=_coordinates(devices.get("cameras")),
            drones=_coordinates(devices.get("drones")),
        ),
        selected_plants=dict(request.selected_plants),
        plant_data=list(request.plant_data),
    )


# =============================================================================
# Automation tasks
# =============================================================================


def new_task_id(taken_ids: Collection[str] = ()) -> str:
    """Generate a ``task-`` id with nine hex characters, unused in taken_ids."""
    while True:
        task_id = f"task-{uuid.uuid4().hex[:9]}"
        if task_id not in taken_ids:
            return task_id


def _task_id(value: Any, taken_ids: Collection[str]) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str) and value.strip() and value.strip() not in taken_ids:
        return value.strip()
    return new_task_id(taken_ids)


def _task_schedule(raw: Any) -> TaskSchedule:
    raw = _as_dict(raw)
    days = _field(raw, "daysOfWeek", "days_of_week")
    day_of_month = _integer(_field(raw, "dayOfMonth", "day_of_month"))

    days_of_week = None
    if isinstance(days, list):
        days_of_week = [
            day
            for day in (_integer(item) for item in days)
            if day is not None and 0 <= day <= 6
        ]

    return TaskSchedule(
        frequency=_enum(raw.get("frequency"), TaskFrequency, TaskFrequency.ON_DEMAND),
        time_of_day=_time_of_day(_field(raw, "timeOfDay", "time_of_day"), None),
        days_of_week=days_of_week,
        day_of_month=day_of_month if day_of_month and 1 <= day_of_month <= 31 else None,
    )


def _conditions(raw: Any) -> list[TaskCondition]:
    conditions = []
    for item in _as_list(raw):
        if not isinstance(item, dict):
            continue
        sensor = _text(item.get("sensor")).strip()
        value = _finite(item.get("value"))
        operator = _enum(item.get("operator"), ConditionOperator, None)
        if not sensor or value is None or operator is None:
            continue
        conditions.append(
            TaskCondition(
                sensor=sensor,
                operator=operator,
                value=value,
                unit=_text(item.get("unit")),
            )
        )
    return conditions


def _component(value: Any) -> HydroComponentType | None:
    if is_valid_code(value):
        return coerce_code(value)
    if isinstance(value, str):
        name = value.strip().upper().replace(" ", "_")
        if name in HydroComponentType.__members__:
            return HydroComponentType[name]
    return None


def _actions(raw: Any) -> list[TaskAction]:
    actions = []
    for item in _as_list(raw):
        if not isinstance(item, dict):
            continue
        component = _component(item.get("component"))
        action = _text(item.get("action")).strip()
        if component is None or not action:
            continue
        unit = item.get("unit")
        actions.append(
            TaskAction(
                component=component,
                action=action,
                value=_finite(item.get("value")),
                unit=unit if isinstance(unit, str) else None,
            )
        )
    return actions


def normalize_task(raw: Any, taken_ids: Collection[str] = ()) -> AutomationTask:
    """Normalize one automation task.

    A missing, blank or already-taken id is replaced with a fresh one.
    Priority falls back to medium, and conditions or actions that cannot
    be interpreted are dropped.

    Args:
        raw: Decoded task object.
        taken_ids: Ids already used by other tasks in the same plan.

    Returns:
        A valid AutomationTask.
    """
    raw = _as_dict(raw)
    task_id = _task_id(raw.get("id"), taken_ids)
    return AutomationTask(
        id=task_id,
        name=_text(raw.get("name")).strip() or task_id,
        type=_enum(raw.get("type"), TaskType, TaskType.MONITORING),
        schedule=_task_schedule(raw.get("schedule")),
        conditions=_conditions(raw.get("conditions")),
        actions=_actions(raw.get("actions")),
        priority=_enum(raw.get("priority"), Priority, Priority.MEDIUM),
    )


def _tasks(raw: Any) -> list[AutomationTask]:
    tasks: list[AutomationTask] = []
    taken: set[str] = set()
    for item in _as_list(raw):
        if not isinstance(item, dict):
            continue
        task = normalize_task(item, taken)
        taken.add(task.id)
        tasks.append(task)
    return tasks


# =============================================================================
# Monitoring, routes and alerts
# =============================================================================


def _monitoring_points(raw: Any) -> list[MonitoringPoint]:
    points = []
    for item in _as_list(raw):
        if not isinstance(item, dict) or not is_coordinate(item.get("position")):
            continue
        sensor = _enum(item.get("type"), SensorType, None)
        if sensor is None:
            continue
        points.append(
            MonitoringPoint(
                position=tuple(map(float, item["position"])),
                type=sensor,
                frequency=clamp_frequency(item.get("frequency")),
                last_value=_finite(_field(item, "lastValue", "last_value")),
            )
        )
    return points


def _routes(raw: Any) -> list[MaintenanceRoute]:
    return [
        MaintenanceRoute(
            name=_text(item.get("name")).strip() or f"Route {index}",
            points=_coordinates(item.get("points")),
            frequency=_enum(
                item.get("frequency"), RouteFrequency, RouteFrequency.WEEKLY
            ),
        )
        for index, item in enumerate(_as_list(raw), start=1)
        if isinstance(item, dict)
    ]


def _alerts(raw: Any) -> list[Alert]:
    return [
        Alert(
            condition=_text(item.get("condition")),
            severity=_enum(item.get("severity"), Severity, Severity.INFO),
            message=_text(item.get("message")),
            actions=_strings(item.get("actions")),
        )
        for item in _as_list(raw)
        if isinstance(item, dict)
    ]


# =============================================================================
# Schedule
# =============================================================================


def _bounded(
    value: Any, default: float, low: float, high: float | None = None
) -> float:
    number = _finite(value)
    if number is None or number < low:
        return default
    return min(number, high) if high is not None else number


def _nutrient_doses(raw: Any) -> list[NutrientDose]:
    doses = []
    for item in _as_list(raw):
        if not isinstance(item, dict):
            continue
        time = _time_of_day(item.get("time"), None)
        amount = _finite(item.get("amount"))
        if time is None or amount is None or amount < 0:
            continue
        doses.append(
            NutrientDose(time=time, formula=_text(item.get("formula")), amount=amount)
        )
    return doses


def _unwrap_schedule(raw: dict) -> dict:
    """Accept ``{"schedule": {...}}`` as well as a bare schedule object."""
    sections = ("lighting", "watering", "nutrients")
    if any(key in raw for key in sections):
        return raw
    if isinstance(raw.get("schedule"), dict):
        return raw["schedule"]
    return raw


def normalize_schedule(raw: Any, fallback: Schedule | None = None) -> Schedule:
    """Normalize a schedule, filling gaps from ``fallback``.

    Args:
        raw: Decoded schedule object, optionally wrapped as
            ``{"schedule": {...}}``.
        fallback: Values used for missing or invalid fields. Defaults to
            lights 06:00-18:00 at 80%, watering 4 times a day for 15 minutes
            from 08:00, and no nutrient doses.

    Returns:
        A valid Schedule.
    """
    fallback = fallback or Schedule()
    raw = _unwrap_schedule(_as_dict(raw))

    lighting = _as_dict(raw.get("lighting"))
    watering = _as_dict(raw.get("watering"))
    nutrients = raw.get("nutrients")

    if isinstance(nutrients, dict) and isinstance(nutrients.get("schedule"), list):
        doses = _nutrient_doses(nutrients["schedule"])
        nutrient_schedule = NutrientSchedule(schedule=doses)
    else:
        nutrient_schedule = fallback.nutrients

    return Schedule(
        lighting=LightingSchedule(
            on=_time_of_day(lighting.get("on"), fallback.lighting.on),
            off=_time_of_day(lighting.get("off"), fallback.lighting.off),
            intensity=_bounded(
                lighting.get("intensity"), fallback.lighting.intensity, 0, 100
            ),
        ),
        watering=WateringSchedule(
            frequency=_bounded(
                watering.get("frequency"), fallback.watering.frequency, 0
            ),
            duration=_bounded(watering.get("duration"), fallback.watering.duration, 0),
            start_time=_time_of_day(
                _field(watering, "startTime", "start_time"),
                fallback.watering.start_time,
            ),
        ),
        nutrients=nutrient_schedule,
    )


# =============================================================================
# Virtual environment
# =============================================================================


def normalize_environment(raw: Any, layout: LayoutAnalysis) -> VirtualEnvironment:
    """Build a VirtualEnvironment from a decoded model response.

    Args:
        raw: Decoded JSON response. Non-objects are treated as empty.
        layout: The layout the plan was generated for.

    Returns:
        A fully populated VirtualEnvironment bound to ``layout``.
    """
    raw = _as_dict(raw)
    return VirtualEnvironment(
        layout=layout,
        automation_tasks=_tasks(_field(raw, "automationTasks", "automation_tasks")),
        monitoring_points=_monitoring_points(
            _field(raw, "monitoringPoints", "monitoring_points")
        ),
        maintenance_routes=_routes(
            _field(raw, "maintenanceRoutes", "maintenance_routes")
        ),
        alerts=_alerts(raw.get("alerts")),
        schedule=normalize_schedule(raw.get("schedule")),
    )


def task_ids(tasks: Iterable[AutomationTask]) -> set[str]:
    """Collect the ids of a task list."""
    return {task.id for task in tasks}


__all__ = [
    "DEFAULT_SAMPLING_INTERVAL",
    "clamp_frequency",
    "is_coordinate",
    "new_task_id",
    "normalize_environment",
    "normalize_layout",
    "normalize_matrix",
    "normalize_schedule",
    "normalize_task",
    "normalize_water_flow",
    "task_ids",
]
