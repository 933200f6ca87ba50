"""Tests for response normalization."""

import re

import pytest

from hydroplan.domain import (
    DEFAULT_PLANT_CATALOG,
    LayoutAnalysis,
    LayoutRequest,
    Schedule,
)
from hydroplan.schema import HydroComponentType

from .lib import (
    clamp_frequency,
    is_coordinate,
    normalize_environment,
    normalize_layout,
    normalize_matrix,
    normalize_schedule,
    normalize_task,
    normalize_water_flow,
)

TASK_ID = re.compile(r"^task-[0-9a-f]{9}$")


@pytest.fixture
def request_h() -> LayoutRequest:
    return LayoutRequest(
        space_size=4,
        selected_plants={"1": 3},
        plant_data=list(DEFAULT_PLANT_CATALOG[:2]),
        setup_type="horizontal",
    )


@pytest.fixture
def request_v() -> LayoutRequest:
    return LayoutRequest(space_size=10, setup_type="vertical", max_height=2)


@pytest.fixture
def layout(request_h) -> LayoutAnalysis:
    return normalize_layout({"matrix": [[[10, 0], [1, 6]]]}, request_h)


@pytest.fixture
def raw_environment() -> dict:
    return {
        "automationTasks": [
            {
                "id": "ph",
                "name": "pH check",
                "type": "monitoring",
                "schedule": {"frequency": "hourly", "timeOfDay": "7:30"},
                "conditions": [
                    {"sensor": "ph", "operator": ">", "value": 6.5, "unit": "pH"},
                    {"sensor": "ph", "operator": "!=", "value": 1},
                ],
                "actions": [
                    {"component": 2, "action": "dose", "value": 5, "unit": "ml"},
                    {"component": "water pump", "action": "start"},
                    {"component": 9, "action": "noop"},
                ],
                "priority": "urgent",
            },
            {"name": "no id"},
            {"id": "ph", "name": "duplicate"},
            "not a task",
        ],
        "monitoringPoints": [
            {"position": [0, 0, 0], "type": "temperature", "frequency": 0},
            {"position": [0, 0, 1], "type": "pH", "frequency": 99999},
            {"position": [0, 0], "type": "light"},
            {"position": [0, 0, 2], "type": "sound"},
        ],
        "maintenanceRoutes": [
            {"name": "Daily", "points": [[0, 0, 0], [1, "x", 0]], "frequency": "daily"}
        ],
        "alerts": [{"condition": "ph > 7", "message": "High pH", "actions": ["dose", 3]}],
        "schedule": {"lighting": {"on": "05:00"}, "watering": {"duration": -1}},
    }


class TestCoordinates:
    """Tests for coordinate validation."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [[0, 1, 2], (0.5, 1, -2), [1e10, 0, 0]])
    def test_valid(self, value):
        assert is_coordinate(value)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value",
        [
            [0, 1],
            [0, 1, 2, 3],
            [0, "1", 2],
            [True, 0, 0],
            [float("nan"), 0, 0],
            [float("inf"), 0, 0],
            [10**400, 0, 0],
            None,
            "0,0,0",
            {"x": 0},
        ],
    )
    def test_invalid(self, value):
        """Wrong arity, non-numbers, booleans and non-finite values fail."""
        assert not is_coordinate(value)


class TestMatrix:
    """Tests for matrix normalization."""

    @pytest.mark.unit
    def test_invalid_cells_become_empty(self):
        """Undefined codes map to EMPTY; valid cells are unchanged."""
        matrix = normalize_matrix([[[0, 8, 12], [9, 21, "x"], [None, 1.0, True]]], 4)
        assert matrix == [[[0, 0, 12], [0, 21, 0], [0, 1, 0]]]

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", [None, [], "grid", 5, [1, 2, 3], [[1, 2]], [[]]])
    def test_malformed_synthesized(self, raw):
        """Missing or shallow matrices become an empty square grid."""
        assert normalize_matrix(raw, 4) == [[[0, 0], [0, 0]]]

    @pytest.mark.unit
    @pytest.mark.parametrize("space,side", [(1, 1), (2, 2), (9, 3), (10, 4), (0.2, 1)])
    def test_synthesized_size(self, space, side):
        """The fallback grid is ceil(sqrt(space)) on each side."""
        matrix = normalize_matrix(None, space)
        assert len(matrix) == 1
        assert len(matrix[0]) == side
        assert all(len(row) == side for row in matrix[0])

    @pytest.mark.unit
    def test_non_list_rows_dropped(self):
        """Rows that are not lists are discarded."""
        assert normalize_matrix([[[1], 5, [2]]], 4) == [[[1], [2]]]


class TestWaterFlow:
    """Tests for water flow filtering."""

    @pytest.mark.unit
    def test_keeps_only_well_formed(self):
        """Only entries with two valid coordinates survive."""
        flows = normalize_water_flow(
            [
                {"from": [0, 0, 0], "to": [0, 1, 0]},
                {"from": [0, 0], "to": [0, 1, 0]},
                {"from": [0, 0, 0]},
                {"from": [0, 0, 0], "to": ["a", 1, 0]},
                [0, 0, 0],
                None,
            ]
        )
        assert len(flows) == 1
        assert flows[0].source == (0, 0, 0)
        assert flows[0].target == (0, 1, 0)

    @pytest.mark.unit
    def test_not_a_list(self):
        assert normalize_water_flow({"from": [0, 0, 0]}) == []


class TestNormalizeLayout:
    """Tests for layout normalization."""

    @pytest.mark.unit
    def test_empty_response_fully_populated(self, request_h):
        """An empty object yields a complete layout."""
        layout = normalize_layout({}, request_h)
        assert layout.matrix == [[[0, 0], [0, 0]]]
        assert layout.recommendations == []
        assert layout.water_flow == []
        assert layout.environmental_zones.humidity.high == []
        assert layout.monitoring_devices.cameras == []
        assert layout.levels == 1

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", [None, [], "text", 42])
    def test_non_object_treated_as_empty(self, request_h, raw):
        """Non-object input never raises."""
        assert normalize_layout(raw, request_h).levels == 1

    @pytest.mark.unit
    def test_horizontal_forces_one_level(self, request_h):
        """Horizontal setups have one level whatever the response says."""
        raw = {"matrix": [[[0]], [[0]]], "levels": 5, "setupType": "vertical"}
        layout = normalize_layout(raw, request_h)
        assert layout.levels == 1
        assert layout.setup_type == "horizontal"

    @pytest.mark.unit
    def test_vertical_levels_accepted_as_given(self, request_v):
        """A positive integer level count is kept for vertical setups."""
        raw = {"matrix": [[[0]], [[0]]], "levels": 4}
        assert normalize_layout(raw, request_v).levels == 4

    @pytest.mark.unit
    @pytest.mark.parametrize("levels", [None, 0, -1, "3", 2.5, True])
    def test_vertical_levels_fallback(self, request_v, levels):
        """Invalid level counts fall back to the matrix depth."""
        raw = {"matrix": [[[0]], [[0]], [[0]]], "levels": levels}
        assert normalize_layout(raw, request_v).levels == 3

    @pytest.mark.unit
    def test_request_echo_overrides_response(self, request_h):
        """Selected plants and catalog come from the request only."""
        raw = {"selectedPlants": {"9": 99}, "plantData": [{"id": "x", "name": "y"}]}
        layout = normalize_layout(raw, request_h)
        assert layout.selected_plants == {"1": 3}
        assert [plant.id for plant in layout.plant_data] == ["1", "2"]

    @pytest.mark.unit
    def test_invalid_coordinates_dropped(self, request_h):
        """Coordinate collections keep only valid coordinates."""
        raw = {
            "nutrientDistribution": {"primary": [[0, 0, 0], [1, 2]], "secondary": "x"},
            "environmentalZones": {"lighting": {"direct": [[0, 0, None], [1, 1, 1]]}},
            "maintenanceRoutes": [[0, 0, 0], "bad"],
            "monitoringDevices": {"drones": [[1, 1, 1], [True, 1, 1]]},
            "recommendations": ["Keep basil warm", 12, None],
        }
        layout = normalize_layout(raw, request_h)
        assert layout.nutrient_distribution.primary == [(0, 0, 0)]
        assert layout.nutrient_distribution.secondary == []
        assert layout.environmental_zones.lighting.direct == [(1, 1, 1)]
        assert layout.maintenance_routes == [(0, 0, 0)]
        assert layout.monitoring_devices.drones == [(1, 1, 1)]
        assert layout.recommendations == ["Keep basil warm"]

    @pytest.mark.unit
    def test_idempotent(self, request_v):
        """Normalizing a normalized layout's dump changes nothing."""
        raw = {
            "matrix": [[[1, 8, 12]], [[5, 0, 33]]],
            "levels": 2,
            "waterFlow": [{"from": [0, 0, 0], "to": [1, 0, 2]}, {"from": 1}],
            "monitoringDevices": {"cameras": [[0, 0, 4]]},
        }
        once = normalize_layout(raw, request_v)
        twice = normalize_layout(once.to_json_dict(), request_v)
        assert once == twice


class TestNormalizeTask:
    """Tests for single task normalization."""

    @pytest.mark.unit
    def test_missing_id_synthesized(self):
        """A task without an id gets a task-xxxxxxxxx id."""
        task = normalize_task({"name": "Water"})
        assert TASK_ID.match(task.id)
        assert task.priority == "medium"

    @pytest.mark.unit
    @pytest.mark.parametrize("task_id", ["", "   ", None, ["x"]])
    def test_blank_id_synthesized(self, task_id):
        assert TASK_ID.match(normalize_task({"id": task_id}).id)

    @pytest.mark.unit
    def test_taken_id_replaced(self):
        """An id already in use is replaced."""
        task = normalize_task({"id": "a"}, taken_ids={"a"})
        assert task.id != "a"
        assert TASK_ID.match(task.id)

    @pytest.mark.unit
    def test_numeric_id_kept_as_string(self):
        assert normalize_task({"id": 7}).id == "7"

    @pytest.mark.unit
    def test_schedule_fields(self):
        """Schedule times are zero padded and out-of-range days dropped."""
        task = normalize_task(
            {
                "schedule": {
                    "frequency": "weekly",
                    "timeOfDay": "7:05",
                    "daysOfWeek": [0, 3, 7, "1", 6.0],
                    "dayOfMonth": 40,
                }
            }
        )
        assert task.schedule.frequency == "weekly"
        assert task.schedule.time_of_day == "07:05"
        assert task.schedule.days_of_week == [0, 3, 6]
        assert task.schedule.day_of_month is None

    @pytest.mark.unit
    def test_unknown_enums_fall_back(self):
        """Unknown type, frequency and priority use defaults."""
        task = normalize_task(
            {"type": "party", "schedule": {"frequency": "yearly"}, "priority": "asap"}
        )
        assert task.type == "monitoring"
        assert task.schedule.frequency == "on_demand"
        assert task.priority == "medium"


class TestNormalizeEnvironment:
    """Tests for automation plan normalization."""

    @pytest.mark.unit
    def test_tasks(self, raw_environment, layout):
        """Tasks get unique ids and sanitized conditions and actions."""
        env = normalize_environment(raw_environment, layout)
        tasks = env.automation_tasks

        assert len(tasks) == 3
        assert tasks[0].id == "ph"
        assert tasks[0].priority == "medium"
        assert tasks[0].schedule.time_of_day == "07:30"
        assert len(tasks[0].conditions) == 1
        assert [a.component for a in tasks[0].actions] == [
            HydroComponentType.NUTRIENT_PUMP,
            HydroComponentType.WATER_PUMP,
        ]
        assert TASK_ID.match(tasks[1].id)
        assert tasks[2].id != "ph"
        assert len({t.id for t in tasks}) == 3

    @pytest.mark.unit
    def test_monitoring_points(self, raw_environment, layout):
        """Frequencies are clamped; invalid positions and sensors dropped."""
        points = normalize_environment(raw_environment, layout).monitoring_points
        assert [(p.type, p.frequency) for p in points] == [
            ("temperature", 30),
            ("pH", 3600),
        ]

    @pytest.mark.unit
    def test_routes_and_alerts(self, raw_environment, layout):
        """Routes drop bad points; alert severity defaults to info."""
        env = normalize_environment(raw_environment, layout)
        assert env.maintenance_routes[0].points == [(0, 0, 0)]
        assert env.maintenance_routes[0].frequency == "daily"
        assert env.alerts[0].severity == "info"
        assert env.alerts[0].actions == ["dose"]

    @pytest.mark.unit
    def test_schedule_fallbacks(self, raw_environment, layout):
        """Missing and invalid schedule fields use the documented defaults."""
        schedule = normalize_environment(raw_environment, layout).schedule
        assert schedule.lighting.on == "05:00"
        assert schedule.lighting.off == "18:00"
        assert schedule.watering.duration == 15
        assert schedule.nutrients.schedule == []

    @pytest.mark.unit
    def test_layout_bound(self, layout):
        """The environment carries the given layout."""
        assert normalize_environment({}, layout).layout == layout

    @pytest.mark.unit
    def test_idempotent(self, raw_environment, layout):
        """Normalizing a normalized environment's dump changes nothing."""
        once = normalize_environment(raw_environment, layout)
        twice = normalize_environment(once.to_json_dict(), layout)
        assert once == twice


class TestNormalizeSchedule:
    """Tests for schedule normalization."""

    @pytest.mark.unit
    def test_defaults(self):
        assert normalize_schedule(None) == Schedule()

    @pytest.mark.unit
    def test_fallback_used_for_gaps(self):
        """Missing fields come from the fallback schedule."""
        current = normalize_schedule({"lighting": {"on": "04:00", "intensity": 55}})
        updated = normalize_schedule({"watering": {"frequency": 6}}, fallback=current)
        assert updated.lighting.on == "04:00"
        assert updated.lighting.intensity == 55
        assert updated.watering.frequency == 6
        assert updated.watering.start_time == "08:00"

    @pytest.mark.unit
    def test_wrapped_schedule(self):
        """A schedule nested under a "schedule" key is unwrapped."""
        schedule = normalize_schedule({"schedule": {"lighting": {"off": "20:00"}}})
        assert schedule.lighting.off == "20:00"

    @pytest.mark.unit
    def test_intensity_clamped(self):
        assert normalize_schedule({"lighting": {"intensity": 150}}).lighting.intensity == 100

    @pytest.mark.unit
    def test_nutrient_doses_filtered(self):
        """Doses need a valid time and a non-negative amount."""
        schedule = normalize_schedule(
            {
                "nutrients": {
                    "schedule": [
                        {"time": "9:00", "formula": "A", "amount": 5},
                        {"time": "25:00", "formula": "B", "amount": 5},
                        {"time": "10:00", "formula": "C", "amount": -1},
                    ]
                }
            }
        )
        assert [(d.time, d.formula) for d in schedule.nutrients.schedule] == [
            ("09:00", "A")
        ]


class TestClampFrequency:
    """Tests for sampling interval clamping."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,expected",
        [(None, 30), (0, 30), ("5", 30), (0.5, 1), (-10, 1), (60, 60), (10**6, 3600)],
    )
    def test_clamp(self, value, expected):
        assert clamp_frequency(value) == expected
