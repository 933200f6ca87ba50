"""Tests for the domain model."""

import pytest
from pydantic import ValidationError

from hydroplan.schema import HydroComponentType, SetupType

from .lib import (
    DEFAULT_PLANT_CATALOG,
    AutomationTask,
    LayoutAnalysis,
    LayoutRequest,
    MonitoringPoint,
    Schedule,
    VirtualEnvironment,
    WaterFlow,
)


def _layout(**overrides) -> LayoutAnalysis:
    data = {"matrix": [[[0, 1], [12, 0]]]}
    data.update(overrides)
    return LayoutAnalysis.model_validate(data)


class TestAliases:
    """Tests for camelCase wire names."""

    @pytest.mark.unit
    def test_accepts_camel_and_snake(self):
        """Both wire and Python names populate fields."""
        camel = LayoutRequest.model_validate({"spaceSize": 5, "setupType": "vertical"})
        snake = LayoutRequest(space_size=5, setup_type=SetupType.VERTICAL)
        assert camel == snake

    @pytest.mark.unit
    def test_dump_uses_wire_names(self):
        """JSON dump uses camelCase keys."""
        dumped = _layout().to_json_dict()
        assert "waterFlow" in dumped
        assert "environmentalZones" in dumped
        assert dumped["monitoringDevices"] == {"cameras": [], "drones": []}

    @pytest.mark.unit
    def test_water_flow_from_to(self):
        """Water flow edges use from/to on the wire."""
        flow = WaterFlow.model_validate({"from": [0, 0, 0], "to": [0, 1, 0]})
        assert flow.source == (0, 0, 0)
        assert flow.to_json_dict() == {"from": [0.0, 0.0, 0.0], "to": [0.0, 1.0, 0.0]}


class TestLayoutAnalysis:
    """Tests for layout constraints."""

    @pytest.mark.unit
    def test_defaults_fully_populated(self):
        """Optional sections default to empty collections."""
        layout = _layout()
        assert layout.recommendations == []
        assert layout.nutrient_distribution.primary == []
        assert layout.environmental_zones.lighting.direct == []
        assert layout.levels == 1

    @pytest.mark.unit
    def test_frozen(self):
        """Instances cannot be mutated."""
        layout = _layout()
        with pytest.raises(ValidationError):
            layout.levels = 2

    @pytest.mark.unit
    def test_horizontal_requires_single_level(self):
        """A horizontal layout with more than one level is rejected."""
        with pytest.raises(ValidationError, match="exactly 1 level"):
            _layout(setupType="horizontal", levels=3)

    @pytest.mark.unit
    def test_vertical_allows_levels(self):
        """Vertical layouts may declare several levels."""
        assert _layout(setupType="vertical", levels=3).levels == 3

    @pytest.mark.unit
    def test_rejects_undefined_code(self):
        """The model itself rejects codes outside the registry."""
        with pytest.raises(ValidationError):
            _layout(matrix=[[[8]]])

    @pytest.mark.unit
    def test_rejects_non_finite_coordinate(self):
        """Coordinates must be finite numbers."""
        with pytest.raises(ValidationError):
            _layout(maintenanceRoutes=[[0, float("nan"), 0]])

    @pytest.mark.unit
    def test_shape(self):
        """Shape reports levels, rows and widest row."""
        assert _layout().shape == (1, 2, 2)
        assert _layout(matrix=[[[HydroComponentType.EMPTY]]]).shape == (1, 1, 1)


class TestAutomationPlan:
    """Tests for automation plan constraints."""

    @pytest.mark.unit
    def test_task_defaults(self):
        """Task priority defaults to medium and collections to empty."""
        task = AutomationTask(id="t1", name="Check pH")
        assert task.priority == "medium"
        assert task.conditions == []
        assert task.actions == []

    @pytest.mark.unit
    def test_blank_task_id_rejected(self):
        """Task ids must be non-empty."""
        with pytest.raises(ValidationError):
            AutomationTask(id="", name="x")

    @pytest.mark.unit
    def test_duplicate_task_ids_rejected(self):
        """Task ids are unique within an environment."""
        task = AutomationTask(id="t1", name="a")
        with pytest.raises(ValidationError, match="duplicate"):
            VirtualEnvironment(layout=_layout(), automation_tasks=[task, task])

    @pytest.mark.unit
    def test_get_task(self):
        """Tasks can be looked up by id."""
        task = AutomationTask(id="t1", name="a")
        env = VirtualEnvironment(layout=_layout(), automation_tasks=[task])
        assert env.get_task("t1") == task
        assert env.get_task("missing") is None

    @pytest.mark.unit
    @pytest.mark.parametrize("frequency", [0, 3601])
    def test_sampling_interval_bounds(self, frequency):
        """Monitoring frequency must lie within 1..3600 seconds."""
        with pytest.raises(ValidationError):
            MonitoringPoint(position=(0, 0, 0), type="pH", frequency=frequency)

    @pytest.mark.unit
    def test_schedule_defaults(self):
        """Schedule defaults match the documented fallbacks."""
        schedule = Schedule()
        assert schedule.lighting.on == "06:00"
        assert schedule.lighting.off == "18:00"
        assert schedule.lighting.intensity == 80
        assert schedule.watering.frequency == 4
        assert schedule.watering.duration == 15
        assert schedule.watering.start_time == "08:00"
        assert schedule.nutrients.schedule == []

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["6:00", "24:00", "12:60", "noon"])
    def test_time_of_day_format(self, value):
        """Times must be zero-padded HH:MM."""
        with pytest.raises(ValidationError):
            Schedule.model_validate({"lighting": {"on": value}})


class TestPlantCatalog:
    """Tests for the built-in catalog."""

    @pytest.mark.unit
    def test_catalog_ids_sequential(self):
        """Catalog ids run 1..12."""
        assert [plant.id for plant in DEFAULT_PLANT_CATALOG] == [
            str(i) for i in range(1, 13)
        ]

    @pytest.mark.unit
    def test_catalog_entries(self):
        """Catalog entries carry growth time and area."""
        tomato = DEFAULT_PLANT_CATALOG[2]
        assert tomato.name == "Tomato"
        assert tomato.growth_time == 65
        assert tomato.space_required == 0.5
