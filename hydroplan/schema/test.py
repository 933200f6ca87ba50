"""Tests for the component code registry."""

import pytest

from .lib import (
    COMPONENT_REGISTRY,
    ComponentCategory,
    HydroComponentType,
    coerce_code,
    export_component_legend,
    export_component_schema,
    get_component_meta,
    get_components_by_category,
    is_valid_code,
    plant_code,
)


class TestRegistry:
    """Tests for registry completeness."""

    @pytest.mark.unit
    def test_every_code_registered(self):
        """Every enum member has metadata."""
        assert set(COMPONENT_REGISTRY) == set(HydroComponentType)

    @pytest.mark.unit
    def test_categories_match_ranges(self):
        """Plant codes start at 10, equipment is 1..9."""
        for code in HydroComponentType:
            category = get_component_meta(code).category
            if code == 0:
                assert category == ComponentCategory.EMPTY
            elif code < 10:
                assert category in (
                    ComponentCategory.INFRASTRUCTURE,
                    ComponentCategory.MONITORING,
                )
            else:
                assert category == ComponentCategory.PLANT

    @pytest.mark.unit
    def test_monitoring_devices(self):
        """Cameras and drones are monitoring devices."""
        assert get_components_by_category(ComponentCategory.MONITORING) == [
            HydroComponentType.CAMERA,
            HydroComponentType.DRONE,
        ]


class TestCodeValidation:
    """Tests for raw value validation."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [int(code) for code in HydroComponentType])
    def test_defined_codes_are_identity(self, value):
        """Every defined code maps to itself."""
        assert is_valid_code(value)
        assert coerce_code(value) == value

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [8, 9, 22, -1, 100, 10.5, "10", None, [1], True])
    def test_undefined_values_become_empty(self, value):
        """Reserved, out-of-range and non-integer values map to EMPTY."""
        assert not is_valid_code(value)
        assert coerce_code(value) == HydroComponentType.EMPTY

    @pytest.mark.unit
    def test_integral_float_accepted(self):
        """A float with no fractional part names its integer code."""
        assert coerce_code(12.0) == HydroComponentType.TOMATO


class TestPlantCode:
    """Tests for catalog index mapping."""

    @pytest.mark.unit
    def test_offset(self):
        """Catalog index i maps to code i + 10."""
        assert plant_code(0) == HydroComponentType.CUCUMBER
        assert plant_code(11) == HydroComponentType.HERBS_MIX

    @pytest.mark.unit
    @pytest.mark.parametrize("index", [-1, 12, 50])
    def test_undefined_index(self, index):
        """Indices without a defined plant code are rejected."""
        with pytest.raises(ValueError, match="No plant code"):
            plant_code(index)


class TestExport:
    """Tests for prompt and schema export."""

    @pytest.mark.unit
    def test_legend_lists_all_codes(self):
        """Legend has one line per code in ascending order."""
        lines = export_component_legend().splitlines()
        assert lines[0] == "0: EMPTY - Unused cell"
        assert "12: TOMATO - Tomato" in lines
        assert len(lines) == len(HydroComponentType)

    @pytest.mark.unit
    def test_schema_export(self):
        """Schema export carries code, name and category."""
        schema = export_component_schema()
        pump = next(entry for entry in schema if entry["code"] == 1)
        assert pump["name"] == "WATER_PUMP"
        assert pump["category"] == "infrastructure"
