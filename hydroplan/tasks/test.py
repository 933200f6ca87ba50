"""Tests for automation task management."""

import pytest

from hydroplan.domain import AutomationTask, LayoutAnalysis, VirtualEnvironment

from .lib import (
    DuplicateTaskError,
    TaskNotFoundError,
    add_task,
    remove_task,
    update_task,
)


@pytest.fixture
def environment() -> VirtualEnvironment:
    layout = LayoutAnalysis.model_validate({"matrix": [[[1, 0], [0, 13]]]})
    return VirtualEnvironment(
        layout=layout,
        automation_tasks=[
            AutomationTask(id="ph-check", name="Check pH", priority="high"),
            AutomationTask(
                id="flush",
                name="Flush lines",
                type="maintenance",
                schedule={"frequency": "weekly", "daysOfWeek": [1]},
            ),
        ],
    )


class TestAddTask:
    """Tests for add_task."""

    @pytest.mark.unit
    def test_add_model(self, environment):
        """A task model is appended to a new environment."""
        task = AutomationTask(id="lights", name="Lights on")
        updated = add_task(environment, task)

        assert [t.id for t in updated.automation_tasks] == [
            "ph-check",
            "flush",
            "lights",
        ]
        assert len(environment.automation_tasks) == 2

    @pytest.mark.unit
    def test_add_mapping_synthesizes_id(self, environment):
        """A mapping without an id is normalized with a fresh id."""
        updated = add_task(environment, {"name": "Top up", "priority": "urgent"})

        task = updated.automation_tasks[-1]
        assert task.id.startswith("task-")
        assert task.priority == "medium"

    @pytest.mark.unit
    def test_add_mapping_keeps_given_id(self, environment):
        """A mapping with a free id keeps it."""
        updated = add_task(environment, {"id": "dose", "name": "Dose A"})
        assert updated.get_task("dose").name == "Dose A"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "task",
        [
            AutomationTask(id="flush", name="Again"),
            {"id": "flush", "name": "Again"},
            {"id": " flush ", "name": "Again"},
        ],
    )
    def test_duplicate_rejected(self, environment, task):
        """Adding a task with a taken id raises DuplicateTaskError."""
        with pytest.raises(DuplicateTaskError, match="flush"):
            add_task(environment, task)


class TestUpdateTask:
    """Tests for update_task."""

    @pytest.mark.unit
    def test_shallow_merge(self, environment):
        """Updated fields change and the rest are preserved."""
        updated = update_task(environment, "flush", {"priority": "critical"})

        task = updated.get_task("flush")
        assert task.priority == "critical"
        assert task.name == "Flush lines"
        assert task.type == "maintenance"
        assert task.schedule.days_of_week == [1]
        assert environment.get_task("flush").priority == "medium"

    @pytest.mark.unit
    def test_update_renormalizes(self, environment):
        """Invalid values in updates are normalized away."""
        updated = update_task(
            environment,
            "ph-check",
            {"conditions": [{"sensor": "pH", "operator": ">", "value": 6.5}, {}]},
        )
        conditions = updated.get_task("ph-check").conditions
        assert len(conditions) == 1
        assert conditions[0].value == 6.5

    @pytest.mark.unit
    def test_rename(self, environment):
        """A task can move to a free id in place."""
        updated = update_task(environment, "flush", {"id": "flush-weekly"})
        assert [t.id for t in updated.automation_tasks] == [
            "ph-check",
            "flush-weekly",
        ]

    @pytest.mark.unit
    def test_blank_id_keeps_current(self, environment):
        """A blank id in updates does not rename the task."""
        updated = update_task(environment, "flush", {"id": "  ", "name": "Rinse"})
        assert updated.get_task("flush").name == "Rinse"

    @pytest.mark.unit
    def test_rename_onto_existing(self, environment):
        """Renaming onto another task's id raises DuplicateTaskError."""
        with pytest.raises(DuplicateTaskError):
            update_task(environment, "flush", {"id": "ph-check"})

    @pytest.mark.unit
    def test_unknown_task(self, environment):
        """Updating a missing task raises TaskNotFoundError."""
        with pytest.raises(TaskNotFoundError) as exc_info:
            update_task(environment, "nope", {"name": "x"})
        assert exc_info.value.task_id == "nope"
        assert isinstance(exc_info.value, LookupError)


class TestRemoveTask:
    """Tests for remove_task."""

    @pytest.mark.unit
    def test_remove(self, environment):
        """Removing a task leaves the others and the input untouched."""
        updated = remove_task(environment, "ph-check")

        assert [t.id for t in updated.automation_tasks] == ["flush"]
        assert environment.get_task("ph-check") is not None
        assert updated.layout == environment.layout

    @pytest.mark.unit
    def test_remove_unknown(self, environment):
        """Removing a missing task raises TaskNotFoundError."""
        with pytest.raises(TaskNotFoundError):
            remove_task(environment, "nope")


@pytest.mark.unit
def test_round_trip_preserves_other_sections(sample_environment):
    """Task edits leave layout, monitoring and schedule untouched."""
    updated = remove_task(add_task(sample_environment, {"name": "Dose"}), "ph-check")

    assert [t.name for t in updated.automation_tasks] == ["Dose"]
    assert updated.layout == sample_environment.layout
    assert updated.schedule == sample_environment.schedule
