"""Editing helpers for the automation tasks of a virtual environment.

Every helper returns a new VirtualEnvironment and leaves its input alone.
Tasks supplied as raw mappings go through the same normalizer as model
output, so hand-written tasks obey the same rules as generated ones.
"""

import logging
from collections.abc import Mapping
from typing import Any

from hydroplan.domain import AutomationTask, VirtualEnvironment
from hydroplan.validation import normalize_task, task_ids

logger = logging.getLogger(__name__)


class TaskNotFoundError(LookupError):
    """Raised when a task id does not exist in the environment."""

    def __init__(self, task_id: str):
        super().__init__(f"No automation task with id '{task_id}'")
        self.task_id = task_id


class DuplicateTaskError(ValueError):
    """Raised when a task id is already used in the environment."""

    def __init__(self, task_id: str):
        super().__init__(f"Automation task id '{task_id}' already exists")
        self.task_id = task_id


def _requested_id(raw: Mapping[str, Any]) -> str | None:
    value = raw.get("id")
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _with_tasks(
    environment: VirtualEnvironment, tasks: list[AutomationTask]
) -> VirtualEnvironment:
    return environment.model_copy(update={"automation_tasks": tasks})


def add_task(
    environment: VirtualEnvironment,
    task: AutomationTask | Mapping[str, Any],
) -> VirtualEnvironment:
    """Append a task to the environment.

    Args:
        environment: The environment to extend.
        task: A task, or a raw mapping that is normalized first. A mapping
            without an id gets a freshly generated one.

    Returns:
        A new environment with the task appended.

    Raises:
        DuplicateTaskError: If the task id is already in use.
    """
    taken = task_ids(environment.automation_tasks)

    if isinstance(task, AutomationTask):
        new_task = task
    else:
        requested = _requested_id(task)
        if requested is not None and requested in taken:
            raise DuplicateTaskError(requested)
        new_task = normalize_task(dict(task), taken)

    if new_task.id in taken:
        raise DuplicateTaskError(new_task.id)

    logger.info(f"Added automation task '{new_task.id}'")
    return _with_tasks(environment, [*environment.automation_tasks, new_task])


def update_task(
    environment: VirtualEnvironment,
    task_id: str,
    updates: Mapping[str, Any],
) -> VirtualEnvironment:
    """Shallow-merge ``updates`` into a task and renormalize it.

    A blank or missing ``id`` in ``updates`` keeps the current id.

    Raises:
        TaskNotFoundError: If ``task_id`` does not exist.
        DuplicateTaskError: If the update renames the task onto another
            task's id.
    """
    current = environment.get_task(task_id)
    if current is None:
        raise TaskNotFoundError(task_id)

    others = task_ids(environment.automation_tasks) - {task_id}
    merged = {**current.to_json_dict(), **updates}
    new_id = _requested_id(updates) or task_id
    if new_id in others:
        raise DuplicateTaskError(new_id)
    merged["id"] = new_id

    updated = normalize_task(merged, others)
    tasks = [
        updated if task.id == task_id else task
        for task in environment.automation_tasks
    ]
    logger.info(f"Updated automation task '{task_id}'")
    return _with_tasks(environment, tasks)


def remove_task(environment: VirtualEnvironment, task_id: str) -> VirtualEnvironment:
    """Remove a task by id.

    Raises:
        TaskNotFoundError: If ``task_id`` does not exist.
    """
    if environment.get_task(task_id) is None:
        raise TaskNotFoundError(task_id)

    tasks = [task for task in environment.automation_tasks if task.id != task_id]
    logger.info(f"Removed automation task '{task_id}'")
    return _with_tasks(environment, tasks)


__all__ = [
    "DuplicateTaskError",
    "TaskNotFoundError",
    "add_task",
    "remove_task",
    "update_task",
]
