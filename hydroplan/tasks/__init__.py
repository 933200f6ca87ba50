"""Automation task management for virtual environments.

Example usage:
    >>> from hydroplan.tasks import add_task, remove_task
    >>> environment = add_task(environment, {"name": "Check pH"})
    >>> environment = remove_task(environment, environment.automation_tasks[-1].id)
"""

from .lib import (
    DuplicateTaskError,
    TaskNotFoundError,
    add_task,
    remove_task,
    update_task,
)

__all__ = [
    "DuplicateTaskError",
    "TaskNotFoundError",
    "add_task",
    "remove_task",
    "update_task",
]
