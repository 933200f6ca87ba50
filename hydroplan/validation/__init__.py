"""Normalization of model responses into validated domain objects.

Example usage:
    >>> from hydroplan.validation import normalize_layout
    >>> layout = normalize_layout({"matrix": [[[0, 8, 12]]]}, request)
    >>> layout.matrix
    [[[0, 0, 12]]]
"""

from .lib import (
    DEFAULT_SAMPLING_INTERVAL,
    clamp_frequency,
    is_coordinate,
    new_task_id,
    normalize_environment,
    normalize_layout,
    normalize_matrix,
    normalize_schedule,
    normalize_task,
    normalize_water_flow,
    task_ids,
)

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
