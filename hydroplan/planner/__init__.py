"""Convenience constructor for a fully wired PlanGenerator.

Example usage:
    >>> from hydroplan.planner import create_planner
    >>> planner = create_planner("gemini-2.0-flash", api_keys=["key-a", "key-b"])
"""

from .lib import create_planner, resolve_model

__all__ = ["create_planner", "resolve_model"]
