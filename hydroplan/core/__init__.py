"""Core utilities shared across hydroplan."""

from .log import get_logger, mask_secret, setup_logging

__all__ = ["get_logger", "mask_secret", "setup_logging"]
