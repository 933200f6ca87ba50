"""Logging micro API for hydroplan."""

from .lib import get_logger, mask_secret, setup_logging

__all__ = ["get_logger", "mask_secret", "setup_logging"]
