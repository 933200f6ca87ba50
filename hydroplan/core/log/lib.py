"""Core logging implementation for hydroplan."""

import logging
import sys
from typing import Optional

__all__ = ["get_logger", "setup_logging", "mask_secret"]


def setup_logging(level: int | str = logging.INFO, stream=sys.stderr) -> None:
    """Configure basic logging.

    Args:
        level: Logging level, as a number or a name such as "DEBUG".
        stream: Output stream.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Name of the logger.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name or "hydroplan")


def mask_secret(secret: str, visible: int = 8) -> str:
    """Shorten a secret to a loggable prefix.

    Args:
        secret: Credential or token.
        visible: Number of leading characters to keep.

    Returns:
        The prefix followed by an ellipsis, or "***" for short secrets.
    """
    if len(secret) <= visible:
        return "***"
    return f"{secret[:visible]}..."
