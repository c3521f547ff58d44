"""Logging setup for WTK."""

import sys

from loguru import logger

_logging_configured = False


def setup_logging(level: str = "WARNING", force: bool = False) -> None:
    """Configure the global logger with a single stderr sink.

    Args:
        level: Minimum level to emit
        force: Reconfigure even if logging was already set up
    """
    global _logging_configured

    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()
    logger.enable("wtk")
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>",
        colorize=True,
    )


__all__ = ["logger", "setup_logging"]
