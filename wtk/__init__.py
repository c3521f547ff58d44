"""WTK - Workspace Token Kit."""

from loguru import logger

__version__ = "1.0.0"

# Silent when used as a library; setup_logging turns output on
logger.disable("wtk")
