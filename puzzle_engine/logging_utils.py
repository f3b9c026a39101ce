"""Logging setup for applications embedding the puzzle engine."""

import logging
from typing import Optional

from .config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic stream handler on the root logger.

    Args:
        level: Log level name; defaults to the LOG_LEVEL setting.
    """
    level = level or get_settings().LOG_LEVEL
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("PIL").setLevel(logging.WARNING)
