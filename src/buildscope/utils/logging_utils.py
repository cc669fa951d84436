"""Logging setup for build runs."""

import logging
from typing import Optional

from ..config.build_config import BuildConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: Optional[BuildConfig] = None) -> int:
    """
    Configure logging for a build run.

    Args:
        config: Build configuration (loads from environment if None)

    Returns:
        The level applied to the package logger
    """
    config = config or BuildConfig()
    if config.verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(config.log_level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("buildscope").setLevel(level)
    return level
