"""
Centralized logging initialization to avoid circular imports.
Every stationmap module logs through the logger defined here.
"""

import logging
from typing import Optional

from stationmap.configs.custom_logging import format_pydantic, setup_logging
from stationmap.configs.settings_models import LoggingConfig

__all__ = ["logger", "initialize_loggers", "format_pydantic"]

logger = setup_logging(__name__, level=LoggingConfig().verbosity_level)


def initialize_loggers(
    verbose: Optional[bool] = True,
    verbose_level: Optional[str] = None,
) -> logging.Logger:
    """
    Initialize the stationmap logger.

    Args:
        verbose: Whether verbose logging is enabled; when False only errors are shown
        verbose_level: Verbosity level (DEBUG, INFO, etc.)
            If None, uses the level from settings.

    Returns:
        The configured logger instance
    """
    if verbose_level is None:
        verbose_level = LoggingConfig().verbosity_level

    if verbose is None:
        verbose = True

    global logger
    logger = setup_logging(__name__, level=verbose_level if verbose else "ERROR")

    return logger
