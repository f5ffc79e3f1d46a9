"""
Logging setup for graphql_fetch.

This module provides the logging configuration model and the function that
applies it to the standard library logging tree.
"""

import logging
import sys
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from .filters import SensitiveDataFilter
from .formatters import ColoredFormatter, StructuredFormatter

PACKAGE_LOGGER = "graphql_fetch"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Default logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    enable_console: bool = Field(default=True, description="Enable console logging")
    enable_structured: bool = Field(
        default=False, description="Enable structured JSON logging"
    )
    use_colors: Optional[bool] = Field(
        default=None, description="Color console levels (None: only when stderr is a terminal)"
    )

    # Component-specific log levels, e.g. {"graphql_fetch.transport": "DEBUG"}
    component_levels: Dict[str, LogLevel] = Field(
        default_factory=dict, description="Per-component log levels"
    )


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure the ``graphql_fetch`` logger tree.

    Calling it again replaces the handler installed by a previous call.

    Args:
        config: Logging configuration

    Returns:
        The package logger
    """
    config = config or LoggingConfig()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, config.level.value))

    for handler in list(package_logger.handlers):
        if getattr(handler, "_graphql_fetch_handler", False):
            package_logger.removeHandler(handler)

    if config.enable_console:
        handler = logging.StreamHandler(sys.stderr)
        use_colors = config.use_colors
        if use_colors is None:
            use_colors = sys.stderr.isatty()

        formatter: logging.Formatter
        if config.enable_structured:
            formatter = StructuredFormatter()
        else:
            formatter = ColoredFormatter(config.format, use_colors=use_colors)

        handler.setFormatter(formatter)
        handler.setLevel(getattr(logging, config.level.value))
        handler.addFilter(SensitiveDataFilter())
        handler._graphql_fetch_handler = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)

    for component, level in config.component_levels.items():
        logging.getLogger(component).setLevel(getattr(logging, level.value))

    package_logger.debug("Logging system configured")
    return package_logger
