"""
Logging support for graphql_fetch.

Every module logs through ``logging.getLogger(__name__)``; this package holds
the formatters, filters and setup helper for applications that want the
package's output configured for them.
"""

from .filters import SensitiveDataFilter
from .formatters import ColoredFormatter, StructuredFormatter
from .groups import LogGroup, log_group
from .manager import LoggingConfig, LogLevel, setup_logging

__all__ = [
    "ColoredFormatter",
    "LogGroup",
    "LogLevel",
    "LoggingConfig",
    "SensitiveDataFilter",
    "StructuredFormatter",
    "log_group",
    "setup_logging",
]
