"""
Formatters for graphql_fetch log output.

Error reports are written as groups: a title record followed by indented
entry records, each tagged with the group title (see :mod:`.groups`). The
structured formatter turns that tag into a ``group`` field; the console
formatter keeps the indented text and only colors the level.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "error_group",
}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        entry: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }

        group = getattr(record, "error_group", None)
        if group is not None:
            entry["group"] = group
            message = message.strip()
        entry["message"] = message

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS
        )
        return json.dumps(entry, default=str, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """Text formatter that colors the level name of warnings and errors."""

    LEVEL_COLORS = {
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, use_colors: bool = False):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def formatMessage(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        if color is None:
            return super().formatMessage(record)

        levelname = record.levelname
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = levelname
