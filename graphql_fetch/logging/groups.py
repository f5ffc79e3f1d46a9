"""Grouped log output, the logging counterpart of a collapsible console group."""

import logging
from contextlib import contextmanager
from typing import Any, Iterator


class LogGroup:
    """Writes indented lines under a group title."""

    def __init__(self, logger: logging.Logger, title: str, level: int, indent: str = "  "):
        self.logger = logger
        self.title = title
        self.level = level
        self.indent = indent

    def log(self, entry: Any) -> None:
        self.logger.log(self.level, "%s%s", self.indent, entry, extra={"error_group": self.title})


@contextmanager
def log_group(logger: logging.Logger, title: str, level: int = logging.ERROR) -> Iterator[LogGroup]:
    """
    Emit ``title``, yield a :class:`LogGroup` for the entries, then close it.

    Title and entry records carry the title as ``record.error_group``.

    Examples:
        ```python
        with log_group(logger, "HTTP ERROR:") as group:
            group.log(result.http_error)
        ```
    """
    logger.log(level, title, extra={"error_group": title})
    try:
        yield LogGroup(logger, title, level)
    finally:
        logger.debug("end of group %s", title)
