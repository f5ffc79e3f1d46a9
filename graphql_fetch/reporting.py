"""
Error reporting for errored GraphQL results.

A client reports every errored result through exactly one strategy, chosen
from its configuration: notify a user-supplied observer, or write grouped
diagnostics to the ``graphql_fetch.errors`` logger. Reporting is a side
effect only and never changes the result.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from .logging.groups import log_group
from .models import GraphQLResult
from .protocols import ErrorObserver

error_logger = logging.getLogger("graphql_fetch.errors")


class ErrorReporter(ABC):
    """Strategy for reporting an errored result."""

    @abstractmethod
    def report(self, result: GraphQLResult, operation: Any = None) -> None:
        ...


class NotifyObserver(ErrorReporter):
    """Forward ``result`` and ``operation`` to a callback; nothing is logged."""

    def __init__(self, callback: ErrorObserver):
        self.callback = callback

    def report(self, result: GraphQLResult, operation: Any = None) -> None:
        self.callback(result=result, operation=operation)


class LogToConsole(ErrorReporter):
    """
    Log one group per error category present in the result.

    Categories are independent: a result carrying several error fields
    produces several groups.
    """

    def __init__(self, enabled: bool = True, logger: Optional[logging.Logger] = None):
        self.enabled = enabled
        self.logger = logger or error_logger

    def report(self, result: GraphQLResult, operation: Any = None) -> None:
        if not self.enabled:
            return

        if result.fetch_error is not None:
            with log_group(self.logger, "FETCH ERROR:") as group:
                group.log(repr(result.fetch_error))

        if result.http_error is not None:
            with log_group(self.logger, "HTTP ERROR:") as group:
                group.log(result.http_error.model_dump(by_alias=True))

        if result.graphql_errors is not None:
            with log_group(self.logger, "GRAPHQL ERROR:") as group:
                for graphql_error in result.graphql_errors:
                    group.log(graphql_error)


def select_reporter(on_error: Optional[ErrorObserver], log_errors: bool) -> ErrorReporter:
    """An observer, when given, takes precedence over logging."""
    if on_error is not None:
        return NotifyObserver(on_error)
    return LogToConsole(enabled=log_errors)
