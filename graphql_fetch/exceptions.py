"""
Exceptions for the GraphQL fetch client.

Only construction problems are raised. Transport, HTTP and GraphQL failures
are captured in :class:`graphql_fetch.models.GraphQLResult` and returned to
the caller instead.
"""

from __future__ import annotations

from typing import Any


class GraphQLFetchError(Exception):
    """
    Base exception for the graphql_fetch package.

    Attributes:
        message: Human-readable error message
        details: Additional error details as keyword arguments
    """

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = kwargs


class ConfigError(GraphQLFetchError):
    """
    Raised when a client is constructed with an invalid configuration.

    The message is prefixed with ``GraphQLClient:`` so it reads well in a
    traceback far away from the construction site.
    """

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(f"GraphQLClient: {message}", **kwargs)
        self.reason = message
