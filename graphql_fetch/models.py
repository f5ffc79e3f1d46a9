"""
GraphQL request and result models.

This module defines the operation sent to the endpoint, the normalized result
returned from every request, and the structural key used to memoize results.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class GraphQLOperation:
    """GraphQL operation: a document plus its variables and optional name."""

    query: str
    variables: Optional[Dict[str, Any]] = None
    operation_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation, omitting unset fields."""
        result: Dict[str, Any] = {"query": self.query}

        if self.variables is not None:
            result["variables"] = self.variables
        if self.operation_name is not None:
            result["operationName"] = self.operation_name

        return result

    @classmethod
    def coerce(cls, value: Union[GraphQLOperation, Mapping[str, Any]]) -> GraphQLOperation:
        """
        Build an operation from either an operation or a plain mapping.

        Mappings may use the wire spelling ``operationName`` or the Python
        spelling ``operation_name``.

        Raises:
            TypeError: If value is neither an operation nor a mapping
            ValueError: If the mapping has no ``query``
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(
                f"operation must be a GraphQLOperation or a mapping, got {type(value).__name__}"
            )
        if "query" not in value:
            raise ValueError("operation is missing 'query'")

        return cls(
            query=value["query"],
            variables=value.get("variables"),
            operation_name=value.get("operationName", value.get("operation_name")),
        )


class HTTPErrorInfo(BaseModel):
    """Details of a non-2xx response, with the body kept verbatim."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: int = Field(description="HTTP status code")
    status_text: str = Field(default="", alias="statusText", description="HTTP reason phrase")
    body: str = Field(default="", description="Raw response body text")


@dataclass
class GraphQLResult:
    """
    Normalized outcome of a GraphQL request.

    ``error`` is true iff at least one of ``graphql_errors``, ``fetch_error``
    or ``http_error`` is present. ``data`` may be present together with
    ``graphql_errors`` when the server returned a partial result.
    """

    error: bool = False
    data: Any = None
    graphql_errors: Optional[List[Any]] = None
    fetch_error: Optional[BaseException] = None
    http_error: Optional[HTTPErrorInfo] = None

    @classmethod
    def from_classification(
        cls,
        data: Any = None,
        graphql_errors: Optional[List[Any]] = None,
        fetch_error: Optional[BaseException] = None,
        http_error: Optional[HTTPErrorInfo] = None,
    ) -> GraphQLResult:
        """Build a result, deriving ``error`` from the error fields present."""
        error_found = (
            graphql_errors is not None or fetch_error is not None or http_error is not None
        )
        return cls(
            error=error_found,
            data=data,
            graphql_errors=graphql_errors,
            fetch_error=fetch_error,
            http_error=http_error,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation; absent fields are omitted."""
        result: Dict[str, Any] = {"error": self.error}

        if self.data is not None:
            result["data"] = self.data
        if self.graphql_errors is not None:
            result["graphQLErrors"] = self.graphql_errors
        if self.fetch_error is not None:
            result["fetchError"] = self.fetch_error
        if self.http_error is not None:
            result["httpError"] = self.http_error.model_dump(by_alias=True)

        return result

    @classmethod
    def from_dict(cls, value: Mapping[str, Any]) -> GraphQLResult:
        """Rebuild a result from :meth:`to_dict` output."""
        http_error = value.get("httpError")
        return cls.from_classification(
            data=value.get("data"),
            graphql_errors=value.get("graphQLErrors"),
            fetch_error=value.get("fetchError"),
            http_error=HTTPErrorInfo.model_validate(http_error) if http_error else None,
        )


@dataclass
class CacheKey:
    """
    Structural identity of a request, used by cache stores.

    Keys hash by their canonical form, so dict-backed stores can use them
    directly even though the fields hold mutable values.
    """

    operation: Any
    fetch_options: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        operation = self.operation
        if isinstance(operation, GraphQLOperation):
            operation = operation.to_dict()
        return {"operation": operation, "fetchOptions": self.fetch_options}

    def canonical(self) -> str:
        """Sorted-key JSON of :meth:`to_dict`."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"), default=repr)

    def __hash__(self) -> int:
        return hash(self.canonical())


@dataclass
class RequestOptions:
    """Per-call options accepted by ``request`` and ``get_cache_key``."""

    fetch_options_overrides: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, value: Union[RequestOptions, Mapping[str, Any], None]) -> RequestOptions:
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        overrides = value.get("fetch_options_overrides", value.get("fetchOptionsOverrides"))
        return cls(fetch_options_overrides=dict(overrides or {}))
