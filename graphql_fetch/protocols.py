"""
Capability protocols consumed by the GraphQL client.

The client never assumes concrete implementations for its cache store, its
HTTP transport or its file extractor. Anything matching these protocols can
be injected through the constructor.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Protocol, Tuple, runtime_checkable

from .models import GraphQLResult


@runtime_checkable
class Cache(Protocol):
    """
    Minimal cache store: read and write results by structural key.

    Keys are :class:`CacheKey` instances. They are hashable, so a plain dict
    keyed on them works; stores that serialize keys can use ``canonical()``.
    """

    def get(self, key: Any) -> Optional[GraphQLResult]:
        ...

    def set(self, key: Any, value: GraphQLResult) -> None:
        ...


@runtime_checkable
class FetchResponseLike(Protocol):
    """Response returned by a transport call."""

    status: int
    status_text: str

    async def text(self) -> str:
        ...

    async def json(self) -> Any:
        ...


class FetchFunction(Protocol):
    """Transport call: ``await fetch(url, options)``."""

    async def __call__(self, url: str, options: Dict[str, Any]) -> FetchResponseLike:
        ...


class ExtractedFiles(NamedTuple):
    """
    Output of a file extractor.

    Attributes:
        clone: Copy of the input with every file replaced by ``None``
        files: ``(file, paths)`` pairs in discovery order; each path is a
            dotted location of the file inside the input
    """

    clone: Any
    files: List[Tuple[Any, List[str]]]


class FileExtractor(Protocol):
    def __call__(self, value: Mapping[str, Any]) -> ExtractedFiles:
        ...


class ErrorObserver(Protocol):
    """Callback invoked with every errored result instead of logging it."""

    def __call__(self, *, result: GraphQLResult, operation: Any) -> None:
        ...
