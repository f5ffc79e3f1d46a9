"""
Default HTTP transport for the GraphQL client.

The client talks to the network through any ``fetch(url, options)``
coroutine. This module provides the aiohttp implementation that is installed
as the process-wide default, and the hooks to replace or remove it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Optional

import aiohttp

from .protocols import FetchFunction

logger = logging.getLogger(__name__)


def _reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


@dataclass
class FetchResponse:
    """Fully buffered HTTP response."""

    status: int
    status_text: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    async def text(self) -> str:
        return self.body

    async def json(self) -> Any:
        return json.loads(self.body)


class AiohttpFetch:
    """
    Transport backed by ``aiohttp``.

    Options built by the client are mapped onto ``ClientSession.request``:
    ``method``, ``headers`` and ``body`` (sent as ``data``); every other key is
    passed through unchanged, so aiohttp settings such as ``timeout`` or
    ``ssl`` can be given as fetch options.

    Examples:
        Reusing one session for many requests:
        ```python
        async with AiohttpFetch() as fetch:
            client = GraphQLClient(url="https://api.example.com/graphql", fetch=fetch)
            result = await client.request({"query": "{ viewer { login } }"})
        ```
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, **session_kwargs: Any):
        """
        Initialize the transport.

        Args:
            session: Session to reuse; it is never closed by this transport
            **session_kwargs: Arguments for sessions created by this transport
        """
        self._session = session
        self._owns_session = False
        self._session_kwargs = session_kwargs

    async def __aenter__(self) -> AiohttpFetch:
        if self._session is None:
            self._session = aiohttp.ClientSession(**self._session_kwargs)
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None
            self._owns_session = False

    async def __call__(self, url: str, options: Dict[str, Any]) -> FetchResponse:
        request_kwargs = dict(options)
        method = request_kwargs.pop("method", "POST")
        headers = request_kwargs.pop("headers", None)
        body = request_kwargs.pop("body", None)

        if self._session is not None:
            return await self._send(self._session, method, url, headers, body, request_kwargs)

        # One-shot session when used outside a context manager
        async with aiohttp.ClientSession(**self._session_kwargs) as session:
            return await self._send(session, method, url, headers, body, request_kwargs)

    async def _send(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]],
        body: Any,
        request_kwargs: Dict[str, Any],
    ) -> FetchResponse:
        async with session.request(
            method, url, headers=headers, data=body, **request_kwargs
        ) as response:
            text = await response.text()
            logger.debug(f"{method} {url} -> {response.status}")
            return FetchResponse(
                status=response.status,
                status_text=response.reason or _reason_phrase(response.status),
                headers=dict(response.headers),
                body=text,
            )


_default_fetch: Optional[FetchFunction] = AiohttpFetch()


def polyfill_fetch(fetch: Optional[FetchFunction]) -> None:
    """
    Replace the process-wide default transport.

    Passing ``None`` removes it; clients constructed afterwards must then be
    given ``fetch`` explicitly.
    """
    global _default_fetch
    _default_fetch = fetch


def get_default_fetch() -> Optional[FetchFunction]:
    """Return the process-wide default transport, if any."""
    return _default_fetch
