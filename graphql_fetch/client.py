"""
GraphQL client implementation.

This module provides the client that sends GraphQL operations to a single
endpoint and normalizes every outcome into a :class:`GraphQLResult`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

import aiohttp

from .config.models import ClientSettings
from .exceptions import ConfigError
from .files import extract_files, file_field
from .models import CacheKey, GraphQLOperation, GraphQLResult, HTTPErrorInfo, RequestOptions
from .protocols import Cache, ErrorObserver, FetchFunction, FetchResponseLike, FileExtractor
from .reporting import ErrorReporter, select_reporter
from .transport import get_default_fetch

logger = logging.getLogger(__name__)

OperationInput = Union[GraphQLOperation, Mapping[str, Any]]
OptionsInput = Union[RequestOptions, Mapping[str, Any], None]


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _drop_header(headers: Dict[str, str], name: str) -> None:
    """Remove every spelling of a header name."""
    for key in [k for k in headers if k.lower() == name.lower()]:
        del headers[key]


def _merge_headers(*layers: Mapping[str, str]) -> Dict[str, str]:
    """Merge header mappings case-insensitively; later layers win."""
    merged: Dict[str, str] = {}
    for layer in layers:
        for key, value in layer.items():
            _drop_header(merged, key)
            merged[key] = value
    return merged


class GraphQLClient:
    """
    GraphQL-over-HTTP client.

    Requests never raise for network, HTTP or GraphQL failures: each one is
    captured in the returned result, whose ``error`` flag tells the caller
    whether anything went wrong. Errored results are also reported, either to
    ``on_error`` or to the ``graphql_fetch.errors`` logger.

    Examples:
        Basic query:
        ```python
        client = GraphQLClient(url="https://api.example.com/graphql")

        result = await client.request({
            "query": "query User($id: ID!) { user(id: $id) { name } }",
            "variables": {"id": "123"},
        })
        if not result.error:
            print(result.data["user"]["name"])
        ```

        Uploading a file:
        ```python
        result = await client.request(GraphQLOperation(
            query="mutation ($file: Upload!) { upload(file: $file) { id } }",
            variables={"file": FileUpload.from_path("avatar.png")},
        ))
        ```

        Memoizing results for server-side rendering:
        ```python
        client = GraphQLClient(url=..., cache=MemCache(), ssr_mode=True)
        result = await client.query({"query": "{ posts { title } }"})
        state = client.cache.get_initial_state()
        ```
    """

    def __init__(
        self,
        url: Optional[str] = None,
        fetch: Optional[FetchFunction] = None,
        headers: Optional[Dict[str, str]] = None,
        fetch_options: Optional[Dict[str, Any]] = None,
        ssr_mode: bool = False,
        cache: Optional[Cache] = None,
        log_errors: bool = True,
        on_error: Optional[ErrorObserver] = None,
        file_extractor: FileExtractor = extract_files,
    ):
        """
        Initialize GraphQL client.

        Args:
            url: GraphQL endpoint URL
            fetch: Transport coroutine; defaults to the polyfilled one
            headers: Headers sent with every request
            fetch_options: Transport options sent with every request
            ssr_mode: Server-side rendering mode, requires ``cache``
            cache: Store for memoized results
            log_errors: Log errored results when no ``on_error`` is set
            on_error: Callback receiving ``result`` and ``operation`` of
                every errored request
            file_extractor: Finds file variables for multipart requests

        Raises:
            ConfigError: If the configuration is invalid
        """
        if not isinstance(url, str) or not url:
            raise ConfigError("url is required")

        if fetch is not None and not callable(fetch):
            raise ConfigError("fetch must be a function")

        if fetch is None:
            fetch = get_default_fetch()
            if fetch is None:
                raise ConfigError("fetch must be polyfilled or passed explicitly")

        if ssr_mode and cache is None:
            raise ConfigError("cache is required when in ssrMode")

        self.url = url
        self.fetch = fetch
        self.headers: Dict[str, str] = headers if headers is not None else {}
        self.fetch_options: Dict[str, Any] = fetch_options if fetch_options is not None else {}
        self.ssr_mode = ssr_mode
        self.cache = cache
        self.file_extractor = file_extractor
        self._log_errors = log_errors
        self._on_error = on_error
        self._reporter: ErrorReporter = select_reporter(on_error, log_errors)

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs: Any) -> GraphQLClient:
        """
        Build a client from loaded settings.

        Keyword arguments (``fetch``, ``cache``, ``on_error``...) override or
        complement what the settings provide.
        """
        fetch_options = dict(settings.fetch_options)
        if settings.timeout is not None:
            fetch_options.setdefault("timeout", aiohttp.ClientTimeout(total=settings.timeout))

        params: Dict[str, Any] = {
            "url": settings.url,
            "headers": dict(settings.headers),
            "fetch_options": fetch_options,
            "ssr_mode": settings.ssr_mode,
            "log_errors": settings.log_errors,
        }
        params.update(kwargs)
        return cls(**params)

    @property
    def on_error(self) -> Optional[ErrorObserver]:
        return self._on_error

    @on_error.setter
    def on_error(self, value: Optional[ErrorObserver]) -> None:
        self._on_error = value
        self._reporter = select_reporter(value, self._log_errors)

    @property
    def log_errors(self) -> bool:
        return self._log_errors

    @log_errors.setter
    def log_errors(self, value: bool) -> None:
        self._log_errors = value
        self._reporter = select_reporter(self._on_error, value)

    def set_header(self, key: str, value: str) -> None:
        self.headers[key] = value

    def set_headers(self, headers: Dict[str, str]) -> None:
        """Replace the headers mapping used by subsequent requests."""
        self.headers = headers

    def remove_header(self, key: str) -> None:
        self.headers.pop(key, None)

    def log_error_result(self, result: GraphQLResult, operation: Any = None) -> None:
        """Report an errored result through the configured strategy."""
        self._reporter.report(result, operation)

    def generate_result(
        self,
        data: Any = None,
        graphql_errors: Optional[list] = None,
        fetch_error: Optional[BaseException] = None,
        http_error: Optional[HTTPErrorInfo] = None,
    ) -> GraphQLResult:
        return GraphQLResult.from_classification(
            data=data,
            graphql_errors=graphql_errors,
            fetch_error=fetch_error,
            http_error=http_error,
        )

    def get_cache_key(self, operation: Any, options: OptionsInput = None) -> CacheKey:
        """
        Derive the structural cache key of a request.

        Only the configured fetch options and the per-call overrides take
        part; headers and body are not included.
        """
        overrides = RequestOptions.coerce(options).fetch_options_overrides
        return CacheKey(operation=operation, fetch_options={**self.fetch_options, **overrides})

    def get_fetch_options(
        self,
        operation: OperationInput,
        fetch_options_overrides: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Build the transport options for an operation.

        Operations without files get a JSON body and
        ``Content-Type: application/json``. Operations with files get a
        multipart form following the GraphQL multipart request convention;
        the form encoder then sets its own ``Content-Type``.

        Headers are copied, so later header mutations do not affect the
        returned options.
        """
        operation = GraphQLOperation.coerce(operation)
        overrides = dict(fetch_options_overrides or {})
        override_headers = overrides.pop("headers", None) or {}
        configured = dict(self.fetch_options)
        configured_headers = configured.pop("headers", None) or {}

        fetch_options: Dict[str, Any] = {"method": "POST", **configured, **overrides}
        headers = _merge_headers(self.headers, configured_headers, override_headers)

        clone, files = self.file_extractor(operation.to_dict())
        if files:
            form = aiohttp.FormData()
            form.add_field("operations", _to_json(clone))
            form.add_field(
                "map",
                _to_json({str(index): paths for index, (_, paths) in enumerate(files, start=1)}),
            )
            for index, (file, _) in enumerate(files, start=1):
                key = str(index)
                payload, filename, content_type = file_field(file)
                form.add_field(key, payload, filename=filename or key, content_type=content_type)

            _drop_header(headers, "Content-Type")
            fetch_options["body"] = form
        else:
            _drop_header(headers, "Content-Type")
            headers["Content-Type"] = "application/json"
            fetch_options["body"] = _to_json(clone)

        fetch_options["headers"] = headers
        return fetch_options

    async def request(self, operation: OperationInput, options: OptionsInput = None) -> GraphQLResult:
        """
        Send an operation and return the normalized result.

        Args:
            operation: Operation or ``{"query", "variables", "operationName"}``
            options: ``RequestOptions`` or a mapping with
                ``fetch_options_overrides``

        Returns:
            GraphQLResult; ``fetch_error``, ``http_error`` and
            ``graphql_errors`` describe any failure
        """
        operation = GraphQLOperation.coerce(operation)
        request_options = RequestOptions.coerce(options)
        fetch_options = self.get_fetch_options(operation, request_options.fetch_options_overrides)

        logger.debug(f"Sending GraphQL operation {operation.operation_name or ''} to {self.url}")
        try:
            response = await self.fetch(self.url, fetch_options)
        except Exception as e:
            classification: Dict[str, Any] = {"fetch_error": e}
        else:
            classification = await self._classify_response(response)

        result = self.generate_result(**classification)
        logger.debug(f"GraphQL request to {self.url} completed (error={result.error})")

        if result.error:
            self.log_error_result(result, operation)

        return result

    async def _classify_response(self, response: FetchResponseLike) -> Dict[str, Any]:
        status = response.status

        try:
            if not 200 <= status < 300:
                body = await response.text()
                return {
                    "http_error": HTTPErrorInfo(
                        status=status,
                        status_text=getattr(response, "status_text", "") or "",
                        body=body,
                    )
                }

            payload = await response.json()
        except Exception as e:
            return {"fetch_error": e}

        if not isinstance(payload, dict):
            return {"fetch_error": ValueError(f"Expected a JSON object response, got {type(payload).__name__}")}

        classification: Dict[str, Any] = {"data": payload.get("data")}
        errors = payload.get("errors")
        if errors:
            classification["graphql_errors"] = errors

        return classification

    async def query(
        self,
        operation: OperationInput,
        options: OptionsInput = None,
        use_cache: bool = True,
    ) -> GraphQLResult:
        """
        Send an operation, serving and storing results through the cache.

        A cached result is returned without a transport call. Errored
        results are never stored. Without a cache this is :meth:`request`.
        """
        if self.cache is None or not use_cache:
            return await self.request(operation, options)

        operation = GraphQLOperation.coerce(operation)
        cache_key = self.get_cache_key(operation, options)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for GraphQL operation {operation.operation_name or ''}")
            return cached

        result = await self.request(operation, options)
        if not result.error:
            self.cache.set(cache_key, result)

        return result
