"""
GraphQL-over-HTTP client with result caching.

This package sends GraphQL queries and mutations, including file uploads via
the GraphQL multipart request convention, to a single endpoint and returns
every outcome in one result shape:

- ``fetch_error`` when the transport call fails
- ``http_error`` when the server answers with a non-2xx status
- ``graphql_errors`` when the response carries GraphQL errors
- ``data`` otherwise, or alongside GraphQL errors for partial results

Successful results can be memoized by a pluggable cache keyed on the
operation and request options.
"""

from .cache import MemCache
from .client import GraphQLClient
from .config import ClientSettings, ConfigLoader, load_settings
from .exceptions import ConfigError, GraphQLFetchError
from .files import FileUpload, extract_files, is_file_like
from .models import CacheKey, GraphQLOperation, GraphQLResult, HTTPErrorInfo, RequestOptions
from .protocols import Cache, ExtractedFiles, FetchFunction, FetchResponseLike, FileExtractor
from .reporting import ErrorReporter, LogToConsole, NotifyObserver
from .transport import AiohttpFetch, FetchResponse, get_default_fetch, polyfill_fetch

__version__ = "1.0.0"

__all__ = [
    # Client
    "GraphQLClient",
    # Models
    "GraphQLOperation",
    "GraphQLResult",
    "HTTPErrorInfo",
    "CacheKey",
    "RequestOptions",
    # Files
    "FileUpload",
    "extract_files",
    "is_file_like",
    # Transport
    "AiohttpFetch",
    "FetchResponse",
    "get_default_fetch",
    "polyfill_fetch",
    # Cache
    "MemCache",
    # Error reporting
    "ErrorReporter",
    "LogToConsole",
    "NotifyObserver",
    # Configuration
    "ClientSettings",
    "ConfigLoader",
    "load_settings",
    # Protocols
    "Cache",
    "ExtractedFiles",
    "FetchFunction",
    "FetchResponseLike",
    "FileExtractor",
    # Exceptions
    "GraphQLFetchError",
    "ConfigError",
]
