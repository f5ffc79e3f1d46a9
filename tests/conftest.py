"""
Shared test fixtures and configuration for the graphql_fetch test suite.
"""

from unittest.mock import AsyncMock

import pytest

from graphql_fetch import FetchResponse, GraphQLClient
from graphql_fetch.transport import get_default_fetch, polyfill_fetch

GRAPHQL_URL = "https://my.graphql.api"

TEST_QUERY = """
  query Test($limit: Int) {
    test(limit: $limit) {
      id
    }
  }
"""


@pytest.fixture
def graphql_url() -> str:
    return GRAPHQL_URL


@pytest.fixture
def test_query() -> str:
    return TEST_QUERY


def _make_response(body: str = "", status: int = 200, status_text: str = "OK") -> FetchResponse:
    """Build a buffered transport response."""
    return FetchResponse(status=status, status_text=status_text, body=body)


@pytest.fixture
def fetch_mock() -> AsyncMock:
    """Transport returning an empty successful GraphQL response."""
    return AsyncMock(return_value=_make_response('{"data": null}'))


@pytest.fixture
def client(fetch_mock: AsyncMock) -> GraphQLClient:
    """Client wired to the mocked transport."""
    return GraphQLClient(url=GRAPHQL_URL, fetch=fetch_mock)


@pytest.fixture
def restore_default_fetch():
    """Restore the process-wide transport after a test replaces it."""
    original = get_default_fetch()
    yield
    polyfill_fetch(original)


@pytest.fixture
def make_response():
    """Factory for buffered transport responses."""
    return _make_response
