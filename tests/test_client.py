"""
Tests for GraphQLClient construction, header management and requests.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from graphql_fetch import (
    ClientSettings,
    ConfigError,
    FileUpload,
    GraphQLClient,
    GraphQLOperation,
    GraphQLResult,
    HTTPErrorInfo,
    MemCache,
    RequestOptions,
)
from graphql_fetch.transport import polyfill_fetch


class TestClientConstruction:
    """Test configuration validation and instance fields."""

    def test_requires_url(self):
        """Test that a missing url is rejected."""
        with pytest.raises(ConfigError, match="url is required"):
            GraphQLClient()

    def test_rejects_empty_url(self):
        """Test that an empty url is rejected."""
        with pytest.raises(ConfigError, match="url is required"):
            GraphQLClient(url="")

    @pytest.mark.parametrize("url", [123, b"https://my.graphql.api", ["https://my.graphql.api"]])
    def test_rejects_non_string_url(self, url, fetch_mock):
        """Test that a url must be a string."""
        with pytest.raises(ConfigError, match="url is required"):
            GraphQLClient(url=url, fetch=fetch_mock)

    def test_rejects_non_callable_fetch(self, graphql_url):
        """Test that fetch must be callable."""
        with pytest.raises(ConfigError, match="fetch must be a function"):
            GraphQLClient(url=graphql_url, fetch="fetch!")

    def test_requires_polyfilled_fetch(self, graphql_url, restore_default_fetch):
        """Test that a transport must exist when none is passed."""
        polyfill_fetch(None)

        with pytest.raises(ConfigError, match="fetch must be polyfilled or passed explicitly"):
            GraphQLClient(url=graphql_url)

    def test_uses_polyfilled_fetch(self, graphql_url, restore_default_fetch):
        """Test that the polyfilled transport becomes the default."""
        polyfill_fetch(None)
        custom_fetch = AsyncMock()
        polyfill_fetch(custom_fetch)

        client = GraphQLClient(url=graphql_url)

        assert client.fetch is custom_fetch

    def test_requires_cache_in_ssr_mode(self, graphql_url, fetch_mock):
        """Test that ssr mode needs a cache."""
        with pytest.raises(ConfigError, match="cache is required when in ssrMode"):
            GraphQLClient(url=graphql_url, fetch=fetch_mock, ssr_mode=True)

    def test_config_error_message_prefix(self):
        """Test the message carried by ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            GraphQLClient()

        assert str(exc_info.value) == "GraphQLClient: url is required"
        assert exc_info.value.reason == "url is required"

    def test_assigns_config_to_instance(self, graphql_url, fetch_mock):
        """Test that configuration values are kept by reference."""
        cache = MemCache()
        headers = {"My-Header": "hello"}
        fetch_options = {"credentials": "include"}
        on_error = MagicMock()

        client = GraphQLClient(
            url=graphql_url,
            fetch=fetch_mock,
            headers=headers,
            fetch_options=fetch_options,
            ssr_mode=True,
            cache=cache,
            log_errors=False,
            on_error=on_error,
        )

        assert client.url == graphql_url
        assert client.fetch is fetch_mock
        assert client.headers is headers
        assert client.fetch_options is fetch_options
        assert client.ssr_mode is True
        assert client.cache is cache
        assert client.log_errors is False
        assert client.on_error is on_error

    def test_defaults(self, client):
        """Test default configuration values."""
        assert client.headers == {}
        assert client.fetch_options == {}
        assert client.ssr_mode is False
        assert client.cache is None
        assert client.log_errors is True
        assert client.on_error is None

    def test_from_settings(self, fetch_mock):
        """Test building a client from loaded settings."""
        settings = ClientSettings(
            url="https://api.example.com/graphql",
            headers={"Authorization": "Bearer token"},
            log_errors=False,
            timeout=5,
        )

        client = GraphQLClient.from_settings(settings, fetch=fetch_mock)

        assert client.url == "https://api.example.com/graphql"
        assert client.headers == {"Authorization": "Bearer token"}
        assert client.log_errors is False
        assert client.fetch is fetch_mock
        assert client.fetch_options["timeout"] == aiohttp.ClientTimeout(total=5)

    def test_from_settings_without_url(self, fetch_mock):
        """Test that settings without a url fail like direct construction."""
        with pytest.raises(ConfigError, match="url is required"):
            GraphQLClient.from_settings(ClientSettings(), fetch=fetch_mock)


class TestHeaders:
    """Test header mutators."""

    def test_set_header(self, client):
        """Test setting a single header."""
        client.set_header("My-Header", "hello")
        assert client.headers["My-Header"] == "hello"

    def test_set_header_keeps_other_keys(self, graphql_url, fetch_mock):
        """Test that set_header only touches its key."""
        client = GraphQLClient(url=graphql_url, fetch=fetch_mock, headers={"A": "1", "B": "2"})

        client.set_header("A", "changed")

        assert client.headers == {"A": "changed", "B": "2"}

    def test_set_headers_replaces_mapping(self, client):
        """Test that set_headers replaces the headers reference."""
        headers = {"My-Header": "hello"}
        client.set_headers(headers)
        assert client.headers is headers

    def test_remove_header(self, graphql_url, fetch_mock):
        """Test removing one header."""
        client = GraphQLClient(
            url=graphql_url, fetch=fetch_mock, headers={"My-Header": "hello", "Other": "x"}
        )

        client.remove_header("My-Header")

        assert "My-Header" not in client.headers
        assert client.headers == {"Other": "x"}

    def test_remove_missing_header(self, client):
        """Test removing a header that is not set."""
        client.remove_header("Missing")
        assert client.headers == {}


class TestGenerateResult:
    """Test result normalization."""

    def test_graphql_errors_mark_error(self, client):
        result = client.generate_result(graphql_errors=["error 1", "error 2"])
        assert result.error is True

    def test_fetch_error_marks_error(self, client):
        result = client.generate_result(fetch_error=RuntimeError("fetch error"))
        assert result.error is True

    def test_http_error_marks_error(self, client):
        result = client.generate_result(
            http_error=HTTPErrorInfo(status=500, status_text="Internal Server Error", body="")
        )
        assert result.error is True

    def test_data_only_is_not_error(self, client):
        result = client.generate_result(data={"user": {"id": "1"}})
        assert result == GraphQLResult(error=False, data={"user": {"id": "1"}})

    def test_empty_classification(self, client):
        result = client.generate_result()
        assert result.error is False
        assert result.to_dict() == {"error": False}

    def test_returns_errors_and_data(self, client):
        """Test that every provided field is echoed unchanged."""
        fetch_error = RuntimeError("fetch error")
        http_error = HTTPErrorInfo(status=502, status_text="Bad Gateway", body="oops")
        graphql_errors = ["graphQL error 1", "graphQL error 2"]

        result = client.generate_result(
            data="data!",
            graphql_errors=graphql_errors,
            fetch_error=fetch_error,
            http_error=http_error,
        )

        assert result.error is True
        assert result.data == "data!"
        assert result.graphql_errors is graphql_errors
        assert result.fetch_error is fetch_error
        assert result.http_error is http_error


class TestGetCacheKey:
    """Test cache key derivation."""

    def test_returns_cache_key(self, graphql_url, fetch_mock):
        client = GraphQLClient(url=graphql_url, fetch=fetch_mock, fetch_options={"optionOne": 1})

        cache_key = client.get_cache_key(
            "operation", {"fetchOptionsOverrides": {"optionTwo": 2}}
        )

        assert cache_key.operation == "operation"
        assert cache_key.fetch_options == {"optionOne": 1, "optionTwo": 2}

    def test_override_wins(self, graphql_url, fetch_mock):
        client = GraphQLClient(url=graphql_url, fetch=fetch_mock, fetch_options={"a": 1})

        cache_key = client.get_cache_key("op", RequestOptions(fetch_options_overrides={"a": 2}))

        assert cache_key.fetch_options == {"a": 2}

    def test_structurally_equal_inputs(self, client, test_query):
        """Test that equal inputs give equal keys without shared objects."""
        first = client.get_cache_key(
            GraphQLOperation(query=test_query, variables={"limit": 1}),
            {"fetch_options_overrides": {"a": 1, "b": 2}},
        )
        second = client.get_cache_key(
            GraphQLOperation(query=test_query, variables={"limit": 1}),
            {"fetch_options_overrides": {"b": 2, "a": 1}},
        )

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_does_not_touch_transport(self, client, fetch_mock):
        client.get_cache_key("operation")
        fetch_mock.assert_not_called()


class TestRequest:
    """Test the request pipeline end to end with a mocked transport."""

    @pytest.mark.asyncio
    async def test_sends_to_configured_url(self, client, fetch_mock, graphql_url, test_query):
        await client.request({"query": test_query})

        fetch_mock.assert_awaited_once()
        url, options = fetch_mock.await_args.args
        assert url == graphql_url
        assert options["method"] == "POST"
        assert json.loads(options["body"]) == {"query": test_query}

    @pytest.mark.asyncio
    async def test_returns_fetch_errors(self, client, fetch_mock, test_query):
        client.log_error_result = MagicMock()
        error = aiohttp.ClientConnectionError("Oops fetch!")
        fetch_mock.side_effect = error

        result = await client.request({"query": test_query})

        assert result.error is True
        assert result.fetch_error is error
        assert result.http_error is None
        assert result.graphql_errors is None

    @pytest.mark.asyncio
    async def test_returns_http_errors(self, client, fetch_mock, make_response, test_query):
        client.log_error_result = MagicMock()
        fetch_mock.return_value = make_response("Denied!", status=403, status_text="Forbidden")

        result = await client.request({"query": test_query})

        assert result.error is True
        assert result.http_error == HTTPErrorInfo(status=403, status_text="Forbidden", body="Denied!")
        assert result.to_dict()["httpError"] == {
            "status": 403,
            "statusText": "Forbidden",
            "body": "Denied!",
        }

    @pytest.mark.asyncio
    async def test_http_error_keeps_json_body_verbatim(self, client, fetch_mock, make_response, test_query):
        client.log_error_result = MagicMock()
        body = '{"errors": [{"message": "boom"}]}'
        fetch_mock.return_value = make_response(body, status=500, status_text="Internal Server Error")

        result = await client.request({"query": test_query})

        assert result.http_error.body == body
        assert result.graphql_errors is None

    @pytest.mark.asyncio
    async def test_returns_valid_responses(self, client, fetch_mock, make_response, test_query):
        fetch_mock.return_value = make_response(json.dumps({"data": "data!"}))

        result = await client.request({"query": test_query})

        assert result == GraphQLResult(error=False, data="data!")

    @pytest.mark.asyncio
    async def test_returns_graphql_errors(self, client, fetch_mock, make_response, test_query):
        client.log_error_result = MagicMock()
        fetch_mock.return_value = make_response(json.dumps({"data": "data!", "errors": ["oops!"]}))

        result = await client.request({"query": test_query})

        assert result.error is True
        assert result.graphql_errors == ["oops!"]
        assert result.data == "data!"

    @pytest.mark.asyncio
    async def test_empty_errors_list_is_success(self, client, fetch_mock, make_response, test_query):
        fetch_mock.return_value = make_response(json.dumps({"data": {"a": 1}, "errors": []}))

        result = await client.request({"query": test_query})

        assert result.error is False
        assert result.graphql_errors is None

    @pytest.mark.asyncio
    async def test_invalid_json_is_fetch_error(self, client, fetch_mock, make_response, test_query):
        client.log_error_result = MagicMock()
        fetch_mock.return_value = make_response("<html>not json</html>")

        result = await client.request({"query": test_query})

        assert result.error is True
        assert isinstance(result.fetch_error, json.JSONDecodeError)

    @pytest.mark.asyncio
    async def test_non_object_json_is_fetch_error(self, client, fetch_mock, make_response, test_query):
        client.log_error_result = MagicMock()
        fetch_mock.return_value = make_response("[1, 2]")

        result = await client.request({"query": test_query})

        assert isinstance(result.fetch_error, ValueError)

    @pytest.mark.asyncio
    async def test_reports_errored_results(self, client, fetch_mock, test_query):
        client.log_error_result = MagicMock()
        fetch_mock.side_effect = RuntimeError("down")

        result = await client.request({"query": test_query})

        client.log_error_result.assert_called_once_with(
            result, GraphQLOperation(query=test_query)
        )

    @pytest.mark.asyncio
    async def test_does_not_report_successful_results(self, client, make_response, fetch_mock, test_query):
        client.log_error_result = MagicMock()
        fetch_mock.return_value = make_response('{"data": {"ok": true}}')

        await client.request({"query": test_query})

        client.log_error_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_on_error_receives_result_and_operation(self, graphql_url, fetch_mock, test_query):
        on_error = MagicMock()
        client = GraphQLClient(url=graphql_url, fetch=fetch_mock, on_error=on_error)
        fetch_mock.side_effect = RuntimeError("down")

        result = await client.request(GraphQLOperation(query=test_query))

        on_error.assert_called_once_with(result=result, operation=GraphQLOperation(query=test_query))

    @pytest.mark.asyncio
    async def test_passes_fetch_options_overrides(self, client, fetch_mock, test_query):
        await client.request(
            {"query": test_query},
            {"fetch_options_overrides": {"method": "PUT", "headers": {"X-Trace": "1"}}},
        )

        _, options = fetch_mock.await_args.args
        assert options["method"] == "PUT"
        assert options["headers"]["X-Trace"] == "1"

    @pytest.mark.asyncio
    async def test_in_flight_request_keeps_header_snapshot(self, client, fetch_mock, make_response, test_query):
        """Test that header changes after building options do not leak into a request."""
        client.set_header("Authorization", "Bearer first")
        seen = {}

        async def fetch(url, options):
            client.set_header("Authorization", "Bearer second")
            seen.update(options["headers"])
            return make_response('{"data": {}}')

        client.fetch = fetch
        await client.request({"query": test_query})

        assert seen["Authorization"] == "Bearer first"
        assert client.headers["Authorization"] == "Bearer second"

    @pytest.mark.asyncio
    async def test_sends_multipart_for_files(self, client, fetch_mock):
        upload = FileUpload(content=b"hello", filename="a.txt", content_type="text/plain")

        await client.request({"query": "", "variables": {"a": upload}})

        _, options = fetch_mock.await_args.args
        assert isinstance(options["body"], aiohttp.FormData)
        assert "Content-Type" not in options["headers"]

    @pytest.mark.asyncio
    async def test_rejects_operation_without_query(self, client):
        with pytest.raises(ValueError):
            await client.request({"variables": {}})

    @pytest.mark.asyncio
    async def test_rejects_non_mapping_operation(self, client):
        with pytest.raises(TypeError):
            await client.request("query { a }")


class TestCachedQuery:
    """Test cache-aware requests."""

    @pytest.mark.asyncio
    async def test_without_cache_behaves_like_request(self, client, fetch_mock, make_response, test_query):
        fetch_mock.return_value = make_response('{"data": 1}')

        first = await client.query({"query": test_query})
        second = await client.query({"query": test_query})

        assert first == second == GraphQLResult(error=False, data=1)
        assert fetch_mock.await_count == 2

    @pytest.mark.asyncio
    async def test_serves_repeated_requests_from_cache(self, graphql_url, fetch_mock, make_response, test_query):
        cache = MemCache()
        client = GraphQLClient(url=graphql_url, fetch=fetch_mock, cache=cache)
        fetch_mock.return_value = make_response('{"data": {"test": []}}')

        first = await client.query({"query": test_query, "variables": {"limit": 1}})
        second = await client.query(GraphQLOperation(query=test_query, variables={"limit": 1}))

        assert first is second
        fetch_mock.assert_awaited_once()
        assert client.get_cache_key(GraphQLOperation(query=test_query, variables={"limit": 1})) in cache

    @pytest.mark.asyncio
    async def test_dict_backed_cache(self, graphql_url, fetch_mock, make_response, test_query):
        class DictCache:
            def __init__(self):
                self.store = {}

            def get(self, key):
                return self.store.get(key)

            def set(self, key, value):
                self.store[key] = value

        cache = DictCache()
        client = GraphQLClient(url=graphql_url, fetch=fetch_mock, cache=cache)
        fetch_mock.return_value = make_response('{"data": 1}')

        await client.query({"query": test_query, "variables": {"limit": 1}})
        result = await client.query({"query": test_query, "variables": {"limit": 1}})

        assert result == GraphQLResult(error=False, data=1)
        fetch_mock.assert_awaited_once()
        assert len(cache.store) == 1

    @pytest.mark.asyncio
    async def test_different_overrides_miss(self, graphql_url, fetch_mock, make_response, test_query):
        client = GraphQLClient(url=graphql_url, fetch=fetch_mock, cache=MemCache())
        fetch_mock.return_value = make_response('{"data": 1}')

        await client.query({"query": test_query}, {"fetch_options_overrides": {"a": 1}})
        await client.query({"query": test_query}, {"fetch_options_overrides": {"a": 2}})

        assert fetch_mock.await_count == 2

    @pytest.mark.asyncio
    async def test_does_not_cache_errors(self, graphql_url, fetch_mock, make_response, test_query):
        cache = MemCache()
        client = GraphQLClient(url=graphql_url, fetch=fetch_mock, cache=cache, log_errors=False)
        fetch_mock.return_value = make_response('{"errors": [{"message": "nope"}]}')

        result = await client.query({"query": test_query})

        assert result.error is True
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_use_cache_false_bypasses_cache(self, graphql_url, fetch_mock, make_response, test_query):
        cache = MemCache()
        client = GraphQLClient(url=graphql_url, fetch=fetch_mock, cache=cache)
        fetch_mock.return_value = make_response('{"data": 1}')

        await client.query({"query": test_query}, use_cache=False)

        assert len(cache) == 0
