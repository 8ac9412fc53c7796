"""Tests for the fetch-style adapter."""

import json

import httpx
import pytest

from apidoc_capture.adapters import create_client
from apidoc_capture.adapters.fetch_adapter import FetchAdapterConfig
from apidoc_capture.core.capture_context import CaptureContext
from apidoc_capture.exceptions import AdapterConfigException


def make_echo_transport(calls):
    """Create a mock transport echoing the request it receives."""

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(
            200,
            json={
                "url": str(request.url),
                "content_type": request.headers.get("content-type"),
                "body": request.content.decode() or None,
            },
        )

    return httpx.MockTransport(handler)


class TestFetchRequests:
    """Tests for performing requests."""

    @pytest.mark.asyncio
    async def test_post_json(self, fetch_client):
        response = await fetch_client.post("/users").send({"name": "John"})

        assert response.status == 201
        assert response.body == {"id": 1, "name": "John"}

    @pytest.mark.asyncio
    async def test_text_response(self, fetch_client):
        response = await fetch_client.get("/text")

        assert response.body == "hello"

    @pytest.mark.asyncio
    async def test_error_status_does_not_raise(self, fetch_client):
        response = await fetch_client.get("/missing")

        assert response.status == 404
        assert response.body == {"error": "Not found"}

    @pytest.mark.asyncio
    async def test_json_sent_as_text(self):
        calls = []
        client = create_client.fetch(
            base_url="http://api.test", transport=make_echo_transport(calls)
        )

        response = await client.post("/items").send({"a": 1})

        assert response.body["content_type"] == "application/json"
        assert json.loads(response.body["body"]) == {"a": 1}

    @pytest.mark.asyncio
    async def test_query_string_built(self):
        calls = []
        client = create_client.fetch(
            base_url="http://api.test/", transport=make_echo_transport(calls)
        )

        await client.get("/search").query({"q": "a b", "tag": ["x", "y"]})

        assert str(calls[0].url) == "http://api.test/search?q=a+b&tag=x&tag=y"

    def test_full_url_appends_to_existing_query(self):
        client = create_client.fetch(base_url="http://api.test")

        builder = client.get("/search?sort=asc").query({"page": 2})

        assert builder.full_url() == "http://api.test/search?sort=asc&page=2"

    @pytest.mark.asyncio
    async def test_default_headers_overridden_by_builder(self):
        calls = []
        client = create_client.fetch(
            base_url="http://api.test",
            headers={"X-Client": "default", "X-Keep": "1"},
            transport=make_echo_transport(calls),
        )

        await client.get("/").set("X-Client", "override")

        assert calls[0].headers["x-client"] == "override"
        assert calls[0].headers["x-keep"] == "1"

    @pytest.mark.asyncio
    async def test_dispatched_once(self):
        calls = []
        client = create_client.fetch(
            base_url="http://api.test", transport=make_echo_transport(calls)
        )

        builder = client.get("/")
        await builder.end()
        await builder

        assert len(calls) == 1


class TestFetchCapture:
    """Tests for capture through the fetch adapter."""

    @pytest.mark.asyncio
    async def test_request_and_response_captured(self, fetch_client):
        async def scenario(store):
            await fetch_client.get("/users").query({"page": 1}).set("X-Trace", "abc")
            return store.captured_requests

        captured = await CaptureContext.run("list", None, scenario)

        record = captured[0]
        assert record.url == "/users"
        assert record.query_params == {"page": 1}
        assert record.headers == {"X-Trace": "abc"}
        assert record.response.body == {"users": [], "query": {"page": "1"}}

    @pytest.mark.asyncio
    async def test_network_error_leaves_no_response(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = create_client.fetch(
            base_url="http://api.test", transport=httpx.MockTransport(handler)
        )

        async def scenario(store):
            with pytest.raises(httpx.ConnectError):
                await client.post("/users").send({"name": "John"})
            return store.captured_requests

        captured = await CaptureContext.run("offline", None, scenario)

        assert captured[0].body == {"name": "John"}
        assert captured[0].response is None


class TestFetchConfig:
    """Tests for adapter configuration."""

    def test_base_url_required(self):
        with pytest.raises(AdapterConfigException, match="requires a base_url"):
            create_client.fetch()

    def test_config_object(self):
        client = create_client.fetch(FetchAdapterConfig(base_url="http://api.test"))

        assert client.config.base_url == "http://api.test"
