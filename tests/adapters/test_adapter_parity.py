"""Cross-adapter parity tests.

The same scenario run through each adapter must produce equivalent
captured requests and responses.
"""

import pytest

from apidoc_capture.core.capture_context import CaptureContext

ADAPTERS = ["asgi_client", "httpx_client", "fetch_client"]

pytestmark = pytest.mark.parity


@pytest.fixture(params=ADAPTERS)
def client(request):
    """Each adapter pointed at the same test app."""
    return request.getfixturevalue(request.param)


async def capture(fn):
    """Run fn in a capture scope and return the captured requests."""

    async def scenario(store):
        await fn()
        return store.captured_requests

    return await CaptureContext.run("parity", None, scenario)


class TestAdapterParity:
    """Tests for equivalent capture across adapters."""

    @pytest.mark.asyncio
    async def test_json_post(self, client):
        captured = await capture(
            lambda: client.post("/items")
            .set("X-Trace", "t-1")
            .query({"page": 2})
            .send({"name": "Widget", "price": 9.5})
        )

        assert len(captured) == 1
        record = captured[0]
        assert record.to_dict()["method"] == "POST"
        assert record.url == "/items"
        assert record.body == {"name": "Widget", "price": 9.5}
        assert record.headers == {"X-Trace": "t-1"}
        assert record.query_params == {"page": 2}
        assert record.response.status == 200
        assert record.response.body == {
            "received": {"name": "Widget", "price": 9.5},
            "page": "2",
            "trace": "t-1",
        }

    @pytest.mark.asyncio
    async def test_error_response(self, client):
        captured = await capture(lambda: client.get("/missing").then(on_rejected=lambda e: None))

        assert captured[0].response.status == 404
        assert captured[0].response.body == {"error": "Not found"}

    @pytest.mark.asyncio
    async def test_text_response(self, client):
        captured = await capture(lambda: client.get("/text"))

        assert captured[0].response.body == "hello"
        assert captured[0].response.text == "hello"

    @pytest.mark.asyncio
    async def test_multipart(self, client):
        captured = await capture(
            lambda: client.post("/upload").field("title", "Report").attach(
                "file", b"content", "report.txt"
            )
        )

        record = captured[0]
        assert record.form_data.fields == {"title": "Report"}
        assert record.form_data.files[0].filename == "report.txt"
        assert record.response.body == {
            "fields": {"title": "Report"},
            "files": [{"field": "file", "filename": "report.txt"}],
        }

    @pytest.mark.asyncio
    async def test_repeated_headers(self, client):
        captured = await capture(lambda: client.get("/cookies"))

        assert captured[0].response.headers["set-cookie"] == ["a=1", "b=2"]

    @pytest.mark.asyncio
    async def test_custom_json_content_type_kept(self, client):
        captured = await capture(
            lambda: client.patch("/raw")
            .set("Content-Type", "application/merge-patch+json")
            .send({"a": 1})
        )

        record = captured[0]
        assert record.body == {"a": 1}
        assert record.response.body["content_types"] == ["application/merge-patch+json"]
        assert record.response.body["text"].replace(" ", "") == '{"a":1}'

    @pytest.mark.asyncio
    async def test_lowercase_content_type_not_duplicated(self, client):
        captured = await capture(
            lambda: client.post("/raw").set("content-type", "application/vnd.api+json").send([1])
        )

        assert captured[0].response.body["content_types"] == ["application/vnd.api+json"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["plain text", b"raw bytes"])
    async def test_raw_body_sent_and_captured_unchanged(self, client, body):
        captured = await capture(
            lambda: client.post("/raw").set("Content-Type", "text/plain").send(body)
        )

        sent_text = body if isinstance(body, str) else body.decode()
        record = captured[0]
        assert record.body == body
        assert type(record.body) is type(body)
        assert record.response.body["text"] == sent_text

    @pytest.mark.asyncio
    async def test_none_body_sends_nothing(self, client):
        captured = await capture(lambda: client.post("/raw").send(None))

        record = captured[0]
        assert record.body is None
        assert record.response.body == {"text": "", "content_types": []}
