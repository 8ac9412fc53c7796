"""Tests for wrap_test module."""

import pytest

from apidoc_capture.adapters import request
from apidoc_capture.core.capture_context import CaptureContext
from apidoc_capture.core.capture_data import CapturedResponse
from apidoc_capture.wrap_test import WrappedTest, wrap_test


class TestWrapTest:
    """Tests for the capturing test decorator."""

    @pytest.mark.asyncio
    async def test_async_test_collected(self, app, collector):
        api_test = wrap_test(collector)

        @api_test("should create user")
        async def create_user():
            assert CaptureContext.get_store().description == "should create user"
            response = await request(app).post("/users").send({"name": "John"})
            assert response.status == 201
            return response.body

        body = await create_user()

        assert body == {"id": 1, "name": "John"}
        assert len(collector.results) == 1
        result = collector.results[0]
        assert result.method == "POST"
        assert result.request["body"] == {"name": "John"}
        assert result.test_suite_description == "should create user"
        assert CaptureContext.is_active() is False

    def test_sync_test_collected(self, collector):
        api_test = wrap_test(collector)

        @api_test("records manually")
        def manual():
            record = CaptureContext.add_request({"method": "GET", "url": "/health"})
            record.merge({"response": CapturedResponse(status=200)})
            return "done"

        assert manual() == "done"
        assert [r.url for r in collector.results] == ["/health"]

    @pytest.mark.asyncio
    async def test_failed_test_not_collected(self, app, collector):
        api_test = wrap_test(collector)

        @api_test("fails")
        async def failing():
            await request(app).get("/users/1")
            raise AssertionError("expected failure")

        with pytest.raises(AssertionError, match="expected failure"):
            await failing()

        assert collector.results == []
        assert CaptureContext.is_active() is False

    @pytest.mark.asyncio
    async def test_with_meta(self, app, collector):
        api_test = wrap_test(collector)

        @api_test.with_meta(summary="Get User", tags=["Users"])("should get user")
        async def get_user():
            await request(app).get("/users/1")

        await get_user()

        assert collector.results[0].options == {
            "summary": "Get User",
            "description": "should get user",
            "tag": "Users",
        }

    @pytest.mark.asyncio
    async def test_arguments_passed_through(self, app, collector):
        api_test = wrap_test(collector)

        @api_test("passes arguments")
        async def with_args(user_id, verbose=False):
            response = await request(app).get(f"/users/{user_id}")
            return response.body["id"], verbose

        assert await with_args("9", verbose=True) == ("9", True)

    def test_preserves_name(self, collector):
        @wrap_test(collector)("named")
        def test_something():
            """Docstring kept."""

        assert test_something.__name__ == "test_something"
        assert test_something.__doc__ == "Docstring kept."

    def test_with_meta_returns_new_instance(self, collector):
        api_test = wrap_test(collector)

        documented = api_test.with_meta({"summary": "S", "operationId": "op"})

        assert isinstance(documented, WrappedTest)
        assert documented is not api_test
        assert api_test.metadata is None
        assert documented.metadata.operation_id == "op"
        assert documented.collector is collector


api_test = wrap_test()


@api_test("decorated pytest test")
@pytest.mark.asyncio
async def test_decorated_pytest_function(app):
    """Test fixtures reach a decorated pytest test function."""
    response = await request(app).get("/users/5")

    assert response.body == {"id": "5", "name": "John"}
    assert CaptureContext.get_captured_requests()[0].url == "/users/5"
