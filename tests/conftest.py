"""Shared pytest fixtures for all tests."""

import asyncio
import json
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from apidoc_capture.adapters import create_client
from apidoc_capture.core.scenario_collector import ScenarioCollector

BASE_URL = "http://testserver"


def build_app() -> FastAPI:
    """Create the API used as system under test."""
    app = FastAPI()

    @app.get("/users")
    async def list_users(request: Request):
        return {"users": [], "query": dict(request.query_params)}

    @app.post("/users", status_code=201)
    async def create_user(request: Request):
        body = await request.json()
        return {"id": 1, **body}

    @app.get("/users/{user_id}")
    async def get_user(user_id: str):
        return {"id": user_id, "name": "John"}

    @app.post("/items")
    async def create_item(request: Request):
        body = await request.json()
        return {
            "received": body,
            "page": request.query_params.get("page"),
            "trace": request.headers.get("x-trace"),
        }

    @app.get("/missing")
    async def missing():
        return JSONResponse({"error": "Not found"}, status_code=404)

    @app.get("/text")
    async def text():
        return PlainTextResponse("hello")

    @app.get("/cookies")
    async def cookies():
        response = JSONResponse({"ok": True})
        response.headers.append("set-cookie", "a=1")
        response.headers.append("set-cookie", "b=2")
        return response

    @app.get("/whoami")
    async def whoami(request: Request):
        return {"authorization": request.headers.get("authorization")}

    @app.get("/slow")
    async def slow(request: Request):
        delay = float(request.query_params.get("delay", "0"))
        await asyncio.sleep(delay)
        return {"delay": delay}

    @app.api_route("/raw", methods=["POST", "PATCH"])
    async def raw(request: Request):
        body = await request.body()
        return {
            "text": body.decode(),
            "content_types": request.headers.getlist("content-type"),
        }

    @app.post("/upload")
    async def upload(request: Request):
        form = await request.form()
        fields = {}
        files = []
        for key, value in form.multi_items():
            if isinstance(value, str):
                fields[key] = value
            else:
                files.append({"field": key, "filename": value.filename})
        return {"fields": fields, "files": files}

    return app


@pytest.fixture
def app() -> FastAPI:
    """Create a fresh application for each test."""
    return build_app()


@pytest.fixture
def asgi_transport(app: FastAPI) -> httpx.ASGITransport:
    """ASGI transport routing real-HTTP adapters to the in-process app."""
    return httpx.ASGITransport(app=app)


@pytest.fixture
def asgi_client(app: FastAPI):
    """In-process client for the test app."""
    return create_client.asgi(app)


@pytest_asyncio.fixture
async def httpx_client(asgi_transport: httpx.ASGITransport):
    """Client-instance adapter pointed at the test app, not raising on errors."""
    client = create_client.httpx(
        base_url=BASE_URL, transport=asgi_transport, raise_for_status=False
    )
    yield client
    await client.aclose()


@pytest.fixture
def fetch_client(asgi_transport: httpx.ASGITransport):
    """Fetch-style adapter pointed at the test app."""
    return create_client.fetch(base_url=BASE_URL, transport=asgi_transport)


@pytest.fixture
def collector() -> ScenarioCollector:
    """Create an empty scenario collector."""
    return ScenarioCollector()


@pytest.fixture
def example_json(tmp_path: Path) -> Path:
    """Create an example JSON file.

    Returns:
        Path to the example file
    """
    path = tmp_path / "user.json"
    path.write_text(
        json.dumps({"id": 1, "email": "john@example.com", "tags": ["admin"], "manager": None})
    )
    return path


@pytest.fixture
def example_yaml(tmp_path: Path) -> Path:
    """Create an example YAML file.

    Returns:
        Path to the example file
    """
    path = tmp_path / "user.yaml"
    path.write_text(
        """id: 7
website: https://example.com
active: true
"""
    )
    return path
