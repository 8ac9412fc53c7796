"""In-process adapter for ASGI applications.

Requests are handed straight to the application through
httpx.ASGITransport; no socket is opened. This is the adapter to use for
FastAPI or Starlette apps under test.
"""

import logging
from typing import Any, Optional

import httpx

from apidoc_capture.adapters.base import HttpClient, RequestBuilder
from apidoc_capture.config import load_settings

logger = logging.getLogger(__name__)


class AsgiRequestBuilder(RequestBuilder):
    """Request builder dispatching into an ASGI app.

    expect() assertions are evaluated after the response is captured and
    raise AssertionError on mismatch.
    """

    EVALUATES_EXPECTATIONS = True

    def __init__(
        self, app: Any, base_url: str, default_timeout: float, method: str, url: str
    ) -> None:
        self._app = app
        self._base_url = base_url
        self._default_timeout = default_timeout
        super().__init__(method, url)

    async def _dispatch(self) -> httpx.Response:
        transport = httpx.ASGITransport(app=self._app)
        async with httpx.AsyncClient(
            transport=transport,
            base_url=self._base_url,
            timeout=self._default_timeout,
        ) as client:
            return await client.request(self.method, self.url, **self._request_kwargs())

    def _decode_body(self, response: httpx.Response, text: str) -> Any:
        content_type = response.headers.get("content-type", "")
        if "json" in content_type and text:
            try:
                return response.json()
            except ValueError:
                logger.debug("Invalid JSON body from %s %s", self.method, self.url)
        return text


class AsgiClient(HttpClient):
    """HTTP client bound to one ASGI application."""

    def __init__(self, app: Any, base_url: str, default_timeout: float) -> None:
        self.app = app
        self.base_url = base_url
        self.default_timeout = default_timeout

    def _builder(self, method: str, url: str) -> RequestBuilder:
        return AsgiRequestBuilder(self.app, self.base_url, self.default_timeout, method, url)


class AsgiAdapter:
    """Create in-process clients for ASGI applications."""

    def create(self, app: Any, base_url: Optional[str] = None) -> AsgiClient:
        """Create a client for app.

        Args:
            app: ASGI application (e.g. a FastAPI instance)
            base_url: Host used in request URLs (default from settings)

        Returns:
            AsgiClient instance
        """
        settings = load_settings()
        return AsgiClient(app, base_url or settings.asgi_base_url, settings.timeout)
