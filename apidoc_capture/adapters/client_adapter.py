"""Client-instance adapter backed by a long-lived httpx.AsyncClient.

One configured client (base URL, default headers, timeout) serves every
request. Non-2xx responses raise by default; the response is
captured before the error propagates.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from apidoc_capture.adapters.base import HttpClient, RequestBuilder
from apidoc_capture.config import load_settings
from apidoc_capture.exceptions import AdapterConfigException

logger = logging.getLogger(__name__)


@dataclass
class ClientAdapterConfig:
    """Configuration of a client-instance adapter.

    Attributes:
        base_url: Base URL prepended to request paths
        timeout: Default timeout in seconds (default from settings)
        headers: Headers sent with every request
        raise_for_status: Raise httpx.HTTPStatusError on non-2xx
            (default from settings)
        transport: Optional httpx transport, e.g. httpx.ASGITransport
    """

    base_url: str = ""
    timeout: Optional[float] = None
    headers: dict[str, str] = field(default_factory=dict)
    raise_for_status: Optional[bool] = None
    transport: Optional[httpx.AsyncBaseTransport] = None


class ClientRequestBuilder(RequestBuilder):
    """Request builder sending through a shared httpx.AsyncClient."""

    def __init__(
        self, client: httpx.AsyncClient, raise_for_status: bool, method: str, url: str
    ) -> None:
        self._client = client
        self._raise_for_status = raise_for_status
        super().__init__(method, url)

    async def _dispatch(self) -> httpx.Response:
        # build_request runs the client's form encoder for multipart bodies
        # and merges its boundary Content-Type into the request headers.
        request = self._client.build_request(self.method, self.url, **self._request_kwargs())
        response = await self._client.send(request)
        if self._raise_for_status:
            response.raise_for_status()
        return response

    def _decode_body(self, response: httpx.Response, text: str) -> Any:
        if not text:
            return text
        try:
            return json.loads(text)
        except ValueError:
            return text


class HttpxClient(HttpClient):
    """HTTP client wrapping one httpx.AsyncClient.

    Close it with aclose() or use it as an async context manager.
    """

    def __init__(self, client: httpx.AsyncClient, raise_for_status: bool) -> None:
        self.client = client
        self.raise_for_status = raise_for_status

    def _builder(self, method: str, url: str) -> RequestBuilder:
        return ClientRequestBuilder(self.client, self.raise_for_status, method, url)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "HttpxClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


class ClientAdapter:
    """Create clients backed by a configured httpx.AsyncClient."""

    def create(self, config: Optional[ClientAdapterConfig] = None) -> HttpxClient:
        """Create a client from config.

        Args:
            config: Adapter configuration (default: empty config)

        Returns:
            HttpxClient instance

        Raises:
            AdapterConfigException: Timeout is negative
        """
        config = config or ClientAdapterConfig()
        settings = load_settings()

        timeout = settings.timeout if config.timeout is None else config.timeout
        if timeout < 0:
            raise AdapterConfigException(f"Timeout must not be negative: {timeout}")
        raise_for_status = (
            settings.raise_for_status
            if config.raise_for_status is None
            else config.raise_for_status
        )

        client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=timeout,
            headers=config.headers,
            transport=config.transport,
            follow_redirects=True,
        )
        logger.debug("Created httpx client for '%s'", config.base_url)
        return HttpxClient(client, raise_for_status)
