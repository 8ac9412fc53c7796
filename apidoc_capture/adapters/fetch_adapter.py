"""Fetch-style adapter performing one-shot real HTTP requests.

Each request builds its absolute URL and query string by hand, sends JSON
bodies as serialized text, and negotiates the response body by trying to
parse the text as JSON.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from apidoc_capture.adapters.base import HttpClient, RequestBuilder
from apidoc_capture.config import load_settings
from apidoc_capture.core.documented_field import UNDEFINED
from apidoc_capture.exceptions import AdapterConfigException

logger = logging.getLogger(__name__)


@dataclass
class FetchAdapterConfig:
    """Configuration of a fetch-style adapter.

    Attributes:
        base_url: Base URL prepended to request paths (required)
        headers: Headers sent with every request
        transport: Optional httpx transport, e.g. httpx.ASGITransport
    """

    base_url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    transport: Optional[httpx.AsyncBaseTransport] = None


class FetchRequestBuilder(RequestBuilder):
    """Request builder issuing a single standalone request."""

    def __init__(
        self, config: FetchAdapterConfig, default_timeout: float, method: str, url: str
    ) -> None:
        self._config = config
        self._default_timeout = default_timeout
        super().__init__(method, url)

    def full_url(self) -> str:
        """Absolute URL including the query string."""
        url = f"{self._config.base_url.rstrip('/')}{self.url}"
        if self._params:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{urlencode(self._params, doseq=True)}"
        return url

    def _outgoing(self) -> tuple[dict[str, str], dict[str, Any]]:
        headers = {**self._config.headers, **self._headers}
        if self._has_multipart():
            return headers, self._multipart_kwargs()
        if self._body is UNDEFINED or self._body is None:
            return headers, {}
        if isinstance(self._body, (bytes, bytearray, str)):
            return headers, {"content": self._body}
        if not any(name.lower() == "content-type" for name in headers):
            headers["Content-Type"] = "application/json"
        return headers, {"content": json.dumps(self._body)}

    async def _dispatch(self) -> httpx.Response:
        headers, body_kwargs = self._outgoing()
        timeout = self._default_timeout if self._timeout is None else self._timeout
        async with httpx.AsyncClient(transport=self._config.transport, timeout=timeout) as client:
            return await client.request(
                self.method, self.full_url(), headers=headers, **body_kwargs
            )

    def _decode_body(self, response: httpx.Response, text: str) -> Any:
        try:
            return json.loads(text)
        except ValueError:
            return text


class FetchClient(HttpClient):
    """HTTP client issuing fetch-style one-shot requests."""

    def __init__(self, config: FetchAdapterConfig, default_timeout: float) -> None:
        self.config = config
        self.default_timeout = default_timeout

    def _builder(self, method: str, url: str) -> RequestBuilder:
        return FetchRequestBuilder(self.config, self.default_timeout, method, url)


class FetchAdapter:
    """Create fetch-style clients."""

    def create(self, config: FetchAdapterConfig) -> FetchClient:
        """Create a client from config.

        Args:
            config: Adapter configuration with a base URL

        Returns:
            FetchClient instance

        Raises:
            AdapterConfigException: base_url is missing
        """
        if not config.base_url:
            raise AdapterConfigException("Fetch adapter requires a base_url")
        return FetchClient(config, load_settings().timeout)
