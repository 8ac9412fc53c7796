"""HTTP adapters with automatic request/response capture.

Every adapter exposes the same chainable, awaitable request contract while
mirroring each call into the active capture context.

Example:
    >>> client = create_client.asgi(app)
    >>> response = await client.post("/users").send({"name": "John"})
    >>> client = create_client.httpx(base_url="http://localhost:8000")
    >>> client = create_client.fetch(base_url="http://localhost:8000")
"""

from typing import Any, Optional

from apidoc_capture.adapters.asgi_adapter import AsgiAdapter, AsgiClient
from apidoc_capture.adapters.base import (
    SUPPORTED_METHODS,
    HttpClient,
    RequestBuilder,
)
from apidoc_capture.adapters.client_adapter import (
    ClientAdapter,
    ClientAdapterConfig,
    HttpxClient,
)
from apidoc_capture.adapters.fetch_adapter import (
    FetchAdapter,
    FetchAdapterConfig,
    FetchClient,
)


class ClientFactory:
    """Create HTTP clients with different adapters."""

    @staticmethod
    def asgi(app: Any, base_url: Optional[str] = None) -> AsgiClient:
        """Create an in-process client for an ASGI app."""
        return AsgiAdapter().create(app, base_url)

    @staticmethod
    def httpx(config: Optional[ClientAdapterConfig] = None, **kwargs: Any) -> HttpxClient:
        """Create a client backed by a configured httpx.AsyncClient.

        Accepts a ClientAdapterConfig or its fields as keyword arguments.
        """
        return ClientAdapter().create(config or ClientAdapterConfig(**kwargs))

    @staticmethod
    def fetch(config: Optional[FetchAdapterConfig] = None, **kwargs: Any) -> FetchClient:
        """Create a fetch-style client.

        Accepts a FetchAdapterConfig or its fields as keyword arguments.
        """
        return FetchAdapter().create(config or FetchAdapterConfig(**kwargs))


create_client = ClientFactory()


def request(app: Any) -> AsgiClient:
    """Shortcut for create_client.asgi(app)."""
    return create_client.asgi(app)


__all__ = [
    "create_client",
    "request",
    "ClientFactory",
    "HttpClient",
    "RequestBuilder",
    "SUPPORTED_METHODS",
    "AsgiAdapter",
    "AsgiClient",
    "ClientAdapter",
    "ClientAdapterConfig",
    "HttpxClient",
    "FetchAdapter",
    "FetchAdapterConfig",
    "FetchClient",
]
