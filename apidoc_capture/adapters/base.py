"""Uniform request builder contract shared by all HTTP adapters.

A RequestBuilder accumulates one request through chainable calls and
performs it when awaited. Every configuration call is mirrored into the
CapturedRequest the builder registered at construction, so the capture
context sees exactly what the test asked for.
"""

import asyncio
import base64
import logging
import mimetypes
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

import httpx

from apidoc_capture.core.capture_context import CaptureContext
from apidoc_capture.core.capture_data import CapturedRequest, CapturedResponse
from apidoc_capture.core.documented_field import UNDEFINED
from apidoc_capture.exceptions import AdapterConfigException

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

FileSource = Union[str, Path, bytes]


def headers_to_dict(headers: httpx.Headers) -> dict[str, Union[str, list[str]]]:
    """Flatten httpx headers; repeated headers become a list."""
    result: dict[str, Union[str, list[str]]] = {}
    for key in headers.keys():
        values = headers.get_list(key)
        result[key] = values[0] if len(values) == 1 else values
    return result


@dataclass
class Expectation:
    """A local assertion on the response.

    Attributes:
        status: Expected status code
        header: Header name to check
        value: Expected header value or regex
    """

    status: Optional[int] = None
    header: Optional[str] = None
    value: Union[str, re.Pattern[str], None] = None

    def check(self, response: CapturedResponse) -> None:
        """Raise AssertionError when the response does not match."""
        if self.status is not None:
            if response.status != self.status:
                raise AssertionError(
                    f'expected {self.status}, got {response.status} "{response.status_text}"'
                )
            return

        actual = None
        for key, value in response.headers.items():
            if key.lower() == (self.header or "").lower():
                actual = value if isinstance(value, str) else ", ".join(value)
                break
        if actual is None:
            raise AssertionError(f'expected "{self.header}" header field')
        if isinstance(self.value, re.Pattern):
            if not self.value.search(actual):
                raise AssertionError(
                    f'expected "{self.header}" matching {self.value.pattern}, got "{actual}"'
                )
        elif actual != self.value:
            raise AssertionError(
                f'expected "{self.header}" of "{self.value}", got "{actual}"'
            )


class RequestBuilder(ABC):
    """Chainable, awaitable description of one HTTP request.

    Subclasses implement _dispatch() for their transport and
    _decode_body() for their response body negotiation.

    Example:
        >>> response = await client.post("/users").set("X-Trace", "1").send({"name": "John"})
        >>> response.status
        201
    """

    # Whether expect() assertions are evaluated by this transport
    EVALUATES_EXPECTATIONS = False

    def __init__(self, method: str, url: str) -> None:
        """Initialize the builder and register the request if capturing.

        Args:
            method: HTTP method
            url: Request URL or path

        Raises:
            AdapterConfigException: Method is not supported
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise AdapterConfigException(
                f"Unsupported HTTP method: {method}. "
                f"Supported methods: {', '.join(SUPPORTED_METHODS)}"
            )
        self.method = method
        self.url = url

        self._headers: dict[str, str] = {}
        self._params: dict[str, Any] = {}
        self._body: Any = UNDEFINED
        self._form_fields: dict[str, str] = {}
        self._files: list[tuple[str, FileSource, str, Optional[str]]] = []
        self._timeout: Optional[float] = None
        self._expectations: list[Expectation] = []
        self._outcome: Optional[asyncio.Future] = None

        # Registered before any other call so intent is recorded even if
        # later configuration fails.
        self._record: Optional[CapturedRequest] = CaptureContext.add_request(
            {"method": method, "url": url}
        )

    @property
    def captured(self) -> Optional[CapturedRequest]:
        """The CapturedRequest owned by this builder, if capturing."""
        return self._record

    def _capture(self, partial: Mapping[str, Any]) -> None:
        if self._record is not None:
            self._record.merge(partial)

    def send(self, body: Any) -> "RequestBuilder":
        """Set the request body (JSON unless str or bytes; None sends no body)."""
        self._body = body
        self._capture({"body": body})
        return self

    def set(
        self, field: Union[str, Mapping[str, str]], value: Optional[str] = None
    ) -> "RequestBuilder":
        """Set one header, or several from a mapping."""
        headers = {field: value} if isinstance(field, str) else dict(field)
        self._headers.update(headers)
        self._capture({"headers": headers})
        return self

    def query(self, params: Mapping[str, Any]) -> "RequestBuilder":
        """Add query parameters.

        The outgoing parameters accumulate, while the captured query_params
        hold only the params of the latest call.
        """
        self._params.update(params)
        self._capture({"query_params": dict(params)})
        return self

    def attach(
        self, field: str, file: FileSource, filename: Optional[str] = None
    ) -> "RequestBuilder":
        """Add a multipart file part from a path or raw bytes."""
        if filename is None:
            filename = Path(file).name if isinstance(file, (str, Path)) else "file"
        mimetype = mimetypes.guess_type(filename)[0]
        self._files.append((field, file, filename, mimetype))
        if self._record is not None:
            self._record.add_file(field, filename, mimetype)
        return self

    def field(self, name: str, value: Union[str, int, float]) -> "RequestBuilder":
        """Add a multipart text field."""
        self._form_fields[name] = str(value)
        if self._record is not None:
            self._record.set_form_field(name, value)
        return self

    def auth(self, username: str, password: str) -> "RequestBuilder":
        """Set HTTP Basic credentials."""
        token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        return self.set("Authorization", f"Basic {token}")

    def bearer(self, token: str) -> "RequestBuilder":
        """Set a Bearer token."""
        return self.set("Authorization", f"Bearer {token}")

    def timeout(self, ms: float) -> "RequestBuilder":
        """Set the request timeout in milliseconds."""
        if ms < 0:
            raise AdapterConfigException(f"Timeout must not be negative: {ms}")
        self._timeout = ms / 1000
        return self

    def expect(
        self, status_or_field: Union[int, str], value: Union[str, re.Pattern[str], None] = None
    ) -> "RequestBuilder":
        """Expect a status code, or a header value (string or regex)."""
        if isinstance(status_or_field, int):
            self._expectations.append(Expectation(status=status_or_field))
        elif value is not None:
            self._expectations.append(Expectation(header=status_or_field, value=value))
        return self

    async def then(
        self,
        on_fulfilled: Optional[Callable[[CapturedResponse], Any]] = None,
        on_rejected: Optional[Callable[[Exception], Any]] = None,
    ) -> Any:
        """Perform the request (once) and hand the outcome to the callbacks.

        Args:
            on_fulfilled: Called with the CapturedResponse on success
            on_rejected: Called with the error instead of raising it

        Returns:
            Callback result, or the CapturedResponse without callback
        """
        try:
            response = await self._settle()
        except Exception as error:
            if on_rejected is not None:
                return on_rejected(error)
            raise
        if on_fulfilled is not None:
            return on_fulfilled(response)
        return response

    async def end(self) -> CapturedResponse:
        """Perform the request (once) and return the CapturedResponse."""
        return await self.then()

    def __await__(self):
        return self.then().__await__()

    async def _settle(self) -> CapturedResponse:
        if self._outcome is None:
            self._outcome = asyncio.ensure_future(self._perform())
        return await self._outcome

    async def _perform(self) -> CapturedResponse:
        logger.debug("Dispatching %s %s", self.method, self.url)
        try:
            raw = await self._dispatch()
        except Exception as error:
            raw_response = getattr(error, "response", None)
            if isinstance(raw_response, httpx.Response):
                self._attach_response(self._build_response(raw_response))
            raise

        captured = self._build_response(raw)
        self._attach_response(captured)
        if self.EVALUATES_EXPECTATIONS:
            for expectation in self._expectations:
                expectation.check(captured)
        return captured

    def _attach_response(self, response: CapturedResponse) -> None:
        logger.debug("%s %s -> %d", self.method, self.url, response.status)
        self._capture({"response": response})

    def _build_response(self, response: httpx.Response) -> CapturedResponse:
        text = response.text
        return CapturedResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=headers_to_dict(response.headers),
            body=self._decode_body(response, text),
            text=text,
        )

    def _has_multipart(self) -> bool:
        return bool(self._files or self._form_fields)

    def _multipart_kwargs(self) -> dict[str, Any]:
        files = []
        for field_name, source, filename, mimetype in self._files:
            content = source if isinstance(source, bytes) else Path(source).read_bytes()
            files.append(
                (field_name, (filename, content, mimetype or "application/octet-stream"))
            )
        return {"data": dict(self._form_fields), "files": files}

    def _body_kwargs(self) -> dict[str, Any]:
        """Keyword arguments encoding the body for httpx."""
        if self._has_multipart():
            return self._multipart_kwargs()
        if self._body is UNDEFINED or self._body is None:
            return {}
        if isinstance(self._body, (bytes, bytearray, str)):
            return {"content": self._body}
        return {"json": self._body}

    def _request_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"headers": dict(self._headers)}
        if self._params:
            kwargs["params"] = dict(self._params)
        kwargs.update(self._body_kwargs())
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        return kwargs

    @abstractmethod
    async def _dispatch(self) -> httpx.Response:
        """Perform the request on the transport."""

    @abstractmethod
    def _decode_body(self, response: httpx.Response, text: str) -> Any:
        """Decode the response body."""


class HttpClient(ABC):
    """Entry point creating one RequestBuilder per HTTP call."""

    @abstractmethod
    def _builder(self, method: str, url: str) -> RequestBuilder:
        """Create a builder for this client's transport."""

    def request(self, method: str, url: str) -> RequestBuilder:
        return self._builder(method, url)

    def get(self, url: str) -> RequestBuilder:
        return self._builder("GET", url)

    def post(self, url: str) -> RequestBuilder:
        return self._builder("POST", url)

    def put(self, url: str) -> RequestBuilder:
        return self._builder("PUT", url)

    def patch(self, url: str) -> RequestBuilder:
        return self._builder("PATCH", url)

    def delete(self, url: str) -> RequestBuilder:
        return self._builder("DELETE", url)

    def head(self, url: str) -> RequestBuilder:
        return self._builder("HEAD", url)

    def options(self, url: str) -> RequestBuilder:
        return self._builder("OPTIONS", url)
