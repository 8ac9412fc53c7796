"""Data structures for captured HTTP exchanges.

This module defines dataclasses used to record the requests and responses
observed while a scenario runs, together with the documentation metadata
attached to the scenario.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

HeaderValue = Union[str, list[str]]


@dataclass
class ApiDocMetadata:
    """Documentation metadata attached to a scenario.

    Attributes:
        summary: Short operation summary
        description: Longer operation description
        tags: Operation tags
        deprecated: Whether the operation is deprecated
        operation_id: Explicit operationId
    """

    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    deprecated: Optional[bool] = None
    operation_id: Optional[str] = None

    @classmethod
    def from_value(cls, value: Any) -> Optional["ApiDocMetadata"]:
        """Build metadata from an instance, a mapping or None.

        Mappings may use either ``operation_id`` or ``operationId``.

        Args:
            value: ApiDocMetadata, mapping or None

        Returns:
            ApiDocMetadata instance, or None when value is None
        """
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(
                summary=value.get("summary"),
                description=value.get("description"),
                tags=list(value.get("tags") or []),
                deprecated=value.get("deprecated"),
                operation_id=value.get("operation_id", value.get("operationId")),
            )
        raise TypeError(f"Unsupported metadata type: {type(value).__name__}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": self.summary,
            "description": self.description,
            "tags": list(self.tags),
            "deprecated": self.deprecated,
            "operation_id": self.operation_id,
        }


@dataclass
class CapturedFile:
    """A file part of a multipart request.

    Attributes:
        field: Form field name
        filename: File name sent to the server
        mimetype: MIME type when it could be guessed
    """

    field: str
    filename: str
    mimetype: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "field": self.field,
            "filename": self.filename,
            "mimetype": self.mimetype,
        }


@dataclass
class FormData:
    """Multipart form content of a request.

    Attributes:
        fields: Text fields by name
        files: File parts in attach order
    """

    fields: dict[str, Any] = field(default_factory=dict)
    files: list[CapturedFile] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "fields": dict(self.fields),
            "files": [f.to_dict() for f in self.files],
        }


@dataclass
class CapturedResponse:
    """Recorded response of one HTTP exchange.

    Attributes:
        status: HTTP status code
        status_text: Reason phrase
        headers: Response headers; repeated headers hold a list
        body: Decoded body (JSON value or text)
        text: Raw response text
    """

    status: int
    status_text: Optional[str] = None
    headers: dict[str, HeaderValue] = field(default_factory=dict)
    body: Any = None
    text: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status,
            "status_text": self.status_text,
            "headers": dict(self.headers),
            "body": self.body,
            "text": self.text,
        }


@dataclass
class CapturedRequest:
    """Recorded request of one HTTP exchange.

    Identity is positional: a record is created once per request builder and
    afterwards only mutated through merge(), add_file() and set_form_field().

    Attributes:
        method: HTTP method in uppercase
        url: Request URL as given to the client
        body: Logical (pre-serialization) request body
        headers: Request headers set through the builder
        query_params: Query parameters of the last query() call
        path_params: Path parameters
        form_data: Multipart content, created on first attach()/field()
        response: Response, set at most once
    """

    method: str = ""
    url: str = ""
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    query_params: dict[str, Any] = field(default_factory=dict)
    path_params: dict[str, Any] = field(default_factory=dict)
    form_data: Optional[FormData] = None
    response: Optional[CapturedResponse] = None

    MERGEABLE_FIELDS = (
        "method",
        "url",
        "body",
        "headers",
        "query_params",
        "path_params",
        "form_data",
        "response",
    )

    @classmethod
    def from_partial(cls, partial: Mapping[str, Any]) -> "CapturedRequest":
        """Create a record from a partial mapping."""
        request = cls()
        request.merge(partial)
        return request

    def merge(self, partial: Mapping[str, Any]) -> None:
        """Merge partial request data into this record.

        Headers merge key by key, keeping keys that are not in the partial.
        A response that is already set is never replaced. Every other field
        is replaced. Unknown keys are ignored.

        Args:
            partial: Mapping of field name to new value
        """
        for key, value in partial.items():
            if key not in self.MERGEABLE_FIELDS:
                logger.debug("Ignoring unknown request field '%s'", key)
                continue
            if key == "headers":
                self.headers = {**self.headers, **dict(value or {})}
            elif key == "response":
                if self.response is not None:
                    logger.debug("Response already captured for %s %s", self.method, self.url)
                    continue
                self.response = value
            else:
                setattr(self, key, value)

    def add_file(self, field_name: str, filename: str, mimetype: Optional[str] = None) -> None:
        """Append a file part, creating form data if absent."""
        if self.form_data is None:
            self.form_data = FormData()
        self.form_data.files.append(CapturedFile(field_name, filename, mimetype))

    def set_form_field(self, name: str, value: Any) -> None:
        """Set a text form field, creating form data if absent."""
        if self.form_data is None:
            self.form_data = FormData()
        self.form_data.fields[name] = value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "method": self.method,
            "url": self.url,
            "body": self.body,
            "headers": dict(self.headers),
            "query_params": dict(self.query_params),
            "path_params": dict(self.path_params),
            "form_data": self.form_data.to_dict() if self.form_data else None,
            "response": self.response.to_dict() if self.response else None,
        }


@dataclass
class ContextStore:
    """Requests observed so far in one scenario.

    Attributes:
        description: Scenario (test case) description
        metadata: Optional documentation metadata
        captured_requests: Requests in construction order
    """

    description: str
    metadata: Optional[ApiDocMetadata] = None
    captured_requests: list[CapturedRequest] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "description": self.description,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "captured_requests": [r.to_dict() for r in self.captured_requests],
        }
