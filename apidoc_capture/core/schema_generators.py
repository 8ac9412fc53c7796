"""Schema generators for individual value kinds.

Each generator turns one kind of value into an OpenAPI schema fragment.
Container generators call back into the owning factory for their
children, so new kinds registered on the factory are honored at any depth.
"""

import ipaddress
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from apidoc_capture.core.documented_field import (
    UNDEFINED,
    DocumentedField,
    is_documented_field,
    plain_example,
)

if TYPE_CHECKING:
    from apidoc_capture.core.schema_factory import SchemaFactory

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_TIME_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$",
    re.IGNORECASE,
)
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
URI_PATTERN = re.compile(r"^[a-z][a-z0-9+.\-]*://[^\s/?#]+[^\s]*$", re.IGNORECASE)
IPV4_PATTERN = re.compile(
    r"^((25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)\.){3}(25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)$"
)


def _is_ipv6(value: str) -> bool:
    if ":" not in value:
        return False
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


# Checked in order, first match wins
FORMAT_CHECKS = [
    ("uuid", UUID_PATTERN.match),
    ("email", EMAIL_PATTERN.match),
    ("date-time", DATE_TIME_PATTERN.match),
    ("date", DATE_PATTERN.match),
    ("uri", URI_PATTERN.match),
    ("ipv4", IPV4_PATTERN.match),
    ("ipv6", _is_ipv6),
]


def detect_string_format(value: str) -> Optional[str]:
    """Detect the OpenAPI format of a string value.

    Args:
        value: String to inspect

    Returns:
        Format name (uuid, email, date-time, date, uri, ipv4, ipv6) or None

    Example:
        >>> detect_string_format("a@b.com")
        'email'
        >>> detect_string_format("hello") is None
        True
    """
    for format_name, check in FORMAT_CHECKS:
        if check(value):
            return format_name
    return None


class SchemaGenerator(ABC):
    """Interface of a schema generator for one kind of value."""

    @abstractmethod
    def generate_schema(self, value: Any, include_example: bool = True) -> dict[str, Any]:
        """Generate a schema fragment from value.

        Args:
            value: Value to describe
            include_example: Whether to put the value in "example"

        Returns:
            OpenAPI schema fragment with exactly one "type"
        """


class StringSchemaGenerator(SchemaGenerator):
    """Schema for str values, with format detection."""

    def generate_schema(self, value: Any, include_example: bool = True) -> dict[str, Any]:
        if not isinstance(value, str):
            return {"type": "string"}

        schema: dict[str, Any] = {"type": "string"}
        format_name = detect_string_format(value)
        if format_name:
            schema["format"] = format_name
        if include_example:
            schema["example"] = value
        return schema


class NumberSchemaGenerator(SchemaGenerator):
    """Schema for int and float values."""

    def generate_schema(self, value: Any, include_example: bool = True) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "number"}
        if include_example and isinstance(value, (int, float)) and not isinstance(value, bool):
            schema["example"] = value
        return schema


class BooleanSchemaGenerator(SchemaGenerator):
    """Schema for bool values."""

    def generate_schema(self, value: Any, include_example: bool = True) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "boolean"}
        if include_example and isinstance(value, bool):
            schema["example"] = value
        return schema


class ArraySchemaGenerator(SchemaGenerator):
    """Schema for lists and tuples.

    Only the first element determines the item schema; heterogeneous
    arrays are not merged.
    """

    def __init__(self, factory: "SchemaFactory") -> None:
        self.factory = factory

    def generate_schema(self, value: Any, include_example: bool = True) -> dict[str, Any]:
        items = list(value)
        if not items:
            return {"type": "array", "items": {"type": "string"}}
        return {
            "type": "array",
            "items": self.factory.create_schema(items[0], include_example),
        }


class ObjectSchemaGenerator(SchemaGenerator):
    """Schema for plain mappings.

    A key is required when its value is a DocumentedField with
    required=True, or a plain value other than None/UNDEFINED.
    """

    def __init__(self, factory: "SchemaFactory") -> None:
        self.factory = factory

    def generate_schema(self, value: Any, include_example: bool = True) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        required: list[str] = []

        for key, item in value.items():
            name = str(key)
            properties[name] = self.factory.create_schema(item, include_example)
            if is_documented_field(item):
                if item.required:
                    required.append(name)
            elif item is not None and item is not UNDEFINED:
                required.append(name)

        schema: dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        return schema


class DocumentedFieldSchemaGenerator(SchemaGenerator):
    """Schema for DocumentedField wrappers.

    The wrapped example decides the type; the wrapper's documentation
    (description, format, enum, pattern) is layered on top. The "example"
    written here is not the raw wrapped value: nested DocumentedField
    wrappers are stripped from it so the schema stays JSON-serializable.
    """

    def __init__(self, factory: "SchemaFactory") -> None:
        self.factory = factory

    def generate_schema(self, value: Any, include_example: bool = True) -> dict[str, Any]:
        documented: DocumentedField = value
        schema = dict(self.factory.create_schema(documented.example, include_example))

        if documented.description:
            schema["description"] = documented.description
        if (
            include_example
            and documented.example is not UNDEFINED
            and not callable(documented.example)
        ):
            schema["example"] = plain_example(documented.example)
        if documented.format:
            schema["format"] = documented.format
        if documented.enum:
            schema["enum"] = list(documented.enum)
        if documented.pattern:
            schema["pattern"] = documented.pattern
        return schema


def is_plain_mapping(value: Any) -> bool:
    """Check whether value is a mapping that is not a DocumentedField."""
    return isinstance(value, Mapping) and not is_documented_field(value)
