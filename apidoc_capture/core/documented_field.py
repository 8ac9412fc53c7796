"""Documented example values.

A DocumentedField pairs an example value with author-supplied
documentation, marking the value as intentionally documented rather than
incidental.
"""

from dataclasses import dataclass
from typing import Any, Optional


class _Undefined:
    """Marker for "no value at all", distinct from None (JSON null)."""

    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


@dataclass(frozen=True)
class DocumentedField:
    """Example value with documentation metadata.

    Attributes:
        description: Field description shown in the documentation
        example: Example value; may be any JSON-compatible value, nested
            DocumentedFields, or a callable used as a value check
        required: Whether the field is required in its parent object
        format: Explicit OpenAPI format
        enum: Allowed values
        pattern: Regular expression the value matches
    """

    description: str
    example: Any = UNDEFINED
    required: bool = True
    format: Optional[str] = None
    enum: Optional[list[Any]] = None
    pattern: Optional[str] = None


def doc_field(
    description: str,
    example: Any,
    required: bool = True,
    *,
    format: Optional[str] = None,
    enum: Optional[list[Any]] = None,
    pattern: Optional[str] = None,
) -> DocumentedField:
    """Create a DocumentedField.

    Args:
        description: Field description shown in the documentation
        example: Example value or value check callable
        required: Whether the field is required (default: True)
        format: Explicit OpenAPI format
        enum: Allowed values
        pattern: Regular expression the value matches

    Returns:
        DocumentedField instance

    Example:
        >>> email = doc_field("User email", "john@example.com")
        >>> email.required
        True
    """
    return DocumentedField(
        description=description,
        example=example,
        required=required,
        format=format,
        enum=enum,
        pattern=pattern,
    )


def is_documented_field(value: Any) -> bool:
    """Check whether value is a DocumentedField."""
    return isinstance(value, DocumentedField)


def plain_example(value: Any) -> Any:
    """Strip DocumentedField wrappers from an example value, recursively."""
    if isinstance(value, DocumentedField):
        return plain_example(value.example)
    if isinstance(value, dict):
        return {key: plain_example(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain_example(item) for item in value]
    return value
