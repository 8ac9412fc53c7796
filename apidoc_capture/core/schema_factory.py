"""Schema factory turning captured values into OpenAPI schema fragments.

This module provides the SchemaFactory, which classifies a value once and
dispatches it to the generator registered for its kind, plus module-level
create_schema() and register_generator() helpers bound to a shared default
factory.
"""

import logging
from contextvars import ContextVar
from typing import Any, Optional, Union

from apidoc_capture.core.documented_field import UNDEFINED, is_documented_field
from apidoc_capture.core.schema_generators import (
    ArraySchemaGenerator,
    BooleanSchemaGenerator,
    DocumentedFieldSchemaGenerator,
    NumberSchemaGenerator,
    ObjectSchemaGenerator,
    SchemaGenerator,
    StringSchemaGenerator,
    is_plain_mapping,
)

logger = logging.getLogger(__name__)

# Built-in value kinds, in dispatch order after UNDEFINED/None
BUILTIN_KINDS = ["documented", "array", "object", "string", "number", "boolean"]

FALLBACK_SCHEMA = {"type": "string"}

# ids of containers currently being described, to cut reference cycles
_in_progress: ContextVar[frozenset[int]] = ContextVar(
    "apidoc_capture_schema_in_progress", default=frozenset()
)


def classify(value: Any) -> Optional[str]:
    """Return the built-in kind of value, or None for unknown kinds.

    Args:
        value: Value to classify (not UNDEFINED or None)

    Returns:
        One of BUILTIN_KINDS, or None
    """
    if is_documented_field(value):
        return "documented"
    if isinstance(value, (list, tuple)):
        return "array"
    if is_plain_mapping(value):
        return "object"
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return None


class SchemaFactory:
    """Select a schema generator by value kind and generate the schema.

    Generators are kept in two tables: one keyed by built-in kind name and
    one keyed by Python type. Types registered by callers are matched with
    isinstance() in registration order, before built-in classification.

    Synthesis never raises. Unknown kinds, reference cycles and failing
    generators all produce {"type": "string"}.

    Example:
        >>> factory = SchemaFactory()
        >>> factory.create_schema("a@b.com")
        {'type': 'string', 'format': 'email', 'example': 'a@b.com'}
        >>> factory.create_schema([])
        {'type': 'array', 'items': {'type': 'string'}}
    """

    def __init__(self) -> None:
        """Initialize factory with the default generators."""
        self._generators: dict[str, SchemaGenerator] = {}
        self._type_generators: dict[type, SchemaGenerator] = {}
        self._register_default_generators()

    def _register_default_generators(self) -> None:
        self._generators["string"] = StringSchemaGenerator()
        self._generators["number"] = NumberSchemaGenerator()
        self._generators["boolean"] = BooleanSchemaGenerator()
        self._generators["array"] = ArraySchemaGenerator(self)
        self._generators["object"] = ObjectSchemaGenerator(self)
        self._generators["documented"] = DocumentedFieldSchemaGenerator(self)

    def register_generator(
        self, kind: Union[str, type], generator: SchemaGenerator
    ) -> None:
        """Register a generator for a kind name or a Python type.

        Args:
            kind: Built-in kind name (see BUILTIN_KINDS) or a type
            generator: Generator instance; replaces any previous one
        """
        if isinstance(kind, type):
            self._type_generators[kind] = generator
        else:
            self._generators[kind] = generator

    def _select_generator(self, value: Any) -> Optional[SchemaGenerator]:
        for registered_type, generator in self._type_generators.items():
            if isinstance(value, registered_type):
                return generator
        kind = classify(value)
        if kind is None:
            return None
        return self._generators.get(kind)

    def create_schema(self, value: Any = UNDEFINED, include_example: bool = True) -> dict[str, Any]:
        """Generate an OpenAPI schema fragment from value.

        Args:
            value: Captured value or DocumentedField; UNDEFINED when omitted
            include_example: Whether to include examples (default: True)

        Returns:
            Schema fragment with exactly one "type"
        """
        if value is UNDEFINED:
            return {"type": "object"}
        if value is None:
            return {"type": "null"}

        generator = self._select_generator(value)
        if generator is None:
            logger.debug("No schema generator for %s", type(value).__name__)
            return dict(FALLBACK_SCHEMA)

        active = _in_progress.get()
        if id(value) in active:
            logger.debug("Reference cycle at %s", type(value).__name__)
            return dict(FALLBACK_SCHEMA)

        token = _in_progress.set(active | {id(value)})
        try:
            return generator.generate_schema(value, include_example)
        except Exception:
            logger.warning(
                "Schema generation failed for %s, using string placeholder",
                type(value).__name__,
                exc_info=True,
            )
            return dict(FALLBACK_SCHEMA)
        finally:
            _in_progress.reset(token)


_default_factory = SchemaFactory()


def get_default_factory() -> SchemaFactory:
    """Return the shared factory used by create_schema()."""
    return _default_factory


def create_schema(value: Any = UNDEFINED, include_example: bool = True) -> dict[str, Any]:
    """Generate a schema fragment with the shared default factory."""
    return _default_factory.create_schema(value, include_example)


def register_generator(kind: Union[str, type], generator: SchemaGenerator) -> None:
    """Register a generator on the shared default factory."""
    _default_factory.register_generator(kind, generator)
