"""Core modules for API Doc Capture."""

from apidoc_capture.core.capture_context import CaptureContext
from apidoc_capture.core.capture_data import (
    ApiDocMetadata,
    CapturedFile,
    CapturedRequest,
    CapturedResponse,
    ContextStore,
    FormData,
)
from apidoc_capture.core.documented_field import (
    UNDEFINED,
    DocumentedField,
    doc_field,
    is_documented_field,
)
from apidoc_capture.core.scenario_collector import (
    ScenarioCollector,
    ScenarioResult,
    get_default_collector,
)
from apidoc_capture.core.schema_factory import (
    SchemaFactory,
    create_schema,
    register_generator,
)
from apidoc_capture.core.schema_generators import SchemaGenerator, detect_string_format

__all__ = [
    # capture
    "CaptureContext",
    "ApiDocMetadata",
    "CapturedFile",
    "CapturedRequest",
    "CapturedResponse",
    "ContextStore",
    "FormData",
    # schema
    "UNDEFINED",
    "DocumentedField",
    "doc_field",
    "is_documented_field",
    "SchemaFactory",
    "SchemaGenerator",
    "create_schema",
    "register_generator",
    "detect_string_format",
    # collection
    "ScenarioCollector",
    "ScenarioResult",
    "get_default_collector",
]
