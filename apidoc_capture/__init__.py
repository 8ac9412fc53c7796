"""API Doc Capture - Record HTTP calls in tests and infer OpenAPI schemas."""

__version__ = "1.0.0"

from apidoc_capture.adapters import create_client, request
from apidoc_capture.core.capture_context import CaptureContext
from apidoc_capture.core.documented_field import doc_field
from apidoc_capture.core.schema_factory import create_schema, register_generator
from apidoc_capture.wrap_test import wrap_test

__all__ = [
    "CaptureContext",
    "create_client",
    "request",
    "create_schema",
    "register_generator",
    "doc_field",
    "wrap_test",
]
