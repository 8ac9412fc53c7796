"""Custom exceptions for API Doc Capture.

This module defines the exception hierarchy for API Doc Capture.
All custom exceptions inherit from ApiDocCaptureException base class.

Capture instrumentation itself never raises: usage errors on the capture
context are silent no-ops and transport errors propagate unchanged. These
exceptions cover configuration and file handling around the core.
"""


class ApiDocCaptureException(Exception):
    """Base exception for all API Doc Capture errors.

    All custom exceptions in API Doc Capture inherit from this
    base class to allow catching all tool-specific errors.
    """

    pass


class AdapterConfigException(ApiDocCaptureException):
    """Raised when an HTTP adapter is configured incorrectly.

    This exception is raised when:
    - Fetch adapter is created without a base URL
    - Timeout is negative
    - HTTP method is not supported by the request builder
    """

    pass


class ExampleLoadException(ApiDocCaptureException):
    """Raised when an example value file cannot be loaded.

    This exception is raised when:
    - File extension is not .json, .yaml or .yml
    - JSON or YAML syntax is invalid
    """

    pass


class ScenarioExportException(ApiDocCaptureException):
    """Raised when collected scenarios cannot be exported or read back.

    This exception is raised when:
    - Export file cannot be written
    - Export file is not valid JSON
    - Export file does not contain a scenario list

    Attributes:
        path: Path of the export file involved
    """

    def __init__(self, path: str, reason: str) -> None:
        """Initialize with export path and failure reason.

        Args:
            path: Path of the export file
            reason: Human readable failure reason
        """
        self.path = path
        super().__init__(f"Scenario export '{path}': {reason}")
