"""Collection of captured scenarios for documentation assembly.

After a scenario succeeds, every captured request that received a response
becomes a ScenarioResult. The collector keeps them in order and exports
them, with body schemas synthesized by the schema factory, as JSON.
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from apidoc_capture.core.capture_data import ContextStore
from apidoc_capture.core.schema_factory import create_schema
from apidoc_capture.exceptions import ScenarioExportException

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


def exportable_body(body: Any) -> Any:
    """Return body in a JSON-serializable form.

    Raw bytes become UTF-8 text, or base64 text when they are not valid
    UTF-8. Every other value is returned unchanged.
    """
    if not isinstance(body, (bytes, bytearray)):
        return body
    try:
        return bytes(body).decode("utf-8")
    except UnicodeDecodeError:
        return base64.b64encode(bytes(body)).decode("ascii")


@dataclass
class ScenarioResult:
    """One documented HTTP exchange.

    Attributes:
        method: HTTP method
        url: Request URL
        options: Documentation options (summary, description, tag)
        request: Request data (body, headers, query_params, path_params)
        response: Response data (status, body, headers)
        test_suite_description: Description of the scenario it came from
    """

    method: str
    url: str
    options: dict[str, Any] = field(default_factory=dict)
    request: dict[str, Any] = field(default_factory=dict)
    response: dict[str, Any] = field(default_factory=dict)
    test_suite_description: Optional[str] = None

    def to_dict(self, include_schemas: bool = False) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Args:
            include_schemas: Add request_schema/response_schema entries
        """
        request = dict(self.request)
        if "body" in request:
            request["body"] = exportable_body(request["body"])
        response = dict(self.response)
        if "body" in response:
            response["body"] = exportable_body(response["body"])
        result = {
            "method": self.method,
            "url": self.url,
            "options": dict(self.options),
            "request": request,
            "response": response,
            "test_suite_description": self.test_suite_description,
        }
        if include_schemas:
            body = self.request.get("body")
            result["request_schema"] = create_schema(body) if body is not None else None
            result["response_schema"] = create_schema(self.response.get("body"))
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScenarioResult":
        """Create from a dictionary produced by to_dict()."""
        return cls(
            method=data["method"],
            url=data["url"],
            options=dict(data.get("options") or {}),
            request=dict(data.get("request") or {}),
            response=dict(data.get("response") or {}),
            test_suite_description=data.get("test_suite_description"),
        )


class ScenarioCollector:
    """Collect ScenarioResults from finished capture scopes.

    Example:
        >>> collector = ScenarioCollector()
        >>> collector.collect_store(store)
        2
        >>> collector.write_json("scenarios.json")
    """

    def __init__(self) -> None:
        """Initialize an empty collector."""
        self.results: list[ScenarioResult] = []

    def collect_store(self, store: ContextStore) -> int:
        """Convert the responded requests of store into results.

        Args:
            store: Store of a finished scenario

        Returns:
            Number of results added
        """
        metadata = store.metadata
        added = 0
        for captured in store.captured_requests:
            if captured.response is None:
                continue
            self.results.append(
                ScenarioResult(
                    method=captured.method,
                    url=captured.url,
                    options={
                        "summary": metadata.summary if metadata else None,
                        "description": (metadata.description if metadata else None)
                        or store.description,
                        "tag": metadata.tags[0] if metadata and metadata.tags else None,
                    },
                    request={
                        "body": captured.body,
                        "headers": dict(captured.headers),
                        "query_params": dict(captured.query_params),
                        "path_params": dict(captured.path_params),
                    },
                    response={
                        "status": captured.response.status,
                        "body": captured.response.body,
                        "headers": dict(captured.response.headers),
                    },
                    test_suite_description=store.description,
                )
            )
            added += 1
        logger.debug("Collected %d result(s) from '%s'", added, store.description)
        return added

    def clear(self) -> None:
        """Remove all collected results."""
        self.results.clear()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": EXPORT_VERSION,
            "scenarios": [r.to_dict(include_schemas=True) for r in self.results],
        }

    def write_json(self, path: str) -> str:
        """Write collected results to a JSON file.

        Args:
            path: Output file path; parent directories are created

        Returns:
            Path of the written file

        Raises:
            ScenarioExportException: File cannot be written or a captured
                value is not JSON serializable
        """
        output = Path(path)
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            with open(output, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
        except (OSError, TypeError) as e:
            raise ScenarioExportException(str(path), str(e)) from e
        return str(output)

    @staticmethod
    def load_json(path: str) -> list[ScenarioResult]:
        """Read results from a file written by write_json().

        Args:
            path: Export file path

        Returns:
            List of ScenarioResult

        Raises:
            FileNotFoundError: File doesn't exist
            ScenarioExportException: File is not a valid export
        """
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ScenarioExportException(path, f"invalid JSON: {e}") from e

        scenarios = data.get("scenarios") if isinstance(data, dict) else None
        if not isinstance(scenarios, list):
            raise ScenarioExportException(path, "missing 'scenarios' list")
        try:
            return [ScenarioResult.from_dict(item) for item in scenarios]
        except (KeyError, TypeError, AttributeError) as e:
            raise ScenarioExportException(path, f"malformed scenario entry: {e}") from e


_default_collector: Optional[ScenarioCollector] = None


def get_default_collector() -> ScenarioCollector:
    """Return the process-wide collector used by wrap_test()."""
    global _default_collector
    if _default_collector is None:
        _default_collector = ScenarioCollector()
    return _default_collector
