"""Configuration and logging setup for API Doc Capture.

Values are loaded from environment variables with safe defaults.

Environment variables:
- APIDOC_CAPTURE_LOG_LEVEL: Root log level used by configure_logging (default: WARNING)
- APIDOC_CAPTURE_TIMEOUT: Default per-request timeout in seconds (default: 30.0)
- APIDOC_CAPTURE_ASGI_BASE_URL: Base URL of in-process requests (default: http://testserver)
- APIDOC_CAPTURE_RAISE_FOR_STATUS: Whether the client-instance adapter raises
  on non-2xx responses ("true"/"false", default: true)
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_TIMEOUT = 30.0
DEFAULT_ASGI_BASE_URL = "http://testserver"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _get_bool_env(name: str, default: bool) -> bool:
    """Parse a boolean-like environment variable.

    Accepts true/false variants (case-insensitive).
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return val.strip().lower() in ("1", "true", "yes", "y", "on")


def _get_float_env(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None:
        return default
    try:
        parsed = float(val)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


@dataclass
class CaptureSettings:
    """Runtime settings shared by adapters and the CLI.

    Attributes:
        log_level: Root log level name
        timeout: Default request timeout in seconds
        asgi_base_url: Base URL used for in-process ASGI requests
        raise_for_status: Default for the client-instance adapter
    """

    log_level: str = DEFAULT_LOG_LEVEL
    timeout: float = DEFAULT_TIMEOUT
    asgi_base_url: str = DEFAULT_ASGI_BASE_URL
    raise_for_status: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "log_level": self.log_level,
            "timeout": self.timeout,
            "asgi_base_url": self.asgi_base_url,
            "raise_for_status": self.raise_for_status,
        }


def load_settings() -> CaptureSettings:
    """Load settings from the environment.

    Returns:
        CaptureSettings populated from APIDOC_CAPTURE_* variables

    Example:
        >>> settings = load_settings()
        >>> settings.timeout
        30.0
    """
    return CaptureSettings(
        log_level=(os.getenv("APIDOC_CAPTURE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        timeout=_get_float_env("APIDOC_CAPTURE_TIMEOUT", DEFAULT_TIMEOUT),
        asgi_base_url=os.getenv("APIDOC_CAPTURE_ASGI_BASE_URL") or DEFAULT_ASGI_BASE_URL,
        raise_for_status=_get_bool_env("APIDOC_CAPTURE_RAISE_FOR_STATUS", True),
    )


def configure_logging(level: Optional[str] = None) -> int:
    """Configure root logging level and format.

    Args:
        level: Optional level name like "INFO" or "DEBUG". If None, uses
            APIDOC_CAPTURE_LOG_LEVEL or falls back to WARNING.

    Returns:
        The numeric log level that was applied
    """
    level_name = level or load_settings().log_level
    numeric = getattr(logging, level_name.upper(), logging.WARNING)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
    return numeric
