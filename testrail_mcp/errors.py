"""
Exception types raised by the TestRail gateway, clients and settings loader.

Every failure carries a ``kind`` so the tool layer can report what went wrong
without inspecting message text:

- transport:       the request never got a response (DNS, refused, timeout)
- upstream:        TestRail answered with a non-2xx status
- deserialization: a 2xx body (or list envelope) could not be interpreted
- configuration:   required settings are missing or malformed
- validation:      a caller passed arguments the gateway/client refuses
"""

from typing import List, Optional


# Marker prepended to every transport failure message
TRANSPORT_ERROR_PREFIX = "TestRail API request failed: "


class TestRailError(Exception):
    """Base class for all TestRail adapter errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(TestRailError):
    """Network-level failure before any response was received."""

    kind = "transport"

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(f"{TRANSPORT_ERROR_PREFIX}{message}")
        self.endpoint = endpoint


class UpstreamError(TestRailError):
    """TestRail rejected the request (status >= 300).

    The raw response body is kept verbatim: TestRail's own error text
    (field validation messages, permission errors) is the only diagnostic.
    """

    kind = "upstream"

    def __init__(self, status_code: int, body: str, endpoint: Optional[str] = None):
        super().__init__(f"TestRail API error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint


class DeserializationError(TestRailError):
    """A successful response whose body is not what the caller expected."""

    kind = "deserialization"

    def __init__(self, message: str, endpoint: Optional[str] = None, body_preview: Optional[str] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.body_preview = body_preview


class ConfigurationError(TestRailError):
    """Missing or invalid startup configuration."""

    kind = "configuration"

    def __init__(self, problems: List[str]):
        super().__init__("Configuration validation failed: " + "; ".join(problems))
        self.problems = problems


class InputValidationError(TestRailError, ValueError):
    """Arguments rejected before any request is sent."""

    kind = "validation"
