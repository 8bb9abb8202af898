"""
Response helpers shared by every tool module.

Tools never let an exception cross the MCP boundary. Success payloads carry
``'status': 'OK'``; failures carry ``'status': 'failed'`` with the error
message, its kind and what the tool was doing:

    {
        "status": "failed",
        "error": "TestRail API error (403): Permission denied",
        "error_type": "upstream",
        "details": "Failed to get case 42",
        "status_code": 403,
        "response_text": "Permission denied"
    }
"""

import logging
from typing import Any, Dict, Optional

from ..errors import DeserializationError, TestRailError, UpstreamError
from ..gateway import EMPTY
from ..models import Page

logger = logging.getLogger(__name__)


def empty_to_none(value: Any) -> Any:
    """EMPTY is not JSON-serializable; tools report it as null."""
    return None if value is EMPTY else value


def ok(**payload) -> dict:
    """Success payload: ``{'status': 'OK', **payload}`` with EMPTY values as null."""
    response = {"status": "OK"}
    for key, value in payload.items():
        response[key] = empty_to_none(value)
    return response


def page_response(page: Page, **extra) -> dict:
    """Success payload for list tools: items under their key plus paging info."""
    response = ok(**page.to_response(), **extra)
    response["has_more"] = page.has_more
    return response


def error_response(exc: TestRailError, details: str) -> dict:
    """Render a TestRail failure; the upstream text is always kept verbatim."""
    logger.error(f"{details}: {exc}")
    response: Dict[str, Any] = {
        "status": "failed",
        "error": str(exc),
        "error_type": exc.kind,
        "details": details,
    }
    if isinstance(exc, UpstreamError):
        response["status_code"] = exc.status_code
        response["response_text"] = exc.body
    elif isinstance(exc, DeserializationError) and exc.body_preview:
        response["response_preview"] = exc.body_preview
    return response


def file_error(exc: OSError, details: str) -> dict:
    """Render a local filesystem failure (attachment upload/read)."""
    logger.error(f"{details}: {exc}")
    return {
        "status": "failed",
        "error": str(exc),
        "error_type": "file_error",
        "details": details,
    }


def check_confirmation(confirmation: Optional[str], expected: str, action: str) -> Optional[dict]:
    """
    Guard for destructive and bulk tools.

    Returns a failure payload when ``confirmation`` is not exactly ``expected``,
    otherwise None. Nothing has been sent to TestRail when this refuses.
    """
    if confirmation == expected:
        return None
    logger.warning(f"Refused to {action}: confirmation string missing or incorrect")
    return {
        "status": "failed",
        "error": f"Confirmation required: pass confirmation='{expected}' to {action}",
        "error_type": "confirmation_required",
        "details": f"Refused to {action} without explicit confirmation",
    }
