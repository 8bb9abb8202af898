"""Shared plumbing for the per-entity TestRail clients."""

import json
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..errors import InputValidationError
from ..gateway import TestRailGateway
from ..models import Page

QueryParams = List[Tuple[str, Any]]


def _to_timestamp(value) -> int:
    if isinstance(value, datetime):
        return int(value.timestamp())
    # Plain dates count from midnight UTC
    return int(datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp())


def build_query(**options) -> QueryParams:
    """
    Turn keyword options into ordered TestRail query pairs.

    - ``None`` and empty lists are skipped
    - lists/tuples become comma-separated values
    - booleans become ``1``/``0``
    - dates and datetimes become Unix timestamps
    """
    params: QueryParams = []
    for key, value in options.items():
        if value is None:
            continue
        if isinstance(value, bool):
            params.append((key, 1 if value else 0))
        elif isinstance(value, (list, tuple)):
            if not value:
                continue
            params.append((key, ",".join(str(v) for v in value)))
        elif isinstance(value, (datetime, date)):
            params.append((key, _to_timestamp(value)))
        else:
            params.append((key, value))
    return params


def require_id(value: Any, name: str) -> int:
    """Reject non-positive or non-integer IDs before they reach the URL."""
    if isinstance(value, bool):
        raise InputValidationError(f"Invalid {name}: expected integer, got bool ({value})")
    try:
        int_value = int(value)
    except (TypeError, ValueError):
        raise InputValidationError(f"Invalid {name}: expected integer, got {type(value).__name__} ({value})")
    if int_value <= 0:
        raise InputValidationError(f"{name} must be a positive integer, got {int_value}")
    return int_value


def require_path_segment(value: Any, name: str) -> str:
    """String IDs (plan entry UUIDs, Cloud attachment IDs) must stay one path segment."""
    if isinstance(value, bool) or value is None:
        raise InputValidationError(f"Invalid {name}: '{value}'")
    text = str(value).strip()
    if not text or any(char in text for char in "/&?#"):
        raise InputValidationError(f"Invalid {name}: '{value}'")
    return text


def compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None so partial updates stay partial."""
    return {key: value for key, value in payload.items() if value is not None}


class EntityAPI:
    """Base class: every entity client talks to TestRail through one gateway."""

    def __init__(self, gateway: TestRailGateway):
        self._gateway = gateway

    def _get(self, path: str, params: Optional[QueryParams] = None) -> Any:
        return self._gateway.execute(path, params=params)

    def _get_page(self, path: str, key: str, params: Optional[QueryParams] = None) -> Page:
        return Page.from_response(self._get(path, params), key, endpoint=path)

    def _post(
        self,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[QueryParams] = None,
        expects_empty_body: Optional[bool] = None,
    ) -> Any:
        body = json.dumps(payload) if payload is not None else None
        return self._gateway.execute(
            path,
            method="POST",
            body=body,
            params=params,
            expects_empty_body=expects_empty_body,
        )
