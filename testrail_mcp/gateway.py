"""
Request gateway for the TestRail REST API (v2).

Every outbound call passes through ``TestRailGateway.execute`` so that
authentication, URL construction and response interpretation live in one
place. The gateway is stateless between calls: it only holds the normalized
base URL and the precomputed Authorization header.
"""

import base64
import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import quote

import requests

from .errors import (
    DeserializationError,
    InputValidationError,
    TransportError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/index.php?/api/v2/"

# Characters left unescaped in query values (TestRail takes comma-separated id lists)
_QUERY_SAFE = ",:"

# Number of body characters kept in deserialization errors
_BODY_PREVIEW_CHARS = 500


class _Empty:
    """Sentinel for a successful response without content.

    Distinct from ``None``, which is what a literal JSON ``null`` body parses to.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = _Empty()


def normalize_base_url(base_url: str) -> str:
    """Strip trailing slashes from the instance root. Safe to apply repeatedly."""
    return base_url.strip().rstrip("/")


def encode_query(params: Optional[Iterable[Tuple[str, Any]]]) -> str:
    """Render ordered (key, value) pairs as ``&key=value`` suffixes.

    TestRail routes through ``index.php?/api/v2/...`` so the query string is
    already open; extra parameters are always joined with ``&``.
    """
    if not params:
        return ""
    parts = []
    for key, value in params:
        parts.append(f"&{quote(str(key), safe='')}={quote(str(value), safe=_QUERY_SAFE)}")
    return "".join(parts)


class TestRailGateway:
    """Single choke point for HTTP calls to a TestRail instance."""

    def __init__(self, base_url: str, username: str, api_key: str):
        self.base_url = normalize_base_url(base_url)
        self.username = username
        # Computed once; every call reuses the same header value
        token = base64.b64encode(f"{username}:{api_key}".encode("utf-8")).decode("ascii")
        self._auth_header = f"Basic {token}"

    @classmethod
    def from_settings(cls, settings) -> "TestRailGateway":
        return cls(settings.base_url, settings.username, settings.api_key)

    def build_url(self, path: str, params: Optional[Iterable[Tuple[str, Any]]] = None) -> str:
        """Absolute URL for an endpoint path such as ``get_case/42``."""
        if "://" in path or "index.php" in path or path.startswith("/"):
            raise InputValidationError(
                f"Endpoint path must be relative to the API root, got '{path}'"
            )
        return f"{self.base_url}{API_PREFIX}{path}{encode_query(params)}"

    def build_headers(self, overrides: Optional[Mapping[str, Optional[str]]] = None) -> Dict[str, str]:
        """Default headers merged with caller overrides.

        An override set to ``None`` removes the header entirely, which is how
        multipart uploads drop ``Content-Type`` so requests can add the boundary.
        """
        headers: Dict[str, Optional[str]] = {
            "Authorization": self._auth_header,
            "Content-Type": "application/json",
        }
        if overrides:
            headers.update(overrides)
        return {name: value for name, value in headers.items() if value is not None}

    def execute(
        self,
        path: str,
        method: str = "GET",
        headers: Optional[Mapping[str, Optional[str]]] = None,
        body: Optional[Union[str, bytes]] = None,
        params: Optional[Iterable[Tuple[str, Any]]] = None,
        files: Optional[Mapping[str, Any]] = None,
        expects_empty_body: Optional[bool] = None,
        raw: bool = False,
    ) -> Any:
        """
        Issue one request and interpret the response.

        Args:
            path: Endpoint suffix, e.g. ``get_case/42`` or ``add_run/7``
            method: HTTP method; TestRail uses POST for every mutation
            headers: Header overrides (``None`` values remove defaults)
            body: Caller-serialized JSON payload
            params: Ordered query pairs appended to the endpoint
            files: Multipart payload passed straight to requests
            expects_empty_body: Force (or forbid) the empty-result shortcut.
                Defaults to True for ``delete_*`` paths.
            raw: Return the response bytes untouched (attachment downloads)

        Returns:
            Parsed JSON, ``bytes`` when ``raw`` is set, or ``EMPTY``.

        Raises:
            UpstreamError: status outside 2xx (message has status and body)
            DeserializationError: non-empty 2xx body that is not JSON
            TransportError: the request failed before a response arrived
        """
        method = method.upper()
        params = list(params) if params else []
        url = self.build_url(path, params)
        request_headers = self.build_headers(headers)

        logger.info(f"API Request: {method} {path}")
        if params:
            logger.debug(f"Request params: {params}")

        try:
            response = requests.request(
                method,
                url,
                headers=request_headers,
                data=body,
                files=files,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Transport Error: {method} {path} - {type(e).__name__}: {e}")
            raise TransportError(str(e), endpoint=path) from e

        logger.info(f"API Response: {method} {path} - Status {response.status_code}")

        if not 200 <= response.status_code < 300:
            error_text = response.text
            logger.error(f"HTTP Error: {method} {path} - Status {response.status_code}: {error_text[:200]}")
            raise UpstreamError(response.status_code, error_text, endpoint=path)

        return self._interpret(path, response, expects_empty_body, raw)

    def _interpret(self, path: str, response: requests.Response, expects_empty_body: Optional[bool], raw: bool) -> Any:
        if raw:
            return response.content

        if expects_empty_body is None:
            expects_empty_body = path.startswith("delete_")
        if expects_empty_body:
            return EMPTY

        content_length = response.headers.get("Content-Length")
        if content_length is None or content_length == "0":
            return EMPTY

        text = response.text
        if not text.strip():
            return EMPTY

        try:
            return json.loads(text)
        except ValueError as e:
            preview = text[:_BODY_PREVIEW_CHARS]
            logger.error(f"Deserialization Error: {path} - {e}; body starts with: {preview[:200]}")
            raise DeserializationError(
                f"TestRail returned a non-JSON body for {path}: {e}",
                endpoint=path,
                body_preview=preview,
            ) from e
