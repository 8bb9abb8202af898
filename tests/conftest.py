#!/usr/bin/env python3
"""
Pytest configuration and fixtures for TestRail MCP Server tests.
"""

import json
from typing import Any, Dict, Optional, Union
from unittest.mock import MagicMock

import pytest
import requests
from fastmcp import Client
from requests.structures import CaseInsensitiveDict

from testrail_mcp.config import TestRailSettings
from testrail_mcp.gateway import TestRailGateway
from testrail_mcp.server import create_server

BASE_URL = "https://x.testrail.io"
USERNAME = "user@example.com"
API_KEY = "secret-key"


def make_response(
    status_code: int = 200,
    body: Union[str, bytes] = b"",
    headers: Optional[Dict[str, str]] = None,
    content_length: bool = True,
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    response = requests.Response()
    response.status_code = status_code
    response._content = body
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict(headers or {})
    if content_length and "Content-Length" not in response.headers:
        response.headers["Content-Length"] = str(len(body))
    return response


async def call_tool(mcp, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Call a tool through an in-memory MCP client and decode its JSON payload."""
    async with Client(mcp) as client:
        result = await client.call_tool(name, arguments or {})
    return json.loads(result.content[0].text)


@pytest.fixture
def settings():
    """Settings as they would come from the environment (trailing slash included)."""
    return TestRailSettings(base_url=f"{BASE_URL}/", username=USERNAME, api_key=API_KEY)


@pytest.fixture
def gateway(settings):
    return TestRailGateway.from_settings(settings)


@pytest.fixture
def mock_gateway():
    """Gateway double for entity client tests."""
    return MagicMock(spec=TestRailGateway)


@pytest.fixture
def mock_client():
    """TestRailClient double; every entity attribute is a MagicMock."""
    return MagicMock()


@pytest.fixture
def mcp_server(settings, mock_client):
    """FastMCP server wired to the mocked client."""
    return create_server(settings, client=mock_client)
