#!/usr/bin/env python3
"""
Unit tests for server assembly: resources, prompts, health route and entry point.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from fastmcp import Client
from starlette.testclient import TestClient

from testrail_mcp.errors import ConfigurationError
from testrail_mcp.server import create_app, main


class TestResources:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_settings_resource_hides_api_key(self, mcp_server):
        async with Client(mcp_server) as client:
            contents = await client.read_resource("testrail://config/settings")

        text = contents[0].text
        config = json.loads(text)
        assert config["testrail_url"] == "https://x.testrail.io"
        assert config["username"] == "user@example.com"
        assert "secret-key" not in text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reference_resources(self, mcp_server):
        async with Client(mcp_server) as client:
            resources = await client.list_resources()
            statuses = await client.read_resource("testrail://docs/status-ids")

        uris = {str(resource.uri) for resource in resources}
        assert {
            "testrail://config/settings",
            "testrail://docs/status-ids",
            "testrail://docs/priority-levels",
            "testrail://docs/getting-started",
        } <= uris
        assert json.loads(statuses[0].text)["5"] == "Failed"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_workflow_prompt(self, mcp_server):
        async with Client(mcp_server) as client:
            prompts = await client.list_prompts()
            result = await client.get_prompt("testrail_workflow_guidance")

        assert "testrail_workflow_guidance" in {prompt.name for prompt in prompts}
        assert "Pagination" in result.messages[0].content.text


class TestHealthRoute:

    @pytest.mark.unit
    def test_health_check(self, mcp_server, settings):
        app = create_app(mcp_server, settings)

        response = TestClient(app).get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["testrail_url"] == "https://x.testrail.io"
        assert body["endpoints"]["sse"] == "/sse"


class TestMain:

    @pytest.mark.unit
    def test_configuration_error_exits(self, capsys):
        error = ConfigurationError(["TESTRAIL_URL: is required", "TESTRAIL_API_KEY: is required"])
        with patch("testrail_mcp.server.load_settings", side_effect=error):
            with pytest.raises(SystemExit) as exc_info:
                main([])

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "TESTRAIL_URL: is required" in err
        assert "TESTRAIL_API_KEY: is required" in err

    @pytest.mark.unit
    def test_stdio_transport(self, settings):
        mcp = MagicMock()
        with patch("testrail_mcp.server.load_settings", return_value=settings), \
                patch("testrail_mcp.server.configure_logging"), \
                patch("testrail_mcp.server.create_server", return_value=mcp):
            main(["--transport", "stdio"])

        mcp.run.assert_called_once_with(transport="stdio")

    @pytest.mark.unit
    def test_sse_transport(self, settings):
        mcp = MagicMock()
        app = MagicMock()
        with patch("testrail_mcp.server.load_settings", return_value=settings), \
                patch("testrail_mcp.server.configure_logging"), \
                patch("testrail_mcp.server.create_server", return_value=mcp), \
                patch("testrail_mcp.server.create_app", return_value=app) as mock_create_app, \
                patch("testrail_mcp.server.uvicorn.run") as mock_run:
            main(["--transport", "sse", "--port", "9000"])

        mock_create_app.assert_called_once_with(mcp, settings)
        mock_run.assert_called_once_with(app, host="0.0.0.0", port=9000, log_level="info")
        mcp.run.assert_not_called()
