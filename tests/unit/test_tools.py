#!/usr/bin/env python3
"""
Unit tests for MCP tools, called through an in-memory FastMCP client.
"""

from unittest.mock import patch

import pytest
from fastmcp import Client

from testrail_mcp.api import TestRailClient
from testrail_mcp.errors import TRANSPORT_ERROR_PREFIX, DeserializationError, TransportError, UpstreamError
from testrail_mcp.gateway import EMPTY
from testrail_mcp.models import Page
from testrail_mcp.server import create_server
from testrail_mcp.tools.cases import ADD_CASES_CONFIRMATION, DELETE_CASE_CONFIRMATION, MOVE_CASES_CONFIRMATION
from testrail_mcp.tools.sections import DELETE_SECTION_CONFIRMATION

from ..conftest import call_tool, make_response


class TestToolRegistration:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_tool_families_are_registered(self, mcp_server):
        async with Client(mcp_server) as client:
            tools = await client.list_tools()
        names = {tool.name for tool in tools}

        expected = {
            "testrail_get_projects", "testrail_get_project", "testrail_delete_suite",
            "testrail_get_sections", "testrail_move_section", "testrail_delete_section",
            "testrail_get_cases", "testrail_add_cases_batch", "testrail_bulk_export_cases",
            "testrail_get_runs", "testrail_close_run", "testrail_add_plan", "testrail_close_plan",
            "testrail_add_result_for_case", "testrail_add_results_for_cases", "testrail_get_tests",
            "testrail_update_tests_batch", "testrail_get_milestones", "testrail_update_label",
            "testrail_get_shared_steps", "testrail_delete_variable", "testrail_add_attachment_to_run",
            "testrail_download_attachment", "testrail_get_case_metadata", "testrail_get_capabilities",
        }
        assert expected <= names
        assert all(name.startswith("testrail_") for name in names)


class TestReadTools:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_get_case(self, mcp_server, mock_client):
        mock_client.cases.get_case.return_value = {"id": 42, "title": "Login works"}

        payload = await call_tool(mcp_server, "testrail_get_case", {"case_id": 42})

        assert payload == {"status": "OK", "case": {"id": 42, "title": "Login works"}}
        mock_client.cases.get_case.assert_called_once_with(42)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_get_cases_returns_page(self, mcp_server, mock_client):
        mock_client.cases.get_cases.return_value = Page.from_response(
            {"offset": 0, "limit": 2, "size": 2, "_links": {"next": "/api/v2/get_cases/1&offset=2", "prev": None},
             "cases": [{"id": 1}, {"id": 2}]},
            "cases",
        )

        payload = await call_tool(mcp_server, "testrail_get_cases", {"project_id": 1, "priority_id": [3, 4], "limit": 2})

        assert payload["status"] == "OK"
        assert payload["cases"] == [{"id": 1}, {"id": 2}]
        assert payload["size"] == 2
        assert payload["_links"]["next"] == "/api/v2/get_cases/1&offset=2"
        assert payload["has_more"] is True
        kwargs = mock_client.cases.get_cases.call_args[1]
        assert kwargs["priority_id"] == [3, 4]
        assert kwargs["limit"] == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_get_project_includes_suites(self, mcp_server, mock_client):
        mock_client.projects.get_project.return_value = {"id": 1, "name": "Web"}
        mock_client.suites.get_suites.return_value = Page.from_response([{"id": 10, "name": "Master"}], "suites")

        payload = await call_tool(mcp_server, "testrail_get_project", {"project_id": 1})

        assert payload["project"] == {"id": 1, "name": "Web"}
        assert payload["suites"] == [{"id": 10, "name": "Master"}]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_capabilities(self, mcp_server):
        payload = await call_tool(mcp_server, "testrail_get_capabilities")

        assert payload["status"] == "OK"
        assert payload["server_info"]["version"] == "1.0.0"
        assert "testrail_delete_case" in payload["safety"]["confirmation_required"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_result_is_reported_as_null(self, mcp_server, mock_client):
        mock_client.projects.get_project.return_value = EMPTY
        mock_client.suites.get_suites.return_value = Page.from_response([], "suites")

        payload = await call_tool(mcp_server, "testrail_get_project", {"project_id": 1})

        assert payload == {"status": "OK", "project": None, "suites": []}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_body_without_content_length_through_real_gateway(self, settings):
        mcp = create_server(settings, client=TestRailClient.from_settings(settings))
        response = make_response(200, '{"id": 5}', content_length=False)

        with patch("testrail_mcp.gateway.requests.request", return_value=response):
            payload = await call_tool(mcp, "testrail_get_case", {"case_id": 5})

        assert payload == {"status": "OK", "case": None}


class TestFailures:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_upstream_error_keeps_response_text(self, mcp_server, mock_client):
        mock_client.cases.get_case.side_effect = UpstreamError(403, "Permission denied", endpoint="get_case/42")

        payload = await call_tool(mcp_server, "testrail_get_case", {"case_id": 42})

        assert payload["status"] == "failed"
        assert payload["error_type"] == "upstream"
        assert payload["status_code"] == 403
        assert payload["response_text"] == "Permission denied"
        assert "Permission denied" in payload["error"]
        assert payload["details"] == "Failed to get case 42"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_transport_error(self, mcp_server, mock_client):
        mock_client.runs.get_runs.side_effect = TransportError("Connection refused")

        payload = await call_tool(mcp_server, "testrail_get_runs", {"project_id": 1})

        assert payload["error_type"] == "transport"
        assert payload["error"].startswith(TRANSPORT_ERROR_PREFIX)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_deserialization_error_preview(self, mcp_server, mock_client):
        mock_client.cases.get_case.side_effect = DeserializationError(
            "TestRail returned a non-JSON body for get_case/1", endpoint="get_case/1", body_preview="<html>"
        )

        payload = await call_tool(mcp_server, "testrail_get_case", {"case_id": 1})

        assert payload["error_type"] == "deserialization"
        assert payload["response_preview"] == "<html>"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_upstream_body_through_real_gateway(self, settings):
        """The verbatim TestRail error survives gateway, client and tool layers."""
        body = '{"error":"Field :title is a required field."}'
        mcp = create_server(settings, client=TestRailClient.from_settings(settings))

        with patch("testrail_mcp.gateway.requests.request", return_value=make_response(400, body)):
            payload = await call_tool(mcp, "testrail_update_case", {"case_id": 5, "title": "x"})

        assert payload["status"] == "failed"
        assert payload["status_code"] == 400
        assert payload["response_text"] == body


class TestConfirmation:

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("confirmation", [None, "", "yes", DELETE_CASE_CONFIRMATION.lower()])
    async def test_delete_case_refused(self, mcp_server, mock_client, confirmation):
        arguments = {"case_id": 42}
        if confirmation is not None:
            arguments["confirmation"] = confirmation

        payload = await call_tool(mcp_server, "testrail_delete_case", arguments)

        assert payload["status"] == "failed"
        assert payload["error_type"] == "confirmation_required"
        assert DELETE_CASE_CONFIRMATION in payload["error"]
        mock_client.cases.delete_case.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_case_confirmed(self, mcp_server, mock_client):
        mock_client.cases.delete_case.return_value = EMPTY

        payload = await call_tool(
            mcp_server, "testrail_delete_case", {"case_id": 42, "confirmation": DELETE_CASE_CONFIRMATION}
        )

        assert payload == {"status": "OK", "case_id": 42, "deleted": True}
        mock_client.cases.delete_case.assert_called_once_with(42)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_soft_delete_section_needs_no_confirmation(self, mcp_server, mock_client):
        mock_client.sections.delete_section.return_value = {"sections": 2, "cases": 14}

        payload = await call_tool(mcp_server, "testrail_delete_section", {"section_id": 9, "soft": True})

        assert payload == {"status": "OK", "section_id": 9, "soft": True, "preview": {"sections": 2, "cases": 14}}
        mock_client.sections.delete_section.assert_called_once_with(9, soft=True)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_hard_delete_section(self, mcp_server, mock_client):
        mock_client.sections.delete_section.return_value = EMPTY

        payload = await call_tool(
            mcp_server, "testrail_delete_section", {"section_id": 9, "confirmation": DELETE_SECTION_CONFIRMATION}
        )

        assert payload["deleted"] is True
        mock_client.sections.delete_section.assert_called_once_with(9)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_move_cases_refused_without_confirmation(self, mcp_server, mock_client):
        payload = await call_tool(
            mcp_server, "testrail_move_cases_to_section", {"section_id": 7, "suite_id": 5, "case_ids": [1, 2]}
        )

        assert payload["error_type"] == "confirmation_required"
        mock_client.cases.move_cases_to_section.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_move_cases_confirmed(self, mcp_server, mock_client):
        mock_client.cases.move_cases_to_section.return_value = EMPTY

        payload = await call_tool(
            mcp_server,
            "testrail_move_cases_to_section",
            {"section_id": 7, "suite_id": 5, "case_ids": [1, 2], "confirmation": MOVE_CASES_CONFIRMATION},
        )

        assert payload["moved_case_ids"] == [1, 2]
        assert payload["result"] is None
        mock_client.cases.move_cases_to_section.assert_called_once_with(7, 5, [1, 2])


class TestBatchAndExport:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_add_cases_batch_reports_each_case(self, mcp_server, mock_client):
        mock_client.cases.add_case.side_effect = [
            {"id": 101},
            UpstreamError(400, "Field :priority_id is not a valid priority."),
        ]

        payload = await call_tool(mcp_server, "testrail_add_cases_batch", {
            "section_id": 3,
            "test_cases": [
                {"title": "Login works", "priority_id": 2},
                {"title": "Logout works", "priority_id": 99},
                {"title": "Reset password"},
            ],
            "selected_indexes": [1, 2, 7],
            "confirmation": ADD_CASES_CONFIRMATION,
        })

        assert payload["status"] == "OK"
        assert payload["created"] == 1
        assert payload["failed"] == 2
        assert payload["selection"] == [1, 2, 7]
        assert payload["results"][0] == {"index": 1, "title": "Login works", "status": "created", "case_id": 101}
        assert payload["results"][1]["status"] == "failed"
        assert "not a valid priority" in payload["results"][1]["error"]
        assert payload["results"][2]["index"] == 7
        assert "out of range" in payload["results"][2]["error"]
        assert mock_client.cases.add_case.call_count == 2
        mock_client.cases.add_case.assert_any_call(3, {"title": "Login works", "priority_id": 2})

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_add_cases_batch_refused(self, mcp_server, mock_client):
        payload = await call_tool(mcp_server, "testrail_add_cases_batch", {
            "section_id": 3,
            "test_cases": [{"title": "Login works"}],
        })

        assert payload["error_type"] == "confirmation_required"
        mock_client.cases.add_case.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bulk_export_csv_summary(self, mcp_server, mock_client):
        mock_client.cases.get_cases.return_value = Page.from_response(
            [{"id": 1, "title": "Login works", "section_id": 3, "priority_id": 2, "type_id": 1,
              "created_on": 0, "updated_on": 86400}],
            "cases",
        )
        mock_client.cases.get_history_for_case.return_value = Page.from_response([{"id": 9}], "history")

        payload = await call_tool(mcp_server, "testrail_bulk_export_cases", {
            "project_id": 1,
            "include_steps": False,
            "include_history": True,
            "format": "csv_summary",
        })

        assert payload["status"] == "OK"
        assert payload["export_metadata"]["total_cases"] == 1
        assert payload["test_cases"][0]["change_history"] == [{"id": 9}]
        assert payload["csv_summary"] == [{
            "id": 1,
            "title": "Login works",
            "section_id": 3,
            "priority": 2,
            "type": 1,
            "created_on": "1970-01-01T00:00:00+00:00",
            "updated_on": "1970-01-02T00:00:00+00:00",
        }]
        mock_client.cases.get_case.assert_not_called()
        mock_client.cases.get_history_for_case.assert_called_once_with(1, limit=10)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bulk_export_keeps_case_when_details_fail(self, mcp_server, mock_client):
        mock_client.cases.get_cases.return_value = Page.from_response([{"id": 1, "title": "Login works"}], "cases")
        mock_client.cases.get_case.side_effect = UpstreamError(403, "Permission denied")

        payload = await call_tool(mcp_server, "testrail_bulk_export_cases", {"project_id": 1})

        assert payload["test_cases"] == [{"id": 1, "title": "Login works"}]
        assert payload["enrichment_errors"][0]["case_id"] == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bulk_export_keeps_case_when_details_are_empty(self, mcp_server, mock_client):
        mock_client.cases.get_cases.return_value = Page.from_response([{"id": 1, "title": "Login works"}], "cases")
        mock_client.cases.get_case.return_value = EMPTY

        payload = await call_tool(mcp_server, "testrail_bulk_export_cases", {"project_id": 1})

        assert payload["status"] == "OK"
        assert payload["test_cases"] == [{"id": 1, "title": "Login works"}]
        assert payload["enrichment_errors"] == [
            {"case_id": 1, "step": "details", "error": "No case details returned by TestRail"}
        ]
        assert payload["has_more"] is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bulk_export_empty(self, mcp_server, mock_client):
        mock_client.cases.get_cases.return_value = Page.from_response([], "cases")

        payload = await call_tool(mcp_server, "testrail_bulk_export_cases", {"project_id": 1})

        assert payload["test_cases"] == []
        assert payload["message"] == "No test cases found for the specified criteria"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bulk_export_unknown_format(self, mcp_server, mock_client):
        payload = await call_tool(mcp_server, "testrail_bulk_export_cases", {"project_id": 1, "format": "xml"})

        assert payload["error_type"] == "validation"
        mock_client.cases.get_cases.assert_not_called()


class TestResultsAndAttachments:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_add_result_for_case_payload(self, mcp_server, mock_client):
        mock_client.results.add_result_for_case.return_value = {"id": 500, "status_id": 5}

        payload = await call_tool(mcp_server, "testrail_add_result_for_case", {
            "run_id": 3,
            "case_id": 7,
            "status_id": 5,
            "comment": "Checkout button missing",
            "custom_step_results": [{"content": "Open cart", "status_id": 5}],
            "custom_fields": {"custom_browser": "firefox"},
        })

        assert payload == {"status": "OK", "result": {"id": 500, "status_id": 5}}
        mock_client.results.add_result_for_case.assert_called_once_with(3, 7, {
            "status_id": 5,
            "comment": "Checkout button missing",
            "custom_step_results": [{"content": "Open cart", "status_id": 5}],
            "custom_browser": "firefox",
        })

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_add_results_for_cases(self, mcp_server, mock_client):
        mock_client.results.add_results_for_cases.return_value = [{"id": 1}, {"id": 2}]

        payload = await call_tool(mcp_server, "testrail_add_results_for_cases", {
            "run_id": 3,
            "results": [{"case_id": 7, "status_id": 1}, {"case_id": 8, "status_id": 5, "defects": "BUG-1"}],
        })

        assert payload["results"] == [{"id": 1}, {"id": 2}]
        mock_client.results.add_results_for_cases.assert_called_once_with(
            3, [{"status_id": 1, "case_id": 7}, {"status_id": 5, "defects": "BUG-1", "case_id": 8}]
        )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_download_attachment_base64(self, mcp_server, mock_client):
        mock_client.attachments.get_attachment.return_value = b"hello"

        payload = await call_tool(mcp_server, "testrail_download_attachment", {"attachment_id": 443})

        assert payload["size_bytes"] == 5
        assert payload["content_base64"] == "aGVsbG8="

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_upload_missing_file(self, mcp_server, mock_client):
        mock_client.attachments.add_attachment_to_run.side_effect = FileNotFoundError("File not found: /tmp/nope.png")

        payload = await call_tool(
            mcp_server, "testrail_add_attachment_to_run", {"run_id": 3, "file_path": "/tmp/nope.png"}
        )

        assert payload["status"] == "failed"
        assert payload["error_type"] == "file_error"
        assert "/tmp/nope.png" in payload["error"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_upload_success(self, mcp_server, mock_client):
        mock_client.attachments.add_attachment_to_run.return_value = {"attachment_id": 443}

        payload = await call_tool(
            mcp_server, "testrail_add_attachment_to_run", {"run_id": 3, "file_path": "/tmp/report.html"}
        )

        assert payload == {"status": "OK", "attachment": {"attachment_id": 443}}
        mock_client.attachments.add_attachment_to_run.assert_called_once_with(3, "/tmp/report.html", None)
