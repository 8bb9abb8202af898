"""Report, instance metadata and capability tools."""

import logging
from typing import List, Optional

from fastmcp import FastMCP
from pydantic import Field

from .. import __version__
from ..api import TestRailClient
from ..api.reports import CASE_FIELD_TYPES
from ..errors import TestRailError
from ..models import CaseFieldConfig, dump_model
from .common import error_response, ok

logger = logging.getLogger(__name__)

CAPABILITIES = {
    "platform_context": {
        "name": "TestRail",
        "description": "Test case management platform for QA teams",
        "key_concepts": {
            "projects": "Top-level containers for organizing test management",
            "suites": "Collections of test cases within projects",
            "sections": "Hierarchical folders within suites",
            "test_cases": "Individual test scenarios with steps and expected results",
            "test_runs": "Execution instances of test cases; each case becomes a test",
            "test_plans": "Collections of test runs for a release or cycle",
            "milestones": "Project deadlines and release targets",
        },
        "common_workflows": [
            "1. Test case creation: create sections in suites, then cases in sections",
            "2. Test execution: add a run, then record results per test or per case",
            "3. Test planning: group runs into plans, optionally per configuration",
            "4. Reporting: run report templates and track milestone progress",
        ],
    },
    "api_modules": {
        "projects": "Projects and suites",
        "sections": "Section tree management",
        "cases": "Case CRUD, history, batch create/update, copy/move, bulk export",
        "runs": "Run management",
        "plans": "Plans, entries and configuration runs",
        "results": "Recording and reading results",
        "tests": "Tests inside runs and their labels",
        "milestones": "Milestones and labels",
        "shared_steps": "Shared steps and test data variables",
        "attachments": "Upload, list, download and delete attachments",
        "reports": "Report templates",
        "metadata": "Priorities, case types, fields, templates, statuses, configurations",
    },
    "safety": {
        "confirmation_required": [
            "testrail_delete_case",
            "testrail_delete_section",
            "testrail_delete_suite",
            "testrail_delete_shared_step",
            "testrail_delete_attachment",
            "testrail_delete_variable",
            "testrail_copy_cases_to_section",
            "testrail_move_cases_to_section",
            "testrail_update_cases_batch",
            "testrail_add_cases_batch",
            "testrail_update_tests_batch",
        ],
        "note": "Soft deletes (soft=true) only preview and need no confirmation",
    },
}


def register_metadata_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register report, metadata and capability tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_reports",
        description = "List the report templates of a project that are enabled for API access."
    )
    def get_reports(
        project_id: int = Field(description="TestRail project ID")
    ) -> dict:
        try:
            return ok(reports=client.reports.get_reports(project_id))
        except TestRailError as e:
            return error_response(e, f"Failed to list reports of project {project_id}")

    @mcp.tool(
        name = "testrail_run_report",
        description = "Execute a report template and return the URLs of the generated report."
    )
    def run_report(
        report_template_id: int = Field(description="Report template ID from testrail_get_reports")
    ) -> dict:
        try:
            return ok(report=client.reports.run_report(report_template_id))
        except TestRailError as e:
            return error_response(e, f"Failed to run report {report_template_id}")

    @mcp.tool(
        name = "testrail_get_priorities",
        description = "List the case priorities of the instance."
    )
    def get_priorities() -> dict:
        try:
            return ok(priorities=client.metadata.get_priorities())
        except TestRailError as e:
            return error_response(e, "Failed to list priorities")

    @mcp.tool(
        name = "testrail_get_case_types",
        description = "List the case types (Functional, Regression, ...) of the instance."
    )
    def get_case_types() -> dict:
        try:
            return ok(case_types=client.metadata.get_case_types())
        except TestRailError as e:
            return error_response(e, "Failed to list case types")

    @mcp.tool(
        name = "testrail_get_case_fields",
        description = "List the case fields (system and custom) with their configurations."
    )
    def get_case_fields() -> dict:
        try:
            return ok(case_fields=client.metadata.get_case_fields())
        except TestRailError as e:
            return error_response(e, "Failed to list case fields")

    @mcp.tool(
        name = "testrail_get_case_metadata",
        description = "Get case types, priorities and case fields in one call, e.g. before creating cases."
    )
    def get_case_metadata() -> dict:
        try:
            return ok(
                case_types=client.metadata.get_case_types(),
                priorities=client.metadata.get_priorities(),
                case_fields=client.metadata.get_case_fields(),
            )
        except TestRailError as e:
            return error_response(e, "Failed to get case metadata")

    @mcp.tool(
        name = "testrail_add_case_field",
        description = (
            "Create a custom case field. Types: " + ", ".join(CASE_FIELD_TYPES) + ". "
            "TestRail prefixes the system name with 'custom_'."
        )
    )
    def add_case_field(
        type: str = Field(description="Field type"),
        name: str = Field(description="System name, without the 'custom_' prefix"),
        label: str = Field(description="Display label"),
        description: Optional[str] = Field(default=None, description="Field description"),
        include_all: Optional[bool] = Field(default=None, description="Use the field in all templates"),
        template_ids: Optional[List[int]] = Field(default=None, description="Templates using the field when include_all is false"),
        configs: Optional[List[CaseFieldConfig]] = Field(default=None, description="Context/options configurations")
    ) -> dict:
        try:
            field = client.metadata.add_case_field(
                type,
                name,
                label,
                description=description,
                include_all=include_all,
                template_ids=template_ids,
                configs=[dump_model(config) for config in configs] if configs else None,
            )
            logger.info(f"testrail_add_case_field: Created case field '{name}' ({type})")
            return ok(case_field=field)
        except TestRailError as e:
            return error_response(e, f"Failed to create case field '{name}'")

    @mcp.tool(
        name = "testrail_get_templates",
        description = "List the templates (field layouts) available in a project."
    )
    def get_templates(
        project_id: int = Field(description="TestRail project ID")
    ) -> dict:
        try:
            return ok(templates=client.metadata.get_templates(project_id))
        except TestRailError as e:
            return error_response(e, f"Failed to list templates of project {project_id}")

    @mcp.tool(
        name = "testrail_get_statuses",
        description = "List the test statuses (system and custom) usable in results."
    )
    def get_statuses() -> dict:
        try:
            return ok(statuses=client.metadata.get_statuses())
        except TestRailError as e:
            return error_response(e, "Failed to list statuses")

    @mcp.tool(
        name = "testrail_get_case_statuses",
        description = "List the case statuses (TestRail Enterprise 7.3+)."
    )
    def get_case_statuses() -> dict:
        try:
            return ok(case_statuses=client.metadata.get_case_statuses())
        except TestRailError as e:
            return error_response(e, "Failed to list case statuses")

    @mcp.tool(
        name = "testrail_get_result_fields",
        description = "List the result fields (system and custom)."
    )
    def get_result_fields() -> dict:
        try:
            return ok(result_fields=client.metadata.get_result_fields())
        except TestRailError as e:
            return error_response(e, "Failed to list result fields")

    @mcp.tool(
        name = "testrail_get_configs",
        description = "List the configuration groups of a project, each with its configurations."
    )
    def get_configs(
        project_id: int = Field(description="TestRail project ID")
    ) -> dict:
        try:
            return ok(configs=client.metadata.get_configs(project_id))
        except TestRailError as e:
            return error_response(e, f"Failed to list configurations of project {project_id}")

    @mcp.tool(
        name = "testrail_get_capabilities",
        description = "Overview of this server's capabilities and the TestRail concepts it works with."
    )
    def get_capabilities() -> dict:
        return ok(
            server_info={
                "name": "TestRail MCP Server",
                "version": __version__,
                "api_coverage": "TestRail REST API v2",
            },
            **CAPABILITIES,
        )
