"""
Project and suite tools.

Projects are the top-level container in TestRail. Depending on the project's
suite mode, cases live either in a single implicit suite or in several
explicit suites; most case/section tools need a ``suite_id`` for the latter.
"""

import logging
from typing import Optional

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..errors import TestRailError
from .common import check_confirmation, error_response, ok, page_response

logger = logging.getLogger(__name__)

DELETE_SUITE_CONFIRMATION = "DELETE_SUITE"


def register_project_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register project and suite tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_projects",
        description = "List TestRail projects with optional completion filter and pagination."
    )
    def get_projects(
        is_completed: Optional[bool] = Field(default=None, description="True for completed projects only, False for active only"),
        limit: Optional[int] = Field(default=None, description="Maximum number of projects to return (TestRail default: 250)"),
        offset: Optional[int] = Field(default=None, description="Number of projects to skip")
    ) -> dict:
        try:
            page = client.projects.get_projects(is_completed=is_completed, limit=limit, offset=offset)
            return page_response(page)
        except TestRailError as e:
            return error_response(e, "Failed to list projects")

    @mcp.tool(
        name = "testrail_get_project",
        description = "Get a project by ID together with its test suites."
    )
    def get_project(
        project_id: int = Field(description="TestRail project ID")
    ) -> dict:
        """
        Get one project and its suites in a single call.

        Returns:
            dict: {'status': 'OK', 'project': {...}, 'suites': [...]}
        """
        try:
            project = client.projects.get_project(project_id)
            suites = client.suites.get_suites(project_id)
            return ok(project=project, suites=suites.items)
        except TestRailError as e:
            return error_response(e, f"Failed to get project {project_id}")

    @mcp.tool(
        name = "testrail_get_suites",
        description = "List the test suites of a project."
    )
    def get_suites(
        project_id: int = Field(description="TestRail project ID")
    ) -> dict:
        try:
            return page_response(client.suites.get_suites(project_id))
        except TestRailError as e:
            return error_response(e, f"Failed to list suites of project {project_id}")

    @mcp.tool(
        name = "testrail_get_suite",
        description = "Get a test suite by ID."
    )
    def get_suite(
        suite_id: int = Field(description="TestRail suite ID")
    ) -> dict:
        try:
            return ok(suite=client.suites.get_suite(suite_id))
        except TestRailError as e:
            return error_response(e, f"Failed to get suite {suite_id}")

    @mcp.tool(
        name = "testrail_add_suite",
        description = "Create a test suite in a project (multi-suite projects only)."
    )
    def add_suite(
        project_id: int = Field(description="TestRail project ID"),
        name: str = Field(description="Name of the new suite"),
        description: Optional[str] = Field(default=None, description="Suite description")
    ) -> dict:
        try:
            suite = client.suites.add_suite(project_id, name, description=description)
            logger.info(f"testrail_add_suite: Created suite '{name}' in project {project_id}")
            return ok(suite=suite)
        except TestRailError as e:
            return error_response(e, f"Failed to create suite in project {project_id}")

    @mcp.tool(
        name = "testrail_update_suite",
        description = "Update the name and/or description of a test suite."
    )
    def update_suite(
        suite_id: int = Field(description="TestRail suite ID"),
        name: Optional[str] = Field(default=None, description="New suite name"),
        description: Optional[str] = Field(default=None, description="New suite description")
    ) -> dict:
        try:
            return ok(suite=client.suites.update_suite(suite_id, name=name, description=description))
        except TestRailError as e:
            return error_response(e, f"Failed to update suite {suite_id}")

    @mcp.tool(
        name = "testrail_delete_suite",
        description = (
            "Delete a test suite with all its sections, cases and related runs/results. "
            "IRREVERSIBLE. Use soft=true first to preview what would be deleted. "
            f"Requires confirmation='{DELETE_SUITE_CONFIRMATION}' unless soft=true."
        )
    )
    def delete_suite(
        suite_id: int = Field(description="TestRail suite ID"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{DELETE_SUITE_CONFIRMATION}'"),
        soft: bool = Field(default=False, description="Only report what would be deleted, without deleting")
    ) -> dict:
        try:
            if soft:
                preview = client.suites.delete_suite(suite_id, soft=True)
                return ok(suite_id=suite_id, soft=True, preview=preview)

            refusal = check_confirmation(confirmation, DELETE_SUITE_CONFIRMATION, f"delete suite {suite_id}")
            if refusal:
                return refusal

            client.suites.delete_suite(suite_id)
            logger.info(f"testrail_delete_suite: Deleted suite {suite_id}")
            return ok(suite_id=suite_id, deleted=True)
        except TestRailError as e:
            return error_response(e, f"Failed to delete suite {suite_id}")
