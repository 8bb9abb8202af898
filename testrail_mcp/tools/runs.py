"""Test run tools."""

import logging
from typing import List, Optional

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..api.base import compact
from ..errors import TestRailError
from .common import error_response, ok, page_response

logger = logging.getLogger(__name__)


def register_run_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register test run tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_run",
        description = "Get a test run by ID, including pass/fail counts."
    )
    def get_run(
        run_id: int = Field(description="TestRail run ID")
    ) -> dict:
        try:
            return ok(run=client.runs.get_run(run_id))
        except TestRailError as e:
            return error_response(e, f"Failed to get run {run_id}")

    @mcp.tool(
        name = "testrail_get_runs",
        description = "List test runs of a project with optional filters and pagination. Runs that belong to a plan are not included."
    )
    def get_runs(
        project_id: int = Field(description="TestRail project ID"),
        created_after: Optional[int] = Field(default=None, description="Created after (Unix timestamp)"),
        created_before: Optional[int] = Field(default=None, description="Created before (Unix timestamp)"),
        created_by: Optional[List[int]] = Field(default=None, description="Creator user IDs"),
        is_completed: Optional[bool] = Field(default=None, description="True for closed runs only, False for active only"),
        milestone_id: Optional[List[int]] = Field(default=None, description="Milestone IDs"),
        refs_filter: Optional[str] = Field(default=None, description="Reference ID filter"),
        suite_id: Optional[List[int]] = Field(default=None, description="Suite IDs"),
        limit: Optional[int] = Field(default=None, description="Maximum number of runs to return"),
        offset: Optional[int] = Field(default=None, description="Number of runs to skip")
    ) -> dict:
        try:
            page = client.runs.get_runs(
                project_id,
                created_after=created_after,
                created_before=created_before,
                created_by=created_by,
                is_completed=is_completed,
                milestone_id=milestone_id,
                refs_filter=refs_filter,
                suite_id=suite_id,
                limit=limit,
                offset=offset,
            )
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to list runs of project {project_id}")

    @mcp.tool(
        name = "testrail_add_run",
        description = (
            "Create a test run. By default all cases of the suite are included; "
            "set include_all=false and pass case_ids for a custom selection."
        )
    )
    def add_run(
        project_id: int = Field(description="TestRail project ID"),
        name: str = Field(description="Name of the test run"),
        suite_id: Optional[int] = Field(default=None, description="Suite ID (required for multi-suite projects)"),
        description: Optional[str] = Field(default=None, description="Run description"),
        milestone_id: Optional[int] = Field(default=None, description="Milestone to link the run to"),
        assignedto_id: Optional[int] = Field(default=None, description="User the run is assigned to"),
        include_all: Optional[bool] = Field(default=None, description="Include all cases of the suite (TestRail default: true)"),
        case_ids: Optional[List[int]] = Field(default=None, description="Cases to include when include_all is false"),
        refs: Optional[str] = Field(default=None, description="Comma-separated references"),
        start_on: Optional[int] = Field(default=None, description="Start date (Unix timestamp)"),
        due_on: Optional[int] = Field(default=None, description="Due date (Unix timestamp)")
    ) -> dict:
        try:
            run = client.runs.add_run(project_id, compact({
                "name": name,
                "suite_id": suite_id,
                "description": description,
                "milestone_id": milestone_id,
                "assignedto_id": assignedto_id,
                "include_all": include_all,
                "case_ids": case_ids,
                "refs": refs,
                "start_on": start_on,
                "due_on": due_on,
            }))
            logger.info(f"testrail_add_run: Created run '{name}' in project {project_id}")
            return ok(run=run)
        except TestRailError as e:
            return error_response(e, f"Failed to create run in project {project_id}")

    @mcp.tool(
        name = "testrail_update_run",
        description = "Update an open test run. Only the fields given are changed."
    )
    def update_run(
        run_id: int = Field(description="TestRail run ID"),
        name: Optional[str] = Field(default=None, description="New run name"),
        description: Optional[str] = Field(default=None, description="New description"),
        milestone_id: Optional[int] = Field(default=None, description="Milestone to link the run to"),
        include_all: Optional[bool] = Field(default=None, description="Include all cases of the suite"),
        case_ids: Optional[List[int]] = Field(default=None, description="Cases to include when include_all is false"),
        refs: Optional[str] = Field(default=None, description="Comma-separated references"),
        start_on: Optional[int] = Field(default=None, description="Start date (Unix timestamp)"),
        due_on: Optional[int] = Field(default=None, description="Due date (Unix timestamp)")
    ) -> dict:
        try:
            run = client.runs.update_run(run_id, compact({
                "name": name,
                "description": description,
                "milestone_id": milestone_id,
                "include_all": include_all,
                "case_ids": case_ids,
                "refs": refs,
                "start_on": start_on,
                "due_on": due_on,
            }))
            return ok(run=run)
        except TestRailError as e:
            return error_response(e, f"Failed to update run {run_id}")

    @mcp.tool(
        name = "testrail_close_run",
        description = "Close a test run. Closed runs are archived and cannot be edited or reopened."
    )
    def close_run(
        run_id: int = Field(description="TestRail run ID")
    ) -> dict:
        try:
            run = client.runs.close_run(run_id)
            logger.info(f"testrail_close_run: Closed run {run_id}")
            return ok(run=run)
        except TestRailError as e:
            return error_response(e, f"Failed to close run {run_id}")
