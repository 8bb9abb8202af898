"""
Test plan tools.

A plan groups several runs (entries), typically one per suite, and can fan an
entry out over configurations (browsers, platforms). Entry IDs are GUID
strings, run IDs are integers.
"""

import logging
from typing import List, Optional

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..api.base import compact
from ..errors import TestRailError
from ..models import PlanEntry, dump_model
from .common import error_response, ok, page_response

logger = logging.getLogger(__name__)


def register_plan_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register test plan tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_plan",
        description = "Get a test plan by ID, including its entries and their runs."
    )
    def get_plan(
        plan_id: int = Field(description="TestRail plan ID")
    ) -> dict:
        try:
            return ok(plan=client.plans.get_plan(plan_id))
        except TestRailError as e:
            return error_response(e, f"Failed to get plan {plan_id}")

    @mcp.tool(
        name = "testrail_get_plans",
        description = "List test plans of a project with optional filters and pagination."
    )
    def get_plans(
        project_id: int = Field(description="TestRail project ID"),
        created_after: Optional[int] = Field(default=None, description="Created after (Unix timestamp)"),
        created_before: Optional[int] = Field(default=None, description="Created before (Unix timestamp)"),
        created_by: Optional[List[int]] = Field(default=None, description="Creator user IDs"),
        is_completed: Optional[bool] = Field(default=None, description="True for closed plans only, False for active only"),
        milestone_id: Optional[List[int]] = Field(default=None, description="Milestone IDs"),
        limit: Optional[int] = Field(default=None, description="Maximum number of plans to return"),
        offset: Optional[int] = Field(default=None, description="Number of plans to skip")
    ) -> dict:
        try:
            page = client.plans.get_plans(
                project_id,
                created_after=created_after,
                created_before=created_before,
                created_by=created_by,
                is_completed=is_completed,
                milestone_id=milestone_id,
                limit=limit,
                offset=offset,
            )
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to list plans of project {project_id}")

    @mcp.tool(
        name = "testrail_add_plan",
        description = "Create a test plan, optionally with entries (one per suite)."
    )
    def add_plan(
        project_id: int = Field(description="TestRail project ID"),
        name: str = Field(description="Name of the test plan"),
        description: Optional[str] = Field(default=None, description="Plan description"),
        milestone_id: Optional[int] = Field(default=None, description="Milestone to link the plan to"),
        start_on: Optional[int] = Field(default=None, description="Start date (Unix timestamp)"),
        due_on: Optional[int] = Field(default=None, description="Due date (Unix timestamp)"),
        entries: Optional[List[PlanEntry]] = Field(default=None, description="Plan entries to create with the plan")
    ) -> dict:
        try:
            payload = compact({
                "name": name,
                "description": description,
                "milestone_id": milestone_id,
                "start_on": start_on,
                "due_on": due_on,
            })
            if entries:
                payload["entries"] = [dump_model(entry) for entry in entries]
            plan = client.plans.add_plan(project_id, payload)
            logger.info(f"testrail_add_plan: Created plan '{name}' in project {project_id}")
            return ok(plan=plan)
        except TestRailError as e:
            return error_response(e, f"Failed to create plan in project {project_id}")

    @mcp.tool(
        name = "testrail_add_plan_entry",
        description = "Add an entry (a suite-based group of runs) to an existing test plan."
    )
    def add_plan_entry(
        plan_id: int = Field(description="TestRail plan ID"),
        entry: PlanEntry = Field(description="The entry to add")
    ) -> dict:
        try:
            return ok(entry=client.plans.add_plan_entry(plan_id, dump_model(entry)))
        except TestRailError as e:
            return error_response(e, f"Failed to add entry to plan {plan_id}")

    @mcp.tool(
        name = "testrail_add_run_to_plan_entry",
        description = "Add a configuration-specific run to an existing plan entry."
    )
    def add_run_to_plan_entry(
        plan_id: int = Field(description="TestRail plan ID"),
        entry_id: str = Field(description="Plan entry ID (GUID)"),
        config_ids: List[int] = Field(description="Configuration IDs of the new run"),
        description: Optional[str] = Field(default=None, description="Run description"),
        assignedto_id: Optional[int] = Field(default=None, description="User the run is assigned to"),
        include_all: Optional[bool] = Field(default=None, description="Include all cases of the suite"),
        case_ids: Optional[List[int]] = Field(default=None, description="Cases to include when include_all is false"),
        refs: Optional[str] = Field(default=None, description="Comma-separated references")
    ) -> dict:
        try:
            run = client.plans.add_run_to_plan_entry(plan_id, entry_id, compact({
                "config_ids": config_ids,
                "description": description,
                "assignedto_id": assignedto_id,
                "include_all": include_all,
                "case_ids": case_ids,
                "refs": refs,
            }))
            return ok(plan=run)
        except TestRailError as e:
            return error_response(e, f"Failed to add run to entry {entry_id} of plan {plan_id}")

    @mcp.tool(
        name = "testrail_update_plan",
        description = "Update a test plan. Only the fields given are changed."
    )
    def update_plan(
        plan_id: int = Field(description="TestRail plan ID"),
        name: Optional[str] = Field(default=None, description="New plan name"),
        description: Optional[str] = Field(default=None, description="New description"),
        milestone_id: Optional[int] = Field(default=None, description="Milestone to link the plan to"),
        start_on: Optional[int] = Field(default=None, description="Start date (Unix timestamp)"),
        due_on: Optional[int] = Field(default=None, description="Due date (Unix timestamp)")
    ) -> dict:
        try:
            plan = client.plans.update_plan(plan_id, compact({
                "name": name,
                "description": description,
                "milestone_id": milestone_id,
                "start_on": start_on,
                "due_on": due_on,
            }))
            return ok(plan=plan)
        except TestRailError as e:
            return error_response(e, f"Failed to update plan {plan_id}")

    @mcp.tool(
        name = "testrail_update_plan_entry",
        description = "Update all runs of a plan entry at once."
    )
    def update_plan_entry(
        plan_id: int = Field(description="TestRail plan ID"),
        entry_id: str = Field(description="Plan entry ID (GUID)"),
        name: Optional[str] = Field(default=None, description="New name of the entry's runs"),
        description: Optional[str] = Field(default=None, description="New description"),
        assignedto_id: Optional[int] = Field(default=None, description="User the runs are assigned to"),
        include_all: Optional[bool] = Field(default=None, description="Include all cases of the suite"),
        case_ids: Optional[List[int]] = Field(default=None, description="Cases to include when include_all is false"),
        refs: Optional[str] = Field(default=None, description="Comma-separated references")
    ) -> dict:
        try:
            entry = client.plans.update_plan_entry(plan_id, entry_id, compact({
                "name": name,
                "description": description,
                "assignedto_id": assignedto_id,
                "include_all": include_all,
                "case_ids": case_ids,
                "refs": refs,
            }))
            return ok(entry=entry)
        except TestRailError as e:
            return error_response(e, f"Failed to update entry {entry_id} of plan {plan_id}")

    @mcp.tool(
        name = "testrail_update_run_in_plan_entry",
        description = "Update a single run that belongs to a plan entry."
    )
    def update_run_in_plan_entry(
        run_id: int = Field(description="Run ID inside the plan entry"),
        description: Optional[str] = Field(default=None, description="New description"),
        assignedto_id: Optional[int] = Field(default=None, description="User the run is assigned to"),
        include_all: Optional[bool] = Field(default=None, description="Include all cases of the suite"),
        case_ids: Optional[List[int]] = Field(default=None, description="Cases to include when include_all is false"),
        refs: Optional[str] = Field(default=None, description="Comma-separated references")
    ) -> dict:
        try:
            run = client.plans.update_run_in_plan_entry(run_id, compact({
                "description": description,
                "assignedto_id": assignedto_id,
                "include_all": include_all,
                "case_ids": case_ids,
                "refs": refs,
            }))
            return ok(plan=run)
        except TestRailError as e:
            return error_response(e, f"Failed to update run {run_id} in plan entry")

    @mcp.tool(
        name = "testrail_close_plan",
        description = "Close a test plan and all its runs. Closed plans cannot be edited or reopened."
    )
    def close_plan(
        plan_id: int = Field(description="TestRail plan ID")
    ) -> dict:
        try:
            plan = client.plans.close_plan(plan_id)
            logger.info(f"testrail_close_plan: Closed plan {plan_id}")
            return ok(plan=plan)
        except TestRailError as e:
            return error_response(e, f"Failed to close plan {plan_id}")
