"""Milestone and label tools."""

import logging
from typing import Optional

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..api.base import compact
from ..errors import TestRailError
from .common import error_response, ok, page_response

logger = logging.getLogger(__name__)


def register_milestone_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register milestone and label tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_milestones",
        description = "List milestones of a project with optional state filters and pagination."
    )
    def get_milestones(
        project_id: int = Field(description="TestRail project ID"),
        is_completed: Optional[bool] = Field(default=None, description="True for completed milestones only, False for open only"),
        is_started: Optional[bool] = Field(default=None, description="True for started milestones only, False for upcoming only"),
        limit: Optional[int] = Field(default=None, description="Maximum number of milestones"),
        offset: Optional[int] = Field(default=None, description="Number of milestones to skip")
    ) -> dict:
        try:
            page = client.milestones.get_milestones(
                project_id, is_completed=is_completed, is_started=is_started, limit=limit, offset=offset
            )
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to list milestones of project {project_id}")

    @mcp.tool(
        name = "testrail_get_milestone",
        description = "Get a milestone by ID."
    )
    def get_milestone(
        milestone_id: int = Field(description="TestRail milestone ID")
    ) -> dict:
        try:
            return ok(milestone=client.milestones.get_milestone(milestone_id))
        except TestRailError as e:
            return error_response(e, f"Failed to get milestone {milestone_id}")

    @mcp.tool(
        name = "testrail_add_milestone",
        description = "Create a milestone, optionally as a sub-milestone of another."
    )
    def add_milestone(
        project_id: int = Field(description="TestRail project ID"),
        name: str = Field(description="Milestone name"),
        description: Optional[str] = Field(default=None, description="Milestone description"),
        due_on: Optional[int] = Field(default=None, description="Due date (Unix timestamp)"),
        start_on: Optional[int] = Field(default=None, description="Start date (Unix timestamp)"),
        parent_id: Optional[int] = Field(default=None, description="Parent milestone ID"),
        refs: Optional[str] = Field(default=None, description="Comma-separated references")
    ) -> dict:
        try:
            milestone = client.milestones.add_milestone(project_id, compact({
                "name": name,
                "description": description,
                "due_on": due_on,
                "start_on": start_on,
                "parent_id": parent_id,
                "refs": refs,
            }))
            logger.info(f"testrail_add_milestone: Created milestone '{name}' in project {project_id}")
            return ok(milestone=milestone)
        except TestRailError as e:
            return error_response(e, f"Failed to create milestone in project {project_id}")

    @mcp.tool(
        name = "testrail_update_milestone",
        description = "Update a milestone, including completing or starting it."
    )
    def update_milestone(
        milestone_id: int = Field(description="TestRail milestone ID"),
        name: Optional[str] = Field(default=None, description="New name"),
        description: Optional[str] = Field(default=None, description="New description"),
        due_on: Optional[int] = Field(default=None, description="Due date (Unix timestamp)"),
        start_on: Optional[int] = Field(default=None, description="Start date (Unix timestamp)"),
        parent_id: Optional[int] = Field(default=None, description="Parent milestone ID"),
        refs: Optional[str] = Field(default=None, description="Comma-separated references"),
        is_completed: Optional[bool] = Field(default=None, description="Mark the milestone completed"),
        is_started: Optional[bool] = Field(default=None, description="Mark the milestone started")
    ) -> dict:
        try:
            milestone = client.milestones.update_milestone(milestone_id, compact({
                "name": name,
                "description": description,
                "due_on": due_on,
                "start_on": start_on,
                "parent_id": parent_id,
                "refs": refs,
                "is_completed": is_completed,
                "is_started": is_started,
            }))
            return ok(milestone=milestone)
        except TestRailError as e:
            return error_response(e, f"Failed to update milestone {milestone_id}")

    @mcp.tool(
        name = "testrail_get_labels",
        description = "List the labels of a project."
    )
    def get_labels(
        project_id: int = Field(description="TestRail project ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of labels"),
        offset: Optional[int] = Field(default=None, description="Number of labels to skip")
    ) -> dict:
        try:
            return page_response(client.labels.get_labels(project_id, limit=limit, offset=offset))
        except TestRailError as e:
            return error_response(e, f"Failed to list labels of project {project_id}")

    @mcp.tool(
        name = "testrail_get_label",
        description = "Get a label by ID."
    )
    def get_label(
        label_id: int = Field(description="TestRail label ID")
    ) -> dict:
        try:
            return ok(label=client.labels.get_label(label_id))
        except TestRailError as e:
            return error_response(e, f"Failed to get label {label_id}")

    @mcp.tool(
        name = "testrail_update_label",
        description = "Rename a label (max 20 characters)."
    )
    def update_label(
        label_id: int = Field(description="TestRail label ID"),
        project_id: int = Field(description="Project the label belongs to"),
        title: str = Field(max_length=20, description="New label title")
    ) -> dict:
        try:
            return ok(label=client.labels.update_label(label_id, project_id, title))
        except TestRailError as e:
            return error_response(e, f"Failed to update label {label_id}")
