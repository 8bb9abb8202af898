"""Shared step and project variable tools."""

import logging
from typing import List, Optional

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..errors import TestRailError
from ..models import SharedStepContent, dump_model
from .common import check_confirmation, error_response, ok, page_response

logger = logging.getLogger(__name__)

DELETE_SHARED_STEP_CONFIRMATION = "I_UNDERSTAND_THIS_CANNOT_BE_UNDONE"
DELETE_VARIABLE_CONFIRMATION = "DELETE_VARIABLE"


def register_shared_step_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register shared step and variable tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_shared_step",
        description = "Get a shared step set by ID."
    )
    def get_shared_step(
        shared_step_id: int = Field(description="TestRail shared step ID")
    ) -> dict:
        try:
            return ok(shared_step=client.shared_steps.get_shared_step(shared_step_id))
        except TestRailError as e:
            return error_response(e, f"Failed to get shared step {shared_step_id}")

    @mcp.tool(
        name = "testrail_get_shared_step_history",
        description = "Get the change history of a shared step set."
    )
    def get_shared_step_history(
        shared_step_id: int = Field(description="TestRail shared step ID")
    ) -> dict:
        try:
            return page_response(client.shared_steps.get_shared_step_history(shared_step_id))
        except TestRailError as e:
            return error_response(e, f"Failed to get history of shared step {shared_step_id}")

    @mcp.tool(
        name = "testrail_get_shared_steps",
        description = "List shared step sets of a project with optional filters and pagination."
    )
    def get_shared_steps(
        project_id: int = Field(description="TestRail project ID"),
        created_after: Optional[int] = Field(default=None, description="Created after (Unix timestamp)"),
        created_before: Optional[int] = Field(default=None, description="Created before (Unix timestamp)"),
        created_by: Optional[List[int]] = Field(default=None, description="Creator user IDs"),
        updated_after: Optional[int] = Field(default=None, description="Updated after (Unix timestamp)"),
        updated_before: Optional[int] = Field(default=None, description="Updated before (Unix timestamp)"),
        refs: Optional[str] = Field(default=None, description="Reference ID filter"),
        limit: Optional[int] = Field(default=None, description="Maximum number of shared steps"),
        offset: Optional[int] = Field(default=None, description="Number of shared steps to skip")
    ) -> dict:
        try:
            page = client.shared_steps.get_shared_steps(
                project_id,
                created_after=created_after,
                created_before=created_before,
                created_by=created_by,
                updated_after=updated_after,
                updated_before=updated_before,
                refs=refs,
                limit=limit,
                offset=offset,
            )
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to list shared steps of project {project_id}")

    @mcp.tool(
        name = "testrail_add_shared_step",
        description = "Create a shared step set that several cases can reference."
    )
    def add_shared_step(
        project_id: int = Field(description="TestRail project ID"),
        title: str = Field(description="Title of the shared step set"),
        custom_steps_separated: Optional[List[SharedStepContent]] = Field(default=None, description="The steps")
    ) -> dict:
        try:
            steps = [dump_model(step) for step in custom_steps_separated] if custom_steps_separated else None
            shared_step = client.shared_steps.add_shared_step(project_id, title, steps)
            logger.info(f"testrail_add_shared_step: Created shared step '{title}' in project {project_id}")
            return ok(shared_step=shared_step)
        except TestRailError as e:
            return error_response(e, f"Failed to create shared step in project {project_id}")

    @mcp.tool(
        name = "testrail_update_shared_step",
        description = "Update a shared step set. Changes apply to every case that uses it."
    )
    def update_shared_step(
        shared_step_id: int = Field(description="TestRail shared step ID"),
        title: Optional[str] = Field(default=None, description="New title"),
        custom_steps_separated: Optional[List[SharedStepContent]] = Field(default=None, description="Replacement steps")
    ) -> dict:
        try:
            steps = [dump_model(step) for step in custom_steps_separated] if custom_steps_separated else None
            return ok(shared_step=client.shared_steps.update_shared_step(shared_step_id, title=title, steps=steps))
        except TestRailError as e:
            return error_response(e, f"Failed to update shared step {shared_step_id}")

    @mcp.tool(
        name = "testrail_delete_shared_step",
        description = (
            "Delete a shared step set. With keep_in_cases=true (default) the steps are copied into the cases "
            f"using them. Requires confirmation='{DELETE_SHARED_STEP_CONFIRMATION}'."
        )
    )
    def delete_shared_step(
        shared_step_id: int = Field(description="TestRail shared step ID"),
        keep_in_cases: bool = Field(default=True, description="Keep the steps inside the cases that used them"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{DELETE_SHARED_STEP_CONFIRMATION}'")
    ) -> dict:
        refusal = check_confirmation(
            confirmation, DELETE_SHARED_STEP_CONFIRMATION, f"delete shared step {shared_step_id}"
        )
        if refusal:
            return refusal
        try:
            client.shared_steps.delete_shared_step(shared_step_id, keep_in_cases=keep_in_cases)
            logger.info(f"testrail_delete_shared_step: Deleted shared step {shared_step_id}")
            return ok(shared_step_id=shared_step_id, deleted=True, keep_in_cases=keep_in_cases)
        except TestRailError as e:
            return error_response(e, f"Failed to delete shared step {shared_step_id}")

    @mcp.tool(
        name = "testrail_get_variables",
        description = "List the test data variables of a project."
    )
    def get_variables(
        project_id: int = Field(description="TestRail project ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of variables"),
        offset: Optional[int] = Field(default=None, description="Number of variables to skip")
    ) -> dict:
        try:
            return page_response(client.variables.get_variables(project_id, limit=limit, offset=offset))
        except TestRailError as e:
            return error_response(e, f"Failed to list variables of project {project_id}")

    @mcp.tool(
        name = "testrail_add_variable",
        description = "Create a test data variable in a project."
    )
    def add_variable(
        project_id: int = Field(description="TestRail project ID"),
        name: str = Field(description="Variable name")
    ) -> dict:
        try:
            return ok(variable=client.variables.add_variable(project_id, name))
        except TestRailError as e:
            return error_response(e, f"Failed to create variable in project {project_id}")

    @mcp.tool(
        name = "testrail_update_variable",
        description = "Rename a test data variable."
    )
    def update_variable(
        variable_id: int = Field(description="TestRail variable ID"),
        name: str = Field(description="New variable name")
    ) -> dict:
        try:
            return ok(variable=client.variables.update_variable(variable_id, name))
        except TestRailError as e:
            return error_response(e, f"Failed to update variable {variable_id}")

    @mcp.tool(
        name = "testrail_delete_variable",
        description = (
            "Delete a test data variable and its values in all datasets. "
            f"Requires confirmation='{DELETE_VARIABLE_CONFIRMATION}'."
        )
    )
    def delete_variable(
        variable_id: int = Field(description="TestRail variable ID"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{DELETE_VARIABLE_CONFIRMATION}'")
    ) -> dict:
        refusal = check_confirmation(confirmation, DELETE_VARIABLE_CONFIRMATION, f"delete variable {variable_id}")
        if refusal:
            return refusal
        try:
            client.variables.delete_variable(variable_id)
            logger.info(f"testrail_delete_variable: Deleted variable {variable_id}")
            return ok(variable_id=variable_id, deleted=True)
        except TestRailError as e:
            return error_response(e, f"Failed to delete variable {variable_id}")
