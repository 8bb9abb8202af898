"""Section tools: the folder tree that organizes cases inside a suite."""

import logging
from typing import Optional

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..errors import TestRailError
from .common import check_confirmation, error_response, ok, page_response

logger = logging.getLogger(__name__)

DELETE_SECTION_CONFIRMATION = "I_UNDERSTAND_THIS_DELETES_ALL_TEST_CASES"


def register_section_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register section tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_sections",
        description = "List the sections of a project (and suite, for multi-suite projects) with pagination."
    )
    def get_sections(
        project_id: int = Field(description="TestRail project ID"),
        suite_id: Optional[int] = Field(default=None, description="Suite ID (required for multi-suite projects)"),
        limit: Optional[int] = Field(default=None, description="Maximum number of sections to return"),
        offset: Optional[int] = Field(default=None, description="Number of sections to skip")
    ) -> dict:
        try:
            page = client.sections.get_sections(project_id, suite_id=suite_id, limit=limit, offset=offset)
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to list sections of project {project_id}")

    @mcp.tool(
        name = "testrail_get_section",
        description = "Get a section by ID."
    )
    def get_section(
        section_id: int = Field(description="TestRail section ID")
    ) -> dict:
        try:
            return ok(section=client.sections.get_section(section_id))
        except TestRailError as e:
            return error_response(e, f"Failed to get section {section_id}")

    @mcp.tool(
        name = "testrail_add_section",
        description = "Create a section, optionally nested under a parent section."
    )
    def add_section(
        project_id: int = Field(description="TestRail project ID"),
        name: str = Field(description="Name of the new section"),
        suite_id: Optional[int] = Field(default=None, description="Suite ID (required for multi-suite projects)"),
        parent_id: Optional[int] = Field(default=None, description="Parent section ID for a nested section"),
        description: Optional[str] = Field(default=None, description="Section description")
    ) -> dict:
        try:
            section = client.sections.add_section(
                project_id, name, suite_id=suite_id, parent_id=parent_id, description=description
            )
            logger.info(f"testrail_add_section: Created section '{name}' in project {project_id}")
            return ok(section=section)
        except TestRailError as e:
            return error_response(e, f"Failed to create section in project {project_id}")

    @mcp.tool(
        name = "testrail_update_section",
        description = "Rename a section or change its description."
    )
    def update_section(
        section_id: int = Field(description="TestRail section ID"),
        name: Optional[str] = Field(default=None, description="New section name"),
        description: Optional[str] = Field(default=None, description="New section description")
    ) -> dict:
        try:
            return ok(section=client.sections.update_section(section_id, name=name, description=description))
        except TestRailError as e:
            return error_response(e, f"Failed to update section {section_id}")

    @mcp.tool(
        name = "testrail_move_section",
        description = (
            "Move a section to another parent and/or position. "
            "Omit parent_id to move it to the top level; omit after_id to make it the first child."
        )
    )
    def move_section(
        section_id: int = Field(description="TestRail section ID"),
        parent_id: Optional[int] = Field(default=None, description="New parent section ID (null for root level)"),
        after_id: Optional[int] = Field(default=None, description="Sibling section to place it after (null for first)")
    ) -> dict:
        try:
            return ok(section=client.sections.move_section(section_id, parent_id=parent_id, after_id=after_id))
        except TestRailError as e:
            return error_response(e, f"Failed to move section {section_id}")

    @mcp.tool(
        name = "testrail_delete_section",
        description = (
            "Delete a section together with ALL its subsections and test cases. IRREVERSIBLE. "
            "Use soft=true to preview the affected items. "
            f"Requires confirmation='{DELETE_SECTION_CONFIRMATION}' unless soft=true."
        )
    )
    def delete_section(
        section_id: int = Field(description="TestRail section ID"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{DELETE_SECTION_CONFIRMATION}'"),
        soft: bool = Field(default=False, description="Only report what would be deleted, without deleting")
    ) -> dict:
        try:
            if soft:
                preview = client.sections.delete_section(section_id, soft=True)
                return ok(section_id=section_id, soft=True, preview=preview)

            refusal = check_confirmation(confirmation, DELETE_SECTION_CONFIRMATION, f"delete section {section_id}")
            if refusal:
                return refusal

            client.sections.delete_section(section_id)
            logger.info(f"testrail_delete_section: Deleted section {section_id}")
            return ok(section_id=section_id, deleted=True)
        except TestRailError as e:
            return error_response(e, f"Failed to delete section {section_id}")
