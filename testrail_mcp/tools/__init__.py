"""FastMCP tool registrations, one module per TestRail entity family."""

from fastmcp import FastMCP

from ..api import TestRailClient
from .attachments import register_attachment_tools
from .cases import register_case_tools
from .metadata import register_metadata_tools
from .milestones import register_milestone_tools
from .plans import register_plan_tools
from .projects import register_project_tools
from .results import register_result_tools
from .runs import register_run_tools
from .sections import register_section_tools
from .shared_steps import register_shared_step_tools
from .tests import register_test_tools

__all__ = ["register_tools"]


def register_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register every TestRail tool on the given MCP instance."""
    register_project_tools(mcp, client)
    register_section_tools(mcp, client)
    register_case_tools(mcp, client)
    register_run_tools(mcp, client)
    register_plan_tools(mcp, client)
    register_result_tools(mcp, client)
    register_test_tools(mcp, client)
    register_milestone_tools(mcp, client)
    register_shared_step_tools(mcp, client)
    register_attachment_tools(mcp, client)
    register_metadata_tools(mcp, client)
