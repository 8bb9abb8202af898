#!/usr/bin/env python3
"""
TestRail MCP Server - Exposes the TestRail REST API (v2) via Model Context Protocol.

This server acts as a bridge between MCP clients and a TestRail instance,
allowing AI assistants to manage projects, suites, sections, test cases,
runs, plans, results and attachments.

Supports two transport modes:
1. STDIO: For local integration with MCP clients (direct stdin/stdout communication)
2. SSE: For remote deployment via Server-Sent Events over HTTP/HTTPS
"""

import argparse
import json
import logging
import sys
from typing import Optional

import uvicorn
from fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from . import __version__
from .api import TestRailClient
from .config import TestRailSettings, load_settings
from .errors import ConfigurationError
from .logging_config import configure_logging
from .tools import register_tools

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Tools for a TestRail instance. Start with testrail_get_projects, then work inside a project. "
    "Destructive and bulk tools require an explicit confirmation string; ask the user before sending it."
)


# ============================================================================
# MCP RESOURCES AND PROMPTS
# ============================================================================
# Static reference documents exposed under the testrail:// URI scheme.

def register_resources(mcp: FastMCP, settings: TestRailSettings) -> None:

    @mcp.resource("testrail://config/settings")
    def get_server_config() -> str:
        """Server configuration (the API key is never exposed)"""
        return json.dumps({
            "testrail_url": settings.base_url,
            "username": settings.username,
            "server_name": settings.server_name,
            "version": __version__,
            "api": "TestRail REST API v2",
            "workflow": "testrail_get_projects() → testrail_get_project() → work with suites, sections and cases"
        }, indent=2)

    @mcp.resource("testrail://docs/status-ids")
    def get_status_ids() -> str:
        """Result status IDs reference"""
        return json.dumps({
            "1": "Passed",
            "2": "Blocked",
            "3": "Untested (cannot be set through results)",
            "4": "Retest",
            "5": "Failed",
            "6+": "Custom statuses, see testrail_get_statuses"
        }, indent=2)

    @mcp.resource("testrail://docs/priority-levels")
    def get_priority_levels() -> str:
        """Default priority levels reference"""
        return json.dumps({
            "1": "Low",
            "2": "Medium",
            "3": "High",
            "4": "Critical",
            "note": "Instances can customize priorities, see testrail_get_priorities"
        }, indent=2)

    @mcp.resource("testrail://docs/getting-started")
    def get_getting_started_guide() -> str:
        """Quick start guide"""
        return json.dumps({
            "1": "Find a project: testrail_get_projects()",
            "2": "Inspect its suites: testrail_get_project(project_id)",
            "3": "Browse sections and cases: testrail_get_sections(), testrail_get_cases()",
            "4": "Execute: testrail_add_run(), then testrail_add_result_for_case()",
            "5": "Check field options first: testrail_get_case_metadata()"
        }, indent=2)

    @mcp.prompt()
    def testrail_workflow_guidance() -> str:
        """
        Guidance for AI assistants on working with TestRail through this server:
        the project/suite/section hierarchy, pagination and confirmation rules.
        """
        return """
# TestRail Workflow Guidance for AI Assistants

## Hierarchy
Project → Suite → Section → Case. Runs and plans execute cases; each case in a run is a "test"
with its own results.

- Single-suite projects: suite_id can usually be omitted.
- Multi-suite projects: pass suite_id to testrail_get_cases / testrail_get_sections.

## Discovery
1. testrail_get_projects() to find the project_id
2. testrail_get_project(project_id) to see its suites
3. testrail_get_case_metadata() before creating cases, to learn type/priority IDs and custom fields

## Pagination
List tools return one page plus offset, limit, size and _links. If _links.next is set,
call again with a larger offset. Nothing is fetched automatically.

## Recording results
Status IDs: 1=Passed, 2=Blocked, 4=Retest, 5=Failed. Use testrail_add_results_for_cases
to record many results in one call.

## Destructive and bulk operations
Deletes, copy/move and batch updates require an exact confirmation string
(see each tool's description).

✓ Show the user what will change and get an explicit yes first
✓ Use soft=true on testrail_delete_section / testrail_delete_suite to preview the impact
❌ Never send a confirmation string the user has not approved
"""


async def health_check(request):
    """
    Health check endpoint for monitoring server status.

    Used by load balancers, monitoring tools, and manual testing.
    """
    settings = request.app.state.settings
    return JSONResponse({
        "status": "ok",
        "service": "TestRail MCP Server",
        "version": __version__,
        "testrail_url": settings.base_url,
        "endpoints": {
            "health": "/",
            "sse": "/sse"
        }
    })


def create_server(settings: TestRailSettings, client: Optional[TestRailClient] = None) -> FastMCP:
    """Build the FastMCP server with every tool, resource and prompt registered."""
    if client is None:
        client = TestRailClient.from_settings(settings)

    mcp = FastMCP(settings.server_name, instructions=INSTRUCTIONS)
    register_tools(mcp, client)
    register_resources(mcp, settings)
    logger.info(f"MCP Server: {settings.server_name} ({settings.base_url})")
    return mcp


def create_app(mcp: FastMCP, settings: TestRailSettings) -> Starlette:
    """
    Starlette ASGI application for the SSE transport.

    Routes:
    1. Health check at root (/)
    2. FastMCP's SSE app mounted at root (/sse and /messages/)
    """
    app = Starlette(
        routes=[
            Route("/", health_check),
            Mount("/", app=mcp.http_app(transport="sse"))
        ]
    )
    app.state.settings = settings
    return app


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def main(argv: Optional[list] = None):
    """
    Run the MCP server with either STDIO or SSE transport.

    Transport Modes:
    1. STDIO (default): the MCP client spawns this as a subprocess
    2. SSE: runs as a web service with uvicorn (put a reverse proxy in front for HTTPS)
    """
    parser = argparse.ArgumentParser(description='TestRail MCP Server')
    parser.add_argument('--transport', choices=['stdio', 'sse'], default='stdio',
                        help='Transport type: stdio (local) or sse (remote)')
    parser.add_argument('--host', default='0.0.0.0',
                        help='Host to bind to for SSE (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=8000,
                        help='Port to bind to for SSE (default: 8000)')
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        # stdout is reserved for STDIO communication
        print(f"TestRail MCP Server: {e.message}", file=sys.stderr)
        for problem in e.problems:
            print(f"  - {problem}", file=sys.stderr)
        print("Set TESTRAIL_URL, TESTRAIL_USER and TESTRAIL_API_KEY (environment or .env file).", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level, settings.log_file)

    logger.info("=" * 60)
    logger.info("TestRail MCP Server Starting")
    logger.info(f"TestRail URL: {settings.base_url}")
    logger.info(f"Transport Mode: {args.transport}")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info("=" * 60)

    print(f"TestRail MCP Server | TestRail: {settings.base_url} | Transport: {args.transport}", file=sys.stderr)

    mcp = create_server(settings)

    if args.transport == 'sse':
        logger.info(f"Starting SSE server on {args.host}:{args.port}")
        try:
            uvicorn.run(
                create_app(mcp, settings),
                host=args.host,
                port=args.port,
                log_level="info"
            )
        except Exception as e:
            logger.critical(f"Failed to start SSE server: {e}", exc_info=True)
            sys.exit(1)
    else:
        logger.info("Starting STDIO server (stdin/stdout communication)")
        try:
            mcp.run(transport='stdio')
        except KeyboardInterrupt:
            logger.info("Server stopped by user (Ctrl+C)")
        except Exception as e:
            logger.critical(f"Failed to start STDIO server: {e}", exc_info=True)
            sys.exit(1)


if __name__ == "__main__":
    main()
