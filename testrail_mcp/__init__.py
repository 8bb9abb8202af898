"""TestRail MCP Server - exposes the TestRail REST API (v2) via Model Context Protocol."""

__version__ = "1.0.0"
