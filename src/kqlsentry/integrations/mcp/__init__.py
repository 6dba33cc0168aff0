"""MCP (Model Context Protocol) integration for KQLSentry.

This module provides an MCP server that exposes query validation and value
escaping as tools for query-writing agents.

Example:
    # Run the MCP server
    python -m kqlsentry.integrations.mcp.server --max-lookback-days 10

    # Or via entry point (after pip install)
    kqlsentry-mcp --no-time-filter
"""

from kqlsentry.integrations.mcp.server import create_server, mcp

__all__ = ["mcp", "create_server"]
