"""MCP server for KQLSentry.

Exposes query validation and escaping as MCP tools so a query-writing agent
can check its output before anything is executed.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP  # type: ignore[import-not-found]

from kqlsentry import GuardPolicy, ToolRegistry

# Configure logging to stderr (important for stdio transport)
logging.basicConfig(level=logging.INFO, stream=sys.stderr)
logger = logging.getLogger(__name__)

# Create MCP server
mcp = FastMCP("kqlsentry")

# Global tool registry (set during server startup)
_registry: ToolRegistry | None = None


def get_registry() -> ToolRegistry:
    """Get the tool registry."""
    if _registry is None:
        raise RuntimeError("Registry not initialized. Call create_server() first.")
    return _registry


def _call(name: str, **arguments: Any) -> str:
    try:
        return json.dumps(get_registry().call(name, arguments), default=str)
    except Exception as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def kqlsentry_validate_kql(query: str, require_time_filter: bool = True) -> str:
    """Validate a KQL (log analytics) query before running it.

    Args:
        query: KQL query text, starting with an allowed table (e.g. Perf)
        require_time_filter: Warn when no TimeGenerated/ago() filter is present

    Returns:
        JSON with valid, errors, warnings, sanitized_query and violations.
        Run only sanitized_query, and only when valid is true.
    """
    return _call("kqlsentry_validate_kql", query=query, require_time_filter=require_time_filter)


@mcp.tool()
def kqlsentry_validate_resource_graph(query: str) -> str:
    """Validate a resource graph query before running it.

    Args:
        query: Query text starting with Resources, ResourceContainers,
            AdvisorResources or AlertsManagementResources

    Returns:
        JSON with valid, errors, warnings and sanitized_query.
    """
    return _call("kqlsentry_validate_resource_graph", query=query)


@mcp.tool()
def kqlsentry_escape_value(value: str | None = None) -> str:
    """Escape a user-supplied value for a single-quoted query literal.

    Args:
        value: Raw value; wrap the escaped result in single quotes

    Returns:
        JSON with the escaped value.
    """
    return _call("kqlsentry_escape_value", value=value)


@mcp.tool()
def kqlsentry_clamp_options(max_results: int | None = None, timeout_ms: int | None = None) -> str:
    """Resolve the row limit and timeout a query execution will use.

    Args:
        max_results: Requested row count
        timeout_ms: Requested timeout in milliseconds

    Returns:
        JSON with max_results and timeout_ms after defaults and ceilings.
    """
    return _call("kqlsentry_clamp_options", max_results=max_results, timeout_ms=timeout_ms)


@mcp.tool()
def kqlsentry_list_tables(dialect: str = "kql") -> str:
    """List the tables a query may start from.

    Args:
        dialect: "kql" or "resourcegraph"

    Returns:
        JSON with the allowed tables (and resource types for resourcegraph).
    """
    return _call("kqlsentry_list_tables", dialect=dialect)


def create_server(policy: GuardPolicy | None = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        policy: Guard policy (read from KQLSENTRY_* variables when omitted)

    Returns:
        Configured FastMCP server instance
    """
    global _registry
    policy = policy or GuardPolicy.from_env()
    _registry = ToolRegistry(policy)
    logger.info(
        f"KQLSentry tools ready (time filter required: {policy.require_time_filter}, "
        f"max look-back days: {policy.max_lookback_days})"
    )
    return mcp


def main() -> None:
    """Entry point for running the MCP server."""
    parser = argparse.ArgumentParser(description="KQLSentry MCP Server")
    parser.add_argument(
        "--max-lookback-days",
        type=float,
        default=None,
        help="Block ago() look-backs longer than this many days",
    )
    parser.add_argument(
        "--no-time-filter",
        action="store_true",
        help="Do not warn about KQL queries without a time filter",
    )
    args = parser.parse_args()

    policy = GuardPolicy.from_env()
    overrides: dict[str, Any] = {}
    if args.max_lookback_days is not None:
        overrides["max_lookback_days"] = args.max_lookback_days
    if args.no_time_filter:
        overrides["require_time_filter"] = False
    if overrides:
        policy = policy.model_copy(update=overrides)

    create_server(policy)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
