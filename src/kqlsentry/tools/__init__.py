"""Tools for agent integrations."""

from kqlsentry.tools.base import ToolDefinition, function_to_tool_definition
from kqlsentry.tools.registry import ToolRegistry

__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "function_to_tool_definition",
]
