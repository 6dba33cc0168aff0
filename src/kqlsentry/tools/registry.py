"""Tool registry for agent access."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from kqlsentry.core.config import GuardPolicy
from kqlsentry.core.types import Dialect
from kqlsentry.query.escaping import escape_value
from kqlsentry.query.execution import clamp_options
from kqlsentry.query.patterns import (
    ALLOWED_RESOURCE_GRAPH_ROOTS,
    ALLOWED_RESOURCE_TYPES,
)
from kqlsentry.query.validator import QueryValidator
from kqlsentry.tools.base import ToolDefinition, function_to_tool_definition


class ToolRegistry:
    """Registry of tools for agent consumption.

    Lets a query-writing agent check its own output before handing it off,
    and escape literal values while it composes queries.
    """

    def __init__(self, policy: GuardPolicy | None = None) -> None:
        """Initialize tool registry.

        Args:
            policy: Limits applied by the validation tools
        """
        self._policy = policy or GuardPolicy()
        self._validators = {
            dialect: QueryValidator.from_policy(dialect, self._policy) for dialect in Dialect
        }
        self._tools: dict[str, ToolDefinition] = {}
        self._register_default_tools()

    def _register_default_tools(self) -> None:
        """Register default KQLSentry tools."""
        self.register(
            name="kqlsentry_validate_kql",
            description="Validate a KQL (log analytics) query before running it. "
            "Returns valid, errors, warnings and the sanitized query. "
            "Fix every error and validate again before execution.",
            func=self._tool_validate_kql,
        )

        self.register(
            name="kqlsentry_validate_resource_graph",
            description="Validate a resource graph query before running it. "
            "Queries must start with Resources, ResourceContainers, AdvisorResources "
            "or AlertsManagementResources.",
            func=self._tool_validate_resource_graph,
        )

        self.register(
            name="kqlsentry_escape_value",
            description="Escape a user-supplied value for use inside a single-quoted "
            "query literal. Wrap the result in single quotes yourself.",
            func=self._tool_escape_value,
        )

        self.register(
            name="kqlsentry_clamp_options",
            description="Resolve the row limit and timeout that will actually be applied "
            "to a query execution.",
            func=self._tool_clamp_options,
        )

        self.register(
            name="kqlsentry_list_tables",
            description="List the tables (kql) or root collections (resourcegraph) "
            "a query may start from.",
            func=self._tool_list_tables,
        )

    def _validate(self, dialect: Dialect, query: str, require_time_filter: bool) -> dict[str, Any]:
        options = self._policy.validation_options(dialect).model_copy(
            update={"require_time_filter": require_time_filter}
        )
        return self._validators[dialect].validate(query, options).model_dump(mode="json")

    def _tool_validate_kql(self, query: str, require_time_filter: bool = True) -> dict[str, Any]:
        """Validate a KQL query (tool wrapper).

        Args:
            query: KQL query text
            require_time_filter: Warn when no time filter is present

        Returns:
            Validation result as dict
        """
        return self._validate(Dialect.KQL, query, require_time_filter)

    def _tool_validate_resource_graph(self, query: str) -> dict[str, Any]:
        """Validate a resource graph query (tool wrapper).

        Args:
            query: Resource graph query text

        Returns:
            Validation result as dict
        """
        return self._validate(Dialect.RESOURCE_GRAPH, query, False)

    def _tool_escape_value(self, value: str | None = None) -> dict[str, Any]:
        """Escape a literal value (tool wrapper)."""
        return {"escaped": escape_value(value)}

    def _tool_clamp_options(
        self,
        max_results: int | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        """Clamp execution options (tool wrapper)."""
        options = clamp_options(
            max_results,
            timeout_ms,
            default_max_results=self._policy.default_max_results,
            max_results_limit=self._policy.max_results_limit,
            default_timeout_ms=self._policy.default_timeout_ms,
            max_timeout_ms=self._policy.max_timeout_ms,
        )
        return options.model_dump()

    def _tool_list_tables(self, dialect: str = "kql") -> dict[str, Any]:
        """List allowed tables for a dialect (tool wrapper)."""
        parsed = Dialect.parse(dialect)
        if parsed == Dialect.KQL:
            return {
                "dialect": parsed.value,
                "tables": list(self._validators[parsed].allowed_tables),
            }
        return {
            "dialect": parsed.value,
            "tables": list(ALLOWED_RESOURCE_GRAPH_ROOTS),
            "resource_types": list(ALLOWED_RESOURCE_TYPES),
        }

    def register(
        self,
        name: str,
        func: Callable[..., Any],
        description: str | None = None,
    ) -> ToolDefinition:
        """Register a tool.

        Args:
            name: Tool name
            func: Function to call
            description: Tool description

        Returns:
            Created ToolDefinition
        """
        tool = function_to_tool_definition(func, name=name, description=description)
        self._tools[name] = tool
        return tool

    def get(self, name: str) -> ToolDefinition | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def call(self, name: str, arguments: dict[str, Any] | None = None) -> Any:
        """Invoke a registered tool with tool-call arguments.

        Raises:
            KeyError: If no tool has that name
        """
        tool = self._tools.get(name)
        if tool is None:
            raise KeyError(f"Unknown tool '{name}'. Available tools: {', '.join(self._tools)}")
        return tool.invoke(**(arguments or {}))

    def list_tools(self) -> list[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def get_all(self) -> list[ToolDefinition]:
        """Get all registered tools."""
        return list(self._tools.values())

    def to_openai_format(self) -> list[dict[str, Any]]:
        """Export all tools in OpenAI function calling format."""
        return [tool.to_openai_format() for tool in self._tools.values()]

    def to_anthropic_format(self) -> list[dict[str, Any]]:
        """Export all tools in Anthropic Claude format."""
        return [tool.to_anthropic_format() for tool in self._tools.values()]

    def to_dict(self) -> list[dict[str, Any]]:
        """Export all tools as dicts."""
        return [tool.to_dict() for tool in self._tools.values()]

