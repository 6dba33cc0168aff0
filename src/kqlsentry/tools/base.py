"""Base tool class for agent integrations."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, get_type_hints

from pydantic import BaseModel, TypeAdapter


class ToolDefinition(BaseModel):
    """Definition of a tool for agent consumption.

    Compatible with OpenAI and Anthropic tool formats.
    """

    name: str
    description: str
    parameters: dict[str, Any]
    function: Callable[..., Any] | None = None

    model_config = {"arbitrary_types_allowed": True}

    def invoke(self, **kwargs: Any) -> Any:
        """Call the underlying function with tool-call arguments."""
        if self.function is None:
            raise RuntimeError(f"Tool '{self.name}' has no function attached")
        return self.function(**kwargs)

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to OpenAI function calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def to_anthropic_format(self) -> dict[str, Any]:
        """Convert to Anthropic Claude tool format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to generic dict format."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


def parameter_schema(annotation: Any) -> dict[str, Any]:
    """JSON Schema for one parameter annotation.

    ``X | None`` collapses to the schema of ``X``; optionality is expressed
    through the ``required`` list instead.
    """
    args = [a for a in getattr(annotation, "__args__", ()) if a is not type(None)]
    if len(args) == 1 and type(None) in getattr(annotation, "__args__", ()):
        annotation = args[0]
    schema = TypeAdapter(annotation).json_schema()
    schema.pop("title", None)
    return schema


def function_to_tool_definition(
    func: Callable[..., Any],
    name: str | None = None,
    description: str | None = None,
) -> ToolDefinition:
    """Convert a Python function to a ToolDefinition.

    Args:
        func: Function to convert
        name: Override function name
        description: Override description (uses docstring if not provided)

    Returns:
        ToolDefinition for the function
    """
    tool_name = name or func.__name__
    tool_description = description or inspect.getdoc(func) or f"Execute {tool_name}"

    hints = get_type_hints(func)
    properties: dict[str, Any] = {}
    required: list[str] = []

    for param_name, param in inspect.signature(func).parameters.items():
        if param_name == "self":
            continue
        schema = parameter_schema(hints.get(param_name, str))
        if param.default is inspect.Parameter.empty:
            required.append(param_name)
        elif param.default is not None:
            schema["default"] = param.default
        properties[param_name] = schema

    parameters: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        parameters["required"] = required

    return ToolDefinition(
        name=tool_name,
        description=tool_description.strip(),
        parameters=parameters,
        function=func,
    )
