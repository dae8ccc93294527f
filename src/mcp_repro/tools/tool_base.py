"""Declarative tool marker.

A tool is a plain function, usually taking a single pydantic input model.
:func:`mcp_tool` turns it into a FastMCP :class:`~fastmcp.tools.tool.Tool`,
which derives the schema and validates arguments, and attaches a
:class:`ToolBinding` to the function. The host program hands those
bindings to the registry at startup, either by listing the functions
explicitly or through :func:`collect_tools`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastmcp.tools.tool import Tool
from pydantic import ValidationError

from ..core.errors import InvalidArguments
from ..core.models import ToolBinding
from ..mcp_protocol import MCPToolDescription

TOOL_MARKER = "__mcp_tool__"

INPUT_PARAMETER = "input"


def mcp_tool(name: Optional[str] = None, description: Optional[str] = None):
    """Mark ``func`` as a tool and attach its binding."""

    def decorator(func):
        tool = Tool.from_function(func, name=name, description=description)
        descriptor = MCPToolDescription(
            name=tool.name,
            description=tool.description or "",
            input_schema=input_schema(tool),
        )
        setattr(func, TOOL_MARKER, ToolBinding(descriptor, _make_handler(tool)))
        return func

    return decorator


def binding_for(func) -> ToolBinding:
    binding = getattr(func, TOOL_MARKER, None)
    if not isinstance(binding, ToolBinding):
        raise TypeError(f"{func!r} is not decorated with @mcp_tool")
    return binding


def collect_tools(*namespaces: Any) -> List[ToolBinding]:
    """Return the bindings of all marked functions found in ``namespaces``.

    Modules and classes are scanned in attribute definition order.
    """
    bindings: List[ToolBinding] = []
    seen = set()
    for namespace in namespaces:
        for value in vars(namespace).values():
            func = getattr(value, "__func__", value)
            binding = getattr(func, TOOL_MARKER, None)
            if not isinstance(binding, ToolBinding) or id(func) in seen:
                continue
            seen.add(id(func))
            bindings.append(binding)
    return bindings


def wraps_input_model(tool: Tool) -> bool:
    properties = (tool.parameters or {}).get("properties", {})
    return INPUT_PARAMETER in properties and len(properties) == 1


def input_schema(tool: Tool) -> Dict[str, Any]:
    """Schema callers see: the model's own schema for ``input: Model`` tools."""
    parameters = tool.parameters or {}
    if not wraps_input_model(tool):
        return parameters

    schema = parameters["properties"][INPUT_PARAMETER]
    definitions = dict(parameters.get("$defs", {}))
    ref = schema.get("$ref")
    if ref:
        schema = definitions.pop(ref.rsplit("/", 1)[-1], {})
    schema = dict(schema)
    if definitions:
        schema["$defs"] = definitions
    return schema


def prepare_arguments(tool: Tool, arguments: Dict[str, Any]) -> Dict[str, Any]:
    if wraps_input_model(tool):
        return {INPUT_PARAMETER: arguments}
    return arguments


def _invalid_arguments(tool: Tool, exc: ValidationError) -> InvalidArguments:
    first = exc.errors()[0]
    location = [str(part) for part in first.get("loc", ())]
    if wraps_input_model(tool) and location[:1] == [INPUT_PARAMETER]:
        location = location[1:]
    argument = ".".join(location) or "arguments"
    if first.get("type") == "missing":
        return InvalidArguments(argument)
    return InvalidArguments(argument, first.get("msg", ""))


def _make_handler(tool: Tool):
    async def handler(arguments: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = await tool.run(prepare_arguments(tool, arguments))
        except ValidationError as exc:
            raise _invalid_arguments(tool, exc) from exc
        # Convert ToolResult blocks (TextContent/etc.) into plain JSON content
        return {
            "content": [
                block.model_dump(mode="json", by_alias=True, exclude_none=True)
                for block in result.content
            ]
        }

    handler.__name__ = tool.name
    return handler
