import logging
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from ..core.errors import InvalidArguments
from ..core.models import ToolBinding
from ..core.tool_registry import ToolRegistry
from ..mcp_protocol import MCPToolDescription, text_content
from .tool_base import binding_for, mcp_tool

logger = logging.getLogger(__name__)

MANUAL_ECHO_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "message": {
            "type": "string",
            "description": "The message to echo back",
        },
    },
    "required": ["message"],
}


class EchoInput(BaseModel):
    message: str = Field(..., description="The message to echo back.")


@mcp_tool(name="echo")
def echo(input: EchoInput) -> str:
    """Echoes the message back to the client."""
    logger.info("Echo tool called with: %r", input.message)
    return f"hello {input.message}"


def manual_echo(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Handler for the manually registered echo tool."""
    if "message" not in arguments:
        raise InvalidArguments("message")
    response = f"Manual echo: {arguments['message']}"
    logger.info("Responding with: %s", response)
    return {"content": [text_content(response)]}


def build_echo_bindings() -> List[ToolBinding]:
    """Return the static tool list the server registers at startup."""
    return [
        binding_for(echo),
        ToolBinding(
            MCPToolDescription(
                name="manual-echo",
                description="Manually registered echo tool",
                input_schema=MANUAL_ECHO_SCHEMA,
            ),
            manual_echo,
        ),
    ]


def create_registry() -> ToolRegistry:
    """Build the startup tool set and seal it."""
    registry = ToolRegistry(build_echo_bindings())
    registry.seal()
    return registry
