from dataclasses import dataclass
from typing import Any, Callable, Dict

from ..mcp_protocol import MCPToolDescription

ToolHandler = Callable[[Dict[str, Any]], Any]


@dataclass(frozen=True)
class ToolBinding(object):
    """Pair a tool descriptor with the handler that implements it."""

    descriptor: MCPToolDescription
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.descriptor.name
