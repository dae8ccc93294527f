from typing import Dict, Iterable, List, Optional

from ..mcp_protocol import MCPToolDescription
from ..tools.tool_base import binding_for
from .errors import DuplicateToolError, RegistrySealedError
from .models import ToolBinding, ToolHandler


class ToolRegistry(object):
    """Registry of tool descriptors and their handlers.

    Built once at startup from a static list of bindings and sealed
    before the server accepts requests. Lookups are exact and
    case-sensitive; resolving naming-convention variants is left to the
    dispatcher.
    """

    def __init__(self, bindings: Iterable[ToolBinding] = ()):
        self._bindings: Dict[str, ToolBinding] = {}
        self._sealed = False
        for binding in bindings:
            self.register(binding.descriptor, binding.handler)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Refuse any further registration."""
        self._sealed = True

    def register(self, descriptor: MCPToolDescription, handler: ToolHandler) -> None:
        """Register a tool. Duplicate names are rejected, never overwritten."""
        if self._sealed:
            raise RegistrySealedError(descriptor.name)
        if descriptor.name in self._bindings:
            raise DuplicateToolError(descriptor.name)
        self._bindings[descriptor.name] = ToolBinding(descriptor, handler)

    def register_tool(self, func) -> None:
        """Register a function decorated with :func:`mcp_tool`."""
        binding = binding_for(func)
        self.register(binding.descriptor, binding.handler)

    def list(self) -> List[MCPToolDescription]:
        """Return all descriptors in registration order."""
        return [binding.descriptor for binding in self._bindings.values()]

    def resolve(self, name: str) -> Optional[ToolHandler]:
        """Return the handler registered under ``name`` or None."""
        binding = self._bindings.get(name)
        return binding.handler if binding is not None else None

    def describe(self, name: str) -> Optional[MCPToolDescription]:
        binding = self._bindings.get(name)
        return binding.descriptor if binding is not None else None

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings
