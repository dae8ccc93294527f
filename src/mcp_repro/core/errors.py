"""Fault types raised while registering tools and dispatching requests.

Every dispatch-time fault carries a JSON-RPC error code so the dispatcher
can turn it into the ``error`` member of a response envelope.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
TOOL_EXECUTION_ERROR = -32000


class MCPError(Exception):
    """Base error for all registry and dispatch failures."""

    code = INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_error(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class DuplicateToolError(MCPError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' is already registered")


class RegistrySealedError(MCPError):
    """The registry was sealed at startup and no longer accepts tools."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot register '{name}': registry is sealed")


class MethodNotFound(MCPError):
    code = METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Method '{method}' not found")


class ToolNotFound(MCPError):
    code = INVALID_PARAMS

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' not found")


class InvalidArguments(MCPError):
    code = INVALID_PARAMS

    def __init__(self, argument: str, detail: str = "") -> None:
        self.argument = argument
        self.detail = detail
        message = f"Missing required argument '{argument}'"
        if detail:
            message = f"Invalid argument '{argument}': {detail}"
        super().__init__(message)


class InvalidRequest(MCPError):
    code = INVALID_REQUEST

    def __init__(self, detail: str, request_id: Optional[Any] = None) -> None:
        self.request_id = request_id
        super().__init__(f"Invalid request: {detail}")


class ParseError(MCPError):
    code = PARSE_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(f"Parse error: {detail}")


class ToolExecutionError(MCPError):
    """A tool handler failed; the handler's own message is kept verbatim."""

    code = TOOL_EXECUTION_ERROR

    def __init__(self, name: str, detail: str) -> None:
        self.name = name
        self.detail = detail
        super().__init__(detail or f"Tool '{name}' failed")
