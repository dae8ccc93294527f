"""Resolve an inbound request envelope to a handler and run it.

Resolution order is fixed: ``list_tools`` first, then ``call_tool``, and
only after both are ruled out the direct-method fallback, which treats
the method name itself as a tool name. The fallback exists for clients
that do not know whether the server expects the wrapped ``call_tool``
envelope or a bare method name, and it is off unless the server runs in
legacy mode.
"""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any, Dict, Optional

import anyio.to_thread

from ..mcp_protocol import (
    CALL_TOOL,
    LIST_TOOLS,
    MCPRequest,
    MCPResponse,
    parse_request,
    text_content,
)
from .errors import (
    INTERNAL_ERROR,
    InvalidArguments,
    InvalidRequest,
    MCPError,
    MethodNotFound,
    ToolExecutionError,
    ToolNotFound,
)
from .tool_registry import ToolRegistry

log = logging.getLogger(__name__)


class RequestDispatcher(object):
    """Route requests to the registry and wrap outcomes in envelopes."""

    def __init__(
        self,
        registry: ToolRegistry,
        legacy_direct_methods: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self._registry = registry
        self._legacy_direct_methods = legacy_direct_methods
        self._log = logger or log

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def legacy_direct_methods(self) -> bool:
        return self._legacy_direct_methods

    async def dispatch_payload(self, payload: Any) -> MCPResponse:
        """Validate a decoded JSON body and dispatch it."""
        try:
            request = parse_request(payload)
        except InvalidRequest as exc:
            self._log.warning("Rejected request envelope: %s", exc.message)
            return MCPResponse(exc.request_id, error=exc.to_error())
        return await self.dispatch(request)

    async def dispatch(self, request: MCPRequest) -> MCPResponse:
        self._log.info("Dispatching method=%r id=%r", request.method, request.request_id)
        try:
            result = await self._route(request)
        except MCPError as exc:
            self._log.warning("Method %r failed: %s", request.method, exc.message)
            return MCPResponse(request.request_id, error=exc.to_error())
        except Exception as exc:  # noqa: BLE001
            self._log.exception("Unexpected failure while dispatching %r", request.method)
            return MCPResponse(
                request.request_id,
                error={"code": INTERNAL_ERROR, "message": f"Internal error: {type(exc).__name__}"},
            )
        return MCPResponse(request.request_id, result=result)

    async def _route(self, request: MCPRequest) -> Dict[str, Any]:
        params = request.params or {}
        if request.method == LIST_TOOLS:
            return self._list_tools()
        if request.method == CALL_TOOL:
            return await self._call_tool(params)
        if self._legacy_direct_methods and self._registry.resolve(request.method) is not None:
            self._log.info("Direct method fallback: treating %r as tool name", request.method)
            return await self._invoke(request.method, params)
        raise MethodNotFound(request.method)

    def _list_tools(self) -> Dict[str, Any]:
        tools = [descriptor.to_wire() for descriptor in self._registry.list()]
        self._log.info("list_tools returning %d tool(s)", len(tools))
        return {"tools": tools}

    async def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if name is None:
            raise InvalidArguments("name")
        if not isinstance(name, str) or not name:
            raise InvalidArguments("name", "expected a non-empty string")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidArguments("arguments", "expected an object")

        if self._registry.resolve(name) is None:
            raise ToolNotFound(name)
        return await self._invoke(name, arguments)

    async def _invoke(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        handler = self._registry.resolve(name)
        descriptor = self._registry.describe(name)
        if handler is None or descriptor is None:
            raise ToolNotFound(name)

        for key in descriptor.required_arguments:
            if key not in arguments:
                raise InvalidArguments(key)

        self._log.info("Calling tool %r with arguments %s", name, sorted(arguments))
        try:
            if inspect.iscoroutinefunction(handler):
                outcome = await handler(arguments)
            else:
                outcome = await anyio.to_thread.run_sync(handler, arguments)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
        except MCPError:
            raise
        except Exception as exc:  # noqa: BLE001
            self._log.warning("Tool %r raised %s: %s", name, type(exc).__name__, exc)
            raise ToolExecutionError(name, str(exc)) from exc

        self._log.info("Tool %r completed", name)
        return _as_result(outcome)


def _as_result(outcome: Any) -> Dict[str, Any]:
    """Normalise a manual handler's return value into a ``{"content": [...]}`` result.

    Declarative tools already return content blocks built by FastMCP.
    """
    if isinstance(outcome, dict) and "content" in outcome:
        return outcome
    if outcome is None:
        return {"content": []}
    if isinstance(outcome, str):
        return {"content": [text_content(outcome)]}
    if isinstance(outcome, dict):
        return {"content": [text_content(json.dumps(outcome, default=str))]}
    if isinstance(outcome, list):
        return {"content": [item if isinstance(item, dict) else text_content(str(item)) for item in outcome]}
    return {"content": [text_content(str(outcome))]}
