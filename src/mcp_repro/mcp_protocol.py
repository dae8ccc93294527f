#!/usr/bin/env python
# vim:fileencoding=UTF-8:ts=4:sw=4:sta:et:sts=4:ai

"""Minimal JSON-RPC envelope helpers shared by server and probe client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .core.errors import INTERNAL_ERROR, InvalidRequest

JSONRPC_VERSION = "2.0"

LIST_TOOLS = "list_tools"
CALL_TOOL = "call_tool"


@dataclass
class MCPToolDescription:
    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)

    @property
    def required_arguments(self) -> List[str]:
        required = self.input_schema.get("required") or []
        return [key for key in required if isinstance(key, str)]

    def to_wire(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class MCPRequest:
    request_id: Any
    method: str
    params: Optional[Dict[str, Any]] = None


@dataclass
class MCPResponse:
    request_id: Any
    result: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("MCPResponse needs exactly one of result or error")

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_wire(self) -> Dict[str, Any]:
        if self.error is not None:
            return make_error_response(self.request_id, self.error["message"], code=self.error["code"])
        return make_result_response(self.request_id, self.result or {})


def parse_request(payload: Any) -> MCPRequest:
    """Validate a decoded JSON body and turn it into an :class:`MCPRequest`.

    Only the single-request form is accepted; batches are rejected as
    invalid requests.
    """
    if not isinstance(payload, dict):
        raise InvalidRequest("Request must be a JSON object")

    request_id = payload.get("id")
    if payload.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequest(f"Unsupported jsonrpc version: {payload.get('jsonrpc')!r}", request_id=request_id)

    method = payload.get("method")
    if not isinstance(method, str) or not method:
        raise InvalidRequest("Missing method", request_id=request_id)

    params = payload.get("params")
    if params is not None and not isinstance(params, dict):
        raise InvalidRequest("params must be an object", request_id=request_id)

    return MCPRequest(request_id=request_id, method=method, params=params)


def text_content(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


def make_error_response(request_id: Any, message: str, code: int = INTERNAL_ERROR) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {
            "code": code,
            "message": message,
        },
    }


def make_result_response(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": result,
    }
