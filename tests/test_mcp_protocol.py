import pytest

from mcp_repro.core.errors import InvalidRequest
from mcp_repro.mcp_protocol import MCPResponse, MCPToolDescription, parse_request


def test_response_requires_exactly_one_member():
    with pytest.raises(ValueError):
        MCPResponse("1")
    with pytest.raises(ValueError):
        MCPResponse("1", result={}, error={"code": 1, "message": "x"})


def test_error_response_to_wire():
    response = MCPResponse("1", error={"code": -32601, "message": "Method 'x' not found"})

    assert response.is_error
    assert response.to_wire() == {
        "jsonrpc": "2.0",
        "id": "1",
        "error": {"code": -32601, "message": "Method 'x' not found"},
    }


def test_parse_request_accepts_missing_params():
    request = parse_request({"jsonrpc": "2.0", "id": "a", "method": "list_tools"})

    assert request.request_id == "a"
    assert request.params is None


@pytest.mark.parametrize(
    "payload",
    [
        {"jsonrpc": "2.0", "id": 1, "method": ""},
        {"jsonrpc": "2.0", "id": 1, "method": "x", "params": [1, 2]},
        {"id": 1, "method": "x"},
        "list_tools",
    ],
)
def test_parse_request_rejects(payload):
    with pytest.raises(InvalidRequest):
        parse_request(payload)


def test_descriptor_wire_form():
    descriptor = MCPToolDescription("echo", "Echo", {"type": "object", "required": ["message", 3]})

    assert descriptor.to_wire() == {"name": "echo", "description": "Echo", "inputSchema": descriptor.input_schema}
    assert descriptor.required_arguments == ["message"]
