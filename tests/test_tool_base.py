import types

import pytest
from fastmcp.tools.tool import Tool
from pydantic import BaseModel, Field

from mcp_repro.core.errors import InvalidArguments
from mcp_repro.tools import echo_tool
from mcp_repro.tools.tool_base import (
    TOOL_MARKER,
    binding_for,
    collect_tools,
    input_schema,
    mcp_tool,
    prepare_arguments,
)


class CountInput(BaseModel):
    text: str = Field(..., description="Text to measure.")
    limit: int = Field(10, ge=1)


@mcp_tool()
def count_chars(input: CountInput) -> int:
    """Count characters up to a limit."""
    return min(len(input.text), input.limit)


@mcp_tool(name="async-count", description="Async variant")
async def async_count(input: CountInput) -> int:
    return len(input.text)


@mcp_tool(name="repeat")
def repeat(word: str, times: int = 2) -> str:
    """Repeat a word."""
    return " ".join([word] * times)


def _texts(result):
    return [block["text"] for block in result["content"]]


def test_descriptor_derived_from_function_and_model():
    descriptor = binding_for(count_chars).descriptor

    assert descriptor.name == "count_chars"
    assert descriptor.description == "Count characters up to a limit."
    assert descriptor.input_schema["required"] == ["text"]
    assert set(descriptor.input_schema["properties"]) == {"text", "limit"}
    assert descriptor.required_arguments == ["text"]


def test_explicit_name_and_description_win():
    descriptor = binding_for(async_count).descriptor

    assert descriptor.name == "async-count"
    assert descriptor.description == "Async variant"


def test_plain_signature_keeps_tool_parameters():
    descriptor = binding_for(repeat).descriptor

    assert set(descriptor.input_schema["properties"]) == {"word", "times"}
    assert descriptor.required_arguments == ["word"]


def test_input_model_arguments_are_wrapped():
    model_tool = Tool.from_function(count_chars)
    plain_tool = Tool.from_function(repeat)

    assert prepare_arguments(model_tool, {"text": "a"}) == {"input": {"text": "a"}}
    assert prepare_arguments(plain_tool, {"word": "a"}) == {"word": "a"}
    assert "input" not in input_schema(model_tool).get("properties", {})


def test_decorated_function_still_callable_directly():
    assert count_chars(CountInput(text="abc")) == 3


@pytest.mark.anyio
async def test_handler_validates_arguments():
    handler = binding_for(count_chars).handler

    assert _texts(await handler({"text": "abcdef", "limit": 4})) == ["4"]


@pytest.mark.anyio
async def test_handler_reports_missing_field():
    handler = binding_for(count_chars).handler

    with pytest.raises(InvalidArguments) as excinfo:
        await handler({"limit": 3})

    assert excinfo.value.argument == "text"
    assert "text" in excinfo.value.message


@pytest.mark.anyio
async def test_handler_reports_malformed_field():
    handler = binding_for(count_chars).handler

    with pytest.raises(InvalidArguments) as excinfo:
        await handler({"text": "abc", "limit": 0})

    assert excinfo.value.argument == "limit"
    assert excinfo.value.detail


@pytest.mark.anyio
async def test_async_tool_is_awaited():
    handler = binding_for(async_count).handler

    assert _texts(await handler({"text": "four"})) == ["4"]


@pytest.mark.anyio
async def test_plain_signature_handler():
    handler = binding_for(repeat).handler

    assert _texts(await handler({"word": "hi", "times": 3})) == ["hi hi hi"]


@pytest.mark.anyio
async def test_tool_exceptions_propagate():
    @mcp_tool(name="explode")
    def explode(input: CountInput) -> str:
        raise RuntimeError("disk on fire")

    with pytest.raises(RuntimeError, match="disk on fire"):
        await binding_for(explode).handler({"text": "x"})


def test_collect_tools_finds_marked_functions_only():
    namespace = types.SimpleNamespace(first=count_chars, second=async_count, plain=len)

    bindings = collect_tools(namespace)

    assert [binding.name for binding in bindings] == ["count_chars", "async-count"]


def test_collect_tools_scans_modules_without_duplicates():
    bindings = collect_tools(echo_tool, echo_tool)

    assert [binding.name for binding in bindings] == ["echo"]


def test_marker_attribute_is_set():
    assert hasattr(echo_tool.echo, TOOL_MARKER)


def test_unmarked_function_has_no_binding():
    with pytest.raises(TypeError):
        binding_for(len)
