"""Tests for InternalToolRegistry: schema inference, validation, dispatch."""

from typing import Any

import pytest

from promptopia.errors import ToolNotFoundError, ValidationError
from promptopia.mcp_proxy.tools.internal import (
    InternalToolRegistry,
    _build_input_schema,
    _get_json_schema_type,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def registry() -> InternalToolRegistry:
    registry = InternalToolRegistry(name="test-tools", description="Test tools")

    @registry.tool(name="echo", description="Echo a message")
    def echo(message: str, times: int = 1) -> dict[str, Any]:
        return {"echo": message * times}

    @registry.tool(name="merge", description="Merge an object and a list")
    async def merge(data: dict[str, Any], items: list[str] | None = None) -> dict[str, Any]:
        return {"data": data, "items": items or []}

    return registry


class TestSchemaInference:
    """Tests for schema building from signatures."""

    @pytest.mark.parametrize(
        "annotation,expected",
        [
            (str, "string"),
            (int, "integer"),
            (float, "number"),
            (bool, "boolean"),
            (dict[str, Any], "object"),
            (list[str], "array"),
            (str | None, "string"),
            (list[int] | None, "array"),
        ],
    )
    def test_json_schema_type(self, annotation, expected):
        assert _get_json_schema_type(annotation) == expected

    def test_build_input_schema(self):
        def func(name: str, count: int = 0, tags: list[str] | None = None) -> None:
            pass

        schema = _build_input_schema(func)
        assert schema == {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "count": {"type": "integer"},
                "tags": {"type": "array"},
            },
            "required": ["name"],
        }

    def test_no_parameters(self):
        def func() -> None:
            pass

        assert _build_input_schema(func) == {"type": "object", "properties": {}}


class TestRegistry:
    """Tests for registration and listing."""

    def test_list_tools_in_registration_order(self, registry: InternalToolRegistry):
        assert [t.name for t in registry.list_tools()] == ["echo", "merge"]
        assert len(registry) == 2

    def test_get_schema(self, registry: InternalToolRegistry):
        schema = registry.get_schema("echo")
        assert schema is not None
        assert schema["name"] == "echo"
        assert schema["inputSchema"]["required"] == ["message"]
        assert registry.get_schema("missing") is None

    def test_explicit_schema_is_kept(self):
        registry = InternalToolRegistry(name="r")
        explicit = {"type": "object", "properties": {"x": {"type": "string"}}}

        @registry.tool(name="t", description="d", input_schema=explicit)
        def t(x: int) -> int:
            return x

        assert registry.get_schema("t")["inputSchema"] is explicit


class TestRegistryCall:
    """Tests for calling tools through the registry."""

    @pytest.mark.asyncio
    async def test_call_sync_tool(self, registry: InternalToolRegistry):
        assert await registry.call("echo", {"message": "ab", "times": 2}) == {"echo": "abab"}

    @pytest.mark.asyncio
    async def test_call_async_tool(self, registry: InternalToolRegistry):
        result = await registry.call("merge", {"data": {"a": 1}, "items": ["x"]})
        assert result == {"data": {"a": 1}, "items": ["x"]}

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry: InternalToolRegistry):
        with pytest.raises(ToolNotFoundError) as exc_info:
            await registry.call("nope", {})
        assert "Unknown tool: nope" in str(exc_info.value)
        assert "echo" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unknown_arguments_are_dropped(self, registry: InternalToolRegistry):
        assert await registry.call("echo", {"message": "a", "extra": True}) == {"echo": "a"}

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, registry: InternalToolRegistry):
        with pytest.raises(ValidationError) as exc_info:
            await registry.call("echo", {})
        assert "Invalid arguments for 'echo'" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_none_arguments(self, registry: InternalToolRegistry):
        with pytest.raises(ValidationError):
            await registry.call("echo", None)

    @pytest.mark.asyncio
    async def test_wrong_type(self, registry: InternalToolRegistry):
        with pytest.raises(ValidationError) as exc_info:
            await registry.call("echo", {"message": "a", "times": "two"})
        assert "times" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_json_string_arguments_are_decoded(self, registry: InternalToolRegistry):
        result = await registry.call("merge", {"data": '{"a": 1}', "items": '["x", "y"]'})
        assert result == {"data": {"a": 1}, "items": ["x", "y"]}

    @pytest.mark.asyncio
    async def test_undecodable_string_fails_validation(self, registry: InternalToolRegistry):
        with pytest.raises(ValidationError):
            await registry.call("merge", {"data": "not json"})

    @pytest.mark.asyncio
    async def test_json_string_of_wrong_shape_fails_validation(
        self, registry: InternalToolRegistry
    ):
        with pytest.raises(ValidationError):
            await registry.call("merge", {"data": "[1, 2]"})
