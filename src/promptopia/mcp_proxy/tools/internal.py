"""
Internal tool registry for Promptopia tools.

Holds the named operations exposed to MCP clients together with their JSON
Schemas. The stdio server lists and calls tools through the registry rather
than registering functions on the MCP server directly, so argument
validation and error translation happen in one place.
"""

from __future__ import annotations

import inspect
import json
import logging
import types
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin, get_type_hints

from jsonschema import Draft7Validator

from promptopia.errors import ToolNotFoundError, ValidationError

logger = logging.getLogger(__name__)

_JSON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    dict: "object",
    list: "array",
}


def _get_json_schema_type(annotation: Any) -> str:
    """Map a Python annotation to a JSON Schema type name."""
    if annotation is inspect.Parameter.empty:
        return "string"

    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        return _get_json_schema_type(args[0]) if args else "string"
    if origin is not None:
        annotation = origin

    return _JSON_TYPES.get(annotation, "string")


def _build_input_schema(func: Callable[..., Any]) -> dict[str, Any]:
    """Infer an input schema from a function signature."""
    hints = get_type_hints(func)
    properties: dict[str, Any] = {}
    required: list[str] = []

    for param_name, param in inspect.signature(func).parameters.items():
        annotation = hints.get(param_name, param.annotation)
        properties[param_name] = {"type": _get_json_schema_type(annotation)}
        if param.default is inspect.Parameter.empty:
            required.append(param_name)

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


@dataclass
class InternalTool:
    """Represents an internal tool with its metadata and implementation."""

    name: str
    description: str
    input_schema: dict[str, Any]
    func: Callable[..., Any]


class InternalToolRegistry:
    """
    Registry for a domain of internal tools (e.g., promptopia-prompts).

    Each registry is a logical grouping of tools that can be discovered and
    called by name.
    """

    def __init__(self, name: str, description: str = ""):
        """
        Initialize a tool registry.

        Args:
            name: Registry name (e.g., "promptopia-prompts")
            description: Human-readable description of this tool domain
        """
        self.name = name
        self.description = description
        self._tools: dict[str, InternalTool] = {}

    def register(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        func: Callable[..., Any],
    ) -> None:
        """
        Register a tool with the registry.

        Args:
            name: Tool name
            description: Tool description
            input_schema: JSON Schema for the tool's input parameters
            func: The callable that implements the tool (sync or async)
        """
        self._tools[name] = InternalTool(
            name=name,
            description=description,
            input_schema=input_schema,
            func=func,
        )
        logger.debug(f"Registered internal tool '{name}' on '{self.name}'")

    def tool(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any] | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of register(); infers the schema when none is given."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            schema = input_schema if input_schema is not None else _build_input_schema(func)
            self.register(name=name, description=description, input_schema=schema, func=func)
            return func

        return decorator

    @staticmethod
    def _coerce_args(args: dict[str, Any], schema: dict[str, Any]) -> dict[str, Any]:
        """Decode JSON-string values for parameters declared as object or array.

        Some MCP clients send structured arguments as JSON text. Values that
        fail to decode are passed through for schema validation to reject.
        """
        properties = schema.get("properties", {})
        coerced = dict(args)
        for key, value in args.items():
            expected = properties.get(key, {}).get("type")
            if expected not in ("object", "array") or not isinstance(value, str):
                continue
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError:
                continue
            if isinstance(decoded, dict if expected == "object" else list):
                coerced[key] = decoded
        return coerced

    @staticmethod
    def _validate_args(name: str, args: dict[str, Any], schema: dict[str, Any]) -> None:
        errors = sorted(Draft7Validator(schema).iter_errors(args), key=lambda e: list(e.path))
        if errors:
            details = "; ".join(
                f"{'.'.join(str(p) for p in error.path) or 'arguments'}: {error.message}"
                for error in errors
            )
            raise ValidationError(f"Invalid arguments for '{name}': {details}")

    async def call(self, name: str, args: dict[str, Any] | None) -> Any:
        """
        Call a tool by name with the given arguments.

        Args:
            name: Tool name
            args: Tool arguments

        Returns:
            Tool execution result

        Raises:
            ToolNotFoundError: If the tool is not registered
            ValidationError: If the arguments do not match the tool's schema
        """
        tool = self._tools.get(name)
        if not tool:
            raise ToolNotFoundError(name, list(self._tools))

        properties = tool.input_schema.get("properties", {})
        ignored = [key for key in (args or {}) if key not in properties]
        if ignored:
            logger.debug(f"Ignoring unknown arguments for '{name}': {ignored}")
        arguments = self._coerce_args(
            {k: v for k, v in (args or {}).items() if k in properties}, tool.input_schema
        )
        self._validate_args(name, arguments, tool.input_schema)

        # Call the function (handle both sync and async)
        if inspect.iscoroutinefunction(tool.func):
            return await tool.func(**arguments)
        return tool.func(**arguments)

    def list_tools(self) -> list[InternalTool]:
        """List all registered tools in registration order."""
        return list(self._tools.values())

    def get_schema(self, name: str) -> dict[str, Any] | None:
        """
        Get full schema for a specific tool.

        Returns:
            Dict with name, description, and inputSchema, or None if not found
        """
        tool = self._tools.get(name)
        if not tool:
            return None

        return {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.input_schema,
        }

    def __len__(self) -> int:
        """Return number of registered tools."""
        return len(self._tools)
