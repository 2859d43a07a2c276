"""
Internal MCP tools for prompt management.

Exposes functionality for:
- add_prompt(): Create a single-content prompt
- add_multi_message_prompt(): Create a role-based multi-message prompt
- get_prompt(): Get a prompt by ID
- list_prompts(): List all prompts
- delete_prompt(): Delete a prompt
- update_prompt(): Update a prompt (converts single-content when messages are given)
- apply_prompt(): Substitute variables into a prompt

Every tool returns a JSON-serializable value; errors propagate as
PromptopiaError subclasses and are translated by PromptToolDispatcher.
"""

from __future__ import annotations

import json
from typing import Any

from mcp import types

from promptopia.mcp_proxy.errors import to_mcp_error
from promptopia.mcp_proxy.tools.internal import InternalToolRegistry
from promptopia.storage.prompts import LocalPromptManager

__all__ = ["MESSAGES_SCHEMA", "PromptToolDispatcher", "create_prompts_registry"]

MESSAGES_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "role": {
                "type": "string",
                "enum": ["user", "assistant"],
                "description": "Role of the message sender",
            },
            "content": {
                "type": "object",
                "properties": {
                    "type": {
                        "type": "string",
                        "enum": ["text", "image"],
                        "description": "Type of content",
                    },
                    "text": {
                        "type": "string",
                        "description": "Text content (required for text type)",
                    },
                    "image": {
                        "type": "string",
                        "description": "Image data (required for image type)",
                    },
                },
                "required": ["type"],
            },
        },
        "required": ["role", "content"],
    },
}


def _id_schema(action: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "id": {"type": "string", "description": f"ID of the prompt to {action}"},
        },
        "required": ["id"],
    }


def create_prompts_registry(manager: LocalPromptManager) -> InternalToolRegistry:
    """
    Create the prompt management tool registry.

    Args:
        manager: Prompt repository the tools operate on

    Returns:
        InternalToolRegistry with the prompt tools registered
    """
    registry = InternalToolRegistry(
        name="promptopia-prompts",
        description="Prompt management - add_prompt, add_multi_message_prompt, get_prompt, "
        "list_prompts, delete_prompt, update_prompt, apply_prompt",
    )

    @registry.tool(
        name="add_prompt",
        description="Adds a new prompt to the system (single content format)",
        input_schema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Name of the prompt"},
                "content": {
                    "type": "string",
                    "description": "Content of the prompt with variables in {{variable}} format",
                },
                "description": {"type": "string", "description": "Description of the prompt"},
            },
            "required": ["name", "content"],
        },
    )
    async def add_prompt(
        name: str, content: str, description: str | None = None
    ) -> dict[str, Any]:
        prompt = await manager.add_prompt(name=name, content=content, description=description)
        return prompt.to_dict()

    @registry.tool(
        name="add_multi_message_prompt",
        description="Adds a new multi-message prompt with role-based messages",
        input_schema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Name of the prompt"},
                "description": {"type": "string", "description": "Description of the prompt"},
                "messages": {**MESSAGES_SCHEMA, "description": "Array of messages with roles"},
            },
            "required": ["name", "messages"],
        },
    )
    async def add_multi_message_prompt(
        name: str,
        messages: list[dict[str, Any]],
        description: str | None = None,
    ) -> dict[str, Any]:
        prompt = await manager.add_multi_message_prompt(
            name=name, messages=messages, description=description
        )
        return prompt.to_dict()

    @registry.tool(
        name="get_prompt",
        description="Gets a prompt by its ID",
        input_schema=_id_schema("retrieve"),
    )
    async def get_prompt(id: str) -> dict[str, Any]:
        prompt = await manager.get_prompt(id)
        return prompt.to_dict()

    @registry.tool(name="list_prompts", description="Lists all available prompts")
    async def list_prompts() -> dict[str, Any]:
        prompts = await manager.list_prompts()
        return {"prompts": [p.to_dict() for p in prompts]}

    @registry.tool(
        name="delete_prompt",
        description="Deletes a prompt by its ID",
        input_schema=_id_schema("delete"),
    )
    async def delete_prompt(id: str) -> dict[str, Any]:
        result = await manager.delete_prompt(id)
        return result.to_dict()

    @registry.tool(
        name="update_prompt",
        description="Updates an existing prompt (supports both single content and "
        "multi-message formats)",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "ID of the prompt to update"},
                "name": {"type": "string", "description": "New name for the prompt"},
                "description": {
                    "type": "string",
                    "description": "New description for the prompt",
                },
                "messages": {
                    **MESSAGES_SCHEMA,
                    "description": "New messages (converts single content to "
                    "multi-message format)",
                },
            },
            "required": ["id"],
        },
    )
    async def update_prompt(
        id: str,
        name: str | None = None,
        description: str | None = None,
        messages: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        result = await manager.update_prompt(
            id, name=name, description=description, messages=messages
        )
        return result.to_dict()

    @registry.tool(
        name="apply_prompt",
        description="Applies variables to a template prompt and returns the result",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "ID of the prompt to apply"},
                "variables": {
                    "type": "object",
                    "description": "Object containing variable names and their values",
                },
            },
            "required": ["id", "variables"],
        },
    )
    async def apply_prompt(id: str, variables: dict[str, Any]) -> dict[str, Any]:
        result = await manager.apply_prompt(id, variables)
        return result.to_dict()

    return registry


class PromptToolDispatcher:
    """Serves a tool registry in the MCP tools/list and tools/call shape."""

    def __init__(self, registry: InternalToolRegistry):
        self.registry = registry

    def list_tools(self) -> list[types.Tool]:
        return [
            types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
            for tool in self.registry.list_tools()
        ]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        """
        Call a tool and wrap its result as MCP text content.

        apply_prompt returns its flat ``result`` text; every other tool returns
        its result as indented JSON.

        Raises:
            McpError: For any failure, mapped through the error taxonomy
        """
        try:
            result = await self.registry.call(name, arguments)
        except Exception as e:
            raise to_mcp_error(e) from e

        if name == "apply_prompt":
            text = result["result"]
        else:
            text = json.dumps(result, indent=2, ensure_ascii=False)
        return [types.TextContent(type="text", text=text)]
