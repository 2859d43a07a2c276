"""
MCP prompts capability.

Stored prompts are offered to MCP clients through prompts/list and
prompts/get. A prompt is addressed by its display name; every derived
variable becomes a required argument.
"""

from __future__ import annotations

import logging
import re

from mcp import types

from promptopia.errors import PromptNotFoundError
from promptopia.prompts.models import MultiMessagePrompt, Prompt, PromptMessage, SingleContentPrompt
from promptopia.storage.prompts import LocalPromptManager

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME_TYPE = "image/png"
_DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


def to_mcp_prompt(prompt: Prompt) -> types.Prompt:
    """Describe a stored prompt for prompts/list."""
    return types.Prompt(
        name=prompt.name,
        description=prompt.description or None,
        arguments=[types.PromptArgument(name=name, required=True) for name in prompt.variables],
    )


def _image_content(image: str) -> types.ImageContent:
    match = _DATA_URL_PATTERN.match(image)
    if match:
        return types.ImageContent(type="image", data=match["data"], mimeType=match["mime"])
    return types.ImageContent(type="image", data=image, mimeType=DEFAULT_IMAGE_MIME_TYPE)


def to_mcp_messages(messages: list[PromptMessage]) -> list[types.PromptMessage]:
    """Convert stored messages to MCP prompt messages."""
    result: list[types.PromptMessage] = []
    for message in messages:
        content: types.TextContent | types.ImageContent
        if message.content.type == "image":
            content = _image_content(message.content.image or "")
        else:
            content = types.TextContent(type="text", text=message.content.text or "")
        result.append(types.PromptMessage(role=message.role, content=content))
    return result


def _single_user_message(text: str) -> list[types.PromptMessage]:
    return [types.PromptMessage(role="user", content=types.TextContent(type="text", text=text))]


async def get_mcp_prompt(
    manager: LocalPromptManager,
    name: str,
    arguments: dict[str, str] | None = None,
) -> types.GetPromptResult:
    """
    Resolve a prompt by display name and render it for prompts/get.

    With arguments (an empty mapping counts) the prompt is applied first and
    missing variables fail. Without arguments the raw template is returned.

    Raises:
        PromptNotFoundError: If no prompt has this name
        MissingVariablesError: If arguments omit a required variable
    """
    prompt = await manager.find_prompt_by_name(name)
    if prompt is None:
        raise PromptNotFoundError(name)

    if arguments is not None:
        applied = await manager.apply_prompt(prompt.id, arguments)
        if isinstance(prompt, MultiMessagePrompt) and applied.messages is not None:
            messages = to_mcp_messages(applied.messages)
        else:
            messages = _single_user_message(applied.result)
    elif isinstance(prompt, MultiMessagePrompt):
        messages = to_mcp_messages(prompt.messages)
    elif isinstance(prompt, SingleContentPrompt):
        messages = _single_user_message(prompt.content)
    else:
        raise TypeError(f"Unsupported prompt type: {type(prompt).__name__}")

    return types.GetPromptResult(description=prompt.description or None, messages=messages)
