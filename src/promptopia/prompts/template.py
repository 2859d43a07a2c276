"""
Template engine for ``{{variable}}`` placeholders.

Pure functions only: variable extraction, substitution, and structural
validation of message lists and stored prompt records.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from .models import (
    MULTI_MESSAGE_VERSION,
    VALID_CONTENT_TYPES,
    VALID_ROLES,
    MessageContent,
    PromptMessage,
)

VARIABLE_PATTERN = re.compile(r"{{([^{}]+)}}")


def extract_variables(text: str | None) -> list[str]:
    """Extract placeholder names from text.

    Names are captured verbatim (inner whitespace is kept), de-duplicated by
    exact string, and returned in order of first appearance.

    Args:
        text: Template text, may be empty or None

    Returns:
        Ordered list of unique variable names
    """
    if not text:
        return []
    return list(dict.fromkeys(VARIABLE_PATTERN.findall(text)))


def extract_variables_from_messages(messages: Iterable[PromptMessage]) -> list[str]:
    """Extract placeholder names from every text message, in message order."""
    variables: dict[str, None] = {}
    for message in messages:
        if message.content.type == "text" and message.content.text:
            variables.update(dict.fromkeys(extract_variables(message.content.text)))
    return list(variables)


def substitute(text: str, values: Mapping[str, Any]) -> str:
    """Replace ``{{name}}`` placeholders with values.

    Lookup uses the trimmed name first, then the name exactly as written.
    Placeholders without a value are left untouched. This is a single pass:
    placeholders introduced by substituted values are not expanded.
    """

    def _replace(match: re.Match[str]) -> str:
        raw_name = match.group(1)
        name = raw_name.strip()
        if name in values:
            return str(values[name])
        if raw_name in values:
            return str(values[raw_name])
        return match.group(0)

    return VARIABLE_PATTERN.sub(_replace, text)


def substitute_messages(
    messages: Iterable[PromptMessage], values: Mapping[str, Any]
) -> list[PromptMessage]:
    """Return new messages with variables substituted in text contents."""
    applied = []
    for message in messages:
        content = message.content
        if content.type == "text" and content.text:
            content = MessageContent(
                type=content.type,
                text=substitute(content.text, values),
                image=content.image,
            )
        else:
            content = MessageContent(type=content.type, text=content.text, image=content.image)
        applied.append(PromptMessage(role=message.role, content=content))
    return applied


def _is_valid_message(message: Any) -> bool:
    if not isinstance(message, Mapping):
        return False
    if message.get("role") not in VALID_ROLES:
        return False

    content = message.get("content")
    if not isinstance(content, Mapping) or content.get("type") not in VALID_CONTENT_TYPES:
        return False

    # text messages carry "text", image messages carry "image"
    return isinstance(content.get(content["type"]), str)


def validate_messages(messages: Any) -> bool:
    """Check a caller-supplied message list.

    True iff ``messages`` is a non-empty list where every item has a role in
    {user, assistant} and content carrying ``text`` for text messages or
    ``image`` for image messages.
    """
    if not isinstance(messages, list) or not messages:
        return False
    return all(_is_valid_message(m) for m in messages)


def is_valid_prompt_structure(data: Any) -> bool:
    """Check that a decoded storage record has the shape of one prompt variant."""
    if not isinstance(data, Mapping):
        return False

    common = (
        isinstance(data.get("id"), str)
        and isinstance(data.get("name"), str)
        and isinstance(data.get("variables"), list)
        and isinstance(data.get("createdAt"), str)
    )
    if not common:
        return False

    if data.get("version") == MULTI_MESSAGE_VERSION:
        return validate_messages(data.get("messages"))

    return isinstance(data.get("content"), str) and isinstance(data.get("description"), str)
