"""
Prompt data model.

A stored prompt is one of two variants:

- SingleContentPrompt: one template string in ``content``
- MultiMessagePrompt: an ordered list of role-tagged messages, marked by
  ``version == "2.0"``

The ``version`` discriminator is the only thing that decides the variant
when a record is decoded (see prompt_from_dict).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

MULTI_MESSAGE_VERSION = "2.0"

Role = Literal["user", "assistant"]
ContentType = Literal["text", "image"]

VALID_ROLES = ("user", "assistant")
VALID_CONTENT_TYPES = ("text", "image")


@dataclass
class MessageContent:
    """Content of a single prompt message."""

    type: ContentType
    text: str | None = None
    image: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MessageContent:
        return cls(type=data["type"], text=data.get("text"), image=data.get("image"))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        if self.text is not None:
            result["text"] = self.text
        if self.image is not None:
            result["image"] = self.image
        return result


@dataclass
class PromptMessage:
    """A role-tagged message in a multi-message prompt."""

    role: Role
    content: MessageContent

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PromptMessage:
        return cls(role=data["role"], content=MessageContent.from_dict(data["content"]))

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content.to_dict()}


@dataclass
class SingleContentPrompt:
    """A prompt whose template is one text string."""

    id: str
    name: str
    content: str
    created_at: str
    description: str = ""
    variables: list[str] = field(default_factory=list)
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SingleContentPrompt:
        """Create a SingleContentPrompt from its serialized form."""
        return cls(
            id=data["id"],
            name=data["name"],
            content=data["content"],
            description=data.get("description") or "",
            variables=list(data.get("variables") or []),
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the serialized (wire and storage) representation."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "description": self.description,
            "variables": list(self.variables),
            "createdAt": self.created_at,
        }
        if self.updated_at is not None:
            result["updatedAt"] = self.updated_at
        return result


@dataclass
class MultiMessagePrompt:
    """A prompt made of an ordered list of user/assistant messages."""

    id: str
    name: str
    messages: list[PromptMessage]
    created_at: str
    description: str = ""
    variables: list[str] = field(default_factory=list)
    updated_at: str | None = None
    version: str = MULTI_MESSAGE_VERSION

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MultiMessagePrompt:
        """Create a MultiMessagePrompt from its serialized form."""
        return cls(
            id=data["id"],
            name=data["name"],
            messages=[PromptMessage.from_dict(m) for m in data["messages"]],
            description=data.get("description") or "",
            variables=list(data.get("variables") or []),
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the serialized (wire and storage) representation."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "variables": list(self.variables),
            "createdAt": self.created_at,
        }
        if self.updated_at is not None:
            result["updatedAt"] = self.updated_at
        result["version"] = self.version
        result["messages"] = [m.to_dict() for m in self.messages]
        return result


Prompt = SingleContentPrompt | MultiMessagePrompt


def is_multi_message(data: Mapping[str, Any]) -> bool:
    """Check the discriminator of a serialized prompt record."""
    return data.get("version") == MULTI_MESSAGE_VERSION


def prompt_from_dict(data: Mapping[str, Any]) -> Prompt:
    """Decode a serialized prompt, branching on the version discriminator.

    Raises:
        KeyError: If a required field is missing
    """
    if is_multi_message(data):
        return MultiMessagePrompt.from_dict(data)
    return SingleContentPrompt.from_dict(data)


def messages_from_dicts(messages: list[Mapping[str, Any]]) -> list[PromptMessage]:
    """Build message objects from caller-supplied dicts."""
    return [PromptMessage.from_dict(m) for m in messages]
