"""
Error taxonomy for Promptopia.

Every failure raised by the template engine or the prompt repository is a
PromptopiaError subclass carrying one of three kinds:

- validation: malformed or missing caller input
- not_found: the referenced prompt (or tool) does not exist
- internal: storage or serialization faults, and anything unclassified

The MCP tool layer is the only place these are translated into protocol
errors (see promptopia.mcp_proxy.errors.to_mcp_error).
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum


class ErrorKind(str, Enum):
    """Failure classes surfaced to MCP clients."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class PromptopiaError(Exception):
    """Base exception for Promptopia errors."""

    kind: ErrorKind = ErrorKind.INTERNAL


class ValidationError(PromptopiaError):
    """Raised when caller input is malformed or incomplete."""

    kind = ErrorKind.VALIDATION


class MissingVariablesError(ValidationError):
    """Raised when apply is called without values for every template variable."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required variables: {', '.join(self.missing)}")


class NotFoundError(PromptopiaError):
    """Raised when a referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class PromptNotFoundError(NotFoundError):
    """Raised when no prompt is stored under the given ID."""

    def __init__(self, prompt_id: str):
        self.prompt_id = prompt_id
        super().__init__(f"Prompt not found: {prompt_id}")


class ToolNotFoundError(NotFoundError):
    """Raised when an unknown tool name is called."""

    def __init__(self, tool_name: str, available: Sequence[str] = ()):
        self.tool_name = tool_name
        self.available = list(available)
        message = f"Unknown tool: {tool_name}"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


class StorageError(PromptopiaError):
    """Raised when prompt bytes cannot be read, written, or decoded."""

    kind = ErrorKind.INTERNAL
