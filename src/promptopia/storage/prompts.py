"""Prompt repository.

Provides CRUD and apply operations for prompts stored as one JSON blob per
prompt (``<id>.json``) in the prompts directory. The repository is the only
writer of prompt state; every read decodes a fresh copy from storage.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from promptopia.errors import (
    MissingVariablesError,
    PromptNotFoundError,
    StorageError,
    ValidationError,
)
from promptopia.prompts.models import (
    MultiMessagePrompt,
    Prompt,
    PromptMessage,
    SingleContentPrompt,
    messages_from_dicts,
    prompt_from_dict,
)
from promptopia.prompts.template import (
    extract_variables,
    extract_variables_from_messages,
    is_valid_prompt_structure,
    substitute,
    substitute_messages,
    validate_messages,
)
from promptopia.storage.blobs import BlobNotFoundError, BlobStoreError, LocalBlobStore

logger = logging.getLogger(__name__)

PROMPT_ID_PREFIX = "prompt-"
BLOB_SUFFIX = ".json"


def generate_prompt_id() -> str:
    """Generate a new prompt ID: ``prompt-`` followed by 8 lowercase hex chars."""
    return f"{PROMPT_ID_PREFIX}{uuid.uuid4().hex[:8]}"


def _now() -> str:
    return datetime.now(UTC).isoformat()


@dataclass
class DeletePromptResult:
    """Acknowledgment returned by delete_prompt."""

    success: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message}


@dataclass
class UpdatePromptResult:
    """Result of update_prompt, carrying the full updated entity."""

    success: bool
    message: str
    prompt: Prompt

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "prompt": self.prompt.to_dict(),
        }


@dataclass
class ApplyPromptResult:
    """Result of apply_prompt.

    ``result`` is always a flat string. ``messages`` is only set for
    multi-message prompts.
    """

    result: str
    messages: list[PromptMessage] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"result": self.result}
        if self.messages is not None:
            data["messages"] = [m.to_dict() for m in self.messages]
        return data


class LocalPromptManager:
    """CRUD operations for prompts persisted in a blob store."""

    def __init__(self, prompts_dir: Path | str | None = None, store: LocalBlobStore | None = None):
        """
        Initialize the prompt manager.

        Args:
            prompts_dir: Directory holding the prompt JSON files
            store: Pre-built blob store (takes precedence over prompts_dir)
        """
        if store is None:
            if prompts_dir is None:
                raise ValueError("Either prompts_dir or store is required")
            store = LocalBlobStore(prompts_dir)
        self.store = store

    @property
    def prompts_dir(self) -> Path:
        return self.store.root

    async def initialize(self) -> None:
        """Ensure the prompts directory exists."""
        try:
            await self.store.ensure_root()
        except BlobStoreError as e:
            logger.error(f"Failed to create prompts directory: {e}")
            raise StorageError(str(e)) from e

    # --- persistence helpers ---

    @staticmethod
    def _key(prompt_id: str) -> str:
        return f"{prompt_id}{BLOB_SUFFIX}"

    async def _save(self, prompt: Prompt) -> None:
        payload = json.dumps(prompt.to_dict(), indent=2, ensure_ascii=False)
        try:
            await self.store.put(self._key(prompt.id), payload.encode("utf-8"))
        except BlobStoreError as e:
            logger.error(f"Failed to save prompt {prompt.id}: {e}")
            raise StorageError(f"Failed to save prompt {prompt.id}: {e}") from e

    async def _load(self, key: str) -> Prompt:
        """Read and decode one stored prompt.

        Raises:
            BlobNotFoundError: If the blob does not exist
            StorageError: If the blob is unreadable or not a valid prompt
        """
        try:
            raw = await self.store.get(key)
        except BlobNotFoundError:
            raise
        except BlobStoreError as e:
            raise StorageError(str(e)) from e

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to decode {key}: {e}") from e

        if not is_valid_prompt_structure(data):
            raise StorageError(f"Invalid prompt structure in {key}")
        return prompt_from_dict(data)

    @staticmethod
    def _require_id(prompt_id: str | None) -> str:
        if not prompt_id or not prompt_id.strip():
            raise ValidationError("Prompt ID is required")
        return prompt_id

    @staticmethod
    def _require_name(name: str | None) -> str:
        if not name or not name.strip():
            raise ValidationError("Prompt name is required")
        return name.strip()

    @staticmethod
    def _require_messages(messages: Any) -> list[PromptMessage]:
        if not isinstance(messages, list) or not messages:
            raise ValidationError("At least one message is required")
        if not validate_messages(messages):
            raise ValidationError("Invalid message structure")
        return messages_from_dicts(messages)

    # --- operations ---

    async def add_prompt(
        self,
        name: str,
        content: str,
        description: str | None = None,
    ) -> SingleContentPrompt:
        """
        Create a single-content prompt.

        Args:
            name: Display name (trimmed)
            content: Template text with ``{{variable}}`` placeholders
            description: Optional description (trimmed)

        Returns:
            The stored prompt

        Raises:
            ValidationError: If name or content is blank
            StorageError: If the prompt cannot be written
        """
        clean_name = self._require_name(name)
        if not content or not content.strip():
            raise ValidationError("Prompt content is required")

        prompt = SingleContentPrompt(
            id=generate_prompt_id(),
            name=clean_name,
            content=content,
            description=(description or "").strip(),
            variables=extract_variables(content),
            created_at=_now(),
        )
        await self._save(prompt)
        logger.info(f"Created prompt {prompt.id} ({prompt.name})")
        return prompt

    async def add_multi_message_prompt(
        self,
        name: str,
        messages: list[dict[str, Any]],
        description: str | None = None,
    ) -> MultiMessagePrompt:
        """
        Create a multi-message prompt.

        Args:
            name: Display name (trimmed)
            messages: Role-tagged messages; at least one is required
            description: Optional description (trimmed)

        Returns:
            The stored prompt

        Raises:
            ValidationError: If name is blank or messages are empty/invalid
            StorageError: If the prompt cannot be written
        """
        clean_name = self._require_name(name)
        prompt_messages = self._require_messages(messages)

        prompt = MultiMessagePrompt(
            id=generate_prompt_id(),
            name=clean_name,
            messages=prompt_messages,
            description=(description or "").strip(),
            variables=extract_variables_from_messages(prompt_messages),
            created_at=_now(),
        )
        await self._save(prompt)
        logger.info(
            f"Created multi-message prompt {prompt.id} ({prompt.name}, "
            f"{len(prompt.messages)} messages)"
        )
        return prompt

    async def get_prompt(self, prompt_id: str) -> Prompt:
        """
        Get a prompt by ID.

        Raises:
            ValidationError: If prompt_id is blank
            PromptNotFoundError: If no prompt is stored under prompt_id
            StorageError: If the stored record is unreadable or invalid
        """
        self._require_id(prompt_id)
        try:
            return await self._load(self._key(prompt_id))
        except BlobNotFoundError as e:
            raise PromptNotFoundError(prompt_id) from e

    async def list_prompts(self) -> list[Prompt]:
        """
        List all stored prompts in storage enumeration order.

        Unreadable or invalid records are skipped and logged.

        Raises:
            StorageError: If the prompts directory cannot be listed
        """
        try:
            keys = await self.store.list_keys(BLOB_SUFFIX)
        except BlobStoreError as e:
            logger.error(f"Failed to list prompts: {e}")
            raise StorageError(str(e)) from e

        prompts: list[Prompt] = []
        for key in keys:
            try:
                prompts.append(await self._load(key))
            except (BlobStoreError, StorageError, KeyError, TypeError) as e:
                logger.warning(f"Skipping unreadable prompt file {key}: {e}")
        return prompts

    async def find_prompt_by_name(self, name: str) -> Prompt | None:
        """Return the first listed prompt with the given display name."""
        for prompt in await self.list_prompts():
            if prompt.name == name:
                return prompt
        return None

    async def delete_prompt(self, prompt_id: str) -> DeletePromptResult:
        """
        Delete a prompt.

        Raises:
            ValidationError: If prompt_id is blank
            PromptNotFoundError: If no prompt is stored under prompt_id
        """
        await self.get_prompt(prompt_id)

        try:
            await self.store.delete(self._key(prompt_id))
        except BlobNotFoundError as e:
            raise PromptNotFoundError(prompt_id) from e
        except BlobStoreError as e:
            logger.error(f"Failed to delete prompt {prompt_id}: {e}")
            raise StorageError(str(e)) from e

        logger.info(f"Deleted prompt {prompt_id}")
        return DeletePromptResult(success=True, message=f"Prompt {prompt_id} deleted successfully")

    async def update_prompt(
        self,
        prompt_id: str,
        name: str | None = None,
        description: str | None = None,
        messages: list[dict[str, Any]] | None = None,
    ) -> UpdatePromptResult:
        """
        Update a prompt, converting single-content prompts when messages are given.

        Args:
            prompt_id: ID of the prompt to update
            name: New display name
            description: New description
            messages: New messages; on a single-content prompt this converts
                it to the multi-message format

        Returns:
            UpdatePromptResult with the full updated prompt

        Raises:
            ValidationError: If nothing to update is supplied, the name is
                blank, or the messages are empty/invalid
            PromptNotFoundError: If the prompt does not exist
        """
        self._require_id(prompt_id)
        if name is None and description is None and messages is None:
            raise ValidationError("At least one field to update must be provided")

        new_name = self._require_name(name) if name is not None else None
        new_description = description.strip() if description is not None else None
        new_messages = self._require_messages(messages) if messages is not None else None

        existing = await self.get_prompt(prompt_id)
        now = _now()

        updated: Prompt
        if isinstance(existing, MultiMessagePrompt):
            updated = MultiMessagePrompt(
                id=existing.id,
                name=new_name if new_name is not None else existing.name,
                description=(
                    new_description if new_description is not None else existing.description
                ),
                messages=new_messages if new_messages is not None else existing.messages,
                variables=(
                    extract_variables_from_messages(new_messages)
                    if new_messages is not None
                    else existing.variables
                ),
                created_at=existing.created_at,
                updated_at=now,
            )
        elif isinstance(existing, SingleContentPrompt):
            if new_messages is not None:
                updated = MultiMessagePrompt(
                    id=existing.id,
                    name=new_name if new_name is not None else existing.name,
                    description=(
                        new_description if new_description is not None else existing.description
                    ),
                    messages=new_messages,
                    variables=extract_variables_from_messages(new_messages),
                    created_at=existing.created_at,
                    updated_at=now,
                )
                logger.info(f"Converted prompt {prompt_id} to multi-message format")
            else:
                updated = SingleContentPrompt(
                    id=existing.id,
                    name=new_name if new_name is not None else existing.name,
                    description=(
                        new_description if new_description is not None else existing.description
                    ),
                    content=existing.content,
                    variables=existing.variables,
                    created_at=existing.created_at,
                    updated_at=now,
                )
        else:
            raise TypeError(f"Unsupported prompt type: {type(existing).__name__}")

        await self._save(updated)
        return UpdatePromptResult(
            success=True,
            message=f"Prompt {prompt_id} updated successfully",
            prompt=updated,
        )

    async def apply_prompt(self, prompt_id: str, variables: Mapping[str, Any]) -> ApplyPromptResult:
        """
        Substitute variable values into a prompt.

        Args:
            prompt_id: ID of the prompt to apply
            variables: Mapping of variable name to value

        Returns:
            ApplyPromptResult; for multi-message prompts ``messages`` holds the
            substituted messages and ``result`` their JSON rendering

        Raises:
            ValidationError: If variables is not a mapping
            MissingVariablesError: If any derived variable has no value
            PromptNotFoundError: If the prompt does not exist
        """
        self._require_id(prompt_id)
        if not isinstance(variables, Mapping):
            raise ValidationError("Variables must be provided as an object")

        prompt = await self.get_prompt(prompt_id)

        missing = [name for name in prompt.variables if name not in variables]
        if missing:
            raise MissingVariablesError(missing)

        if isinstance(prompt, MultiMessagePrompt):
            applied = substitute_messages(prompt.messages, variables)
            rendered = json.dumps([m.to_dict() for m in applied], indent=2, ensure_ascii=False)
            return ApplyPromptResult(result=rendered, messages=applied)
        if isinstance(prompt, SingleContentPrompt):
            return ApplyPromptResult(result=substitute(prompt.content, variables))
        raise TypeError(f"Unsupported prompt type: {type(prompt).__name__}")
