"""
Prompt templates with ``{{variable}}`` placeholders.

Provides:
- The two prompt variants (single content, multi-message)
- Variable extraction and substitution
- A watcher for the prompts directory
"""

from .models import (
    MULTI_MESSAGE_VERSION,
    MessageContent,
    MultiMessagePrompt,
    Prompt,
    PromptMessage,
    SingleContentPrompt,
    prompt_from_dict,
)
from .template import (
    extract_variables,
    extract_variables_from_messages,
    substitute,
    validate_messages,
)
from .watcher import PromptDirectoryWatcher

__all__ = [
    "MULTI_MESSAGE_VERSION",
    "MessageContent",
    "MultiMessagePrompt",
    "Prompt",
    "PromptDirectoryWatcher",
    "PromptMessage",
    "SingleContentPrompt",
    "extract_variables",
    "extract_variables_from_messages",
    "prompt_from_dict",
    "substitute",
    "validate_messages",
]
