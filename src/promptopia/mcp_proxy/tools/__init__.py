"""Internal MCP tools."""

from promptopia.mcp_proxy.tools.internal import InternalTool, InternalToolRegistry
from promptopia.mcp_proxy.tools.prompts import PromptToolDispatcher, create_prompts_registry

__all__ = [
    "InternalTool",
    "InternalToolRegistry",
    "PromptToolDispatcher",
    "create_prompts_registry",
]
