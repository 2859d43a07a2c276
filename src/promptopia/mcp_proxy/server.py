"""
Stdio MCP server implementation.

Serves the prompt tools and the stored prompts over stdio, and forwards
prompts directory changes to the client as
``notifications/prompts/list_changed``.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp import types
from mcp.server.lowlevel import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.session import ServerSession
from mcp.server.stdio import stdio_server

from promptopia.config.app import PromptopiaConfig
from promptopia.mcp_proxy.errors import to_mcp_error
from promptopia.mcp_proxy.prompts import get_mcp_prompt, to_mcp_prompt
from promptopia.mcp_proxy.tools.prompts import PromptToolDispatcher, create_prompts_registry
from promptopia.prompts.watcher import PromptDirectoryWatcher
from promptopia.storage.prompts import LocalPromptManager

__all__ = ["SERVER_NAME", "SERVER_VERSION", "PromptopiaServer"]

logger = logging.getLogger("promptopia.mcp.stdio")

SERVER_NAME = "promptopia-mcp"
SERVER_VERSION = "1.1.0"


class PromptopiaServer:
    """MCP server exposing the prompt store."""

    def __init__(self, config: PromptopiaConfig, manager: LocalPromptManager | None = None):
        self.config = config
        self.manager = manager or LocalPromptManager(config.get_prompts_path())
        self.dispatcher = PromptToolDispatcher(create_prompts_registry(self.manager))
        self.server: Server[Any, Any] = Server(SERVER_NAME, version=SERVER_VERSION)
        self.watcher: PromptDirectoryWatcher | None = None
        if config.watch_enabled:
            self.watcher = PromptDirectoryWatcher(self.manager.prompts_dir, self.send_list_changed)

        # Session of the connected client, known after its first request
        self._session: ServerSession | None = None

        self._setup_handlers()

    def _remember_session(self) -> None:
        try:
            self._session = self.server.request_context.session
        except LookupError:
            pass

    def _setup_handlers(self) -> None:
        server = self.server

        @server.list_tools()
        async def list_tools() -> list[types.Tool]:
            self._remember_session()
            return self.dispatcher.list_tools()

        # Arguments are coerced and validated by the tool registry
        @server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
            self._remember_session()
            return await self.dispatcher.call_tool(name, arguments)

        @server.list_prompts()
        async def list_prompts() -> list[types.Prompt]:
            self._remember_session()
            try:
                prompts = await self.manager.list_prompts()
            except Exception as e:
                raise to_mcp_error(e) from e
            return [to_mcp_prompt(p) for p in prompts]

        @server.get_prompt()
        async def get_prompt(
            name: str, arguments: dict[str, str] | None
        ) -> types.GetPromptResult:
            self._remember_session()
            try:
                return await get_mcp_prompt(self.manager, name, arguments)
            except Exception as e:
                raise to_mcp_error(e) from e

    def create_initialization_options(self) -> InitializationOptions:
        return self.server.create_initialization_options(
            notification_options=NotificationOptions(prompts_changed=True),
        )

    async def send_list_changed(self) -> None:
        """Notify the connected client that the prompt list changed."""
        if self._session is None:
            logger.debug("No client session yet, skipping prompts/list_changed")
            return
        try:
            await self._session.send_prompt_list_changed()
            logger.debug("Sent prompts/list_changed notification")
        except Exception as e:
            logger.error(f"Failed to send prompts list changed notification: {e}")

    async def run(self) -> None:
        """Run the server on stdio until the client disconnects."""
        await self.manager.initialize()
        if self.watcher is not None:
            await self.watcher.start()

        logger.info(f"{SERVER_NAME} MCP server running (v{SERVER_VERSION})")
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.create_initialization_options(),
                )
        finally:
            if self.watcher is not None:
                await self.watcher.stop()
            logger.info(f"{SERVER_NAME} MCP server stopped")


async def main(config: PromptopiaConfig) -> None:
    """Main entry point for the stdio MCP server."""
    await PromptopiaServer(config).run()
