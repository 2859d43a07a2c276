"""
MCP server commands.
"""

import asyncio
import logging
import sys

import click

from promptopia.config.app import PromptopiaConfig

logger = logging.getLogger(__name__)


@click.command("serve")
@click.option("--no-watch", is_flag=True, help="Do not watch the prompts directory for changes")
@click.pass_context
def serve(ctx: click.Context, no_watch: bool) -> None:
    """
    Run the stdio MCP server.

    Example usage:
      claude mcp add --transport stdio promptopia -- promptopia serve
    """
    from promptopia.mcp_proxy.server import main as mcp_main

    config: PromptopiaConfig = ctx.obj["config"]
    if no_watch:
        config = config.model_copy(update={"watch_enabled": False})

    try:
        asyncio.run(mcp_main(config))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.error(f"MCP server failed: {e}")
        sys.exit(1)
