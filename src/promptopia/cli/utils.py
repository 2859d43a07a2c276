"""Shared helpers for CLI commands."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from promptopia.config.app import LoggingSettings, PromptopiaConfig
from promptopia.errors import StorageError
from promptopia.storage.prompts import LocalPromptManager


def setup_logging(settings: LoggingSettings, verbose: bool = False) -> None:
    """
    Configure logging for the CLI and the stdio server.

    Records go to stderr because stdout carries the MCP stream.

    Args:
        settings: Logging settings from configuration
        verbose: If True, force DEBUG level logging
    """
    log_level = logging.DEBUG if verbose else getattr(logging, settings.level.upper())

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.file:
        log_file = Path(settings.file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format=settings.format,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )

    # Silence noisy third-party loggers
    logging.getLogger("watchfiles").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.WARNING)


def get_prompt_manager(ctx: click.Context) -> LocalPromptManager:
    """Build a prompt manager from the context config, creating the prompts directory."""
    config: PromptopiaConfig = ctx.obj["config"]
    manager = LocalPromptManager(config.get_prompts_path())
    try:
        asyncio.run(manager.initialize())
    except StorageError as e:
        fail(str(e))
    return manager


def fail(message: str) -> None:
    """Print an error to stderr and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)
