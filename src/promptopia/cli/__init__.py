"""
Promptopia CLI entry point.
"""

import click

from promptopia.config.app import load_config

from .mcp import serve
from .prompts import apply_prompt, delete_prompt, list_prompts, show_prompt
from .utils import setup_logging


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to custom configuration file",
)
@click.option(
    "--prompts-dir",
    type=click.Path(file_okay=False),
    envvar="PROMPTS_DIR",
    help="Directory where prompts are stored",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, prompts_dir: str | None, verbose: bool) -> None:
    """Promptopia - MCP server for reusable prompt templates."""
    ctx.ensure_object(dict)
    try:
        app_config = load_config(config, cli_overrides={"prompts_dir": prompts_dir})
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    setup_logging(app_config.logging, verbose=verbose)
    ctx.obj["config"] = app_config


# Register commands
cli.add_command(serve)
cli.add_command(list_prompts)
cli.add_command(show_prompt)
cli.add_command(apply_prompt)
cli.add_command(delete_prompt)
