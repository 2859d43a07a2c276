"""
Prompt management commands.

Operate directly on the prompts directory, without a running server.
"""

import asyncio
import json

import click

from promptopia.cli.utils import fail, get_prompt_manager
from promptopia.errors import PromptopiaError
from promptopia.prompts.models import MultiMessagePrompt


def _parse_assignments(assignments: tuple[str, ...]) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in assignments:
        if "=" not in item:
            raise click.BadParameter(f"expected NAME=VALUE, got '{item}'", param_hint="--var")
        name, value = item.split("=", 1)
        values[name] = value
    return values


@click.command("list")
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def list_prompts(ctx: click.Context, json_format: bool) -> None:
    """List stored prompts."""
    manager = get_prompt_manager(ctx)
    try:
        prompts = asyncio.run(manager.list_prompts())
    except PromptopiaError as e:
        fail(str(e))
        return

    if json_format:
        click.echo(json.dumps({"prompts": [p.to_dict() for p in prompts]}, indent=2))
        return

    if not prompts:
        click.echo("No prompts found.")
        return

    for prompt in prompts:
        kind = "multi-message" if isinstance(prompt, MultiMessagePrompt) else "single"
        variables = ", ".join(prompt.variables) or "-"
        click.echo(f"{prompt.id}  {prompt.name}  [{kind}]  variables: {variables}")


@click.command("show")
@click.argument("prompt_id")
@click.pass_context
def show_prompt(ctx: click.Context, prompt_id: str) -> None:
    """Show a prompt as JSON."""
    manager = get_prompt_manager(ctx)
    try:
        prompt = asyncio.run(manager.get_prompt(prompt_id))
    except PromptopiaError as e:
        fail(str(e))
        return
    click.echo(json.dumps(prompt.to_dict(), indent=2))


@click.command("apply")
@click.argument("prompt_id")
@click.option(
    "--var",
    "-v",
    "assignments",
    multiple=True,
    help="Variable value as NAME=VALUE (repeatable)",
)
@click.pass_context
def apply_prompt(ctx: click.Context, prompt_id: str, assignments: tuple[str, ...]) -> None:
    """Apply variable values to a prompt and print the result."""
    values = _parse_assignments(assignments)
    manager = get_prompt_manager(ctx)
    try:
        result = asyncio.run(manager.apply_prompt(prompt_id, values))
    except PromptopiaError as e:
        fail(str(e))
        return
    click.echo(result.result)


@click.command("delete")
@click.argument("prompt_id")
@click.pass_context
def delete_prompt(ctx: click.Context, prompt_id: str) -> None:
    """Delete a prompt."""
    manager = get_prompt_manager(ctx)
    try:
        result = asyncio.run(manager.delete_prompt(prompt_id))
    except PromptopiaError as e:
        fail(str(e))
        return
    click.echo(result.message)
