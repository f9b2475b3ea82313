"""CLI commands for listing and inspecting template kits."""

from __future__ import annotations

from typing import Any

import click
from rich.markup import escape
from rich.table import Table

from stencil.cli.common import cli_error_handler
from stencil.cli.console import console
from stencil.cli.context import CLIContext
from stencil.cli.output import OutputFormat, format_json
from stencil.library import ScaffoldService, TemplateKit

_FORMAT_OPTION = click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TABLE.value,
    help="Output format.",
)


def _kit_to_dict(kit: TemplateKit) -> dict[str, Any]:
    return {
        "name": kit.name,
        "description": kit.description,
        "root": str(kit.root),
        "builtin": kit.builtin,
        "syntax": kit.syntax.describe(),
        "placeholders": sorted(kit.placeholders()),
        "templates": [
            {"source": t.source.relative_to(kit.root).as_posix(), "output": t.output}
            for t in kit.templates
        ],
    }


@click.command("kits")
@_FORMAT_OPTION
@click.pass_context
def kits(ctx: click.Context, fmt: str) -> None:
    """List built-in template kits.

    Examples:
        stencil kits
        stencil kits --format json
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    service = ScaffoldService(config=cli_ctx.config)

    with cli_error_handler():
        found = [_kit_to_dict(kit) for kit in service.list_kits()]

    if fmt == OutputFormat.JSON.value:
        click.echo(format_json(found))
        return

    if not found:
        click.echo("No template kits installed")
        return

    table = Table(title="Template kits")
    for header in ("Name", "Syntax", "Placeholders", "Description"):
        table.add_column(header)
    for kit in found:
        table.add_row(
            escape(kit["name"]),
            escape(kit["syntax"]),
            ", ".join(kit["placeholders"]),
            escape(kit["description"]) or "(no description)",
        )
    console.print(table)


@click.command("inspect")
@click.argument("kit")
@_FORMAT_OPTION
@click.pass_context
def inspect(ctx: click.Context, kit: str, fmt: str) -> None:
    """Show a kit's syntax, placeholders and templates.

    KIT is a built-in kit name or a template directory.

    Examples:
        stencil inspect uikit
        stencil inspect ./templates --format json
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    service = ScaffoldService(config=cli_ctx.config)

    with cli_error_handler():
        info = _kit_to_dict(service.load_kit(kit))

    if fmt == OutputFormat.JSON.value:
        click.echo(format_json(info))
        return

    console.print(f"[bold]{escape(info['name'])}[/bold]", highlight=False)
    if info["description"]:
        console.print(info["description"], markup=False, highlight=False)
    console.print(f"Syntax: {info['syntax']}", markup=False, highlight=False)
    console.print(
        f"Placeholders: {', '.join(info['placeholders']) or '(none)'}",
        markup=False,
        highlight=False,
    )

    table = Table(title="Templates")
    table.add_column("Source")
    table.add_column("Output")
    for template in info["templates"]:
        table.add_row(escape(template["source"]), escape(template["output"]))
    console.print(table)
