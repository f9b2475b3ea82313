"""CLI entry point for Stencil.

This module defines the Click-based command-line interface for Stencil.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from dotenv import load_dotenv

# STENCIL_* variables from ./.env must be set before configuration loads
load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

from stencil import __version__  # noqa: E402
from stencil.cli.commands.kits import inspect, kits  # noqa: E402
from stencil.cli.commands.render import render  # noqa: E402
from stencil.cli.context import CLIContext, ExitCode  # noqa: E402
from stencil.config import load_config  # noqa: E402
from stencil.exceptions import ConfigError  # noqa: E402
from stencil.logging import configure_logging  # noqa: E402

_VERBOSITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="stencil")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides ./stencil.yaml).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress non-essential output (ERROR level only).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    verbose: int,
    quiet: bool,
) -> None:
    """Stencil - render source templates into new files."""
    ctx.ensure_object(dict)

    # Load configuration first (before logging setup)
    config_path = Path(config_file) if config_file else None
    try:
        config = load_config(config_path)
    except ConfigError as e:
        # Can't use logging yet, just output error
        error_parts = [f"Error: {e.message}"]
        if e.field:
            error_parts.append(f"  Field: {e.field}")
        if e.value is not None:
            error_parts.append(f"  Value: {e.value}")
        click.echo("\n".join(error_parts), err=True)
        ctx.exit(ExitCode.FAILURE)

    ctx.obj["cli_ctx"] = CLIContext(
        config=config,
        config_path=config_path,
        verbosity=verbose,
        quiet=quiet,
    )

    # Priority: quiet > verbose > config
    if quiet:
        level = logging.ERROR
    elif verbose > 0:
        level = logging.INFO if verbose == 1 else logging.DEBUG
    else:
        level = _VERBOSITY_LEVELS.get(config.verbosity, logging.WARNING)

    configure_logging(level=level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(render)
cli.add_command(kits)
cli.add_command(inspect)

if __name__ == "__main__":
    cli()
