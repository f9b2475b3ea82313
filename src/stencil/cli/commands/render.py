"""CLI command for stencil render.

Renders a template kit into an output directory, substituting placeholder
values given on the command line, in a tokens file, or in configuration.
"""

from __future__ import annotations

from pathlib import Path

import click
from click.core import ParameterSource
from rich.markup import escape
from rich.table import Table

from stencil.cli.common import cli_error_handler
from stencil.cli.console import console
from stencil.cli.context import CLIContext, ExitCode
from stencil.cli.output import (
    OutputFormat,
    format_error,
    format_json,
    format_success,
    format_warning,
)
from stencil.engine import ConflictPolicy, EngineOutcome, FileStatus, TokenSet
from stencil.library import ScaffoldRequest, ScaffoldService, TemplateKit
from stencil.logging import get_logger

logger = get_logger(__name__)

_STATUS_STYLES: dict[FileStatus, str] = {
    FileStatus.WRITTEN: "green",
    FileStatus.SKIPPED: "yellow",
    FileStatus.FAILED: "red",
    FileStatus.NOT_WRITTEN: "dim",
    FileStatus.PREVIEWED: "cyan",
}


@click.command()
@click.argument("kit")
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to write rendered files into (default from config).",
)
@click.option(
    "-t",
    "--token",
    "token_pairs",
    multiple=True,
    metavar="KEY=VALUE",
    help="Placeholder value; repeat for each placeholder.",
)
@click.option(
    "--tokens-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file mapping placeholder names to values.",
)
@click.option(
    "--on-conflict",
    type=click.Choice([p.value for p in ConflictPolicy]),
    default=None,
    help="What to do when an output file exists (default from config).",
)
@click.option(
    "--strict/--lenient",
    default=True,
    help="Reject (or ignore) tokens no template uses (default from config).",
)
@click.option(
    "--preview",
    is_flag=True,
    default=False,
    help="Render without writing and show the result.",
)
@click.option(
    "--prompt",
    "prompt_missing",
    is_flag=True,
    default=False,
    help="Ask for any placeholder without a value.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TABLE.value,
    help="Output format.",
)
@click.pass_context
def render(
    ctx: click.Context,
    kit: str,
    output_dir: Path | None,
    token_pairs: tuple[str, ...],
    tokens_file: Path | None,
    on_conflict: str | None,
    strict: bool,
    preview: bool,
    prompt_missing: bool,
    fmt: str,
) -> None:
    """Render a template kit.

    KIT is a built-in kit name or a template directory.

    Examples:
        stencil render uikit -t FEATURE=Login -t "TITLE=Sign In" -t DataType=User
        stencil render ./templates --tokens-file tokens.yaml -o src
        stencil render uikit --prompt --preview
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    config = cli_ctx.config
    service = ScaffoldService(config=config)

    with cli_error_handler():
        tokens = TokenSet()
        if tokens_file is not None:
            tokens = TokenSet.from_file(tokens_file)
        tokens = tokens.merged(TokenSet.from_pairs(token_pairs))

        if prompt_missing:
            tokens = _prompt_for_missing(service, service.load_kit(kit), tokens)

        request = ScaffoldRequest(
            kit=kit,
            tokens=tokens,
            output_dir=output_dir or config.output_dir,
            on_conflict=ConflictPolicy(on_conflict or config.on_conflict),
            strict=strict if _given(ctx, "strict") else config.strict,
        )
        logger.debug(
            "render_requested",
            kit=kit,
            output_dir=str(request.output_dir),
            policy=request.on_conflict.value,
            preview=preview,
        )
        outcome = service.preview(request) if preview else service.scaffold(request)

    if fmt == OutputFormat.JSON.value:
        click.echo(format_json(_outcome_to_json(outcome, include_content=preview)))
    else:
        _print_outcome(outcome, preview=preview, quiet=cli_ctx.quiet)

    if not outcome.ok:
        raise SystemExit(ExitCode.FAILURE)


def _prompt_for_missing(
    service: ScaffoldService, kit: TemplateKit, tokens: TokenSet
) -> TokenSet:
    """Ask for each placeholder still lacking a value, in name order."""
    resolved = service.resolve_tokens(kit, tokens)
    answers = {
        name: click.prompt(name, type=str)
        for name in sorted(kit.placeholders())
        if not resolved.get(name)
    }
    return tokens.merged(answers)


def _outcome_to_json(outcome: EngineOutcome, *, include_content: bool) -> dict:
    data = outcome.to_dict()
    if include_content:
        for entry, file in zip(data["files"], outcome.files, strict=True):
            entry["content"] = file.content
    return data


def _print_outcome(outcome: EngineOutcome, *, preview: bool, quiet: bool) -> None:
    if preview and outcome.ok:
        for file in outcome.files:
            console.rule(escape(str(file.path)))
            console.print(file.content, markup=False, highlight=False, end="")

    if outcome.files and not quiet:
        table = Table(title="Preview" if preview else "Rendered files")
        for header in ("Template", "Path", "Status"):
            table.add_column(header)
        for file in outcome.files:
            style = _STATUS_STYLES[file.status]
            table.add_row(
                escape(file.template),
                escape(str(file.path)) if file.path is not None else "-",
                f"[{style}]{file.status.value}[/{style}]",
            )
        console.print(table)

    for issue in outcome.issues:
        click.echo(format_error(issue.message), err=True)

    if outcome.written and not outcome.ok:
        # Earlier writes are kept when a later one fails
        click.echo(
            format_warning(
                "Files already written: "
                + ", ".join(str(p) for p in outcome.written)
            ),
            err=True,
        )
    elif outcome.ok and not preview and not quiet:
        message = f"Wrote {len(outcome.written)} file(s)"
        if outcome.skipped:
            message += f", skipped {len(outcome.skipped)} existing"
        click.echo(format_success(message))


def _given(ctx: click.Context, name: str) -> bool:
    """Whether *name* was set on the command line rather than defaulted."""
    return ctx.get_parameter_source(name) is not ParameterSource.DEFAULT
