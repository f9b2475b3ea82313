from __future__ import annotations

import contextlib
from collections.abc import Generator

import click

from stencil.cli.context import ExitCode
from stencil.cli.output import format_error
from stencil.exceptions import (
    ConfigError,
    KitNotFoundError,
    StencilError,
    TokenParseError,
)
from stencil.logging import get_logger


@contextlib.contextmanager
def cli_error_handler() -> Generator[None, None, None]:
    """Context manager for common CLI error handling.

    Handles common error patterns across CLI commands:
    - KeyboardInterrupt: Exit with code 130
    - KitNotFoundError: List the available kits
    - ConfigError: Format error with the offending field
    - StencilError: Format error with message
    - Generic exceptions: Log and format error

    Example:
        >>> with cli_error_handler():
        >>>     service.scaffold(request)
    """
    logger = get_logger(__name__)

    try:
        yield
    except KeyboardInterrupt:
        click.echo("\n\nInterrupted by user.", err=True)
        raise SystemExit(ExitCode.INTERRUPTED) from None
    except KitNotFoundError as e:
        error_msg = format_error(
            e.message,
            details=[f"Available: {', '.join(e.available)}"] if e.available else None,
            suggestion="Run 'stencil kits' or pass a template directory",
        )
        click.echo(error_msg, err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except ConfigError as e:
        error_msg = format_error(
            e.message,
            details=[f"Field: {e.field}"] if e.field else None,
        )
        click.echo(error_msg, err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except TokenParseError as e:
        error_msg = format_error(
            e.message,
            suggestion="Pass tokens as -t KEY=VALUE",
        )
        click.echo(error_msg, err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except StencilError as e:
        error_msg = format_error(e.message)
        click.echo(error_msg, err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except Exception as e:
        logger.exception("Unexpected error in command")
        click.echo(f"Error: {e!s}", err=True)
        raise SystemExit(ExitCode.FAILURE) from e
