"""CLI context and exit codes for Stencil."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from stencil.config import StencilConfig

__all__ = [
    "CLIContext",
    "ExitCode",
]


class ExitCode(IntEnum):
    """Standard exit codes for the Stencil CLI.

    - 0 for success
    - 1 for failure (validation, conflicts, write errors)
    - 130 for keyboard interrupt (128 + SIGINT=2)
    """

    SUCCESS = 0
    FAILURE = 1
    INTERRUPTED = 130


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Type-safe CLI context containing global options and configuration.

    Attributes:
        config: Loaded Stencil configuration.
        config_path: Path to config file (if specified via --config).
        verbosity: Verbosity level (0=default, 1=INFO, 2+=DEBUG).
        quiet: Suppress non-essential output.
    """

    config: StencilConfig
    config_path: Path | None = None
    verbosity: int = 0
    quiet: bool = False
