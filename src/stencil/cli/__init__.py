"""CLI utilities for Stencil.

This module provides CLI-specific utilities including context management
and output formatting.
"""

from __future__ import annotations

from stencil.cli.context import CLIContext, ExitCode
from stencil.cli.output import OutputFormat

__all__ = [
    "CLIContext",
    "ExitCode",
    "OutputFormat",
]
