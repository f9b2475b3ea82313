"""Output formatting utilities for Stencil CLI.

This module defines output format options and formatting helpers for CLI commands.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

__all__ = [
    "OutputFormat",
    "format_error",
    "format_success",
    "format_warning",
    "format_json",
]


class OutputFormat(str, Enum):
    """Supported output formats for CLI commands.

    Values:
        TABLE: Rich table for terminals.
        JSON: Machine-readable JSON output.
    """

    TABLE = "table"
    JSON = "json"


def format_error(
    message: str, details: list[str] | None = None, suggestion: str | None = None
) -> str:
    """Format an error message with optional details and suggestion.

    Args:
        message: Primary error message.
        details: Optional list of detail lines to include.
        suggestion: Optional suggestion for resolving the error.

    Returns:
        Formatted error string with details and suggestion if provided.

    Example:
        >>> result = format_error(
        ...     "Template kit not found: uikt",
        ...     details=["Available: uikit"],
        ...     suggestion="Run 'stencil kits'"
        ... )
        >>> print(result)
        Error: Template kit not found: uikt
          Available: uikit
        Suggestion: Run 'stencil kits'
    """
    lines = [f"Error: {message}"]

    if details:
        for detail in details:
            lines.append(f"  {detail}")

    if suggestion:
        lines.append(f"Suggestion: {suggestion}")

    return "\n".join(lines)


def format_success(message: str) -> str:
    """Format a success message.

    Example:
        >>> format_success("Wrote 2 files")
        'Success: Wrote 2 files'
    """
    return f"Success: {message}"


def format_warning(message: str) -> str:
    """Format a warning message.

    Example:
        >>> format_warning("Skipped 1 existing file")
        'Warning: Skipped 1 existing file'
    """
    return f"Warning: {message}"


def format_json(data: Any) -> str:
    """Format data as indented JSON.

    Args:
        data: Any JSON-serializable data structure.

    Returns:
        Formatted JSON string with 2-space indentation.

    Raises:
        TypeError: If data is not JSON-serializable.
    """
    return json.dumps(data, indent=2)
