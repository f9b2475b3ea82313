"""Shared Rich Console for Stencil CLI output.

Styled output in terminals, plain text when piped.
"""

from __future__ import annotations

from rich.console import Console

__all__ = ["console"]

console = Console()
