"""Stencil - placeholder-substitution scaffolding for source templates."""

from __future__ import annotations

from stencil.engine import (
    ConflictPolicy,
    EngineOutcome,
    PlaceholderSyntax,
    ScaffoldEngine,
    TemplateDocument,
    TokenSet,
)
from stencil.library import ScaffoldRequest, ScaffoldService

__version__ = "0.1.0"

__all__ = [
    "ConflictPolicy",
    "EngineOutcome",
    "PlaceholderSyntax",
    "ScaffoldEngine",
    "ScaffoldRequest",
    "ScaffoldService",
    "TemplateDocument",
    "TokenSet",
    "__version__",
]
