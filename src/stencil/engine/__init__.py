"""Template scaffolding engine.

Parses templates into immutable documents, validates token sets against the
placeholders a batch needs, renders text, and writes results under a
conflict policy.

Example:
    ```python
    from stencil.engine import (
        ConflictPolicy,
        PlaceholderSyntax,
        ScaffoldEngine,
        TemplateDocument,
        TokenSet,
    )

    syntax = PlaceholderSyntax.braces()
    doc = TemplateDocument.parse("class {{FEATURE}}View {}", syntax, name="view")
    outcome = ScaffoldEngine().run(
        [(doc, Path("LoginView.swift"))],
        TokenSet({"FEATURE": "Login"}),
        ConflictPolicy.OVERWRITE,
    )
    ```
"""

from __future__ import annotations

from stencil.engine.document import Marker, TemplateDocument
from stencil.engine.engine import AbortSignal, ScaffoldEngine, Target
from stencil.engine.errors import (
    Aborted,
    DuplicateTarget,
    InvalidTarget,
    IssueKind,
    MalformedTemplate,
    MissingPlaceholder,
    ScaffoldIssue,
    TargetExists,
    UnknownPlaceholder,
    WriteFailure,
)
from stencil.engine.models import (
    ConflictPolicy,
    EngineOutcome,
    FileOutcome,
    FileStatus,
    OutputPattern,
    RenderResult,
)
from stencil.engine.renderer import Renderer
from stencil.engine.syntax import (
    MarkerStyle,
    PlaceholderSyntax,
    is_valid_placeholder_name,
)
from stencil.engine.tokens import TokenSet, ValidationOutcome

__all__ = [
    # Syntax
    "MarkerStyle",
    "PlaceholderSyntax",
    "is_valid_placeholder_name",
    # Documents and tokens
    "Marker",
    "TemplateDocument",
    "TokenSet",
    "ValidationOutcome",
    # Rendering
    "Renderer",
    "RenderResult",
    "OutputPattern",
    # Engine
    "AbortSignal",
    "ConflictPolicy",
    "EngineOutcome",
    "FileOutcome",
    "FileStatus",
    "ScaffoldEngine",
    "Target",
    # Issues
    "Aborted",
    "DuplicateTarget",
    "InvalidTarget",
    "IssueKind",
    "MalformedTemplate",
    "MissingPlaceholder",
    "ScaffoldIssue",
    "TargetExists",
    "UnknownPlaceholder",
    "WriteFailure",
]
