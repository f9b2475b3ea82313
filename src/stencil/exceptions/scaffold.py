"""Scaffolding exceptions raised on behalf of reported issues."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from stencil.exceptions.base import StencilError

if TYPE_CHECKING:
    from stencil.engine.errors import ScaffoldIssue


class ScaffoldValidationError(StencilError):
    """A render batch failed validation before anything was written.

    The engine itself never raises this; it reports issues in its outcome.
    Callers that prefer exceptions use :meth:`EngineOutcome.raise_for_errors`.

    Attributes:
        issues: Every validation issue found, in report order.
    """

    def __init__(self, issues: Sequence[ScaffoldIssue]) -> None:
        self.issues = tuple(issues)
        summary = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"Scaffold validation failed: {summary}")


class ScaffoldWriteError(StencilError):
    """Writing a render batch stopped part-way.

    Attributes:
        issues: Write-phase issues.
        written: Paths already written before the failure.
    """

    def __init__(
        self, issues: Sequence[ScaffoldIssue], written: Sequence[str]
    ) -> None:
        self.issues = tuple(issues)
        self.written = tuple(written)
        summary = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"Scaffold write failed: {summary}")


class InvalidTargetError(StencilError):
    """A rendered output name would escape its output directory.

    Attributes:
        template: Logical name of the template being placed.
        name: The rendered output name.
        reason: Why the name was rejected.
    """

    def __init__(self, template: str, name: str, reason: str) -> None:
        self.template = template
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid output name {name!r} for {template}: {reason}")
