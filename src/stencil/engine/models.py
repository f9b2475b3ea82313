"""Typed models for render batches and their outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from stencil.engine.document import TemplateDocument
from stencil.engine.errors import IssueKind, ScaffoldIssue
from stencil.exceptions import ScaffoldValidationError, ScaffoldWriteError

__all__ = [
    "ConflictPolicy",
    "FileStatus",
    "OutputPattern",
    "RenderResult",
    "FileOutcome",
    "EngineOutcome",
]


class ConflictPolicy(str, Enum):
    """What to do when an output path already exists.

    Values:
        OVERWRITE: Replace the existing file.
        SKIP: Leave the existing file untouched and record it as skipped.
        FAIL: Stop writing and report the existing path.
    """

    OVERWRITE = "overwrite"
    SKIP = "skip"
    FAIL = "fail"


class FileStatus(str, Enum):
    """Per-document status in an engine outcome."""

    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"
    NOT_WRITTEN = "not_written"
    PREVIEWED = "previewed"


@dataclass(frozen=True, slots=True)
class OutputPattern:
    """Output path derived by substituting tokens into a name pattern.

    Attributes:
        directory: Directory the rendered name is joined onto.
        pattern: Parsed name pattern, e.g. ``FEATUREViewController.swift``.
    """

    directory: Path
    pattern: TemplateDocument


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Rendered text bound for one output path.

    Attributes:
        template: Logical name of the originating document.
        text: Fully substituted text.
        output_path: Where the text will be written.
    """

    template: str
    text: str
    output_path: Path


@dataclass(frozen=True, slots=True)
class FileOutcome:
    """What happened to one document in a batch.

    Attributes:
        template: Logical name of the document.
        path: Output path, or None if the batch stopped before it was known.
        status: Final status.
        issue: The issue that failed this file, if any.
        content: Rendered text (preview runs only).
    """

    template: str
    path: Path | None
    status: FileStatus
    issue: ScaffoldIssue | None = None
    content: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "template": self.template,
            "path": str(self.path) if self.path is not None else None,
            "status": self.status.value,
            "error": self.issue.message if self.issue is not None else None,
        }


@dataclass(frozen=True, slots=True)
class EngineOutcome:
    """Summary of one render batch.

    Attributes:
        files: Per-document outcomes in batch order.
        issues: Every reported issue, in report order.
    """

    files: tuple[FileOutcome, ...] = ()
    issues: tuple[ScaffoldIssue, ...] = ()

    @property
    def ok(self) -> bool:
        """True when nothing failed (skipped files are not failures)."""
        return not self.issues

    @property
    def written(self) -> tuple[Path, ...]:
        return self._paths(FileStatus.WRITTEN)

    @property
    def skipped(self) -> tuple[Path, ...]:
        return self._paths(FileStatus.SKIPPED)

    @property
    def failed(self) -> tuple[Path, ...]:
        return self._paths(FileStatus.FAILED)

    @property
    def aborted(self) -> bool:
        return any(i.kind is IssueKind.ABORTED for i in self.issues)

    @property
    def validation_failed(self) -> bool:
        """True if the batch stopped before rendering or writing."""
        return any(i.kind.blocks_writes for i in self.issues)

    def _paths(self, status: FileStatus) -> tuple[Path, ...]:
        return tuple(
            f.path for f in self.files if f.status is status and f.path is not None
        )

    def raise_for_errors(self) -> None:
        """Raise if the batch reported issues.

        Raises:
            ScaffoldValidationError: For pre-write issues.
            ScaffoldWriteError: For write-phase issues or an abort.
        """
        if self.ok:
            return
        if self.validation_failed:
            raise ScaffoldValidationError(self.issues)
        raise ScaffoldWriteError(self.issues, [str(p) for p in self.written])

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "files": [f.to_dict() for f in self.files],
            "errors": [i.to_dict() for i in self.issues],
        }
