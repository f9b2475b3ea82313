"""Reported scaffolding issues.

Issues are values, not exceptions: the engine collects them into its
outcome so a batch can report every problem at once. Each failure kind has
its own type.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

__all__ = [
    "IssueKind",
    "ScaffoldIssue",
    "MissingPlaceholder",
    "UnknownPlaceholder",
    "MalformedTemplate",
    "DuplicateTarget",
    "InvalidTarget",
    "TargetExists",
    "WriteFailure",
    "Aborted",
]


class IssueKind(str, Enum):
    """Distinct failure kinds a render batch can report."""

    MISSING_PLACEHOLDER = "missing_placeholder"
    UNKNOWN_PLACEHOLDER = "unknown_placeholder"
    MALFORMED_TEMPLATE = "malformed_template"
    DUPLICATE_TARGET = "duplicate_target"
    INVALID_TARGET = "invalid_target"
    TARGET_EXISTS = "target_exists"
    WRITE_FAILURE = "write_failure"
    ABORTED = "aborted"

    @property
    def blocks_writes(self) -> bool:
        """True for kinds detected before any file is written."""
        return self in _PRE_WRITE_KINDS


_PRE_WRITE_KINDS = frozenset(
    {
        IssueKind.MISSING_PLACEHOLDER,
        IssueKind.UNKNOWN_PLACEHOLDER,
        IssueKind.MALFORMED_TEMPLATE,
        IssueKind.DUPLICATE_TARGET,
        IssueKind.INVALID_TARGET,
    }
)


@dataclass(frozen=True, slots=True)
class ScaffoldIssue(ABC):
    """Base class for reported issues."""

    kind: ClassVar[IssueKind]

    @property
    @abstractmethod
    def message(self) -> str: ...

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable representation including the issue's fields."""
        data: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Path):
                value = str(value)
            elif isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        return data


@dataclass(frozen=True, slots=True)
class MissingPlaceholder(ScaffoldIssue):
    """A required placeholder has no value, or an empty one."""

    name: str

    kind: ClassVar[IssueKind] = IssueKind.MISSING_PLACEHOLDER

    @property
    def message(self) -> str:
        return f"Missing value for placeholder '{self.name}'"


@dataclass(frozen=True, slots=True)
class UnknownPlaceholder(ScaffoldIssue):
    """A supplied token is not referenced by any template (strict mode)."""

    name: str

    kind: ClassVar[IssueKind] = IssueKind.UNKNOWN_PLACEHOLDER

    @property
    def message(self) -> str:
        return f"Token '{self.name}' is not used by any template"


@dataclass(frozen=True, slots=True)
class MalformedTemplate(ScaffoldIssue):
    """A template violates the marker convention."""

    template: str
    reason: str
    line: int | None = None
    column: int = 0

    kind: ClassVar[IssueKind] = IssueKind.MALFORMED_TEMPLATE

    @property
    def message(self) -> str:
        if self.line is None:
            return f"Malformed template '{self.template}': {self.reason}"
        where = f"{self.line}:{self.column}" if self.column else f"{self.line}"
        return f"Malformed template '{self.template}' at {where}: {self.reason}"


@dataclass(frozen=True, slots=True)
class DuplicateTarget(ScaffoldIssue):
    """Two or more templates render to the same output path."""

    path: Path
    templates: tuple[str, ...]

    kind: ClassVar[IssueKind] = IssueKind.DUPLICATE_TARGET

    @property
    def message(self) -> str:
        names = ", ".join(self.templates)
        return f"Templates {names} all render to {self.path}"


@dataclass(frozen=True, slots=True)
class InvalidTarget(ScaffoldIssue):
    """An output name resolves outside its output directory."""

    template: str
    name: str
    reason: str

    kind: ClassVar[IssueKind] = IssueKind.INVALID_TARGET

    @property
    def message(self) -> str:
        return f"Invalid output name {self.name!r} for {self.template}: {self.reason}"


@dataclass(frozen=True, slots=True)
class TargetExists(ScaffoldIssue):
    """Output path already exists under the ``fail`` conflict policy."""

    path: Path

    kind: ClassVar[IssueKind] = IssueKind.TARGET_EXISTS

    @property
    def message(self) -> str:
        return f"Output path already exists: {self.path}"


@dataclass(frozen=True, slots=True)
class WriteFailure(ScaffoldIssue):
    """An output file could not be written."""

    path: Path
    reason: str

    kind: ClassVar[IssueKind] = IssueKind.WRITE_FAILURE

    @property
    def message(self) -> str:
        return f"Failed to write {self.path}: {self.reason}"


@dataclass(frozen=True, slots=True)
class Aborted(ScaffoldIssue):
    """The caller's abort signal stopped the batch."""

    before: Path | None = None

    kind: ClassVar[IssueKind] = IssueKind.ABORTED

    @property
    def message(self) -> str:
        if self.before is None:
            return "Scaffold aborted before writing"
        return f"Scaffold aborted before writing {self.before}"
