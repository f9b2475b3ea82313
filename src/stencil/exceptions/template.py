"""Template parsing and loading exceptions."""

from __future__ import annotations

from pathlib import Path

from stencil.exceptions.base import StencilError


class TemplateError(StencilError):
    """Base exception for template problems.

    Attributes:
        template: Logical name of the template involved.
    """

    def __init__(self, message: str, *, template: str) -> None:
        self.template = template
        super().__init__(message)


class MalformedTemplateError(TemplateError):
    """Template text violates the placeholder marker convention.

    Raised for an opening delimiter with no closing delimiter, a braced
    marker holding an invalid or undeclared name, or a Jinja2 syntax error.

    Attributes:
        template: Logical name of the template.
        reason: What is wrong with the marker.
        line: 1-based line of the offending marker, None if unknown.
        column: 1-based column of the offending marker (0 if unknown).
    """

    def __init__(
        self,
        template: str,
        reason: str,
        *,
        line: int | None,
        column: int = 0,
    ) -> None:
        self.reason = reason
        self.line = line
        self.column = column
        if line is None:
            message = f"Malformed template '{template}': {reason}"
        else:
            where = f"{line}:{column}" if column else f"{line}"
            message = f"Malformed template '{template}' at {where}: {reason}"
        super().__init__(message, template=template)


class TemplateLoadError(TemplateError):
    """Template source could not be read.

    Attributes:
        path: Path of the unreadable template.
    """

    def __init__(self, path: Path, cause: str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(
            f"Failed to read template {path}: {cause}", template=path.name
        )
