"""Token substitution.

The renderer trusts its caller to have validated the token set: it never
re-checks placeholders and never touches the filesystem.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path, PurePath

from jinja2 import TemplateError

from stencil.engine.document import TemplateDocument
from stencil.engine.models import OutputPattern, RenderResult
from stencil.engine.syntax import MarkerStyle, jinja_environment
from stencil.exceptions import InvalidTargetError, MalformedTemplateError

__all__ = ["Renderer"]


class Renderer:
    """Substitutes token values into parsed documents.

    Substitution is literal and single-pass: each marker is replaced by its
    value verbatim, and values are never scanned for further markers. The
    same document and tokens always produce identical text.
    """

    def render(
        self,
        doc: TemplateDocument,
        tokens: Mapping[str, str],
        output_path: Path,
    ) -> RenderResult:
        """Render *doc* for *output_path*.

        Args:
            doc: Parsed template.
            tokens: Validated placeholder values.
            output_path: Target path recorded on the result.

        Returns:
            RenderResult with the substituted text.

        Raises:
            MalformedTemplateError: If a jinja template fails while rendering.
        """
        return RenderResult(
            template=doc.name,
            text=self.render_text(doc, tokens),
            output_path=output_path,
        )

    def render_text(self, doc: TemplateDocument, tokens: Mapping[str, str]) -> str:
        """Substitute *tokens* into *doc* and return the text.

        Raises:
            MalformedTemplateError: If a jinja template fails while rendering,
                e.g. an undefined attribute or a missing include.
        """
        if doc.syntax.style is MarkerStyle.JINJA:
            try:
                template = jinja_environment(doc.syntax).from_string(doc.text)
                return template.render(
                    **{name: tokens[name] for name in doc.placeholders}
                )
            except (TemplateError, TypeError, ValueError, ArithmeticError) as e:
                raise MalformedTemplateError(
                    doc.name,
                    f"{type(e).__name__}: {e}",
                    line=getattr(e, "lineno", None),
                ) from e

        parts: list[str] = []
        pos = 0
        for marker in doc.markers:
            parts.append(doc.text[pos : marker.start])
            parts.append(tokens[marker.name])
            pos = marker.end
        parts.append(doc.text[pos:])
        return "".join(parts)

    def render_name(self, output: OutputPattern, tokens: Mapping[str, str]) -> Path:
        """Resolve an output pattern to a concrete path.

        ``FEATUREViewController.swift`` with ``FEATURE=Login`` becomes
        ``<directory>/LoginViewController.swift``.

        Raises:
            InvalidTargetError: If the rendered name is empty, absolute, or
                has a ``..`` part.
            MalformedTemplateError: If a jinja pattern fails while rendering.
        """
        name = self.render_text(output.pattern, tokens)
        reason = unsafe_name_reason(name)
        if reason is not None:
            raise InvalidTargetError(output.pattern.name, name, reason)
        return output.directory / name


def unsafe_name_reason(name: str) -> str | None:
    """Why *name* cannot be joined onto an output directory, or None."""
    path = PurePath(name)
    if not name or not path.parts:
        return "name is empty"
    if path.is_absolute() or path.anchor:
        return "name is absolute"
    if ".." in path.parts:
        return "name has a '..' part"
    return None
