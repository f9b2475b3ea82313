"""Parsed template documents.

A :class:`TemplateDocument` is the immutable, parsed form of one template's
text: the raw text, the syntax it was parsed with, the distinct placeholder
names it references, and the location of every marker.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from jinja2 import TemplateSyntaxError, meta

from stencil.engine.syntax import (
    MarkerStyle,
    PlaceholderSyntax,
    is_valid_placeholder_name,
    jinja_environment,
)
from stencil.exceptions import MalformedTemplateError, TemplateLoadError
from stencil.logging import get_logger

__all__ = ["Marker", "TemplateDocument"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Marker:
    """One placeholder occurrence.

    Attributes:
        name: Placeholder name.
        start: Offset of the first character of the marker.
        end: Offset just past the marker (delimiters included).
    """

    name: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class TemplateDocument:
    """Immutable parsed template.

    Build instances with :meth:`parse` or :meth:`load`; the constructor does
    not scan the text.

    Attributes:
        name: Logical template name used in reports.
        text: Raw template text.
        syntax: Syntax the text was parsed with.
        placeholders: Distinct placeholder names referenced by the text.
        markers: Marker locations in text order (empty for JINJA).
    """

    name: str
    text: str
    syntax: PlaceholderSyntax
    placeholders: frozenset[str]
    markers: tuple[Marker, ...] = ()

    @classmethod
    def parse(
        cls,
        raw_text: str,
        syntax: PlaceholderSyntax,
        *,
        name: str = "<string>",
    ) -> TemplateDocument:
        """Parse template text under *syntax*.

        Args:
            raw_text: Template text.
            syntax: Marker convention for the batch.
            name: Logical name used in error messages.

        Returns:
            The parsed document.

        Raises:
            MalformedTemplateError: If a marker is unclosed, holds an invalid
                or undeclared name, or the Jinja2 source does not parse.
        """
        if syntax.style is MarkerStyle.BARE:
            markers = _scan_bare(raw_text, syntax)
            placeholders = frozenset(m.name for m in markers)
        elif syntax.style is MarkerStyle.BRACES:
            markers = _scan_braces(raw_text, syntax, name)
            placeholders = frozenset(m.name for m in markers)
        else:
            markers = ()
            placeholders = _scan_jinja(raw_text, syntax, name)

        logger.debug(
            "template_parsed",
            template=name,
            style=syntax.style.value,
            placeholders=sorted(placeholders),
        )
        return cls(
            name=name,
            text=raw_text,
            syntax=syntax,
            placeholders=placeholders,
            markers=markers,
        )

    @classmethod
    def load(
        cls,
        path: Path,
        syntax: PlaceholderSyntax,
        *,
        name: str | None = None,
    ) -> TemplateDocument:
        """Read and parse a UTF-8 template file.

        Raises:
            TemplateLoadError: If the file cannot be read or decoded.
            MalformedTemplateError: If the text does not parse.
        """
        try:
            raw_text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateLoadError(path, str(e)) from e
        return cls.parse(raw_text, syntax, name=name or path.name)


def _position(text: str, offset: int) -> tuple[int, int]:
    """1-based (line, column) of *offset* in *text*."""
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


def _vocabulary_regex(vocabulary: frozenset[str]) -> re.Pattern[str]:
    # Longest first so FEATURE_NAME wins over FEATURE at the same offset
    words = sorted(vocabulary, key=lambda w: (-len(w), w))
    return re.compile("|".join(re.escape(w) for w in words))


def _scan_bare(text: str, syntax: PlaceholderSyntax) -> tuple[Marker, ...]:
    regex = _vocabulary_regex(syntax.vocabulary)
    return tuple(
        Marker(name=m.group(0), start=m.start(), end=m.end())
        for m in regex.finditer(text)
    )


def _scan_braces(
    text: str, syntax: PlaceholderSyntax, template: str
) -> tuple[Marker, ...]:
    markers: list[Marker] = []
    pos = 0
    while True:
        start = text.find(syntax.open, pos)
        if start == -1:
            break
        inner_start = start + len(syntax.open)
        end = text.find(syntax.close, inner_start)
        if end == -1:
            line, column = _position(text, start)
            raise MalformedTemplateError(
                template,
                f"'{syntax.open}' is never closed",
                line=line,
                column=column,
            )

        placeholder = text[inner_start:end].strip()
        if not is_valid_placeholder_name(placeholder):
            line, column = _position(text, start)
            raise MalformedTemplateError(
                template,
                f"invalid placeholder name {placeholder!r}",
                line=line,
                column=column,
            )
        if not syntax.declares(placeholder):
            line, column = _position(text, start)
            raise MalformedTemplateError(
                template,
                f"placeholder '{placeholder}' is not in the declared vocabulary",
                line=line,
                column=column,
            )

        pos = end + len(syntax.close)
        markers.append(Marker(name=placeholder, start=start, end=pos))
    return tuple(markers)


def _scan_jinja(text: str, syntax: PlaceholderSyntax, template: str) -> frozenset[str]:
    env = jinja_environment(syntax)
    try:
        ast = env.parse(text)
    except TemplateSyntaxError as e:
        raise MalformedTemplateError(template, e.message or str(e), line=e.lineno) from e

    names = frozenset(meta.find_undeclared_variables(ast))
    undeclared = sorted(n for n in names if not syntax.declares(n))
    if undeclared:
        raise MalformedTemplateError(
            template,
            f"placeholders not in the declared vocabulary: {', '.join(undeclared)}",
            line=None,
        )
    return names
