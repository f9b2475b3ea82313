"""Placeholder marker conventions.

A :class:`PlaceholderSyntax` is the explicit configuration passed to
template parsing and token validation. It fixes how placeholders are
written in template text for one render batch.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from jinja2 import DictLoader, Environment, StrictUndefined

__all__ = [
    "MarkerStyle",
    "PlaceholderSyntax",
    "PLACEHOLDER_NAME_PATTERN",
    "is_valid_placeholder_name",
    "jinja_environment",
]

PLACEHOLDER_NAME_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"

_NAME_RE = re.compile(PLACEHOLDER_NAME_PATTERN)


class MarkerStyle(str, Enum):
    """How placeholders are marked in template text.

    Values:
        BARE: Bare words from a declared vocabulary (``FEATUREViewModel``).
        BRACES: Delimited names (``{{FEATURE}}``), literal substitution.
        JINJA: Jinja2 templates; placeholders are undeclared variables.
    """

    BARE = "bare"
    BRACES = "braces"
    JINJA = "jinja"


def is_valid_placeholder_name(name: str) -> bool:
    """Return True if *name* is a legal placeholder name."""
    return _NAME_RE.fullmatch(name) is not None


@dataclass(frozen=True, slots=True)
class PlaceholderSyntax:
    """Marker convention and declared vocabulary for one render batch.

    Attributes:
        style: Marker style applied to every template in the batch.
        vocabulary: Declared placeholder names. Required for BARE; when set
            for BRACES or JINJA, names outside it are rejected.
        open: Opening delimiter for BRACES and JINJA.
        close: Closing delimiter for BRACES and JINJA.

    Raises:
        ValueError: On an invalid vocabulary name, empty delimiters, or a
            BARE syntax without vocabulary.
    """

    style: MarkerStyle = MarkerStyle.BRACES
    vocabulary: frozenset[str] = field(default_factory=frozenset)
    open: str = "{{"
    close: str = "}}"

    def __post_init__(self) -> None:
        object.__setattr__(self, "style", MarkerStyle(self.style))
        object.__setattr__(self, "vocabulary", frozenset(self.vocabulary))

        bad = sorted(n for n in self.vocabulary if not is_valid_placeholder_name(n))
        if bad:
            raise ValueError(f"Invalid placeholder names in vocabulary: {bad}")
        if self.style is MarkerStyle.BARE and not self.vocabulary:
            raise ValueError("Bare marker style requires a declared vocabulary")
        if not self.open or not self.close:
            raise ValueError("Placeholder delimiters cannot be empty")

    @classmethod
    def bare(cls, vocabulary: Iterable[str]) -> PlaceholderSyntax:
        """Bare-word syntax over *vocabulary*."""
        return cls(style=MarkerStyle.BARE, vocabulary=frozenset(vocabulary))

    @classmethod
    def braces(
        cls,
        vocabulary: Iterable[str] = (),
        *,
        open: str = "{{",
        close: str = "}}",
    ) -> PlaceholderSyntax:
        """Delimited syntax, optionally restricted to *vocabulary*."""
        return cls(
            style=MarkerStyle.BRACES,
            vocabulary=frozenset(vocabulary),
            open=open,
            close=close,
        )

    @classmethod
    def jinja(cls, vocabulary: Iterable[str] = ()) -> PlaceholderSyntax:
        """Jinja2 syntax, optionally restricted to *vocabulary*."""
        return cls(style=MarkerStyle.JINJA, vocabulary=frozenset(vocabulary))

    def declares(self, name: str) -> bool:
        """Whether *name* is allowed by this syntax's vocabulary."""
        return not self.vocabulary or name in self.vocabulary

    def describe(self) -> str:
        """Short human-readable description, e.g. ``braces {{NAME}}``."""
        if self.style is MarkerStyle.BARE:
            return f"bare ({', '.join(sorted(self.vocabulary))})"
        return f"{self.style.value} {self.open}NAME{self.close}"


@functools.lru_cache(maxsize=32)
def jinja_environment(syntax: PlaceholderSyntax) -> Environment:
    """Jinja2 environment for a JINJA syntax.

    Autoescaping is off so values are substituted verbatim, and undefined
    variables raise instead of rendering as empty strings. Templates are
    self-contained, so an include or import raises TemplateNotFound.
    """
    return Environment(
        loader=DictLoader({}),
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        variable_start_string=syntax.open,
        variable_end_string=syntax.close,
    )
