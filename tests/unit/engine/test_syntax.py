"""Tests for placeholder syntax definitions."""

from __future__ import annotations

import pytest

from stencil.engine import MarkerStyle, PlaceholderSyntax, is_valid_placeholder_name
from stencil.engine.syntax import jinja_environment


class TestPlaceholderNames:
    """Tests for is_valid_placeholder_name."""

    @pytest.mark.parametrize("name", ["FEATURE", "DataType", "_private", "a1"])
    def test_valid_names(self, name: str) -> None:
        assert is_valid_placeholder_name(name)

    @pytest.mark.parametrize("name", ["", "1ABC", "MY-NAME", "has space", "x.y", "NAME\n"])
    def test_invalid_names(self, name: str) -> None:
        assert not is_valid_placeholder_name(name)


class TestPlaceholderSyntax:
    """Tests for PlaceholderSyntax construction and checks."""

    def test_default_is_braces(self) -> None:
        syntax = PlaceholderSyntax()
        assert syntax.style is MarkerStyle.BRACES
        assert (syntax.open, syntax.close) == ("{{", "}}")

    def test_style_string_coerced(self) -> None:
        syntax = PlaceholderSyntax(style="jinja")  # type: ignore[arg-type]
        assert syntax.style is MarkerStyle.JINJA

    def test_bare_requires_vocabulary(self) -> None:
        with pytest.raises(ValueError, match="vocabulary"):
            PlaceholderSyntax.bare([])

    def test_invalid_vocabulary_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid placeholder names"):
            PlaceholderSyntax.braces(["OK", "not-ok"])

    def test_empty_delimiter_rejected(self) -> None:
        with pytest.raises(ValueError, match="delimiters"):
            PlaceholderSyntax.braces(open="", close="}")

    def test_declares_without_vocabulary_accepts_anything(self) -> None:
        assert PlaceholderSyntax.braces().declares("ANYTHING")

    def test_declares_with_vocabulary(self) -> None:
        syntax = PlaceholderSyntax.braces(["FEATURE"])
        assert syntax.declares("FEATURE")
        assert not syntax.declares("TITLE")

    def test_describe(self) -> None:
        assert PlaceholderSyntax.bare(["TITLE", "FEATURE"]).describe() == (
            "bare (FEATURE, TITLE)"
        )
        assert PlaceholderSyntax.braces(open="<%", close="%>").describe() == (
            "braces <%NAME%>"
        )

    def test_hashable_and_equal(self) -> None:
        a = PlaceholderSyntax.bare(["FEATURE", "TITLE"])
        b = PlaceholderSyntax.bare(["TITLE", "FEATURE"])
        assert a == b
        assert hash(a) == hash(b)


class TestJinjaEnvironment:
    """Tests for the cached Jinja2 environment."""

    def test_uses_syntax_delimiters(self) -> None:
        env = jinja_environment(PlaceholderSyntax(style=MarkerStyle.JINJA, open="[[", close="]]"))
        assert env.variable_start_string == "[["
        assert env.variable_end_string == "]]"

    def test_cached_per_syntax(self) -> None:
        syntax = PlaceholderSyntax.jinja()
        assert jinja_environment(syntax) is jinja_environment(PlaceholderSyntax.jinja())

    def test_no_autoescape(self) -> None:
        env = jinja_environment(PlaceholderSyntax.jinja())
        assert env.from_string("{{ X }}").render(X="<a & b>") == "<a & b>"
