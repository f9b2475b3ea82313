"""Tests for ScaffoldEngine render batches."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from stencil.engine import (
    Aborted,
    ConflictPolicy,
    DuplicateTarget,
    FileStatus,
    InvalidTarget,
    IssueKind,
    MalformedTemplate,
    MissingPlaceholder,
    OutputPattern,
    PlaceholderSyntax,
    ScaffoldEngine,
    ScaffoldIssue,
    TargetExists,
    TemplateDocument,
    TokenSet,
    UnknownPlaceholder,
    WriteFailure,
)
from stencil.exceptions import ScaffoldValidationError, ScaffoldWriteError

SYNTAX = PlaceholderSyntax.bare(["FEATURE", "TITLE", "DataType"])

VIEW_CONTROLLER = 'final class FEATUREViewController {\n    title = "TITLE"\n}\n'
VIEW_MODEL = "final class FEATUREViewModel {\n    var data: DataType?\n}\n"


@pytest.fixture
def controller() -> TemplateDocument:
    return TemplateDocument.parse(VIEW_CONTROLLER, SYNTAX, name="view-controller")


@pytest.fixture
def model() -> TemplateDocument:
    return TemplateDocument.parse(VIEW_MODEL, SYNTAX, name="view-model")


@pytest.fixture
def engine() -> ScaffoldEngine:
    return ScaffoldEngine()


class TestRequiredPlaceholders:
    """Union of placeholders across a batch."""

    def test_includes_output_patterns(
        self, tmp_path: Path, controller: TemplateDocument
    ) -> None:
        pattern = TemplateDocument.parse("DataType.swift", SYNTAX)
        required = ScaffoldEngine.required_placeholders(
            [(controller, OutputPattern(tmp_path, pattern))]
        )
        assert required == frozenset({"FEATURE", "TITLE", "DataType"})


class TestValidation:
    """Nothing is written when validation fails."""

    def test_end_to_end_login(
        self,
        tmp_path: Path,
        engine: ScaffoldEngine,
        controller: TemplateDocument,
    ) -> None:
        out = tmp_path / "LoginViewController.swift"
        outcome = engine.run(
            [(controller, out)],
            TokenSet({"FEATURE": "Login", "TITLE": "Sign In"}),
            ConflictPolicy.OVERWRITE,
        )
        assert outcome.ok
        assert outcome.written == (out,)
        assert out.read_text(encoding="utf-8") == (
            'final class LoginViewController {\n    title = "Sign In"\n}\n'
        )

    def test_all_missing_reported_and_nothing_written(
        self,
        tmp_path: Path,
        engine: ScaffoldEngine,
        controller: TemplateDocument,
        model: TemplateDocument,
    ) -> None:
        targets = [
            (controller, tmp_path / "a.swift"),
            (model, tmp_path / "b.swift"),
        ]
        outcome = engine.run(targets, TokenSet({"FEATURE": "Login"}))

        assert not outcome.ok
        assert outcome.validation_failed
        assert outcome.issues == (
            MissingPlaceholder("DataType"),
            MissingPlaceholder("TITLE"),
        )
        assert [f.status for f in outcome.files] == [FileStatus.NOT_WRITTEN] * 2
        assert list(tmp_path.iterdir()) == []

    def test_strict_rejects_extra_token(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        outcome = engine.run(
            [(controller, tmp_path / "a.swift")],
            TokenSet({"FEATURE": "Login", "TITLE": "Sign In", "EXTRA": "x"}),
        )
        assert outcome.issues == (UnknownPlaceholder("EXTRA"),)
        assert not (tmp_path / "a.swift").exists()

    def test_lenient_accepts_extra_token(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        outcome = engine.run(
            [(controller, tmp_path / "a.swift")],
            TokenSet({"FEATURE": "Login", "TITLE": "Sign In", "EXTRA": "x"}),
            strict=False,
        )
        assert outcome.ok

    def test_pattern_paths_unknown_when_invalid(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        pattern = TemplateDocument.parse("FEATUREViewController.swift", SYNTAX)
        outcome = engine.run(
            [(controller, OutputPattern(tmp_path, pattern))], TokenSet()
        )
        assert outcome.files[0].path is None
        assert outcome.files[0].status is FileStatus.NOT_WRITTEN

    def test_raise_for_errors_validation(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        outcome = engine.run([(controller, tmp_path / "a.swift")], TokenSet())
        with pytest.raises(ScaffoldValidationError) as exc_info:
            outcome.raise_for_errors()
        assert len(exc_info.value.issues) == 2

    def test_duplicate_targets_rejected(
        self,
        tmp_path: Path,
        engine: ScaffoldEngine,
        controller: TemplateDocument,
        model: TemplateDocument,
    ) -> None:
        out = tmp_path / "Same.swift"
        outcome = engine.run(
            [(controller, out), (model, out)],
            TokenSet({"FEATURE": "Login", "TITLE": "Sign In", "DataType": "User"}),
        )
        assert outcome.issues == (
            DuplicateTarget(path=out, templates=("view-controller", "view-model")),
        )
        assert outcome.validation_failed
        assert not out.exists()


class TestConflictPolicies:
    """Overwrite, skip and fail."""

    TOKENS = TokenSet({"FEATURE": "Login", "TITLE": "Sign In"})

    def test_overwrite_replaces(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        out = tmp_path / "a.swift"
        out.write_text("old")
        outcome = engine.run([(controller, out)], self.TOKENS, ConflictPolicy.OVERWRITE)
        assert outcome.written == (out,)
        assert "LoginViewController" in out.read_text()

    def test_skip_leaves_existing_file(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        out = tmp_path / "a.swift"
        out.write_text("hand edited")
        outcome = engine.run([(controller, out)], self.TOKENS, ConflictPolicy.SKIP)
        assert outcome.ok
        assert outcome.skipped == (out,)
        assert out.read_text() == "hand edited"

    def test_skip_is_idempotent(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        out = tmp_path / "a.swift"
        first = engine.run([(controller, out)], self.TOKENS, ConflictPolicy.SKIP)
        content = out.read_text()
        second = engine.run([(controller, out)], self.TOKENS, ConflictPolicy.SKIP)

        assert first.written == (out,)
        assert second.written == ()
        assert second.skipped == (out,)
        assert out.read_text() == content

    def test_fail_stops_at_existing_file(
        self,
        tmp_path: Path,
        engine: ScaffoldEngine,
        controller: TemplateDocument,
        model: TemplateDocument,
    ) -> None:
        first, second, third = (tmp_path / n for n in ("1.swift", "2.swift", "3.swift"))
        second.write_text("existing")
        tokens = TokenSet({"FEATURE": "Login", "TITLE": "Sign In", "DataType": "User"})

        outcome = engine.run(
            [(controller, first), (model, second), (controller, third)],
            tokens,
            ConflictPolicy.FAIL,
        )

        assert outcome.issues == (TargetExists(second),)
        assert [f.status for f in outcome.files] == [
            FileStatus.WRITTEN,
            FileStatus.FAILED,
            FileStatus.NOT_WRITTEN,
        ]
        # Earlier writes are not rolled back
        assert first.exists()
        assert second.read_text() == "existing"
        assert not third.exists()

        with pytest.raises(ScaffoldWriteError) as exc_info:
            outcome.raise_for_errors()
        assert exc_info.value.written == (str(first),)

    def test_creates_parent_directories(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        out = tmp_path / "Sources" / "Login" / "a.swift"
        outcome = engine.run([(controller, out)], self.TOKENS)
        assert outcome.written == (out,)

    def test_parent_is_a_file(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        blocker = tmp_path / "Sources"
        blocker.write_text("not a directory")
        outcome = engine.run([(controller, blocker / "a.swift")], self.TOKENS)

        (issue,) = outcome.issues
        assert isinstance(issue, WriteFailure)
        assert issue.kind is IssueKind.WRITE_FAILURE
        assert outcome.files[0].status is FileStatus.FAILED

    def test_preserves_line_endings(self, tmp_path: Path, engine: ScaffoldEngine) -> None:
        doc = TemplateDocument.parse("a\r\nFEATURE\r\n", SYNTAX)
        out = tmp_path / "crlf.txt"
        engine.run([(doc, out)], TokenSet({"FEATURE": "Login"}))
        assert out.read_bytes() == b"a\r\nLogin\r\n"


class TestAbortAndPreview:
    """Abort signals and dry runs."""

    TOKENS = TokenSet({"FEATURE": "Login", "TITLE": "Sign In"})

    def test_abort_before_writing(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        abort = threading.Event()
        abort.set()
        out = tmp_path / "a.swift"
        outcome = engine.run([(controller, out)], self.TOKENS, abort=abort)

        assert outcome.aborted
        assert outcome.issues == (Aborted(),)
        assert outcome.files[0].status is FileStatus.NOT_WRITTEN
        assert not out.exists()

    def test_abort_between_writes(
        self, tmp_path: Path, controller: TemplateDocument
    ) -> None:
        class AbortAfterFirstCheck:
            def __init__(self) -> None:
                self.calls = 0

            def is_set(self) -> bool:
                self.calls += 1
                # Checked once before writing, then before each file
                return self.calls > 2

        first, second = tmp_path / "1.swift", tmp_path / "2.swift"
        outcome = ScaffoldEngine().run(
            [(controller, first), (controller, second)],
            self.TOKENS,
            abort=AbortAfterFirstCheck(),
        )

        assert outcome.issues == (Aborted(before=second),)
        assert outcome.written == (first,)
        assert not second.exists()

    def test_dry_run_writes_nothing(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        out = tmp_path / "a.swift"
        outcome = engine.run([(controller, out)], self.TOKENS, dry_run=True)

        assert outcome.ok
        (file,) = outcome.files
        assert file.status is FileStatus.PREVIEWED
        assert file.content is not None
        assert "LoginViewController" in file.content
        assert not out.exists()


class TestOutcomeSerialization:
    """JSON-ready outcome dictionaries."""

    def test_to_dict(self, tmp_path: Path, engine: ScaffoldEngine) -> None:
        doc = TemplateDocument.parse("FEATURE", SYNTAX, name="t")
        outcome = engine.run([(doc, tmp_path / "t.txt")], TokenSet())
        data = outcome.to_dict()

        assert data["ok"] is False
        assert data["files"] == [
            {
                "template": "t",
                "path": str(tmp_path / "t.txt"),
                "status": "not_written",
                "error": None,
            }
        ]
        assert data["errors"] == [
            {
                "kind": "missing_placeholder",
                "message": "Missing value for placeholder 'FEATURE'",
                "name": "FEATURE",
            }
        ]


class TestRenderFailures:
    """Problems found while rendering stop the batch before any write."""

    TOKENS = {"FEATURE": "Login", "TITLE": "Sign In"}

    def test_absolute_output_name_rejected(
        self, tmp_path: Path, engine: ScaffoldEngine, controller: TemplateDocument
    ) -> None:
        out, elsewhere = tmp_path / "out", tmp_path / "elsewhere"
        pattern = TemplateDocument.parse("FEATUREViewController.swift", SYNTAX)
        outcome = engine.run(
            [(controller, OutputPattern(out, pattern))],
            TokenSet({**self.TOKENS, "FEATURE": str(elsewhere / "Evil")}),
            ConflictPolicy.OVERWRITE,
        )

        (issue,) = outcome.issues
        assert isinstance(issue, InvalidTarget)
        assert issue.template == "view-controller"
        assert issue.reason == "name is absolute"
        assert outcome.validation_failed
        assert outcome.written == ()
        assert outcome.files[0].status is FileStatus.NOT_WRITTEN
        assert not elsewhere.exists()

    def test_parent_segments_in_output_name_rejected(
        self, tmp_path: Path, engine: ScaffoldEngine
    ) -> None:
        out = tmp_path / "a" / "b" / "out"
        victim = tmp_path / "a" / "pwned.swift"
        victim.parent.mkdir(parents=True)
        victim.write_text("keep me")
        doc = TemplateDocument.parse("// {{NAME}}\n", PlaceholderSyntax.braces(), name="t")
        pattern = TemplateDocument.parse("{{NAME}}.swift", PlaceholderSyntax.braces())

        outcome = engine.run(
            [(doc, OutputPattern(out, pattern))],
            TokenSet({"NAME": "../../pwned"}),
            ConflictPolicy.OVERWRITE,
        )

        (issue,) = outcome.issues
        assert issue.kind is IssueKind.INVALID_TARGET
        assert issue.name == "../../pwned.swift"
        assert victim.read_text() == "keep me"
        assert not out.exists()

    def test_symlink_out_of_output_directory_rejected(
        self, tmp_path: Path, engine: ScaffoldEngine
    ) -> None:
        out, outside = tmp_path / "out", tmp_path / "outside"
        out.mkdir()
        outside.mkdir()
        (out / "link").symlink_to(outside, target_is_directory=True)
        doc = TemplateDocument.parse("hello\n", PlaceholderSyntax.braces(), name="t")
        pattern = TemplateDocument.parse("{{DIR}}/x.txt", PlaceholderSyntax.braces())

        outcome = engine.run(
            [(doc, OutputPattern(out, pattern))], TokenSet({"DIR": "link"})
        )

        (issue,) = outcome.issues
        assert isinstance(issue, InvalidTarget)
        assert issue.reason == "resolves outside the output directory"
        assert not (outside / "x.txt").exists()

    def test_nested_output_name_allowed(
        self, tmp_path: Path, engine: ScaffoldEngine
    ) -> None:
        doc = TemplateDocument.parse("{{NAME}}\n", PlaceholderSyntax.braces(), name="t")
        pattern = TemplateDocument.parse("{{NAME}}/{{NAME}}.py", PlaceholderSyntax.braces())
        outcome = engine.run(
            [(doc, OutputPattern(tmp_path, pattern))], TokenSet({"NAME": "auth"})
        )
        assert outcome.ok
        assert outcome.written == (tmp_path / "auth" / "auth.py",)

    def test_jinja_runtime_error_reported(
        self, tmp_path: Path, engine: ScaffoldEngine
    ) -> None:
        syntax = PlaceholderSyntax.jinja()
        good = TemplateDocument.parse("{{ FEATURE }}\n", syntax, name="good.j2")
        bad = TemplateDocument.parse(
            "{{ FEATURE.title_case }}\n", syntax, name="bad.j2"
        )
        first, second = tmp_path / "good.txt", tmp_path / "bad.txt"

        outcome = engine.run(
            [(good, first), (bad, second)], TokenSet({"FEATURE": "Login"})
        )

        (issue,) = outcome.issues
        assert isinstance(issue, MalformedTemplate)
        assert issue.template == "bad.j2"
        assert "title_case" in issue.reason
        assert [f.status for f in outcome.files] == [
            FileStatus.NOT_WRITTEN,
            FileStatus.NOT_WRITTEN,
        ]
        assert not first.exists()
        assert not second.exists()

    def test_jinja_missing_include_reported(
        self, tmp_path: Path, engine: ScaffoldEngine
    ) -> None:
        doc = TemplateDocument.parse(
            '{% include "header.txt" %}body\n', PlaceholderSyntax.jinja(), name="t.j2"
        )
        outcome = engine.run([(doc, tmp_path / "t.txt")], TokenSet())

        (issue,) = outcome.issues
        assert issue.kind is IssueKind.MALFORMED_TEMPLATE
        assert "header.txt" in issue.message
        with pytest.raises(ScaffoldValidationError):
            outcome.raise_for_errors()


def test_issue_base_is_abstract() -> None:
    with pytest.raises(TypeError):
        ScaffoldIssue()
