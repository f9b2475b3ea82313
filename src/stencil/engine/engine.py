"""Render batch orchestration.

:class:`ScaffoldEngine` runs one batch in three phases:

1. Validate the token set against every placeholder the batch needs.
2. Render every document (and output-name pattern) in memory.
3. Write results in batch order under the conflict policy.

Nothing is written unless phases 1 and 2 succeed for the whole batch. Writes
already made in phase 3 are not rolled back when a later write fails.
"""

from __future__ import annotations

import errno
from collections import defaultdict
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol

from stencil.engine.document import TemplateDocument
from stencil.engine.errors import (
    Aborted,
    DuplicateTarget,
    InvalidTarget,
    MalformedTemplate,
    ScaffoldIssue,
    TargetExists,
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
from stencil.engine.tokens import TokenSet
from stencil.exceptions import InvalidTargetError, MalformedTemplateError
from stencil.logging import get_logger

__all__ = ["AbortSignal", "ScaffoldEngine", "Target"]

logger = get_logger(__name__)

#: A document paired with its output path or output-name pattern.
Target = tuple[TemplateDocument, Path | OutputPattern]


class AbortSignal(Protocol):
    """Anything with ``is_set()``, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool: ...


class ScaffoldEngine:
    """Validates, renders and writes one render batch.

    Args:
        renderer: Renderer to use (default: a new :class:`Renderer`).

    Example:
        ```python
        engine = ScaffoldEngine()
        outcome = engine.run(
            [(doc, Path("out/LoginViewController.swift"))],
            TokenSet({"FEATURE": "Login", "TITLE": "Sign In"}),
            ConflictPolicy.SKIP,
        )
        outcome.written
        ```
    """

    def __init__(self, renderer: Renderer | None = None) -> None:
        self._renderer = renderer or Renderer()

    @staticmethod
    def required_placeholders(targets: Iterable[Target]) -> frozenset[str]:
        """Union of placeholders across documents and output patterns."""
        required: set[str] = set()
        for doc, output in targets:
            required |= doc.placeholders
            if isinstance(output, OutputPattern):
                required |= output.pattern.placeholders
        return frozenset(required)

    def run(
        self,
        targets: Sequence[Target],
        tokens: TokenSet,
        conflict_policy: ConflictPolicy = ConflictPolicy.FAIL,
        *,
        strict: bool = True,
        abort: AbortSignal | None = None,
        dry_run: bool = False,
    ) -> EngineOutcome:
        """Run a render batch.

        Args:
            targets: Documents paired with output paths or name patterns.
            tokens: Placeholder values for the whole batch.
            conflict_policy: Behavior when an output path already exists.
            strict: Reject tokens that no document references.
            abort: Checked before phase 3 and before each write.
            dry_run: Stop after phase 2 and report rendered content.

        Returns:
            EngineOutcome with per-document statuses and every issue. Never
            raises for validation, render or write failures.
        """
        targets = list(targets)
        log = logger.bind(documents=len(targets), policy=conflict_policy.value)
        log.info("render_batch_started", strict=strict, dry_run=dry_run)

        # Phase 1: validate
        validation = tokens.validate(self.required_placeholders(targets), strict=strict)
        if not validation.ok:
            log.warning(
                "render_batch_invalid",
                missing=list(validation.missing),
                unknown=list(validation.unknown),
            )
            return _unwritten(
                [(doc.name, _fixed_path(output)) for doc, output in targets],
                validation.errors,
            )

        # Phase 2: render everything before touching storage
        results, problems = self._render_all(targets, tokens)
        if problems:
            log.warning(
                "render_batch_unrenderable",
                errors=[p.message for p in problems],
            )
            return _unwritten(
                [(doc.name, _fixed_path(output)) for doc, output in targets],
                problems,
            )

        duplicates = _find_duplicates(results)
        if duplicates:
            log.warning(
                "render_batch_duplicate_targets",
                paths=[str(d.path) for d in duplicates],
            )
            return _unwritten([(r.template, r.output_path) for r in results], duplicates)

        if dry_run:
            log.info("render_batch_previewed")
            return EngineOutcome(
                files=tuple(
                    FileOutcome(
                        template=r.template,
                        path=r.output_path,
                        status=FileStatus.PREVIEWED,
                        content=r.text,
                    )
                    for r in results
                )
            )

        if abort is not None and abort.is_set():
            log.warning("render_batch_aborted", written=[])
            return _unwritten([(r.template, r.output_path) for r in results], [Aborted()])

        # Phase 3: write
        return self._write_all(results, conflict_policy, abort)

    def _render_all(
        self, targets: Sequence[Target], tokens: TokenSet
    ) -> tuple[list[RenderResult], list[ScaffoldIssue]]:
        results: list[RenderResult] = []
        problems: list[ScaffoldIssue] = []
        for doc, output in targets:
            try:
                path = self._resolve(output, tokens)
                results.append(self._renderer.render(doc, tokens, path))
            except InvalidTargetError as e:
                problems.append(InvalidTarget(doc.name, e.name, e.reason))
            except MalformedTemplateError as e:
                problems.append(
                    MalformedTemplate(e.template, e.reason, e.line, e.column)
                )
        return results, problems

    def _resolve(self, output: Path | OutputPattern, tokens: TokenSet) -> Path:
        if not isinstance(output, OutputPattern):
            return output
        path = self._renderer.render_name(output, tokens)
        # Symlinks inside the output directory can still point elsewhere
        if not path.resolve().is_relative_to(output.directory.resolve()):
            raise InvalidTargetError(
                output.pattern.name,
                str(path.relative_to(output.directory)),
                "resolves outside the output directory",
            )
        return path

    def _write_all(
        self,
        results: list[RenderResult],
        policy: ConflictPolicy,
        abort: AbortSignal | None,
    ) -> EngineOutcome:
        files: list[FileOutcome] = []
        issue: ScaffoldIssue | None = None

        for result in results:
            path = result.output_path
            if abort is not None and abort.is_set():
                issue = Aborted(before=path)
                break
            try:
                status = self._write(result, policy)
            except FileExistsError:
                issue = TargetExists(path)
            except OSError as e:
                issue = WriteFailure(path, e.strerror or str(e))

            if issue is not None:
                files.append(
                    FileOutcome(result.template, path, FileStatus.FAILED, issue=issue)
                )
                break
            files.append(FileOutcome(result.template, path, status))

        files.extend(
            FileOutcome(r.template, r.output_path, FileStatus.NOT_WRITTEN)
            for r in results[len(files) :]
        )
        outcome = EngineOutcome(
            files=tuple(files), issues=(issue,) if issue is not None else ()
        )

        if issue is None:
            logger.info(
                "render_batch_completed",
                written=len(outcome.written),
                skipped=len(outcome.skipped),
            )
        else:
            # Earlier writes stay on disk; say exactly which ones
            logger.warning(
                "render_batch_stopped",
                reason=issue.kind.value,
                error=issue.message,
                written=[str(p) for p in outcome.written],
            )
        return outcome

    def _write(self, result: RenderResult, policy: ConflictPolicy) -> FileStatus:
        path = result.output_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except FileExistsError as e:
            # A file sits where a parent directory should be
            raise NotADirectoryError(
                errno.ENOTDIR, "parent path is not a directory", str(path.parent)
            ) from e

        # "x" checks existence and creates in one step
        mode = "w" if policy is ConflictPolicy.OVERWRITE else "x"
        try:
            with open(path, mode, encoding="utf-8", newline="") as handle:
                handle.write(result.text)
        except FileExistsError:
            if policy is ConflictPolicy.SKIP:
                logger.info("file_skipped", path=str(path), template=result.template)
                return FileStatus.SKIPPED
            raise

        logger.info("file_written", path=str(path), template=result.template)
        return FileStatus.WRITTEN


def _fixed_path(output: Path | OutputPattern) -> Path | None:
    return output if isinstance(output, Path) else None


def _unwritten(
    entries: Iterable[tuple[str, Path | None]],
    issues: Iterable[ScaffoldIssue],
) -> EngineOutcome:
    return EngineOutcome(
        files=tuple(
            FileOutcome(template, path, FileStatus.NOT_WRITTEN)
            for template, path in entries
        ),
        issues=tuple(issues),
    )


def _find_duplicates(results: Iterable[RenderResult]) -> list[DuplicateTarget]:
    by_path: dict[Path, list[str]] = defaultdict(list)
    for result in results:
        by_path[result.output_path].append(result.template)
    return [
        DuplicateTarget(path=path, templates=tuple(names))
        for path, names in by_path.items()
        if len(names) > 1
    ]
