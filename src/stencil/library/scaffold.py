"""Kit scaffolding service.

Resolves a template kit, merges token values from configuration and the
caller, and runs the render batch through :class:`ScaffoldEngine`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path

from stencil.config import StencilConfig
from stencil.engine import (
    AbortSignal,
    ConflictPolicy,
    EngineOutcome,
    ScaffoldEngine,
    TokenSet,
)
from stencil.library.kit import TemplateKit, list_builtin_kits, resolve_kit
from stencil.logging import bind_context, clear_context, get_logger

__all__ = [
    "ScaffoldRequest",
    "ScaffoldService",
    "create_scaffold_service",
]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ScaffoldRequest:
    """Request to scaffold files from a kit.

    Attributes:
        kit: Built-in kit name or kit directory path.
        tokens: Placeholder values supplied by the caller.
        output_dir: Directory rendered files are written under.
        on_conflict: Policy for output paths that already exist.
        strict: Reject tokens that no template uses.
    """

    kit: str
    tokens: TokenSet
    output_dir: Path
    on_conflict: ConflictPolicy = ConflictPolicy.FAIL
    strict: bool = True


class ScaffoldService:
    """Scaffolds template kits into output directories.

    Args:
        config: Settings supplying default tokens and the syntax for
            manifest-less kit directories. Defaults to built-in defaults.
        engine: Engine instance (default: a new :class:`ScaffoldEngine`).
    """

    def __init__(
        self,
        config: StencilConfig | None = None,
        engine: ScaffoldEngine | None = None,
    ) -> None:
        self._config = config or StencilConfig()
        self._engine = engine or ScaffoldEngine()

    @property
    def config(self) -> StencilConfig:
        return self._config

    def list_kits(self) -> list[TemplateKit]:
        """List built-in kits."""
        return list_builtin_kits()

    def load_kit(self, kit: str) -> TemplateKit:
        """Resolve a kit name or directory.

        Raises:
            KitNotFoundError: If no such kit exists.
            KitError: If the kit is invalid.
        """
        return resolve_kit(kit, default_syntax=self._config.syntax())

    def resolve_tokens(self, kit: TemplateKit, tokens: TokenSet) -> TokenSet:
        """Apply configured default tokens beneath the caller's tokens.

        Raises:
            MalformedTemplateError: If a kit template is malformed.
        """
        return self._with_defaults(kit.placeholders(), tokens)

    def _with_defaults(self, used: frozenset[str], tokens: TokenSet) -> TokenSet:
        # Defaults a kit never uses would trip strict validation
        defaults = TokenSet(self._config.tokens).restricted(used)
        return defaults.merged(tokens)

    def scaffold(
        self,
        request: ScaffoldRequest,
        *,
        abort: AbortSignal | None = None,
    ) -> EngineOutcome:
        """Render a kit and write its files.

        Returns:
            EngineOutcome; validation and write problems are reported there.

        Raises:
            KitNotFoundError: If the kit does not exist.
            KitError: If the kit manifest is invalid.
            TemplateLoadError: If a template file cannot be read.
        """
        return self._run(request, abort=abort, dry_run=False)

    def preview(self, request: ScaffoldRequest) -> EngineOutcome:
        """Render a kit without writing; statuses are ``previewed``."""
        return self._run(request, abort=None, dry_run=True)

    def _run(
        self,
        request: ScaffoldRequest,
        *,
        abort: AbortSignal | None,
        dry_run: bool,
    ) -> EngineOutcome:
        kit = self.load_kit(request.kit)
        bind_context(batch_id=uuid.uuid4().hex[:8], kit=kit.name)
        try:
            parsed, malformed = kit.parse()
            if malformed:
                logger.warning(
                    "kit_malformed",
                    templates=[issue.template for issue in malformed],
                )
                return EngineOutcome(issues=tuple(malformed))

            targets = [p.target(request.output_dir) for p in parsed]
            tokens = self._with_defaults(
                ScaffoldEngine.required_placeholders(targets), request.tokens
            )
            return self._engine.run(
                targets,
                tokens,
                request.on_conflict,
                strict=request.strict,
                abort=abort,
                dry_run=dry_run,
            )
        finally:
            clear_context()


def create_scaffold_service(config: StencilConfig | None = None) -> ScaffoldService:
    """Create a scaffold service instance.

    Args:
        config: Settings to use; built-in defaults when None.

    Returns:
        Configured ScaffoldService instance.
    """
    return ScaffoldService(config=config)
