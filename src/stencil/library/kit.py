"""Template kits.

A kit is a directory of templates. With a ``kit.yaml`` manifest it declares
its marker style, vocabulary and output-name patterns; without one, every
file in the directory is a template rendered to its own relative path.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from stencil.engine import (
    MalformedTemplate,
    MarkerStyle,
    OutputPattern,
    PlaceholderSyntax,
    TemplateDocument,
    is_valid_placeholder_name,
)
from stencil.engine.renderer import unsafe_name_reason
from stencil.exceptions import KitError, KitNotFoundError, MalformedTemplateError
from stencil.logging import get_logger

__all__ = [
    "BUILTIN_KITS_DIR",
    "MANIFEST_NAME",
    "KitManifest",
    "KitTemplate",
    "ParsedTemplate",
    "TemplateKit",
    "list_builtin_kits",
    "load_kit",
    "resolve_kit",
]

logger = get_logger(__name__)

BUILTIN_KITS_DIR = Path(__file__).parent / "kits"

MANIFEST_NAME = "kit.yaml"

_JINJA_SUFFIX = ".j2"


# =============================================================================
# Manifest
# =============================================================================


class TemplateEntry(BaseModel):
    """One template listed in a kit manifest."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source: str = Field(min_length=1)
    output: str | None = None

    @field_validator("output")
    @classmethod
    def check_output_inside(cls, v: str | None) -> str | None:
        if v is not None:
            reason = unsafe_name_reason(v)
            if reason is not None:
                raise ValueError(f"output {reason}")
        return v


class KitManifest(BaseModel):
    """Validated contents of ``kit.yaml``."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str = ""
    style: MarkerStyle = MarkerStyle.BRACES
    placeholders: list[str] = Field(default_factory=list)
    open: str = Field(default="{{", min_length=1)
    close: str = Field(default="}}", min_length=1)
    templates: list[TemplateEntry] = Field(min_length=1)

    @field_validator("placeholders")
    @classmethod
    def check_placeholder_names(cls, v: list[str]) -> list[str]:
        bad = [name for name in v if not is_valid_placeholder_name(name)]
        if bad:
            raise ValueError(f"invalid placeholder names: {', '.join(bad)}")
        return v

    def syntax(self) -> PlaceholderSyntax:
        return PlaceholderSyntax(
            style=self.style,
            vocabulary=frozenset(self.placeholders),
            open=self.open,
            close=self.close,
        )


# =============================================================================
# Kit models
# =============================================================================


@dataclass(frozen=True, slots=True)
class KitTemplate:
    """A template source and the pattern naming its output.

    Attributes:
        source: Path of the template file.
        output: Output path pattern relative to the output directory.
    """

    source: Path
    output: str


@dataclass(frozen=True, slots=True)
class ParsedTemplate:
    """A parsed template and its parsed output-name pattern."""

    document: TemplateDocument
    output: TemplateDocument

    def target(self, output_dir: Path) -> tuple[TemplateDocument, OutputPattern]:
        """Engine target writing under *output_dir*."""
        return self.document, OutputPattern(directory=output_dir, pattern=self.output)


@dataclass(frozen=True, slots=True)
class TemplateKit:
    """A loadable collection of templates sharing one syntax.

    Attributes:
        name: Kit name.
        root: Kit directory.
        description: Human-readable description.
        syntax: Marker convention for every template in the kit.
        templates: Templates in render order.
        builtin: Whether the kit ships with Stencil.
    """

    name: str
    root: Path
    description: str
    syntax: PlaceholderSyntax
    templates: tuple[KitTemplate, ...]
    builtin: bool = False

    def parse(self) -> tuple[list[ParsedTemplate], list[MalformedTemplate]]:
        """Parse every template and output pattern.

        Every malformed template is reported, not just the first.

        Returns:
            Parsed templates and the issues for those that failed.

        Raises:
            TemplateLoadError: If a template file cannot be read.
        """
        parsed: list[ParsedTemplate] = []
        issues: list[MalformedTemplate] = []
        for template in self.templates:
            try:
                parsed.append(self._parse_template(template))
            except MalformedTemplateError as e:
                issues.append(
                    MalformedTemplate(
                        template=e.template,
                        reason=e.reason,
                        line=e.line,
                        column=e.column,
                    )
                )

        logger.debug(
            "kit_parsed",
            kit=self.name,
            templates=len(parsed),
            malformed=len(issues),
        )
        return parsed, issues

    def documents(self) -> list[ParsedTemplate]:
        """Parse every template, raising on the first malformed one.

        Raises:
            MalformedTemplateError: If any template is malformed.
        """
        return [self._parse_template(template) for template in self.templates]

    def placeholders(self) -> frozenset[str]:
        """Every placeholder the kit's templates and output names use.

        Raises:
            MalformedTemplateError: If any template is malformed.
        """
        names: set[str] = set()
        for parsed in self.documents():
            names |= parsed.document.placeholders | parsed.output.placeholders
        return frozenset(names)

    def _parse_template(self, template: KitTemplate) -> ParsedTemplate:
        logical_name = template.source.relative_to(self.root).as_posix()
        return ParsedTemplate(
            document=TemplateDocument.load(
                template.source, self.syntax, name=logical_name
            ),
            output=TemplateDocument.parse(
                template.output, self.syntax, name=f"{logical_name} (output name)"
            ),
        )


# =============================================================================
# Loading
# =============================================================================


def load_kit(
    path: Path,
    *,
    default_syntax: PlaceholderSyntax | None = None,
    builtin: bool = False,
) -> TemplateKit:
    """Load a kit from a directory.

    Args:
        path: Kit directory.
        default_syntax: Syntax for directories without ``kit.yaml``.
        builtin: Mark the kit as built-in.

    Returns:
        The loaded kit.

    Raises:
        KitError: If the manifest is invalid, a listed template is missing
            or outside the kit, or an ad-hoc kit has no templates or no
            syntax.
    """
    if not path.is_dir():
        raise KitError(f"Kit path is not a directory: {path}", kit=str(path))

    manifest_path = path / MANIFEST_NAME
    if manifest_path.exists():
        kit = _load_manifest_kit(path, manifest_path, builtin=builtin)
    else:
        if default_syntax is None:
            raise KitError(
                f"{path} has no {MANIFEST_NAME} and no marker style was configured",
                kit=str(path),
            )
        kit = _load_directory_kit(path, default_syntax)

    logger.debug(
        "kit_loaded",
        kit=kit.name,
        root=str(kit.root),
        templates=len(kit.templates),
        style=kit.syntax.style.value,
    )
    return kit


def _load_manifest_kit(root: Path, manifest_path: Path, *, builtin: bool) -> TemplateKit:
    try:
        with open(manifest_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise KitError(
            f"Cannot read kit manifest {manifest_path}: {e}", kit=str(root)
        ) from e

    try:
        manifest = KitManifest.model_validate(raw or {})
        syntax = manifest.syntax()
    except ValidationError as e:
        first_error = e.errors()[0]
        where = ".".join(str(loc) for loc in first_error["loc"])
        raise KitError(
            f"Invalid kit manifest {manifest_path}: {where}: {first_error['msg']}",
            kit=str(root),
        ) from e
    except ValueError as e:
        raise KitError(
            f"Invalid kit manifest {manifest_path}: {e}", kit=str(root)
        ) from e

    resolved_root = root.resolve()
    templates: list[KitTemplate] = []
    for entry in manifest.templates:
        source = (root / entry.source).resolve()
        if not source.is_relative_to(resolved_root):
            raise KitError(
                f"Template {entry.source!r} is outside kit {manifest.name}",
                kit=manifest.name,
            )
        if not source.is_file():
            raise KitError(
                f"Template {entry.source!r} listed in {manifest_path} not found",
                kit=manifest.name,
            )
        templates.append(KitTemplate(source=source, output=entry.output or entry.source))

    return TemplateKit(
        name=manifest.name,
        root=resolved_root,
        description=manifest.description,
        syntax=syntax,
        templates=tuple(templates),
        builtin=builtin,
    )


def _load_directory_kit(root: Path, syntax: PlaceholderSyntax) -> TemplateKit:
    resolved_root = root.resolve()
    templates: list[KitTemplate] = []
    for source in sorted(resolved_root.rglob("*")):
        relative = source.relative_to(resolved_root)
        if not source.is_file() or any(part.startswith(".") for part in relative.parts):
            continue
        output = relative.as_posix()
        if syntax.style is MarkerStyle.JINJA and output.endswith(_JINJA_SUFFIX):
            output = output[: -len(_JINJA_SUFFIX)]
        templates.append(KitTemplate(source=source, output=output))

    if not templates:
        raise KitError(f"No templates found in {root}", kit=str(root))

    return TemplateKit(
        name=resolved_root.name,
        root=resolved_root,
        description="",
        syntax=syntax,
        templates=tuple(templates),
    )


def list_builtin_kits() -> list[TemplateKit]:
    """Load every built-in kit, sorted by name."""
    kits = [
        load_kit(path, builtin=True)
        for path in sorted(BUILTIN_KITS_DIR.iterdir())
        if (path / MANIFEST_NAME).is_file()
    ]
    return sorted(kits, key=lambda k: k.name)


def resolve_kit(
    kit: str,
    *,
    default_syntax: PlaceholderSyntax | None = None,
) -> TemplateKit:
    """Find a kit by built-in name or directory path.

    Built-in names win over a same-named relative directory only when that
    directory does not exist.

    Raises:
        KitNotFoundError: If *kit* is neither a directory nor a built-in name.
        KitError: If the kit exists but is invalid.
    """
    path = Path(kit).expanduser()
    if path.is_dir():
        return load_kit(path, default_syntax=default_syntax)

    builtin_path = BUILTIN_KITS_DIR / kit
    if "/" not in kit and (builtin_path / MANIFEST_NAME).is_file():
        return load_kit(builtin_path, builtin=True)

    available = tuple(k.name for k in list_builtin_kits())
    raise KitNotFoundError(kit, available)
