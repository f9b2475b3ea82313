"""Template kits and the scaffolding service built on the engine."""

from __future__ import annotations

from stencil.library.kit import (
    BUILTIN_KITS_DIR,
    MANIFEST_NAME,
    KitManifest,
    KitTemplate,
    ParsedTemplate,
    TemplateKit,
    list_builtin_kits,
    load_kit,
    resolve_kit,
)
from stencil.library.scaffold import (
    ScaffoldRequest,
    ScaffoldService,
    create_scaffold_service,
)

__all__ = [
    "BUILTIN_KITS_DIR",
    "MANIFEST_NAME",
    "KitManifest",
    "KitTemplate",
    "ParsedTemplate",
    "ScaffoldRequest",
    "ScaffoldService",
    "TemplateKit",
    "create_scaffold_service",
    "list_builtin_kits",
    "load_kit",
    "resolve_kit",
]
