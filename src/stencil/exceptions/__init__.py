"""Stencil exception hierarchy.

All exceptions can be imported from this package:
    from stencil.exceptions import StencilError, MalformedTemplateError
"""

from __future__ import annotations

from stencil.exceptions.base import StencilError
from stencil.exceptions.config import ConfigError
from stencil.exceptions.kit import KitError, KitNotFoundError
from stencil.exceptions.scaffold import (
    InvalidTargetError,
    ScaffoldValidationError,
    ScaffoldWriteError,
)
from stencil.exceptions.template import (
    MalformedTemplateError,
    TemplateError,
    TemplateLoadError,
)
from stencil.exceptions.tokens import TokenParseError

__all__ = [
    # Base
    "StencilError",
    # Configuration
    "ConfigError",
    # Kits
    "KitError",
    "KitNotFoundError",
    # Scaffolding
    "InvalidTargetError",
    "ScaffoldValidationError",
    "ScaffoldWriteError",
    # Templates
    "MalformedTemplateError",
    "TemplateError",
    "TemplateLoadError",
    # Tokens
    "TokenParseError",
]
