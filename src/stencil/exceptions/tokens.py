"""Token parsing exceptions."""

from __future__ import annotations

from stencil.exceptions.base import StencilError


class TokenParseError(StencilError):
    """Token values could not be parsed.

    Raised for a ``KEY=VALUE`` pair without ``=``, an invalid placeholder
    name, or a tokens file that is not a YAML mapping.

    Attributes:
        source: Where the bad input came from (flag text or file path).
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        super().__init__(message)
