"""Template kit exceptions."""

from __future__ import annotations

from stencil.exceptions.base import StencilError


class KitError(StencilError):
    """A template kit or its manifest is invalid.

    Attributes:
        kit: Kit name or path.
    """

    def __init__(self, message: str, *, kit: str) -> None:
        self.kit = kit
        super().__init__(message)


class KitNotFoundError(KitError):
    """No built-in kit or directory matches the requested kit.

    Attributes:
        kit: The requested kit name or path.
        available: Names of the built-in kits.
    """

    def __init__(self, kit: str, available: tuple[str, ...] = ()) -> None:
        self.available = available
        super().__init__(f"Template kit not found: {kit}", kit=kit)
