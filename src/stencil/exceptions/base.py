from __future__ import annotations


class StencilError(Exception):
    """Base exception class for all Stencil-specific errors.

    All custom exceptions raised by Stencil inherit from this class, so a CLI
    or library caller can catch every Stencil failure at one boundary while
    system exceptions propagate naturally.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            service.scaffold(request)
        except StencilError as e:
            logger.error("scaffold_failed", error=e.message)
            sys.exit(1)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the StencilError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
