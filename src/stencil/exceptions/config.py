from __future__ import annotations

from typing import Any

from stencil.exceptions.base import StencilError


class ConfigError(StencilError):
    """Exception for configuration loading, parsing, and validation errors.

    Raised when ``stencil.yaml``, the user config file, or a ``STENCIL_*``
    environment variable cannot be parsed or fails validation.

    Attributes:
        message: Human-readable error message describing the issue.
        field: Optional field name that caused the error (e.g., "on_conflict").
        value: Optional value that failed validation (for debugging).

    Examples:
        ```python
        raise ConfigError("Invalid YAML in stencil.yaml: line 3")

        raise ConfigError(
            "Invalid configuration value",
            field="on_conflict",
            value="clobber",
        )
        ```
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the ConfigError.

        Args:
            message: Human-readable error message.
            field: Optional field name that caused the error.
            value: Optional value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)
