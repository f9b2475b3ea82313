from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal, Self

import yaml
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from stencil.engine import (
    ConflictPolicy,
    MarkerStyle,
    PlaceholderSyntax,
    is_valid_placeholder_name,
)
from stencil.exceptions import ConfigError
from stencil.logging import get_logger

__all__ = [
    "StencilConfig",
    "load_config",
    "get_project_config_path",
    "get_user_config_path",
]

logger = get_logger(__name__)

PROJECT_CONFIG_NAME = "stencil.yaml"

# Explicit --config path for the duration of one load_config() call
_project_config_override: ContextVar[Path | None] = ContextVar(
    "stencil_project_config", default=None
)


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source that loads from a YAML file."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file, encoding="utf-8") as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"Invalid YAML in {yaml_file}: {e}",
                    field=None,
                    value=None,
                ) from e

            if loaded is None:
                logger.warning("config_file_empty", path=str(yaml_file))
            elif not isinstance(loaded, dict):
                raise ConfigError(
                    message=f"Config file {yaml_file} must contain a mapping",
                    value=type(loaded).__name__,
                )
            else:
                self._config_data = loaded

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._config_data


class StencilConfig(BaseSettings):
    """Root configuration object containing all Stencil settings.

    Attributes:
        style: Marker style for template directories without a kit manifest.
        open: Opening delimiter for braces/jinja styles.
        close: Closing delimiter for braces/jinja styles.
        vocabulary: Declared placeholder names (required for bare style).
        strict: Reject tokens no template references.
        on_conflict: Default conflict policy for existing output files.
        output_dir: Default output directory.
        tokens: Default placeholder values; only those a kit uses are applied.
        verbosity: Log level when no -v/-q flag is given.
    """

    model_config = SettingsConfigDict(
        env_prefix="STENCIL_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    style: MarkerStyle = MarkerStyle.BRACES
    open: str = Field(default="{{", min_length=1)
    close: str = Field(default="}}", min_length=1)
    vocabulary: list[str] = Field(default_factory=list)
    strict: bool = True
    on_conflict: ConflictPolicy = ConflictPolicy.FAIL
    output_dir: Path = Field(default_factory=lambda: Path("."))
    tokens: dict[str, str] = Field(default_factory=dict)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @field_validator("vocabulary")
    @classmethod
    def check_vocabulary_names(cls, v: list[str]) -> list[str]:
        bad = [name for name in v if not is_valid_placeholder_name(name)]
        if bad:
            raise ValueError(f"invalid placeholder names: {', '.join(bad)}")
        return v

    @field_validator("tokens", mode="before")
    @classmethod
    def stringify_token_values(cls, v: Any) -> Any:
        """YAML gives ints and bools for bare scalars; tokens are text."""
        if isinstance(v, dict):
            return {k: "" if val is None else str(val) for k, val in v.items()}
        return v

    @field_validator("tokens")
    @classmethod
    def check_token_names(cls, v: dict[str, str]) -> dict[str, str]:
        bad = [name for name in v if not is_valid_placeholder_name(name)]
        if bad:
            raise ValueError(f"invalid placeholder names: {', '.join(bad)}")
        return v

    @model_validator(mode="after")
    def check_bare_vocabulary(self) -> Self:
        if self.style is MarkerStyle.BARE and not self.vocabulary:
            raise ValueError("bare marker style requires a vocabulary")
        return self

    def syntax(self) -> PlaceholderSyntax:
        """Placeholder syntax described by this configuration."""
        return PlaceholderSyntax(
            style=self.style,
            vocabulary=frozenset(self.vocabulary),
            open=self.open,
            close=self.close,
        )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order of settings sources.

        Priority (highest to lowest):
        1. Init keyword arguments
        2. Environment variables (STENCIL_*)
        3. Project YAML config (./stencil.yaml or the --config path)
        4. User YAML config (~/.config/stencil/config.yaml)
        """
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, get_project_config_path()),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


def get_project_config_path() -> Path:
    """Project config path: the --config override, else ./stencil.yaml."""
    return _project_config_override.get() or Path.cwd() / PROJECT_CONFIG_NAME


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/stencil/config.yaml
    """
    return Path.home() / ".config" / "stencil" / "config.yaml"


def load_config(config_path: Path | None = None, **overrides: Any) -> StencilConfig:
    """Load configuration with hierarchy: defaults -> user -> project -> env.

    Args:
        config_path: Optional project config file. Defaults to ./stencil.yaml.
        **overrides: Field values that take precedence over every source.

    Returns:
        StencilConfig instance with merged configuration.

    Raises:
        ConfigError: If an explicit config file is missing or the
            configuration is invalid.
    """
    if config_path is not None and not config_path.exists():
        raise ConfigError(
            message=f"Config file not found: {config_path}",
            field=None,
            value=str(config_path),
        )

    token = _project_config_override.set(config_path)
    try:
        if not get_project_config_path().exists():
            logger.debug("project_config_missing", path=str(get_project_config_path()))
        return StencilConfig(**overrides)
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field or None,
            value=first_error.get("input"),
        ) from e
    finally:
        _project_config_override.reset(token)
