"""Token sets: placeholder values for one scaffold invocation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from stencil.engine.errors import MissingPlaceholder, ScaffoldIssue, UnknownPlaceholder
from stencil.engine.syntax import is_valid_placeholder_name
from stencil.exceptions import TokenParseError
from stencil.logging import get_logger

__all__ = ["TokenSet", "ValidationOutcome"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of validating a token set against required placeholders.

    Attributes:
        missing: Required names with no value or an empty value, sorted.
        unknown: Supplied names no template references (strict only), sorted.
    """

    missing: tuple[str, ...] = ()
    unknown: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing and not self.unknown

    @property
    def errors(self) -> tuple[ScaffoldIssue, ...]:
        """Every failure as a reported issue, missing names first."""
        return (
            *(MissingPlaceholder(name) for name in self.missing),
            *(UnknownPlaceholder(name) for name in self.unknown),
        )


class TokenSet(Mapping[str, str]):
    """Immutable mapping of placeholder name to replacement value.

    Keys must be valid placeholder names; values are stored as strings.

    Example:
        tokens = TokenSet({"FEATURE": "Login", "TITLE": "Sign In"})
        outcome = tokens.validate({"FEATURE", "TITLE", "DataType"})
        outcome.missing  # ("DataType",)
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        checked: dict[str, str] = {}
        for key, value in (values or {}).items():
            if not isinstance(key, str) or not is_valid_placeholder_name(key):
                raise TokenParseError(f"Invalid placeholder name: {key!r}")
            checked[key] = "" if value is None else str(value)
        self._values: Mapping[str, str] = MappingProxyType(checked)

    # -- Mapping protocol --------------------------------------------------

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"TokenSet({dict(self._values)!r})"

    # -- Construction ------------------------------------------------------

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> TokenSet:
        """Build from a mapping; non-string scalar values are stringified."""
        return cls(values)

    @classmethod
    def from_pairs(cls, pairs: Iterable[str]) -> TokenSet:
        """Build from ``KEY=VALUE`` strings, as given on the command line.

        Later pairs override earlier ones. The value may be empty or contain
        further ``=`` characters.

        Raises:
            TokenParseError: If a pair has no ``=`` or an invalid name.
        """
        values: dict[str, str] = {}
        for pair in pairs:
            key, sep, value = pair.partition("=")
            key = key.strip()
            if not sep:
                raise TokenParseError(
                    f"Expected KEY=VALUE, got {pair!r}", source=pair
                )
            if not is_valid_placeholder_name(key):
                raise TokenParseError(
                    f"Invalid placeholder name {key!r} in {pair!r}", source=pair
                )
            values[key] = value
        return cls(values)

    @classmethod
    def from_file(cls, path: Path) -> TokenSet:
        """Load a YAML mapping of placeholder values.

        Raises:
            TokenParseError: If the file is unreadable, not valid YAML, or
                not a mapping of scalars.
        """
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except OSError as e:
            raise TokenParseError(
                f"Cannot read tokens file {path}: {e}", source=str(path)
            ) from e
        except yaml.YAMLError as e:
            raise TokenParseError(
                f"Invalid YAML in tokens file {path}: {e}", source=str(path)
            ) from e

        if loaded is None:
            logger.warning("tokens_file_empty", path=str(path))
            return cls()
        if not isinstance(loaded, dict):
            raise TokenParseError(
                f"Tokens file {path} must contain a mapping", source=str(path)
            )
        nested = sorted(str(k) for k, v in loaded.items() if isinstance(v, dict | list))
        if nested:
            raise TokenParseError(
                f"Tokens file {path} has non-scalar values for: {', '.join(nested)}",
                source=str(path),
            )
        return cls(loaded)

    def merged(self, other: Mapping[str, Any]) -> TokenSet:
        """New token set with *other*'s values taking precedence."""
        return TokenSet({**self._values, **other})

    def restricted(self, names: Iterable[str]) -> TokenSet:
        """New token set holding only the entries named in *names*."""
        keep = set(names)
        return TokenSet({k: v for k, v in self._values.items() if k in keep})

    # -- Validation --------------------------------------------------------

    def validate(
        self,
        required_placeholders: Iterable[str],
        *,
        strict: bool = True,
    ) -> ValidationOutcome:
        """Check this token set against the batch's required placeholders.

        Every problem is reported in one pass. Pure: no side effects beyond
        a debug log record.

        Args:
            required_placeholders: Union of placeholder names across all
                documents in the batch.
            strict: Also report supplied names that nothing references.

        Returns:
            A :class:`ValidationOutcome`.
        """
        required = frozenset(required_placeholders)
        missing = tuple(sorted(n for n in required if not self._values.get(n)))
        unknown: tuple[str, ...] = ()
        if strict:
            unknown = tuple(sorted(set(self._values) - required))

        logger.debug(
            "tokens_validated",
            required=sorted(required),
            missing=list(missing),
            unknown=list(unknown),
            strict=strict,
        )
        return ValidationOutcome(missing=missing, unknown=unknown)
