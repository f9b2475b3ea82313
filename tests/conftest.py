from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Generator, Iterator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from click.testing import CliRunner


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for test environment.

    Runs automatically for all tests so log output goes to stderr at
    WARNING level and never mixes with rendered output on stdout.
    """
    from stencil.logging import configure_logging

    configure_logging(level=logging.WARNING)
    yield


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files.

    Also saves and restores the current working directory to prevent
    tests that use os.chdir() from affecting other tests.
    """
    original_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
    os.chdir(original_cwd)


@pytest.fixture
def clean_env(temp_dir: Path) -> Generator[None, None, None]:
    """Remove all STENCIL_ environment variables and isolate HOME."""
    original_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("STENCIL_"):
            del os.environ[key]
    # Keep a real ~/.config/stencil/config.yaml out of the tests
    os.environ["HOME"] = str(temp_dir / "home")
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def login_tokens() -> dict[str, str]:
    """Token values for the built-in uikit kit."""
    return {"FEATURE": "Login", "TITLE": "Sign In", "DataType": "User"}


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner.

    Example:
        >>> def test_version(cli_runner):
        ...     from stencil.main import cli
        ...     result = cli_runner.invoke(cli, ["--version"])
        ...     assert result.exit_code == 0
    """
    from click.testing import CliRunner

    return CliRunner()
