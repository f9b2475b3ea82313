"""Shared fixtures for CLI command tests.

Common fixtures available from parent conftest.py:
- cli_runner: Click CLI test runner
- temp_dir: Temporary directory for test files
- clean_env: Clean environment without STENCIL_ vars
- login_tokens: Token values for the uikit kit
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture
def workdir(temp_dir: Path, clean_env: None) -> Path:
    """Run the CLI from an empty directory with no config files."""
    os.chdir(temp_dir)
    return temp_dir
