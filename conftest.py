"""
Repository-level pytest configuration.

  - Initializes the Loguru logger from configuration once per session
  - Creates the test output directories
  - Exposes the repository root
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from autotest_tools.common import get_logger, init_logger
from testsuites.ui_testing.framework.directory_manager import DirectoryManager


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _session_setup(project_root: Path) -> Generator[None, None, None]:
    """Configure logging and output folders before any test runs."""
    init_logger()
    DirectoryManager(project_root).ensure_base_directories()
    get_logger().info(f"Test session started in {project_root}")

    yield

    get_logger().info("Test session finished")
