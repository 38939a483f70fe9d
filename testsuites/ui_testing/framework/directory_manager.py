"""
================================================================================
Directory Manager
================================================================================

Resolves and creates the output directories used during a test run.

Layout (relative to the project root):
    test_output/
        screenshots/<test name>/    per-test screenshots and visual artifacts
        logs/                       log files

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from loguru import logger


PROJECT_ROOT = Path(__file__).resolve().parents[3]


class DirectoryManager:
    """
    Path-resolution collaborator for screenshots, logs and visual artifacts.

    Usage:
        dirs = DirectoryManager()
        dirs.ensure_base_directories()
        shots = dirs.get_and_ensure_test_screenshot_dir("test_login_success")
    """

    def __init__(
        self,
        project_root: Optional[Union[str, Path]] = None,
        output_dir_name: str = "test_output",
    ):
        """
        Initialize directory paths (nothing is created here).

        Args:
            project_root: Root for all relative paths. Defaults to the repo root.
            output_dir_name: Name of the output directory under the root
        """
        self.project_root = Path(project_root) if project_root else PROJECT_ROOT
        self.test_output_dir = self.project_root / output_dir_name
        self.screenshot_root = self.test_output_dir / "screenshots"
        self.log_root = self.test_output_dir / "logs"

        logger.debug(
            f"DirectoryManager paths: output={self.test_output_dir}, "
            f"screenshots={self.screenshot_root}, logs={self.log_root}"
        )

    def ensure_base_directories(self) -> None:
        """Create the output, screenshot and log roots if missing."""
        for path, description in (
            (self.test_output_dir, "Base test output"),
            (self.screenshot_root, "Base screenshot"),
            (self.log_root, "Base log"),
        ):
            self.ensure_directory(path, description)

    def get_and_ensure_test_screenshot_dir(self, test_folder_name: str) -> Path:
        """
        Return (and create) the screenshot directory for one test.

        Args:
            test_folder_name: Folder name, already safe for the filesystem

        Raises:
            ValueError: If the name is empty or whitespace
        """
        if not test_folder_name or not test_folder_name.strip():
            logger.error("Invalid test folder name (empty). Cannot create screenshot directory.")
            raise ValueError("Test-specific folder name cannot be empty or whitespace.")

        path = self.screenshot_root / test_folder_name
        self.ensure_directory(path, f"Screenshot folder for '{test_folder_name}'")
        return path

    def resolve(self, path: Union[str, Path]) -> Path:
        """Resolve a configured path against the project root (absolute paths pass through)."""
        return self.project_root / Path(path)

    @staticmethod
    def ensure_directory(path: Path, description: str = "Directory") -> Path:
        if path.is_dir():
            logger.trace(f"{description} already exists: {path}")
            return path
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create {description.lower()} at {path}: {e}")
            raise
        logger.debug(f"{description} created: {path}")
        return path


__all__ = [
    "DirectoryManager",
    "PROJECT_ROOT",
]
