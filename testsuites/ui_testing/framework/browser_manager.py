"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation (Playwright sync API).

Features:
    - One browser instance per session
    - Isolated contexts per test
    - Browser selection: chromium, firefox, webkit
    - Viewport and default timeout from BrowserSettings

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    sync_playwright,
)

from .settings import BrowserSettings


class BrowserManager:
    """
    Manages the browser instance and contexts for UI testing.

    Usage:
        with BrowserManager(BrowserSettings.load()) as manager:
            page = manager.new_page()
            page.goto("https://www.saucedemo.com/")
    """

    # Chromium-only flags; other engines reject them
    CHROMIUM_ARGS: List[str] = [
        "--ignore-certificate-errors",
        "--disable-dev-shm-usage",
    ]

    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "ignore_https_errors": True,
    }

    def __init__(self, settings: Optional[BrowserSettings] = None):
        """
        Initialize browser manager.

        Args:
            settings: Browser settings (defaults are used when None)
        """
        self.settings = settings or BrowserSettings()

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    def __enter__(self) -> "BrowserManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def browser_name(self) -> str:
        return self.settings.browser_type

    def start(self) -> None:
        """Start Playwright and launch the configured browser."""
        self._playwright = sync_playwright().start()
        launcher = getattr(self._playwright, self.settings.browser_type)

        launch_options: Dict[str, Any] = {"headless": self.settings.headless}
        if self.settings.browser_type == "chromium":
            launch_options["args"] = list(self.CHROMIUM_ARGS)

        self._browser = launcher.launch(**launch_options)
        logger.info(
            f"Browser started: {self.settings.browser_type} "
            f"(headless={self.settings.headless}, version={self._browser.version})"
        )

    def close(self) -> None:
        """Close all contexts, the browser and Playwright."""
        for context in self._contexts:
            try:
                context.close()
            except PlaywrightError as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            self._browser.close()
            self._browser = None

        if self._playwright:
            self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def new_context(self, **options: Any) -> BrowserContext:
        """
        Create an isolated browser context (own cookies and storage).

        Args:
            **options: Context options overriding the defaults
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {
            **self.DEFAULT_CONTEXT_OPTIONS,
            "viewport": {
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height,
            },
            **options,
        }
        context = self._browser.new_context(**context_options)
        context.set_default_timeout(self.settings.default_timeout_ms)
        self._contexts.append(context)
        return context

    def new_page(self, context: Optional[BrowserContext] = None, **context_options: Any) -> Page:
        """Create a page in the given context, or in a new one."""
        if context is None:
            context = self.new_context(**context_options)
        return context.new_page()

    def close_context(self, context: BrowserContext) -> None:
        if context in self._contexts:
            self._contexts.remove(context)
        context.close()

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser


__all__ = [
    "BrowserManager",
]
