"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation and URL handling
    - Page-load validation against critical elements
    - Retry-wrapped click / fill for flaky interactions
    - Screenshot and failure capture

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence

import allure
from loguru import logger
from playwright.sync_api import Locator, Page, expect

from autotest_tools.report_tools.allure_utils import attach_image_file, attach_text

from .directory_manager import DirectoryManager
from .retry_executor import RetryExecutor
from .visual_regression import sanitize_filename


def data_test(value: str) -> str:
    """CSS selector for SauceDemo's ``data-test`` attribute."""
    return f"[data-test='{value}']"


class BasePage:
    """
    Base class for all page objects.

    Subclasses declare CRITICAL_ELEMENTS (selectors that must be visible for
    the page to count as loaded) and optionally URL_PATH and PAGE_TITLE.

    Usage:
        class CartPage(BasePage):
            URL_PATH = "/cart.html"
            PAGE_TITLE = "Your Cart"
            CRITICAL_ELEMENTS = (data_test("checkout"),)

        CartPage(page, base_url, retry).assert_page_is_loaded()
    """

    # Override in subclasses
    URL_PATH: str = "/"
    PAGE_TITLE: str = ""
    CRITICAL_ELEMENTS: Sequence[str] = ()

    TITLE_SELECTOR = data_test("title")

    def __init__(
        self,
        page: Page,
        base_url: str,
        retry: Optional[RetryExecutor] = None,
        directories: Optional[DirectoryManager] = None,
    ):
        """
        Initialize page object. No load validation happens here;
        call assert_page_is_loaded() for that.

        Args:
            page: Playwright Page object
            base_url: Application base URL
            retry: Executor for flaky interactions
            directories: Output directory resolver for screenshots
        """
        self.page = page
        self.base_url = base_url.rstrip("/")
        self.retry = retry or RetryExecutor()
        self.directories = directories or DirectoryManager()
        self.page_name = type(self).__name__
        logger.debug(f"Instantiated {self.page_name}")

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.URL_PATH}"

    def navigate(self, wait_for: str = "load") -> "BasePage":
        """Navigate to this page's URL."""
        with allure.step(f"Navigate to {self.URL_PATH}"):
            self.page.goto(self.url, wait_until=wait_for)
            logger.debug(f"Navigated to: {self.url}")
        return self

    def assert_page_is_loaded(self, timeout: Optional[int] = None) -> "BasePage":
        """
        Assert the document finished loading and every critical element is visible.

        Returns:
            self, for chaining
        """
        with allure.step(f"Assert '{self.page_name}' is loaded"):
            started = datetime.now()
            try:
                self.page.wait_for_load_state("load", timeout=timeout)
                for selector in self.CRITICAL_ELEMENTS:
                    expect(self.page.locator(selector).first).to_be_visible(timeout=timeout)
                if self.PAGE_TITLE:
                    expect(self.page.locator(self.TITLE_SELECTOR)).to_have_text(
                        self.PAGE_TITLE, timeout=timeout
                    )
            except AssertionError:
                logger.error(f"{self.page_name} did not finish loading at {self.page.url}")
                raise

            elapsed_ms = (datetime.now() - started).total_seconds() * 1000
            logger.info(f"{self.page_name} loaded and validated in {elapsed_ms:.0f}ms")
        return self

    # =========================================================================
    # Element Interactions
    # =========================================================================

    def _open_page(self, page_cls):
        """Instantiate the next page object on the same tab and validate it."""
        next_page = page_cls(self.page, self.base_url, self.retry, self.directories)
        next_page.assert_page_is_loaded()
        return next_page

    def locator(self, selector: str) -> Locator:
        return self.page.locator(selector)

    def click(
        self,
        selector: str,
        max_attempts: int = 3,
        initial_delay: float = 0.5,
        **kwargs: Any,
    ) -> None:
        """Click an element, retrying transient failures."""
        with allure.step(f"Click: {selector}"):
            self.retry.execute(
                lambda: self.page.locator(selector).click(**kwargs),
                max_attempts=max_attempts,
                initial_delay=initial_delay,
                description=f"{self.page_name}.click({selector})",
            )

    def fill(
        self,
        selector: str,
        value: str,
        max_attempts: int = 3,
        initial_delay: float = 0.5,
        secret: bool = False,
    ) -> None:
        """Fill an input, retrying transient failures."""
        shown = "*" * len(value) if secret else value
        with allure.step(f"Fill {selector}: {shown}"):
            self.retry.execute(
                lambda: self.page.locator(selector).fill(value),
                max_attempts=max_attempts,
                initial_delay=initial_delay,
                description=f"{self.page_name}.fill({selector})",
            )

    def press(
        self,
        selector: str,
        key: str,
        max_attempts: int = 3,
        initial_delay: float = 0.5,
    ) -> None:
        """Press a key on an element, retrying transient failures."""
        with allure.step(f"Press {key} on {selector}"):
            self.retry.execute(
                lambda: self.page.locator(selector).press(key),
                max_attempts=max_attempts,
                initial_delay=initial_delay,
                description=f"{self.page_name}.press({selector}, {key})",
            )

    def get_text(self, selector: str) -> str:
        return (self.page.locator(selector).inner_text() or "").strip()

    def is_visible(self, selector: str) -> bool:
        return self.page.locator(selector).is_visible()

    def get_page_title(self) -> str:
        return self.get_text(self.TITLE_SELECTOR)

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    def screenshot(
        self,
        name: str,
        test_name: str = "general",
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take a screenshot into the test's screenshot folder.

        Returns:
            Path to saved screenshot
        """
        folder = self.directories.get_and_ensure_test_screenshot_dir(sanitize_filename(test_name))
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = folder / f"{sanitize_filename(name)}_{timestamp}.png"

        self.page.screenshot(path=str(filepath), full_page=full_page)
        if attach_to_allure:
            attach_image_file(filepath, name)

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    def capture_failure(self, test_name: str) -> None:
        """Attach a full-page screenshot and the current URL."""
        with allure.step("Capture failure details"):
            self.screenshot(f"failure_{test_name}", test_name=test_name, full_page=True)
            attach_text(self.page.url, name="Current URL")


__all__ = [
    "BasePage",
    "data_test",
]
