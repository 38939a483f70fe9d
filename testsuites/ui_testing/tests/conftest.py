"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, page objects, retry and visual regression, and failure capture.

Key Features:
- Session-scoped browser, function-scoped context and page
- Page Object fixtures (login page opened, inventory page logged in)
- RetryExecutor and VisualRegressionEngine per test
- Screenshot capture on failure

================================================================================
"""

from typing import Generator

import pytest
from loguru import logger
from playwright.sync_api import BrowserContext, Error as PlaywrightError, Page

from testsuites.ui_testing.framework.browser_manager import BrowserManager
from testsuites.ui_testing.framework.directory_manager import DirectoryManager
from testsuites.ui_testing.framework.page_base import BasePage
from testsuites.ui_testing.framework.retry_executor import RetryExecutor
from testsuites.ui_testing.framework.settings import (
    BrowserSettings,
    RetryPolicySettings,
    SauceDemoSettings,
    VisualTestSettings,
)
from testsuites.ui_testing.framework.visual_regression import (
    PlaywrightFrameCapture,
    VisualRegressionEngine,
    sanitize_filename,
)
from testsuites.ui_testing.pages import InventoryPage, LoginPage


# ================================================================================
# Settings Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def browser_settings() -> BrowserSettings:
    return BrowserSettings.load()


@pytest.fixture(scope="session")
def sauce_demo() -> SauceDemoSettings:
    """SauceDemo URL and demo accounts."""
    return SauceDemoSettings.load()


@pytest.fixture(scope="session")
def directory_manager() -> DirectoryManager:
    manager = DirectoryManager()
    manager.ensure_base_directories()
    return manager


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def browser_manager(browser_settings: BrowserSettings) -> Generator[BrowserManager, None, None]:
    """
    Session-scoped browser manager fixture.

    Provides a single browser for all tests in the session (per xdist worker),
    reducing browser launch overhead.
    """
    manager = BrowserManager(browser_settings)
    manager.start()
    yield manager
    manager.close()


@pytest.fixture
def context(browser_manager: BrowserManager) -> Generator[BrowserContext, None, None]:
    """Fresh, isolated browser context per test."""
    context = browser_manager.new_context()
    yield context
    browser_manager.close_context(context)


@pytest.fixture
def page(context: BrowserContext) -> Generator[Page, None, None]:
    page = context.new_page()
    yield page
    page.close()


# ================================================================================
# Core Fixtures
# ================================================================================

@pytest.fixture
def retry_executor() -> RetryExecutor:
    """Executor configured from the retry_policy section."""
    settings = RetryPolicySettings.load()
    return RetryExecutor(
        retryable_faults=settings.retryable_faults,
        max_delay=settings.max_delay_seconds,
    )


@pytest.fixture
def visual_tester(page: Page, directory_manager: DirectoryManager) -> VisualRegressionEngine:
    return VisualRegressionEngine(
        PlaywrightFrameCapture(page),
        directory_manager,
        VisualTestSettings.load(),
    )


@pytest.fixture
def visual_test_name(request) -> str:
    """Test name used to namespace baselines, e.g. "TestInventory.test_visual_user_inventory"."""
    if request.cls is not None:
        return f"{request.cls.__name__}.{request.node.name}"
    return request.node.name


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(
    page: Page,
    sauce_demo: SauceDemoSettings,
    retry_executor: RetryExecutor,
    directory_manager: DirectoryManager,
) -> LoginPage:
    """LoginPage, opened and validated."""
    return LoginPage(page, sauce_demo.page_url, retry_executor, directory_manager).open()


@pytest.fixture
def inventory_page(login_page: LoginPage, sauce_demo: SauceDemoSettings) -> InventoryPage:
    """InventoryPage reached by logging in as the standard user."""
    landed = login_page.login_as(
        sauce_demo.login_username_standard_user,
        sauce_demo.login_password,
    )
    assert isinstance(landed, InventoryPage), "Standard user should reach the inventory page"
    return landed


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Hook to capture screenshots on test failure.

    Uses any page object of the failed test to save a full-page screenshot
    under the test's screenshot folder and attach it, with the current URL,
    to the Allure report.
    """
    outcome = yield
    report = outcome.get_result()

    if report.when != "call" or not report.failed:
        return

    funcargs = getattr(item, "funcargs", {})
    page_object = next((v for v in funcargs.values() if isinstance(v, BasePage)), None)
    if page_object is None or page_object.page.is_closed():
        return

    try:
        page_object.capture_failure(sanitize_filename(item.name))
    except PlaywrightError as e:
        logger.warning(f"Failed to capture screenshot on failure: {e}")
