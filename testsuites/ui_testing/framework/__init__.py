"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework with retry and visual regression.

Components:
    - retry_executor: Retry policies with exponential backoff and fault classification
    - visual_regression: Baseline capture, comparison and diff artifacts
    - image_compare: Pixel comparison and diff masks (Pillow)
    - settings: Typed configuration sections
    - directory_manager: Output directory layout
    - page_base: Base page object for common operations
    - browser_manager: Browser lifecycle management

Author: Automation Team
License: MIT
================================================================================
"""

from .browser_manager import BrowserManager
from .directory_manager import DirectoryManager
from .page_base import BasePage
from .retry_executor import RetryExecutor, RetryPolicy, retryable
from .settings import (
    BrowserSettings,
    ConfigurationError,
    RetryPolicySettings,
    SauceDemoSettings,
    VisualTestSettings,
)
from .visual_regression import (
    BaselineCreatedWarning,
    PlaywrightFrameCapture,
    VisualRegressionEngine,
)

__all__ = [
    "BaselineCreatedWarning",
    "BasePage",
    "BrowserManager",
    "BrowserSettings",
    "ConfigurationError",
    "DirectoryManager",
    "PlaywrightFrameCapture",
    "RetryExecutor",
    "RetryPolicy",
    "RetryPolicySettings",
    "SauceDemoSettings",
    "VisualRegressionEngine",
    "VisualTestSettings",
    "retryable",
]
