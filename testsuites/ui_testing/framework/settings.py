"""
================================================================================
Typed Settings
================================================================================

Binds configuration sections (see autotest_tools.common) to typed, validated
settings objects.

Sections:
    - browser:        BrowserSettings
    - retry_policy:   RetryPolicySettings
    - visual_testing: VisualTestSettings
    - sauce_demo:     SauceDemoSettings

Environment overrides arrive as strings (SAUCE_DEMO__LOGIN_PASSWORD=...), so
every field is coerced to the type of its declared default before validation.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import MISSING, dataclass, field, fields
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import urlparse

from loguru import logger

from autotest_tools.common import get_section


S = TypeVar("S")

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

# Environment spellings that clear an Optional field
NULL_VALUES = ("", "none", "null")


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


def _convert_type(value: Any, reference: Any, name: str = "value") -> Any:
    """
    Convert a raw configuration value to match the reference type.

    Used mainly for environment variables, which are always strings.

    Raises:
        ConfigurationError: If a numeric field receives a non-numeric string
    """
    if reference is None or not isinstance(value, str):
        return value

    if isinstance(reference, bool):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if isinstance(reference, int):
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(f"{name} must be an integer, got '{value}'") from e
    if isinstance(reference, float):
        try:
            return float(value)
        except ValueError as e:
            raise ConfigurationError(f"{name} must be a number, got '{value}'") from e
    if isinstance(reference, list):
        return [item.strip() for item in value.split(",") if item.strip()]

    return value


def _bind(cls: Type[S], section: str, data: Optional[Dict[str, Any]] = None) -> S:
    raw = get_section(section) if data is None else dict(data)
    kwargs: Dict[str, Any] = {}

    for f in fields(cls):
        if f.name not in raw:
            continue
        value = raw[f.name]
        if isinstance(value, str) and value.strip().lower() in NULL_VALUES and "Optional" in str(f.type):
            kwargs[f.name] = None
            continue
        if f.default is not MISSING:
            reference = f.default
        elif f.default_factory is not MISSING:
            reference = f.default_factory()
        else:
            reference = ""
        kwargs[f.name] = _convert_type(value, reference, f"{section}.{f.name}")

    unknown = set(raw) - {f.name for f in fields(cls)}
    if unknown:
        logger.debug(f"Ignoring unknown keys in '{section}': {sorted(unknown)}")

    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ConfigurationError(f"Section '{section}' is incomplete: {e}") from e


# ================================================================================
# Settings Sections
# ================================================================================

@dataclass(frozen=True)
class BrowserSettings:
    """Browser launch and context options."""
    browser_type: str = "chromium"
    headless: bool = True
    viewport_width: int = 1920
    viewport_height: int = 1080
    default_timeout_ms: int = 10000

    def __post_init__(self) -> None:
        if self.browser_type not in SUPPORTED_BROWSERS:
            raise ConfigurationError(
                f"browser.browser_type must be one of {SUPPORTED_BROWSERS}, "
                f"got '{self.browser_type}'"
            )
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise ConfigurationError("browser viewport dimensions must be positive")

    @classmethod
    def load(cls, data: Optional[Dict[str, Any]] = None) -> "BrowserSettings":
        settings = _bind(cls, "browser", data)
        if os.getenv("CI") and not settings.headless:
            logger.info("CI environment detected. Forcing headless browser mode.")
            settings = BrowserSettings(
                browser_type=settings.browser_type,
                headless=True,
                viewport_width=settings.viewport_width,
                viewport_height=settings.viewport_height,
                default_timeout_ms=settings.default_timeout_ms,
            )
        return settings


@dataclass(frozen=True)
class RetryPolicySettings:
    """
    Fault kinds considered transient for browser interactions.

    Each entry is a dotted import path ("playwright.sync_api.TimeoutError")
    or a bare class name. An empty list retries every failure.
    """
    retryable_faults: List[str] = field(default_factory=list)
    max_delay_seconds: Optional[float] = 30.0

    def __post_init__(self) -> None:
        if self.max_delay_seconds is not None and self.max_delay_seconds < 0:
            raise ConfigurationError("retry_policy.max_delay_seconds must be >= 0")

    @classmethod
    def load(cls, data: Optional[Dict[str, Any]] = None) -> "RetryPolicySettings":
        return _bind(cls, "retry_policy", data)


@dataclass(frozen=True)
class VisualTestSettings:
    """Baseline storage and comparison defaults for visual regression checks."""
    baseline_directory: str = "visual_baselines"
    auto_create_baseline_if_missing: bool = True
    warn_on_automatic_baseline_creation: bool = True
    default_comparison_tolerance_percent: float = 0.20

    def __post_init__(self) -> None:
        if not str(self.baseline_directory or "").strip():
            raise ConfigurationError("visual_testing.baseline_directory is required")
        tolerance = self.default_comparison_tolerance_percent
        if not isinstance(tolerance, (int, float)) or not 0 <= tolerance <= 100:
            raise ConfigurationError(
                "visual_testing.default_comparison_tolerance_percent must be between 0 and 100"
            )

    @classmethod
    def load(cls, data: Optional[Dict[str, Any]] = None) -> "VisualTestSettings":
        return _bind(cls, "visual_testing", data)


@dataclass(frozen=True)
class SauceDemoSettings:
    """Target site URL and demo accounts."""
    page_url: str
    login_username_standard_user: str
    login_username_locked_out_user: str
    login_username_problem_user: str
    login_username_performance_glitch_user: str
    login_username_error_user: str
    login_username_visual_user: str
    login_password: str

    def __post_init__(self) -> None:
        for f in fields(self):
            if not str(getattr(self, f.name) or "").strip():
                raise ConfigurationError(f"sauce_demo.{f.name} is required")
        parsed = urlparse(self.page_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"sauce_demo.page_url must be an absolute http(s) URL, got '{self.page_url}'"
            )

    @classmethod
    def load(cls, data: Optional[Dict[str, Any]] = None) -> "SauceDemoSettings":
        return _bind(cls, "sauce_demo", data)


__all__ = [
    "BrowserSettings",
    "ConfigurationError",
    "RetryPolicySettings",
    "SauceDemoSettings",
    "VisualTestSettings",
]
