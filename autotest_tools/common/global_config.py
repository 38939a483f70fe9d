"""
================================================================================
Global Configuration for the Automation Framework
================================================================================

This module provides centralized configuration management for the framework,
including logging setup and configuration file loading.

Features:
    - Module-level configuration store shared by every test in the process
    - YAML-based configuration loading with environment-specific overlays
    - Environment variable support (SECTION__KEY overrides section.key)
    - Centralized Loguru logging configuration

Author: Automation Team
License: MIT
================================================================================
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from loguru import logger

# Global configuration storage
_config: Dict[str, Any] = {}
_config_dir: Optional[Path] = None
_logger_initialized: bool = False

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)


def init_logger(level: str = None, format_str: str = None) -> None:
    """
    Initializes the global Loguru logger with consistent configuration.

    This function should be called once at session start (the root conftest
    does it) to ensure consistent logging across pages, services and tests.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_str: Custom log format string. Defaults to config value.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    # Load config first to get logging settings
    _ensure_config_loaded()

    log_level = level or get_config("logging.level", "INFO")
    log_format = format_str or get_config("logging.format", DEFAULT_LOG_FORMAT)

    # Remove default logger and add configured one
    logger.remove()
    logger.add(
        sys.stderr,
        level=str(log_level).upper(),
        format=log_format,
        colorize=True,
        backtrace=True,
        diagnose=True,
    )

    log_file = get_config("logging.file", None)
    if log_file:
        log_dir = Path(log_file).parent
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=str(log_level).upper(),
            format=log_format.replace("{level: <8}", "{level}"),  # Remove padding for file
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
            compression="zip",
            enqueue=True,
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {log_level}")


def get_logger():
    """
    Returns the configured Loguru logger instance.

    Ensures the logger is initialized before returning.
    """
    if not _logger_initialized:
        init_logger()
    return logger


def _ensure_config_loaded() -> None:
    """Ensures the configuration is loaded."""
    if not _config:
        _load_config()


def _candidate_config_dirs() -> list:
    if _config_dir is not None:
        return [_config_dir]

    env_dir = os.getenv("AUTOTEST_CONFIG_DIR")
    candidates = [Path(env_dir)] if env_dir else []
    candidates += [
        Path("config"),
        Path(__file__).parent.parent.parent / "config",
    ]
    return candidates


def _load_config() -> None:
    """
    Loads configuration from YAML files and environment variables.

    Configuration loading order:
        1. Default configuration file (config/config.yaml)
        2. Environment-specific configuration (config/{ENV}.yaml)
        3. Environment variables (override YAML settings)
    """
    global _config

    config_dir = None
    for dir_path in _candidate_config_dirs():
        if dir_path.exists():
            config_dir = dir_path
            break

    if not config_dir:
        logger.warning("No configuration directory found. Using defaults.")
        _config = _get_defaults()
        _apply_env_overrides()
        return

    default_config_path = config_dir / "config.yaml"
    if default_config_path.exists():
        with open(default_config_path, "r", encoding="utf-8") as f:
            _config = _deep_merge(_get_defaults(), yaml.safe_load(f) or {})
        logger.debug(f"Loaded configuration from {default_config_path}")
    else:
        _config = _get_defaults()

    # Load environment-specific config (optional)
    env = os.getenv("ENVIRONMENT", os.getenv("ENV", "dev"))
    env_config_path = config_dir / f"{env}.yaml"
    if env_config_path.exists():
        with open(env_config_path, "r", encoding="utf-8") as f:
            env_config = yaml.safe_load(f) or {}
        _config = _deep_merge(_config, env_config)
        logger.debug(f"Merged environment config: {env_config_path}")

    _apply_env_overrides()


def _get_defaults() -> Dict[str, Any]:
    """Returns default configuration values."""
    return {
        "logging": {
            "level": "INFO",
            "format": DEFAULT_LOG_FORMAT,
        },
        "browser": {
            "browser_type": "chromium",
            "headless": True,
            "viewport_width": 1920,
            "viewport_height": 1080,
            "default_timeout_ms": 10000,
        },
        "retry_policy": {
            "retryable_faults": [
                "playwright.sync_api.TimeoutError",
                "playwright.sync_api.Error",
            ],
            "max_delay_seconds": 30.0,
        },
        "visual_testing": {
            "baseline_directory": "visual_baselines",
            "auto_create_baseline_if_missing": True,
            "warn_on_automatic_baseline_creation": True,
            "default_comparison_tolerance_percent": 0.20,
        },
    }


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merges two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides() -> None:
    """
    Applies environment variable overrides to the configuration.

    Environment variable naming convention:
        - Use double underscore to separate nested keys
        - Example: VISUAL_TESTING__AUTO_CREATE_BASELINE_IF_MISSING=false
          overrides visual_testing.auto_create_baseline_if_missing
    """
    for key, value in os.environ.items():
        if "__" in key and not key.startswith("_"):
            parts = [p.lower() for p in key.split("__")]
            _set_nested(_config, parts, value)


def _set_nested(d: Dict, keys: list, value: Any) -> None:
    """Sets a nested dictionary value using a list of keys."""
    for key in keys[:-1]:
        existing = d.get(key)
        if not isinstance(existing, dict):
            existing = {}
            d[key] = existing
        d = existing
    d[keys[-1]] = value


def get_config(key: str, default: Any = None) -> Any:
    """
    Retrieves a configuration value using a dot-separated key path.

    Args:
        key: Dot-separated key path (e.g., "logging.level", "sauce_demo.page_url").
        default: Default value to return if key is not found.

    Returns:
        The configuration value, or the default if not found.

    Examples:
        >>> get_config("logging.level", "INFO")
        "DEBUG"
        >>> get_config("visual_testing.default_comparison_tolerance_percent", 0.2)
        0.2
    """
    _ensure_config_loaded()

    value = _config
    for k in key.split("."):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default

    return value


def get_section(section: str) -> Dict[str, Any]:
    """Returns a copy of a whole configuration section (empty if absent)."""
    value = get_config(section, {})
    return dict(value) if isinstance(value, dict) else {}


def set_config(key: str, value: Any) -> None:
    """
    Sets a configuration value at runtime.

    Args:
        key: Dot-separated key path.
        value: Value to set.
    """
    _ensure_config_loaded()
    _set_nested(_config, key.split("."), value)


def reload_config(config_dir: Optional[Union[str, Path]] = None) -> None:
    """
    Reloads the configuration from files.

    Args:
        config_dir: Load from this directory instead of the default search
            path. Passing None restores the default search path.
    """
    global _config, _config_dir, _logger_initialized
    _config = {}
    _config_dir = Path(config_dir) if config_dir is not None else None
    _logger_initialized = False
    _load_config()
    init_logger()
    logger.info("Configuration reloaded.")
