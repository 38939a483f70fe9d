"""
================================================================================
Autotest Tools Common Utilities
================================================================================

Shared configuration management and logging setup for the framework.

Exports:
    - get_config / set_config / get_section: dot-path configuration access
    - reload_config: re-read YAML files (optionally from another directory)
    - init_logger / get_logger: loguru logger with standard settings

Usage:
    from autotest_tools.common import get_config, init_logger

    init_logger()
    base_url = get_config("sauce_demo.page_url", "https://www.saucedemo.com")

================================================================================
"""

from .global_config import (
    get_config,
    get_logger,
    get_section,
    init_logger,
    reload_config,
    set_config,
)

__all__ = [
    "get_config",
    "get_logger",
    "get_section",
    "init_logger",
    "reload_config",
    "set_config",
]
