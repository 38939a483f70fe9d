"""
================================================================================
Autotest Tools
================================================================================

Infrastructure utilities shared by the test suites.

Modules:
    - common: Global configuration and Loguru logging setup
    - report_tools: Allure attachment helpers and report generation

Example:
    from autotest_tools.common import get_config, init_logger
    from autotest_tools.report_tools.allure_utils import attach_image_file

    init_logger()
    tolerance = get_config("visual_testing.default_comparison_tolerance_percent")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
