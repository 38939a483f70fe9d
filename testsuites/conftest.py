"""
================================================================================
Test Suites Pytest Configuration
================================================================================

Registers the markers used across the unit and UI suites and tags tests by
location.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests simulating user flows"
    )
    config.addinivalue_line(
        "markers", "visual: Visual regression checkpoints against stored baselines"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "ui: Browser-driven tests against SauceDemo"
    )
    config.addinivalue_line(
        "markers", "unit: Hermetic tests of the framework itself"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "login: Tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "inventory: Tests related to the product listing"
    )
    config.addinivalue_line(
        "markers", "cart: Tests related to the shopping cart"
    )
    config.addinivalue_line(
        "markers", "checkout: Tests related to the checkout flow"
    )


def pytest_collection_modifyitems(config, items):
    """Auto-add 'ui' / 'unit' markers based on the test's directory."""
    for item in items:
        path = str(item.fspath)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
        elif "unit" in path:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "SauceDemo UI Automation Framework",
        "=" * 60,
        "",
    ]
