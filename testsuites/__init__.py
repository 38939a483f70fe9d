"""
Test suites package.

  - ui_testing: SauceDemo page objects, the retry and visual regression
    framework, and the browser-driven tests
  - unit: hermetic tests of the framework (no browser, no network)

Kept importable so `run_tests.py` and IDEs can resolve framework modules.
"""
