"""
================================================================================
Login Page Object
================================================================================

SauceDemo login form: credentials, submit by Enter or click, and the error
banner shown for rejected users.

================================================================================
"""

from __future__ import annotations

from typing import Union

import allure
from loguru import logger
from playwright.sync_api import expect

from testsuites.ui_testing.framework.page_base import BasePage, data_test

from .enums import LoginMode
from .inventory_page import InventoryPage


class LoginPage(BasePage):
    """Login page object."""

    URL_PATH = "/"
    DOCUMENT_TITLE = "Swag Labs"

    USERNAME_INPUT = data_test("username")
    PASSWORD_INPUT = data_test("password")
    LOGIN_BUTTON = data_test("login-button")
    ERROR_MESSAGE = data_test("error")

    CRITICAL_ELEMENTS = (USERNAME_INPUT, PASSWORD_INPUT, LOGIN_BUTTON)

    # Post-login wait before concluding the user stayed on the login page
    NAVIGATION_TIMEOUT_MS = 5000

    @allure.step("Open login page")
    def open(self) -> "LoginPage":
        self.navigate()
        self.assert_page_is_loaded()
        expect(self.page).to_have_title(self.DOCUMENT_TITLE)
        return self

    @allure.step("Enter username: {username}")
    def enter_username(self, username: str) -> "LoginPage":
        logger.info(f"Entering username '{username}' on {self.page_name}")
        self.fill(self.USERNAME_INPUT, username)
        return self

    @allure.step("Enter password")
    def enter_password(self, password: str) -> "LoginPage":
        logger.info(f"Entering password on {self.page_name}")
        self.fill(self.PASSWORD_INPUT, password, secret=True)
        return self

    def submit(self, mode: LoginMode = LoginMode.SUBMIT) -> None:
        """Send the form with Enter in the password field or a click on the login button."""
        if mode is LoginMode.SUBMIT:
            self.press(self.PASSWORD_INPUT, "Enter")
        else:
            self.click(self.LOGIN_BUTTON)

    @allure.step("Login using {mode}")
    def login_and_expect_navigation(
        self,
        mode: LoginMode = LoginMode.SUBMIT,
    ) -> Union[InventoryPage, "LoginPage"]:
        """
        Submit the form and return the page the browser lands on.

        Returns:
            InventoryPage after a successful login, otherwise this LoginPage
        """
        logger.info(f"Attempting login on {self.page_name} using {mode.value} mode")

        self.submit(mode)

        try:
            expect(self.page.locator(InventoryPage.INVENTORY_CONTAINER)).to_be_visible(
                timeout=self.NAVIGATION_TIMEOUT_MS
            )
        except AssertionError as e:
            logger.error(
                f"Login on {self.page_name} did not navigate to the inventory; "
                f"user remained on {self.page.url}: {e}"
            )
            return self

        logger.info("Login successful. Confirmed navigation to InventoryPage.")
        return self._open_page(InventoryPage)

    def login_as(
        self,
        username: str,
        password: str,
        mode: LoginMode = LoginMode.SUBMIT,
    ) -> Union[InventoryPage, "LoginPage"]:
        return (
            self.enter_username(username)
            .enter_password(password)
            .login_and_expect_navigation(mode)
        )

    @allure.step("Get error message from login page")
    def get_error_message(self) -> str:
        """Error banner text; retried briefly while the banner renders empty."""
        text = self.retry.execute_with_result(
            lambda: self.page.locator(self.ERROR_MESSAGE).inner_text(),
            max_attempts=3,
            initial_delay=0.2,
            result_condition=lambda value: bool(value and value.strip()),
            description=f"{self.page_name}.get_error_message",
        )
        logger.info(f"Retrieved error message from {self.page_name}: '{text}'")
        return (text or "").strip()


__all__ = [
    "LoginPage",
]
