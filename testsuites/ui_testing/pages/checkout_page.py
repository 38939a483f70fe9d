"""
================================================================================
Checkout Page Objects
================================================================================

The three checkout steps:
    - CheckoutStepOnePage:  customer information form
    - CheckoutStepTwoPage:  order overview with subtotal, tax and total
    - CheckoutCompletePage: confirmation

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

import allure
from loguru import logger

from testsuites.ui_testing.framework.page_base import BasePage, data_test

from .components import CartItem, parse_price
from .inventory_page import InventoryPage


@dataclass(frozen=True)
class CheckoutInformation:
    """Customer data entered on the first checkout step, plus the items to buy."""
    first_name: str
    last_name: str
    postal_code: str
    items: List[str] = field(default_factory=list)


class CheckoutStepOnePage(BasePage):
    """Customer information form."""

    URL_PATH = "/checkout-step-one.html"
    PAGE_TITLE = "Checkout: Your Information"

    FIRST_NAME_INPUT = data_test("firstName")
    LAST_NAME_INPUT = data_test("lastName")
    POSTAL_CODE_INPUT = data_test("postalCode")
    CONTINUE_BUTTON = data_test("continue")
    CANCEL_BUTTON = data_test("cancel")
    ERROR_MESSAGE = data_test("error")

    CRITICAL_ELEMENTS = (
        FIRST_NAME_INPUT,
        LAST_NAME_INPUT,
        POSTAL_CODE_INPUT,
        CONTINUE_BUTTON,
        CANCEL_BUTTON,
    )

    def enter_first_name(self, first_name: str) -> "CheckoutStepOnePage":
        self.fill(self.FIRST_NAME_INPUT, first_name)
        return self

    def enter_last_name(self, last_name: str) -> "CheckoutStepOnePage":
        self.fill(self.LAST_NAME_INPUT, last_name)
        return self

    def enter_postal_code(self, postal_code: str) -> "CheckoutStepOnePage":
        self.fill(self.POSTAL_CODE_INPUT, postal_code)
        return self

    @allure.step("Fill checkout information")
    def fill_information(self, info: CheckoutInformation) -> "CheckoutStepOnePage":
        logger.info(f"Filling checkout information for {info.first_name} {info.last_name}")
        return (
            self.enter_first_name(info.first_name)
            .enter_last_name(info.last_name)
            .enter_postal_code(info.postal_code)
        )

    @allure.step("Continue to overview")
    def click_continue(self) -> "CheckoutStepTwoPage":
        self.click(self.CONTINUE_BUTTON)
        return self._open_page(CheckoutStepTwoPage)

    @allure.step("Continue expecting a validation error")
    def click_continue_expecting_error(self) -> str:
        self.click(self.CONTINUE_BUTTON)
        text = self.retry.execute_with_result(
            lambda: self.page.locator(self.ERROR_MESSAGE).inner_text(),
            max_attempts=3,
            initial_delay=0.2,
            result_condition=lambda value: bool(value and value.strip()),
            description=f"{self.page_name}.error_message",
        )
        return (text or "").strip()

    @allure.step("Cancel checkout")
    def click_cancel(self):
        from .cart_page import ShoppingCartPage

        self.click(self.CANCEL_BUTTON)
        return self._open_page(ShoppingCartPage)


class CheckoutStepTwoPage(BasePage):
    """Order overview."""

    URL_PATH = "/checkout-step-two.html"
    PAGE_TITLE = "Checkout: Overview"

    CART_ITEM = ".cart_item"
    SUBTOTAL_LABEL = data_test("subtotal-label")
    TAX_LABEL = data_test("tax-label")
    TOTAL_LABEL = data_test("total-label")
    PAYMENT_INFO = data_test("payment-info-value")
    SHIPPING_INFO = data_test("shipping-info-value")
    FINISH_BUTTON = data_test("finish")
    CANCEL_BUTTON = data_test("cancel")

    CRITICAL_ELEMENTS = (SUBTOTAL_LABEL, TOTAL_LABEL, FINISH_BUTTON, CANCEL_BUTTON)

    def get_items_in_overview(self) -> List[CartItem]:
        return [CartItem(root, self.retry) for root in self.page.locator(self.CART_ITEM).all()]

    def get_subtotal_text(self) -> str:
        return self.get_text(self.SUBTOTAL_LABEL)

    def get_tax_text(self) -> str:
        return self.get_text(self.TAX_LABEL)

    def get_total_text(self) -> str:
        return self.get_text(self.TOTAL_LABEL)

    def get_subtotal(self) -> Decimal:
        return parse_price(self.get_subtotal_text())

    def get_tax(self) -> Decimal:
        return parse_price(self.get_tax_text())

    def get_total(self) -> Decimal:
        return parse_price(self.get_total_text())

    def get_payment_info(self) -> str:
        return self.get_text(self.PAYMENT_INFO)

    def get_shipping_info(self) -> str:
        return self.get_text(self.SHIPPING_INFO)

    @allure.step("Finish order")
    def click_finish(self) -> "CheckoutCompletePage":
        self.click(self.FINISH_BUTTON)
        return self._open_page(CheckoutCompletePage)

    @allure.step("Cancel order")
    def click_cancel(self) -> InventoryPage:
        self.click(self.CANCEL_BUTTON)
        return self._open_page(InventoryPage)


class CheckoutCompletePage(BasePage):
    """Order confirmation."""

    URL_PATH = "/checkout-complete.html"
    PAGE_TITLE = "Checkout: Complete!"

    COMPLETE_HEADER = data_test("complete-header")
    COMPLETE_TEXT = data_test("complete-text")
    PONY_EXPRESS_IMAGE = data_test("pony-express")
    BACK_HOME_BUTTON = data_test("back-to-products")

    CRITICAL_ELEMENTS = (COMPLETE_HEADER, BACK_HOME_BUTTON)

    def get_confirmation_header_text(self) -> str:
        return self.get_text(self.COMPLETE_HEADER)

    def get_completion_text(self) -> str:
        return self.get_text(self.COMPLETE_TEXT)

    def is_pony_express_image_displayed(self) -> bool:
        return self.is_visible(self.PONY_EXPRESS_IMAGE)

    @allure.step("Back to products")
    def click_back_home(self) -> InventoryPage:
        self.click(self.BACK_HOME_BUTTON)
        return self._open_page(InventoryPage)


__all__ = [
    "CheckoutCompletePage",
    "CheckoutInformation",
    "CheckoutStepOnePage",
    "CheckoutStepTwoPage",
]
