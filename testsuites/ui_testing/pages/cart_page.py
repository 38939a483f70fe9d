"""
================================================================================
Shopping Cart Page Object
================================================================================
"""

from __future__ import annotations

from typing import List

import allure
from loguru import logger

from testsuites.ui_testing.framework.page_base import BasePage, data_test

from .checkout_page import CheckoutStepOnePage
from .components import CartItem
from .inventory_page import InventoryPage


class ShoppingCartPage(BasePage):
    """Cart contents with checkout and continue-shopping actions."""

    URL_PATH = "/cart.html"
    PAGE_TITLE = "Your Cart"

    CART_ITEM = ".cart_item"
    CONTINUE_SHOPPING_BUTTON = data_test("continue-shopping")
    CHECKOUT_BUTTON = data_test("checkout")

    CRITICAL_ELEMENTS = (CHECKOUT_BUTTON, CONTINUE_SHOPPING_BUTTON)

    def get_cart_items(self) -> List[CartItem]:
        items = [CartItem(root, self.retry) for root in self.page.locator(self.CART_ITEM).all()]
        logger.debug(f"Cart holds {len(items)} item(s)")
        return items

    def get_item_names(self) -> List[str]:
        return [item.name for item in self.get_cart_items()]

    @allure.step("Remove '{item_name}' from cart")
    def remove_item_by_name(self, item_name: str) -> "ShoppingCartPage":
        for item in self.get_cart_items():
            if item.name == item_name:
                item.remove()
                return self
        raise LookupError(f"Item '{item_name}' is not in the cart")

    @allure.step("Proceed to checkout")
    def click_checkout(self) -> CheckoutStepOnePage:
        self.click(self.CHECKOUT_BUTTON)
        return self._open_page(CheckoutStepOnePage)

    @allure.step("Continue shopping")
    def click_continue_shopping(self) -> InventoryPage:
        self.click(self.CONTINUE_SHOPPING_BUTTON)
        return self._open_page(InventoryPage)


__all__ = [
    "ShoppingCartPage",
]
