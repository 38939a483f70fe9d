"""
================================================================================
Page Components
================================================================================

Repeated fragments inside SauceDemo pages, scoped to a root locator.

    - InventoryItem: one product card on the inventory page
    - CartItem:      one row in the cart or checkout overview

================================================================================
"""

from __future__ import annotations

import re
from decimal import Decimal

import allure
from loguru import logger
from playwright.sync_api import Locator

from testsuites.ui_testing.framework.page_base import data_test
from testsuites.ui_testing.framework.retry_executor import RetryExecutor, retryable


_PRICE_PATTERN = re.compile(r"\$?\s*(\d+(?:\.\d+)?)")


def parse_price(text: str) -> Decimal:
    """Extract the amount from labels such as "$29.99" or "Item total: $29.99"."""
    match = _PRICE_PATTERN.search(text or "")
    if not match:
        raise ValueError(f"No price found in '{text}'")
    return Decimal(match.group(1))


class PageComponent:
    """Base for components rooted at a single locator."""

    def __init__(self, root: Locator, retry: RetryExecutor):
        self.root = root
        self.retry = retry

    def _text(self, selector: str) -> str:
        return (self.root.locator(selector).inner_text() or "").strip()


class InventoryItem(PageComponent):
    """A product card: image, name, description, price and action button."""

    IMAGE = "img.inventory_item_img"
    NAME = ".inventory_item_name"
    DESCRIPTION = ".inventory_item_desc"
    PRICE = ".inventory_item_price"
    ACTION_BUTTON = "button.btn_inventory"

    @property
    def image(self) -> Locator:
        return self.root.locator(self.IMAGE)

    @property
    def name(self) -> str:
        return self._text(self.NAME)

    @property
    def description(self) -> str:
        return self._text(self.DESCRIPTION)

    @property
    def price_text(self) -> str:
        return self._text(self.PRICE)

    @property
    def price(self) -> Decimal:
        return parse_price(self.price_text)

    @property
    def action_button(self) -> Locator:
        return self.root.locator(self.ACTION_BUTTON)

    def get_action_button_text(self) -> str:
        return (self.action_button.inner_text() or "").strip()

    @allure.step("Click item action button")
    @retryable(max_attempts=3, initial_delay=0.5)
    def click_action_button(self) -> None:
        button_text = self.get_action_button_text()
        logger.info(f"Clicking '{button_text}' for item '{self.name}'")
        self.action_button.click()

    def add_to_cart(self) -> None:
        if self.get_action_button_text().lower() != "add to cart":
            raise AssertionError(f"Item '{self.name}' is already in the cart")
        self.click_action_button()

    def remove_from_cart(self) -> None:
        if self.get_action_button_text().lower() != "remove":
            raise AssertionError(f"Item '{self.name}' is not in the cart")
        self.click_action_button()


class CartItem(PageComponent):
    """A cart or overview row: name, description, price, quantity."""

    NAME = data_test("inventory-item-name")
    DESCRIPTION = data_test("inventory-item-desc")
    PRICE = data_test("inventory-item-price")
    QUANTITY = ".cart_quantity"
    REMOVE_BUTTON = "button.cart_button"

    @property
    def name(self) -> str:
        return self._text(self.NAME)

    @property
    def description(self) -> str:
        return self._text(self.DESCRIPTION)

    @property
    def price_text(self) -> str:
        return self._text(self.PRICE)

    @property
    def price(self) -> Decimal:
        return parse_price(self.price_text)

    @property
    def quantity(self) -> int:
        return int(self._text(self.QUANTITY) or 0)

    @allure.step("Remove item from cart")
    def remove(self) -> None:
        name = self.name
        self.retry.execute(
            lambda: self.root.locator(self.REMOVE_BUTTON).click(),
            max_attempts=3,
            initial_delay=0.5,
            description=f"remove '{name}'",
        )
        logger.info(f"Removed '{name}' from cart")


__all__ = [
    "CartItem",
    "InventoryItem",
    "PageComponent",
    "parse_price",
]
