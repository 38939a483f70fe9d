"""
================================================================================
Inventory Page Object
================================================================================

Product listing: sorting, item components, cart badge and cart navigation.

================================================================================
"""

from __future__ import annotations

from typing import List

import allure
from loguru import logger

from testsuites.ui_testing.framework.page_base import BasePage, data_test

from .components import InventoryItem
from .enums import SortByType


class InventoryPage(BasePage):
    """Inventory (products) page object."""

    URL_PATH = "/inventory.html"
    PAGE_TITLE = "Products"

    SORT_DROPDOWN = data_test("product-sort-container")
    INVENTORY_CONTAINER = data_test("inventory-container")
    INVENTORY_LIST = data_test("inventory-list")
    INVENTORY_ITEM = data_test("inventory-item")
    CART_LINK = data_test("shopping-cart-link")
    CART_BADGE = data_test("shopping-cart-badge")

    CRITICAL_ELEMENTS = (SORT_DROPDOWN, INVENTORY_CONTAINER, INVENTORY_LIST)

    @allure.step("Sort products by {by} '{option}'")
    def sort_products(self, by: SortByType, option: str) -> "InventoryPage":
        """
        Select a sort option.

        Args:
            by: Match the option by visible text or by value ("az", "za", "lohi", "hilo")
            option: Option text or value
        """
        dropdown = self.page.locator(self.SORT_DROPDOWN)
        if by is SortByType.TEXT:
            self.retry.execute(lambda: dropdown.select_option(label=option), initial_delay=0.5)
        else:
            self.retry.execute(lambda: dropdown.select_option(value=option), initial_delay=0.5)
        logger.info(f"Sorted products by {by.value} '{option}'")
        return self

    def get_selected_sort_text(self) -> str:
        return self.page.locator(self.SORT_DROPDOWN).evaluate(
            "el => el.options[el.selectedIndex].text"
        )

    def get_selected_sort_value(self) -> str:
        return self.page.locator(self.SORT_DROPDOWN).input_value()

    @allure.step("Get inventory items")
    def get_inventory_items(self, min_expected_items: int = 1) -> List[InventoryItem]:
        """
        Collect the product cards once at least ``min_expected_items`` have rendered.

        Raises:
            AssertionError: If fewer items are present after retrying
        """
        items = self.retry.execute_with_result(
            lambda: self.page.locator(self.INVENTORY_ITEM).all(),
            max_attempts=3,
            initial_delay=0.5,
            result_condition=lambda found: len(found) >= min_expected_items,
            description=f"{self.page_name}.get_inventory_items",
        )
        if len(items) < min_expected_items:
            raise AssertionError(
                f"Expected at least {min_expected_items} inventory items, found {len(items)}"
            )
        logger.debug(f"Found {len(items)} inventory items")
        return [InventoryItem(root, self.retry) for root in items]

    def get_item_by_name(self, name: str) -> InventoryItem:
        for item in self.get_inventory_items():
            if item.name == name:
                return item
        raise LookupError(f"No inventory item named '{name}'")

    def get_item_names(self) -> List[str]:
        return [item.name for item in self.get_inventory_items()]

    def get_cart_badge_count(self) -> int:
        badge = self.page.locator(self.CART_BADGE)
        if badge.count() == 0:
            return 0
        return int(badge.inner_text().strip() or 0)

    @allure.step("Open shopping cart")
    def open_cart(self):
        from .cart_page import ShoppingCartPage

        self.click(self.CART_LINK)
        return self._open_page(ShoppingCartPage)


__all__ = [
    "InventoryPage",
]
