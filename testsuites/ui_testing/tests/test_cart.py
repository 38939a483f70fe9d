"""
================================================================================
Cart Feature UI Tests
================================================================================
"""

import allure
import pytest

from testsuites.ui_testing.pages import InventoryPage, ShoppingCartPage


BACKPACK = "Sauce Labs Backpack"
BIKE_LIGHT = "Sauce Labs Bike Light"
BOLT_T_SHIRT = "Sauce Labs Bolt T-Shirt"


@allure.epic("UI Testing")
@allure.feature("Cart")
@pytest.mark.cart
class TestCart:
    """Shopping cart UI test suite."""

    @allure.story("Add to cart")
    @allure.title("Adding an item flips its button and bumps the badge")
    @pytest.mark.P0
    @pytest.mark.smoke
    def test_add_item_to_cart(self, inventory_page: InventoryPage):
        item = inventory_page.get_item_by_name(BACKPACK)
        item.add_to_cart()

        assert item.get_action_button_text() == "Remove"
        assert inventory_page.get_cart_badge_count() == 1

    @allure.story("Cart contents")
    @allure.title("Cart lists the added item with its price and quantity")
    @pytest.mark.P1
    @pytest.mark.regression
    def test_cart_shows_added_item(self, inventory_page: InventoryPage):
        item = inventory_page.get_item_by_name(BOLT_T_SHIRT)
        expected_price = item.price
        item.add_to_cart()

        cart = inventory_page.open_cart()
        assert isinstance(cart, ShoppingCartPage)

        items = cart.get_cart_items()
        assert len(items) == 1
        assert items[0].name == BOLT_T_SHIRT
        assert items[0].price == expected_price
        assert items[0].quantity == 1

    @allure.story("Remove from cart")
    @allure.title("Removing items in the cart updates contents and badge")
    @pytest.mark.P1
    @pytest.mark.regression
    def test_add_and_remove_items(self, inventory_page: InventoryPage):
        for name in (BACKPACK, BIKE_LIGHT, BOLT_T_SHIRT):
            inventory_page.get_item_by_name(name).add_to_cart()
        assert inventory_page.get_cart_badge_count() == 3

        cart = inventory_page.open_cart()
        assert sorted(cart.get_item_names()) == sorted([BACKPACK, BIKE_LIGHT, BOLT_T_SHIRT])

        cart.remove_item_by_name(BACKPACK).remove_item_by_name(BIKE_LIGHT)
        assert cart.get_item_names() == [BOLT_T_SHIRT]

        inventory_page = cart.click_continue_shopping()
        assert inventory_page.get_cart_badge_count() == 1

    @allure.story("Remove from cart")
    @allure.title("Removing from the inventory page clears the badge")
    @pytest.mark.P2
    def test_remove_from_inventory_page(self, inventory_page: InventoryPage):
        item = inventory_page.get_item_by_name(BIKE_LIGHT)
        item.add_to_cart()
        item.remove_from_cart()

        assert item.get_action_button_text() == "Add to cart"
        assert inventory_page.get_cart_badge_count() == 0
