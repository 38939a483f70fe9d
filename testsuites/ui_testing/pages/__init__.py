"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the SauceDemo pages.

Each page class encapsulates:
    - Element locators (data-test attributes)
    - Critical elements checked by assert_page_is_loaded()
    - Page-specific actions, returning the next page object

Author: Automation Team
License: MIT
================================================================================
"""

from .cart_page import ShoppingCartPage
from .checkout_page import (
    CheckoutCompletePage,
    CheckoutInformation,
    CheckoutStepOnePage,
    CheckoutStepTwoPage,
)
from .components import CartItem, InventoryItem
from .enums import LoginMode, SortByType
from .inventory_page import InventoryPage
from .login_page import LoginPage

__all__ = [
    "CartItem",
    "CheckoutCompletePage",
    "CheckoutInformation",
    "CheckoutStepOnePage",
    "CheckoutStepTwoPage",
    "InventoryItem",
    "InventoryPage",
    "LoginMode",
    "LoginPage",
    "ShoppingCartPage",
    "SortByType",
]
