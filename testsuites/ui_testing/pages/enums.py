"""Enumerations shared by the SauceDemo page objects."""

from enum import Enum


class SortByType(Enum):
    """How a sort option is selected in the product dropdown."""
    TEXT = "text"
    VALUE = "value"


class LoginMode(Enum):
    """How the login form is submitted."""
    SUBMIT = "submit"  # Enter in the password field
    CLICK = "click"    # click the login button


__all__ = [
    "LoginMode",
    "SortByType",
]
