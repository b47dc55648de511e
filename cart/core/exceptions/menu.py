"""
Menu Exceptions
"""

from cart.core.exceptions.base import CartBaseError


class MenuError(CartBaseError):
    """Base exception for menu errors."""
    pass


class MenuConfigMissingError(MenuError):
    """
    Raised when the coffee configuration is missing or blank.

    The refresh is aborted and the current menu snapshot is kept.
    """
    pass
