"""
Persistence Exceptions

Raised by the order and coffee stores. PersistenceError is the only error the
order endpoint exposes to clients.
"""

from cart.core.exceptions.base import CartBaseError


class PersistenceError(CartBaseError):
    """Raised when the relational store rejects or fails an operation."""
    pass
