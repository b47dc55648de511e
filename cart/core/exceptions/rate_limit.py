"""
Rate Limiting Exceptions

All exceptions related to rate limiting operations
"""

from cart.core.exceptions.base import CartBaseError


class RateLimitError(CartBaseError):
    """Base exception for rate limiting errors."""
    pass


class RateLimitedError(RateLimitError):
    """
    Raised when the rate limiter refuses a permit.

    The current window is exhausted and the next free permit is further away
    than the acquire timeout.
    """
    pass
