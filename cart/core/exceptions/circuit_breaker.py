"""
Circuit Breaker Exceptions

All exceptions related to circuit breaker operations
"""

from cart.core.exceptions.base import CartBaseError


class CircuitBreakerError(CartBaseError):
    """Base exception for circuit breaker errors."""
    pass


class CircuitBreakerOpenError(CircuitBreakerError):
    """
    Raised when the circuit breaker refuses admission (fail fast).

    Raised while the breaker is OPEN, and while it is HALF_OPEN once all
    trial permits are taken. No network call is made.
    """
    pass
