"""
Exception Module

Structured exception hierarchy for the cart service, organized by theme.

Module Structure:
-----------------
- **base.py**: CartBaseError base class + ConfigurationError
- **persistence.py**: Relational store exceptions
- **downstream.py**: Points sink exceptions
- **circuit_breaker.py**: Circuit breaker exceptions
- **rate_limit.py**: Rate limiting exceptions
- **menu.py**: Menu refresh exceptions

Usage:
------
```python
from cart.core.exceptions import PersistenceError, DownstreamServerError
```
"""

from cart.core.exceptions.base import CartBaseError, ConfigurationError
from cart.core.exceptions.circuit_breaker import (
    CircuitBreakerError,
    CircuitBreakerOpenError,
)
from cart.core.exceptions.downstream import (
    DownstreamClientError,
    DownstreamError,
    DownstreamServerError,
    DownstreamTransportError,
)
from cart.core.exceptions.menu import MenuConfigMissingError, MenuError
from cart.core.exceptions.persistence import PersistenceError
from cart.core.exceptions.rate_limit import RateLimitedError, RateLimitError

__all__ = [
    # Base
    "CartBaseError",
    "ConfigurationError",
    # Persistence
    "PersistenceError",
    # Downstream
    "DownstreamError",
    "DownstreamServerError",
    "DownstreamClientError",
    "DownstreamTransportError",
    # Circuit Breaker
    "CircuitBreakerError",
    "CircuitBreakerOpenError",
    # Rate Limit
    "RateLimitError",
    "RateLimitedError",
    # Menu
    "MenuError",
    "MenuConfigMissingError",
]
