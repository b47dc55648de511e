"""
Core Module

Cross-cutting building blocks of the cart service:

- **config/**: Pydantic settings and constants
- **exceptions/**: Exception hierarchy
- **logging/**: structlog configuration
- **resilience/**: Circuit breaker, rate limiter, retry policy
- **events.py**: Refresh event channel
- **tasks.py**: Background task registry
"""
