"""
Resilience Module - Outbound Call Protection

Components guarding every call to the points sink:

- CircuitBreaker: fails fast while the sink keeps returning 5xx
- RateLimiter: caps outbound calls per window
- RetryPolicy: exponential backoff for retryable failures

The breaker and limiter are process-wide singletons built once at startup
and shared by every order.
"""

from .circuit_breaker import CircuitBreaker, downstream_failure_predicate
from .rate_limiter import RateLimiter
from .retry import RETRYABLE_EXCEPTIONS, RetryPolicy

__all__ = [
    "CircuitBreaker",
    "downstream_failure_predicate",
    "RateLimiter",
    "RetryPolicy",
    "RETRYABLE_EXCEPTIONS",
]
