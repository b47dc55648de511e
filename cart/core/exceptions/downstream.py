"""
Downstream (points sink) Exceptions

Errors raised by the points sink client. Retry and circuit breaker
classification is keyed on these classes:

- DownstreamServerError: 5xx response, retried, counted as breaker failure
- DownstreamClientError: other non-2xx response, not retried, not a failure
- DownstreamTransportError: connection failure or timeout, retried
"""

from cart.core.exceptions.base import CartBaseError


class DownstreamError(CartBaseError):
    """Base exception for points sink errors."""
    pass


class DownstreamServerError(DownstreamError):
    """The points sink answered with a status in [500, 600)."""

    def __init__(self, message: str, status_code: int, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.details.setdefault("status_code", status_code)


class DownstreamClientError(DownstreamError):
    """The points sink answered with a non-2xx, non-5xx status."""

    def __init__(self, message: str, status_code: int, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.details.setdefault("status_code", status_code)


class DownstreamTransportError(DownstreamError):
    """The request never produced a response (connect error, timeout)."""
    pass
