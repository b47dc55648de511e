"""
Unit Tests for the Exception Hierarchy
"""

import pytest

from cart.core.exceptions import (
    CartBaseError,
    CircuitBreakerError,
    CircuitBreakerOpenError,
    DownstreamClientError,
    DownstreamError,
    DownstreamServerError,
    DownstreamTransportError,
    MenuConfigMissingError,
    MenuError,
    PersistenceError,
    RateLimitedError,
    RateLimitError,
)


@pytest.mark.unit
class TestCartBaseError:
    def test_to_dict(self):
        error = PersistenceError("Failed to save order", request_id="req-1", details={"table": "cafe_orders"})

        assert error.to_dict() == {
            "error_type": "PersistenceError",
            "message": "Failed to save order",
            "request_id": "req-1",
            "details": {"table": "cafe_orders"},
        }

    def test_details_are_copied(self):
        details = {"a": 1}
        error = CartBaseError("boom", details=details)
        error.with_context(b=2)

        assert details == {"a": 1}
        assert error.details == {"a": 1, "b": 2}

    def test_with_context_chains(self):
        error = CartBaseError("boom").with_context(order_id=7)

        assert isinstance(error, CartBaseError)
        assert error.details["order_id"] == 7

    def test_from_exception_wraps_original(self):
        original = ValueError("disk full")

        error = PersistenceError.from_exception(original, message="Failed to save order", table="cafe_orders")

        assert isinstance(error, PersistenceError)
        assert error.message == "Failed to save order"
        assert error.details == {
            "original_error": "ValueError",
            "original_message": "disk full",
            "table": "cafe_orders",
        }

    def test_from_exception_defaults_message(self):
        error = DownstreamTransportError.from_exception(ConnectionError("refused"))

        assert error.message == "refused"

    def test_repr_includes_context(self):
        error = CartBaseError("boom", request_id="req-9", details={"k": "v"})

        assert repr(error) == "CartBaseError(message='boom', request_id='req-9', details={'k': 'v'})"


@pytest.mark.unit
class TestDownstreamErrors:
    @pytest.mark.parametrize("cls, status", [(DownstreamServerError, 503), (DownstreamClientError, 404)])
    def test_status_code_is_kept(self, cls, status):
        error = cls(f"Points sink returned {status}", status_code=status, details={"sink": "points-sink"})

        assert error.status_code == status
        assert error.details == {"sink": "points-sink", "status_code": status}

    def test_hierarchy(self):
        assert issubclass(DownstreamServerError, DownstreamError)
        assert issubclass(DownstreamClientError, DownstreamError)
        assert issubclass(DownstreamTransportError, DownstreamError)
        assert issubclass(CircuitBreakerOpenError, CircuitBreakerError)
        assert issubclass(RateLimitedError, RateLimitError)
        assert issubclass(MenuConfigMissingError, MenuError)
        for cls in (DownstreamError, CircuitBreakerError, RateLimitError, MenuError, PersistenceError):
            assert issubclass(cls, CartBaseError)
