"""
Application Services Package
=============================

Business logic used by API routes, kept apart from HTTP handling.
"""

from cart.application.services.order_service import OrderService

__all__ = ["OrderService"]
