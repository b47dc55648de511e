from cart.application.api.middleware.error_handler import ErrorHandlingMiddleware
from cart.application.api.middleware.request_id import RequestIdMiddleware

__all__ = ["ErrorHandlingMiddleware", "RequestIdMiddleware"]
