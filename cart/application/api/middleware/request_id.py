"""
Request ID Middleware

Binds an X-Request-ID (taken from the request or generated) to the logging
context for the duration of the request and echoes it on the response.
"""

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from cart.core.config.constants import HEADER_REQUEST_ID
from cart.core.logging.logger import clear_request_id, set_request_id


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)
        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response
        finally:
            clear_request_id()
