"""
FastAPI middleware for the shop API.
"""

import logging
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import request_id_var

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique request ID to each request.

    The ID is available in request.state.request_id, stamped on every log
    line written while the request is handled, and returned in the
    X-Request-ID header, so storefront errors can be matched to server logs.
    """

    async def dispatch(self, request: Request, call_next):
        # Use the caller's ID when the storefront or a proxy already set one
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response = await call_next(request)

            response.headers["X-Request-ID"] = request_id
            if response.status_code >= 500:
                logger.error(
                    "Request %s %s failed with %d",
                    request.method,
                    request.url.path,
                    response.status_code,
                )
            return response
        finally:
            request_id_var.reset(token)
