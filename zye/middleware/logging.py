"""
Logging Middleware for Request/Response Logging

This middleware logs all HTTP requests and responses for observability.
It captures:
- Request method and path
- Response status code
- Request processing time
- Client IP address
- Short code and resolution outcome, when a link route handled the request

Design Decisions:
- Uses Starlette's BaseHTTPMiddleware for compatibility
- Logs to standard Python logging (configured in zye.core.logging)
- Query strings are not logged; they may carry the preview flag only,
  but paths are enough to trace a resolution
"""

import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from zye.core.network import get_client_ip

logger = logging.getLogger("zye")


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    It wraps the request/response cycle to add logging without
    modifying endpoint code.
    """

    async def dispatch(self, request: Request, call_next):
        """
        Process request and log details.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware/endpoint in the chain

        Returns:
            Response object
        """
        client_ip = get_client_ip(request)

        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time

        # Format: METHOD PATH STATUS_CODE PROCESS_TIME_MS CLIENT_IP [CODE OUTCOME]
        message = (
            f"{request.method} {request.url.path} "
            f"{response.status_code} {process_time*1000:.2f}ms "
            f"IP:{client_ip}"
        )
        short_code = getattr(request.state, "short_code", None)
        if short_code is not None:
            message += f" code:{short_code} outcome:{request.state.outcome}"
        logger.info(message)

        response.headers["X-Process-Time"] = str(process_time)

        return response


def add_logging_middleware(app):
    """
    Add logging middleware to FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(LoggingMiddleware)
