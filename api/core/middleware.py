"""
Request logging middleware.
"""

from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request: method, path, status and duration."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        client = request.client.host if request.client else "-"
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed client=%s method=%s path=%s status=500 duration_ms=%.2f",
                client,
                request.method,
                request.url.path,
                (time.perf_counter() - started) * 1000,
            )
            raise

        logger.info(
            "request client=%s method=%s path=%s status=%s duration_ms=%.2f",
            client,
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
