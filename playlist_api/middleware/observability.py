"""
Request logging middleware for FastAPI/Starlette.

Features:
- Assign and propagate correlation IDs per request (from X-Request-ID or generated)
- Measure request latency and record status code
- Emit structured logs on request start and end

Headers:
- Reads X-Request-ID (or X-Correlation-ID) as incoming correlation id if provided
- Sets X-Correlation-ID on the response

Enabled via Settings.REQUEST_LOGGING_ENABLED; mounted conditionally in the app.
"""

from __future__ import annotations

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from playlist_api.core.logging import clear_correlation_id, get_logger, set_correlation_id

logger = get_logger("request")


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Middleware to log and measure requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming_cid = request.headers.get("X-Request-ID") or request.headers.get("X-Correlation-ID")
        cid = set_correlation_id(incoming_cid)

        path = request.url.path
        method = request.method
        logger.info("request.start", extra={"method": method, "path": path})

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            logger.exception("Unhandled exception in request", extra={"method": method, "path": path})
            raise
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            logger.info(
                "request.end",
                extra={"method": method, "path": path, "status_code": status_code, "duration_ms": round(duration_ms, 2)},
            )
            clear_correlation_id()

        response.headers["X-Correlation-ID"] = cid
        return response
