"""
Middleware for the local converter API: POST throttling and request logging
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Endpoints the front end polls while a job runs
POLLING_SUFFIXES = ("/health", "/progress", "/tools/status")


def is_polling_path(path: str) -> bool:
    return path.endswith(POLLING_SUFFIXES)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window limit on state-changing requests per client.

    Only POSTs count: starting conversions, cancelling, and re-running the
    FFmpeg setup. Reads and polling are never throttled.
    """

    def __init__(self, app, calls: int = 10, period: int = 60):
        super().__init__(app)
        self.calls = calls
        self.period = period
        self.clients: Dict[str, Deque[float]] = defaultdict(deque)

    async def dispatch(self, request: Request, call_next):
        if request.method != "POST":
            return await call_next(request)

        client_ip = request.client.host if request.client is not None else "unknown"
        now = time.monotonic()
        window = self.clients[client_ip]
        while window and window[0] <= now - self.period:
            window.popleft()

        if len(window) >= self.calls:
            logger.warning(
                "Rate limit exceeded for %s on %s", client_ip, request.url.path
            )
            return JSONResponse(
                status_code=429,
                content={
                    "detail": {
                        "error": "Rate limit exceeded",
                        "details": f"Maximum {self.calls} POST requests per {self.period} seconds",
                    }
                },
            )

        window.append(now)
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status and duration.

    Polling endpoints go to DEBUG so a running conversion does not flood the log.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        level = logging.DEBUG if is_polling_path(request.url.path) else logging.INFO
        logger.log(
            level,
            "%s %s -> %d in %.3fs",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response
