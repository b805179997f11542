"""In-memory per-IP rate limiting."""

from __future__ import annotations

import logging
import time
from collections import defaultdict, deque
from typing import Callable, Deque

from fastapi import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class RateLimitMiddleware:
    """Sliding window limiter keyed on client IP.

    Counts are per process; several workers each enforce their own window.
    """

    def __init__(self, app: Callable, limit: int, window_seconds: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.app = app
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[str, Deque[float]] = defaultdict(deque)

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        client_ip = request.client.host if request.client else "unknown"
        now = self._clock()

        request_times = self._requests[client_ip]
        while request_times and request_times[0] <= now - self.window_seconds:
            request_times.popleft()

        if len(request_times) >= self.limit:
            logger.warning("rate_limited", extra={"client_ip": client_ip, "path": request.url.path})
            response = JSONResponse({"detail": "Rate limit exceeded"}, status_code=429)
            await response(scope, receive, send)
            return

        request_times.append(now)
        await self.app(scope, receive, send)
