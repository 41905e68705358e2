"""
TechNotes Backend — Rate Limiting Middleware
==============================================

What:  Per-IP sliding window rate limiter.
How:   Keeps a deque of request timestamps per client IP. Expired timestamps
       fall off the left end; a request is refused with 429 while the deque
       already holds `rate_limit_requests` entries.

State is per process. Multi-worker deployments need a shared store.
"""

import logging
import time
from collections import deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings

logger = logging.getLogger(__name__)

SWEEP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Limits are read from settings on every request, so they can be tuned
    without rebuilding the app:
        rate_limit_requests: Max requests per window (default: 100)
        rate_limit_window:   Window length in seconds (default: 3600)
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._hits: Dict[str, Deque[float]] = {}
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window = settings.rate_limit_window

        hits = self._hits.setdefault(client_ip, deque())
        self._expire(hits, now - window)

        if len(hits) >= settings.rate_limit_requests:
            retry_after = int(hits[0] + window - now) + 1
            logger.warning(
                "Rate limit hit for %s: %d requests in the last %ds",
                client_ip, len(hits), window,
            )
            return JSONResponse(
                status_code=429,
                content={"message": f"Too many requests. Retry in {retry_after} seconds."},
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        self._seen += 1
        if self._seen % SWEEP_EVERY == 0:
            self._sweep(now - window)

        return await call_next(request)

    @staticmethod
    def _expire(hits: Deque[float], cutoff: float) -> None:
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def _sweep(self, cutoff: float) -> None:
        """Forget clients whose every request has aged out of the window."""
        for ip in list(self._hits):
            self._expire(self._hits[ip], cutoff)
            if not self._hits[ip]:
                del self._hits[ip]
