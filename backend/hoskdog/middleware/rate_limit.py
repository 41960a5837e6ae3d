"""Per-client request rate limiting for the ``/api`` surface."""

from __future__ import annotations

import logging
import time
from typing import Iterable

from limits import RateLimitItemPerMinute
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

LOGGER = logging.getLogger(__name__)

API_LIMIT = RateLimitItemPerMinute(10)
SLURP_LIMIT = RateLimitItemPerMinute(3, 5)

STORAGE = MemoryStorage()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Moving-window limits keyed by client IP; slurp paths get the stricter limit."""

    def __init__(self, app, prefix: str = "/api", exempt: Iterable[str] = ("/api/health",)):
        super().__init__(app)
        self.prefix = prefix
        self.exempt = set(exempt)
        self.limiter = MovingWindowRateLimiter(STORAGE)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith(self.prefix) or path in self.exempt:
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        namespace, item = ("slurp", SLURP_LIMIT) if "/slurp" in path else ("api", API_LIMIT)
        if not self.limiter.hit(item, namespace, client):
            return self._reject(item, namespace, client, path)
        return await call_next(request)

    def _reject(self, item, namespace: str, client: str, path: str) -> JSONResponse:
        stats = self.limiter.get_window_stats(item, namespace, client)
        retry_after = max(1, round(stats.reset_time - time.time()))
        LOGGER.warning("Rate limit (%s) exceeded for %s on %s", namespace, client, path)
        return JSONResponse(
            status_code=429,
            content={
                "error": "Too many requests",
                "message": f"Rate limit exceeded. Try again in {retry_after} seconds.",
                "retryAfter": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )


__all__ = ["API_LIMIT", "SLURP_LIMIT", "STORAGE", "RateLimitMiddleware"]
