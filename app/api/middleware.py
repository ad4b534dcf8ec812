"""
app/api/middleware.py

Request-level middleware: per-client rate limiting.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from app.services.errors import RateLimitExceededError
from app.services.rate_limiter import FixedWindowRateLimiter


def get_client_identity(request: Request) -> str:
    """
    First X-Forwarded-For entry, else the peer address, else ``"unknown"``.
    """

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Admit or reject every request through the app's rate limiter.

    Limit headers are set on every response, not only on rejections.
    """

    def __init__(self, app, limiter: FixedWindowRateLimiter) -> None:
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        key = get_client_identity(request)

        try:
            decision = self.limiter.check(key)
        except RateLimitExceededError as exc:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": str(exc)},
                headers={
                    "Retry-After": str(exc.retry_after_seconds),
                    "X-RateLimit-Limit": str(exc.limit),
                    "X-RateLimit-Remaining": str(exc.remaining),
                    "X-RateLimit-Reset": str(exc.reset_time_ms),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Reset"] = str(decision.reset_time_ms)
        return response
