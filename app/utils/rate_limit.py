import math
from typing import Optional
from fastapi import HTTPException, Request, Response, status
from app import config
from app.utils.cache import MemoryCache, caches
from app.logger import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """Fixed-window request limit per client IP, usable as a FastAPI dependency"""

    def __init__(self, scope: str, max_requests: int, window_seconds: int, message: str,
                 cache: Optional[MemoryCache] = None):
        self.scope = scope
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self.cache = caches["rate_limits"] if cache is None else cache

    def __call__(self, request: Request, response: Response) -> None:
        if not config.RATE_LIMIT_ENABLED:
            return

        client = request.client.host if request.client else "unknown"
        key = f"{self.scope}:{client}"

        window = self.cache.get(key)
        if window is None:
            window = {"count": 0, "reset_at": self.cache.now() + self.window_seconds}
            self.cache.set(key, window, self.window_seconds)
        # Counting in place keeps the entry's first expiry
        window["count"] += 1

        reset_in = max(math.ceil(window["reset_at"] - self.cache.now()), 0)
        headers = {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(max(self.max_requests - window["count"], 0)),
            "RateLimit-Reset": str(reset_in),
        }

        if window["count"] > self.max_requests:
            logger.warning(f"Rate limit '{self.scope}' exceeded by {client}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=self.message,
                headers={**headers, "Retry-After": str(reset_in)},
            )

        response.headers.update(headers)


api_limiter = RateLimiter(
    "api",
    config.RATE_LIMIT_MAX_REQUESTS,
    config.RATE_LIMIT_WINDOW_SECONDS,
    "Too many requests from this IP, please try again later.",
)
booking_limiter = RateLimiter(
    "booking", 10, 60 * 60, "Too many booking attempts, please try again later."
)
auth_limiter = RateLimiter(
    "auth", 5, 15 * 60, "Too many authentication attempts, please try again later."
)
password_reset_limiter = RateLimiter(
    "password_reset", 3, 60 * 60, "Too many password reset attempts, please try again later."
)
