"""Simple in-memory rate limiter for API endpoints."""

import threading
import time
from collections import defaultdict
from typing import Any, Dict, Tuple

from fastapi import HTTPException, Request

from profile_assistant.core.config import get_settings
from profile_assistant.core.logging import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Simple token bucket rate limiter.

    Tracks requests per key (e.g., client address) and enforces limits.
    Uses in-memory storage, so limits are per process.
    """

    def __init__(self, max_requests: int, window_seconds: float, message: str):
        """
        Initialize rate limiter.

        Args:
            max_requests: Requests allowed per window (also the burst size)
            window_seconds: Window length in seconds
            message: Detail returned with 429 responses
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self.refill_rate = max_requests / window_seconds  # tokens per second
        self._lock = threading.Lock()

        # Storage: key -> (tokens, last_refill_time)
        self._buckets: Dict[str, Tuple[float, float]] = defaultdict(
            lambda: (float(max_requests), time.time())
        )

    def _refill_bucket(self, key: str) -> None:
        current_tokens, last_refill = self._buckets[key]
        now = time.time()

        elapsed = now - last_refill
        new_tokens = min(self.max_requests, current_tokens + elapsed * self.refill_rate)

        self._buckets[key] = (new_tokens, now)

    def check_limit(self, key: str, cost: float = 1.0) -> bool:
        """
        Check if request is allowed under rate limit.

        Args:
            key: Rate limit key
            cost: Token cost for this request (default 1.0)

        Returns:
            True if allowed

        Raises:
            HTTPException: 429 if rate limited
        """
        with self._lock:
            self._refill_bucket(key)
            current_tokens, last_refill = self._buckets[key]

            if current_tokens >= cost:
                self._buckets[key] = (current_tokens - cost, last_refill)
                return True

            retry_after = int((cost - current_tokens) / self.refill_rate) + 1

        logger.warning(f"Rate limit exceeded for key: {key}, retry after: {retry_after}s")

        raise HTTPException(
            status_code=429,
            detail={
                "error": "Too Many Requests",
                "message": self.message,
                "retryAfter": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )

    def get_stats(self, key: str) -> Dict[str, Any]:
        with self._lock:
            self._refill_bucket(key)
            current_tokens, _ = self._buckets[key]
        return {
            "tokens_remaining": int(current_tokens),
            "max_requests": self.max_requests,
            "window_seconds": self.window_seconds,
        }

    def reset(self, key: str | None = None) -> None:
        """Reset one key, or every key when none is given."""
        with self._lock:
            if key is None:
                self._buckets.clear()
            else:
                self._buckets.pop(key, None)


# Global rate limiter instances
chat_rate_limiter = RateLimiter(
    max_requests=20,
    window_seconds=60,
    message="Too many chat requests, please slow down.",
)
data_read_rate_limiter = RateLimiter(
    max_requests=50,
    window_seconds=60,
    message="Too many data reading requests, please slow down.",
)
data_write_rate_limiter = RateLimiter(
    max_requests=10,
    window_seconds=5 * 60,
    message="Too many data modification requests, please try again later.",
)


def _client_key(request: Request, bucket: str) -> str:
    host = request.client.host if request.client else "unknown"
    return f"{bucket}:{host}"


def _check(limiter: RateLimiter, request: Request, bucket: str) -> None:
    if not get_settings().RATE_LIMIT_ENABLED:
        return
    limiter.check_limit(_client_key(request, bucket))


def limit_chat(request: Request) -> None:
    """FastAPI dependency: chat rate limit."""
    _check(chat_rate_limiter, request, "chat")


def limit_data_read(request: Request) -> None:
    """FastAPI dependency: profile read rate limit."""
    _check(data_read_rate_limiter, request, "read")


def limit_data_write(request: Request) -> None:
    """FastAPI dependency: profile modification rate limit."""
    _check(data_write_rate_limiter, request, "write")
