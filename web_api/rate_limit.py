"""Per-IP throttling for the login endpoint.

Every login can cost three LMS round trips, so brute-forcing passwords
through the proxy is kept slow.
"""

import time
from collections import defaultdict
from typing import Callable

from fastapi import HTTPException, Request

from core.config import get_login_rate_limit


def client_ip(request: Request) -> str:
    """Client IP, taking the first X-Forwarded-For hop behind a reverse proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """
    Sliding-window rate limiter keyed by client IP.

    Args:
        max_requests: Returns the allowed requests per window; read on
            every check so configuration changes apply immediately.
        window_seconds: Time window in seconds.
        clock: Monotonic time source.
    """

    def __init__(
        self,
        max_requests: Callable[[], int],
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # {ip: [timestamp, ...]}, only IPs seen within the window
        self._requests: dict[str, list[float]] = defaultdict(list)

    def __len__(self) -> int:
        return len(self._requests)

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        for ip in list(self._requests):
            recent = [t for t in self._requests[ip] if t > cutoff]
            if recent:
                self._requests[ip] = recent
            else:
                del self._requests[ip]

    def check(self, request: Request) -> None:
        """Record a request, or raise 429 if the client is over the limit."""
        now = self._clock()
        self._prune(now)

        ip = client_ip(request)
        if len(self._requests.get(ip, [])) >= self.max_requests():
            raise HTTPException(status_code=429, detail="Too many requests")
        self._requests[ip].append(now)

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._requests.clear()


login_limiter = RateLimiter(max_requests=get_login_rate_limit, window_seconds=60)
