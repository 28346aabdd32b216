"""Fixed-window rate limiting for sensitive operations.

Each limiter counts hits per key inside a window that starts at the first
hit. Once the window has passed the counter starts over. Limiters are plain
objects held in a registry so tests can reset them and the application can
sweep expired windows on a timer.
"""

import asyncio
import math
import threading
import time
from dataclasses import dataclass

from fastapi import Request

from pizzeria.config import get_settings
from pizzeria.identity.access import optional_user_id
from pizzeria.shared.errors import RateLimited
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class _Window:
    attempts: int
    reset_at: float


class RateLimiter:
    def __init__(self, max_attempts: int, window_seconds: float, clock=time.monotonic) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> None:
        """Count one attempt for ``key``; raise RateLimited once the budget is spent."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                self._windows[key] = _Window(attempts=1, reset_at=now + self.window_seconds)
                return

            if window.attempts >= self.max_attempts:
                retry_after = max(math.ceil(window.reset_at - now), 1)
                logger.warning("rate_limited", key=key, retry_after=retry_after)
                raise RateLimited(retry_after=retry_after)

            window.attempts += 1

    def sweep(self) -> int:
        """Drop expired windows. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, window in self._windows.items() if now > window.reset_at]
            for key in expired:
                del self._windows[key]
        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
_limiters: dict[str, RateLimiter] = {}
_registry_lock = threading.Lock()


def get_limiter(name: str) -> RateLimiter:
    with _registry_lock:
        limiter = _limiters.get(name)
        if limiter is None:
            settings = get_settings()
            limiter = _limiters[name] = RateLimiter(
                settings.rate_limit_attempts,
                settings.rate_limit_window_seconds,
            )
        return limiter


def set_limiter(name: str, limiter: RateLimiter) -> None:
    with _registry_lock:
        _limiters[name] = limiter


def reset_limiters() -> None:
    with _registry_lock:
        _limiters.clear()


def sweep_all() -> int:
    with _registry_lock:
        limiters = list(_limiters.values())
    removed = sum(limiter.sweep() for limiter in limiters)
    if removed:
        logger.debug("rate_limit_swept", removed=removed)
    return removed


async def sweep_periodically(interval_seconds: float) -> None:
    """Background task started with the application lifespan."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            sweep_all()
        except Exception:
            logger.exception("rate_limit_sweep_failed")


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------
def limit_key(ip: str | None, user_id: str | None) -> str:
    return f"{ip or 'unknown'}_{user_id or 'anonymous'}"


def rate_limit(name: str):
    """Dependency factory: ``Depends(rate_limit("forgot-password"))``."""

    async def _dependency(request: Request) -> None:
        ip = request.client.host if request.client else None
        get_limiter(name).hit(limit_key(ip, optional_user_id(request)))

    return _dependency
