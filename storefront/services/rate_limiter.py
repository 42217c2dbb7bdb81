# storefront/services/rate_limiter.py
import threading
import time
from dataclasses import dataclass

import redis

from storefront.utils.logging import get_logger
from storefront.utils.retry import redis_retry
from storefront.utils.settings import (
    RATE_LIMIT_BACKEND,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    REDIS_URL,
)

logger = get_logger(__name__)

#INCR + PEXPIRE przy pierwszym trafieniu, wszystko atomowo w jednym skrypcie lua
_HIT_LUA = """
local current = redis.call('INCR', KEYS[1])
if current == 1 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
end
return {current, redis.call('PTTL', KEYS[1])}
"""


@dataclass(frozen=True)
class WindowHit:
    count: int
    reset_in: float  # seconds until the window resets


class MemoryWindowStore:
    """Per-process fixed windows: client -> (count, window reset time)."""

    def __init__(self, clock=time.monotonic):
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._next_sweep = 0.0

    def _sweep(self, now: float, window_seconds: int):
        # klienci z wygaslym oknem nie zostaja w pamieci
        if now < self._next_sweep:
            return
        expired = [k for k, (_, reset_at) in self._windows.items() if now >= reset_at]
        for k in expired:
            del self._windows[k]
        self._next_sweep = now + window_seconds

    def hit(self, key: str, window_seconds: int) -> WindowHit:
        now = self._clock()
        with self._lock:
            self._sweep(now, window_seconds)
            count, reset_at = self._windows.get(key, (0, 0.0))
            if now >= reset_at:
                count, reset_at = 0, now + window_seconds
            count += 1
            self._windows[key] = (count, reset_at)
        return WindowHit(count=count, reset_in=max(reset_at - now, 0.0))

    def reset(self):
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


class RedisWindowStore:
    """Shared fixed windows, so every API instance counts against the same limit."""

    def __init__(self, url: str | None = None, prefix: str = "ratelimit", client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.prefix = prefix
        self._script = self.redis.register_script(_HIT_LUA)

    @redis_retry()
    def hit(self, key: str, window_seconds: int) -> WindowHit:
        count, ttl_ms = self._script(keys=[f"{self.prefix}:{key}"], args=[window_seconds * 1000])
        return WindowHit(count=int(count), reset_in=max(int(ttl_ms), 0) / 1000)


class RateLimiter:
    def __init__(
        self,
        store=None,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
    ):
        self.store = store if store is not None else build_store(RATE_LIMIT_BACKEND)
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    def check(self, client: str) -> tuple[bool, WindowHit]:
        hit = self.store.hit(client, self.window_seconds)
        allowed = hit.count <= self.max_requests
        if not allowed:
            logger.warning(f"Rate limit exceeded for {client}: {hit.count}/{self.max_requests}")
        return allowed, hit


def build_store(backend: str):
    if backend == "redis":
        return RedisWindowStore()
    if backend == "memory":
        return MemoryWindowStore()
    raise ValueError(f"Unknown rate limit backend: {backend}")
