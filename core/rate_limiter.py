# core/rate_limiter.py

"""
Fixed-window attempt counters.

The login route depends on a CounterStore rather than on module state, so
the backend can be swapped: in-memory for a single instance, Redis when
several instances must share counters.
"""

import time
from abc import ABC, abstractmethod
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request

from core.config import settings
from core.logging_config import logger


class CounterStore(ABC):
    """check(key) records an attempt and says whether it is allowed."""

    def __init__(self, max_attempts: int, window_seconds: int):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    @abstractmethod
    def check(self, key: str) -> bool:
        ...

    @abstractmethod
    def reset(self, key: str) -> None:
        ...


# ============================================================
# In-memory (single process)
# ============================================================
class InMemoryCounterStore(CounterStore):
    """
    The first attempt opens a window; attempts beyond `max_attempts` inside
    it are refused. The window is not extended by refused attempts.
    """

    def __init__(self, max_attempts: int, window_seconds: int, clock: Callable[[], float] = time.time):
        super().__init__(max_attempts, window_seconds)
        self._clock = clock
        self._counters: Dict[str, Tuple[int, float]] = {}
        self._lock = Lock()

    def check(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            self._clear_expired(now)
            current = self._counters.get(key)
            if current is None:
                self._counters[key] = (1, now)
                return True
            count = current[0] + 1
            self._counters[key] = (count, current[1])
            return count <= self.max_attempts

    def _clear_expired(self, now: float) -> None:
        expired = [k for k, (_, started) in self._counters.items() if now - started > self.window_seconds]
        for k in expired:
            del self._counters[k]

    def reset(self, key: str) -> None:
        with self._lock:
            self._counters.pop(key, None)


# ============================================================
# Redis (shared across instances)
# ============================================================
class RedisCounterStore(CounterStore):
    """
    SET NX EX opens the window and INCR counts, in one MULTI/EXEC, so a
    counter never exists without its TTL.
    """

    def __init__(self, client, max_attempts: int, window_seconds: int, prefix: str = "ratelimit:login:"):
        super().__init__(max_attempts, window_seconds)
        self.client = client
        self.prefix = prefix

    def check(self, key: str) -> bool:
        redis_key = f"{self.prefix}{key}"
        pipe = self.client.pipeline()
        pipe.set(redis_key, 0, ex=self.window_seconds, nx=True)
        pipe.incr(redis_key, 1)
        _, count = pipe.execute()
        return int(count) <= self.max_attempts

    def reset(self, key: str) -> None:
        self.client.delete(f"{self.prefix}{key}")


# ============================================================
# Factory + FastAPI dependency
# ============================================================
def build_counter_store(backend: str, max_attempts: int, window_seconds: int, redis_url: Optional[str] = None) -> CounterStore:
    if backend == "redis":
        if not redis_url:
            raise RuntimeError("RATE_LIMIT_BACKEND=redis requires REDIS_URL")
        import redis

        client = redis.Redis.from_url(redis_url)
        logger.info("Login rate limiting backed by Redis")
        return RedisCounterStore(client, max_attempts, window_seconds)
    if backend != "memory":
        raise RuntimeError(f"Unknown RATE_LIMIT_BACKEND: {backend}")
    return InMemoryCounterStore(max_attempts, window_seconds)


_login_store: Optional[CounterStore] = None


def get_login_store() -> CounterStore:
    global _login_store
    if _login_store is None:
        _login_store = build_counter_store(
            settings.RATE_LIMIT_BACKEND,
            settings.LOGIN_RATE_LIMIT_MAX_ATTEMPTS,
            settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS,
            settings.REDIS_URL,
        )
    return _login_store


def set_login_store(store: Optional[CounterStore]) -> None:
    global _login_store
    _login_store = store


def get_client_ip(request: Request) -> str:
    # Check for forwarded IP (common behind proxies)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP (original client)
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def login_rate_key(request: Request, email: str) -> str:
    return f"{get_client_ip(request)}:{email}"
