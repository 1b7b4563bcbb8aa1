"""Rate limiting module using fixed-window counters.

Enforces a per-client request budget keyed by client identifier (the
caller's IP address). Each client owns one window: the first request opens
it with count=1, later requests increment the count until the limit is
reached, and the first request after the window ends replaces it with a
fresh one. Denied requests do not increment the count.

Window state lives behind a RateLimitStore so single-process deployments
can keep it in memory while multi-process deployments share it through an
external keyed store (see src/security/dynamodb_ratelimit.py). The whole
check-then-increment step is one store operation, ``increment``, so every
store must make it atomic with respect to concurrent callers.

The in-memory store is never swept unless RateLimiter.sweep() is called;
entries otherwise live for the lifetime of the process.
"""

import math
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from src.config.settings import get_settings


@dataclass
class RateWindow:
    count: int
    window_end: float  # epoch seconds


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int  # whole seconds until the window resets; 0 when allowed


class RateLimitStore(ABC):
    """Abstract keyed storage for rate windows."""

    @abstractmethod
    async def increment(
        self, client_id: str, now: float, window_seconds: float, limit: int
    ) -> tuple[bool, RateWindow]:
        """Atomically count one request against the client's window.

        Opens a new window (count=1) when the client has none or its window
        ended before ``now``; otherwise increments the count if it is below
        ``limit``. A full window is left untouched.

        Returns:
            (allowed, window) where window is the client's window after the call.
        """
        ...

    @abstractmethod
    async def get(self, client_id: str) -> RateWindow | None:
        """Return the client's current window, or None if it has none."""
        ...

    @abstractmethod
    async def set(self, client_id: str, window: RateWindow) -> None:
        ...

    @abstractmethod
    async def purge_expired(self, now: float) -> int:
        """Remove windows that ended before ``now``. Returns how many were removed."""
        ...


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local store. ``increment`` never suspends, so it is atomic per event loop."""

    def __init__(self):
        self._windows: dict[str, RateWindow] = {}

    async def increment(
        self, client_id: str, now: float, window_seconds: float, limit: int
    ) -> tuple[bool, RateWindow]:
        window = self._windows.get(client_id)
        if window is None or now > window.window_end:
            window = RateWindow(count=1, window_end=now + window_seconds)
            self._windows[client_id] = window
            return True, window
        if window.count < limit:
            window.count += 1
            return True, window
        return False, window

    async def get(self, client_id: str) -> RateWindow | None:
        return self._windows.get(client_id)

    async def set(self, client_id: str, window: RateWindow) -> None:
        self._windows[client_id] = window

    async def purge_expired(self, now: float) -> int:
        expired = [cid for cid, w in self._windows.items() if now > w.window_end]
        for cid in expired:
            del self._windows[cid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)


class RateLimiter:
    """Fixed-window request counter per client."""

    def __init__(
        self,
        store: RateLimitStore,
        limit: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock

    async def check(self, client_id: str) -> RateLimitResult:
        """Record a request for ``client_id`` and decide whether it is allowed."""
        now = self._clock()
        allowed, window = await self.store.increment(
            client_id, now, self.window_seconds, self.limit,
        )

        if allowed:
            return RateLimitResult(
                allowed=True,
                limit=self.limit,
                remaining=max(0, self.limit - window.count),
                retry_after=0,
            )

        retry_after = math.ceil(window.window_end - now)
        retry_after = min(max(retry_after, 0), math.ceil(self.window_seconds))
        return RateLimitResult(allowed=False, limit=self.limit, remaining=0, retry_after=retry_after)

    async def sweep(self) -> int:
        """Drop windows that have already ended."""
        return await self.store.purge_expired(self._clock())


_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get the rate limiter singleton, backed by the configured store."""
    global _limiter
    if _limiter is not None:
        return _limiter

    settings = get_settings()
    if settings.rate_limit_backend == "dynamodb":
        # Lazy import to avoid pulling in boto3 for in-memory setups
        from src.security.dynamodb_ratelimit import DynamoDBRateLimitStore
        store: RateLimitStore = DynamoDBRateLimitStore(
            table_name=settings.dynamodb_table_name,
            region=settings.aws_region,
        )
    else:
        store = InMemoryRateLimitStore()

    _limiter = RateLimiter(
        store=store,
        limit=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    return _limiter
