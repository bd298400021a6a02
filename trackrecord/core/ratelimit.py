"""Per-client request rate tracking (process-local, single instance only)."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from trackrecord.core.constants import (
    LIMITER_IDLE_TIMEOUT_SECONDS,
    LIMITER_SWEEP_INTERVAL_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass
class TokenBucket:
    """Refills at ``rate`` tokens/second up to ``capacity``; starts full."""

    rate: float
    capacity: float
    tokens: float
    updated_at: float
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def allow(self, now: float) -> bool:
        with self.lock:
            elapsed = max(0.0, now - self.updated_at)
            self.updated_at = now
            self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
            if self.tokens >= 1:
                self.tokens -= 1
                return True
            return False


@dataclass
class ClientState:
    bucket: TokenBucket
    last_seen: float


class ClientRateTracker:
    """
    Tracks one token bucket per client address.

    With the defaults (2 rps, burst 1) a new client gets one request
    immediately and then one more every 500ms; excess requests are
    rejected, never queued. Clients idle for longer than ``idle_timeout``
    are dropped by ``sweep()``, which ``start()`` runs periodically.
    """

    def __init__(
        self,
        rps: float = 2.0,
        burst: int = 1,
        idle_timeout: float = LIMITER_IDLE_TIMEOUT_SECONDS,
        sweep_interval: float = LIMITER_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rps = rps
        self.burst = burst
        self.idle_timeout = idle_timeout
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._clients: dict[str, ClientState] = {}
        self._mu = threading.Lock()
        self._sweeper: asyncio.Task | None = None

    def __contains__(self, address: str) -> bool:
        with self._mu:
            return address in self._clients

    def __len__(self) -> int:
        with self._mu:
            return len(self._clients)

    def allow(self, address: str) -> bool:
        now = self._clock()
        with self._mu:
            state = self._clients.get(address)
            if state is None:
                bucket = TokenBucket(rate=self.rps, capacity=self.burst, tokens=self.burst, updated_at=now)
                state = self._clients[address] = ClientState(bucket=bucket, last_seen=now)
            state.last_seen = now
        # Token check happens outside the map lock
        return state.bucket.allow(now)

    def sweep(self) -> int:
        """Drop clients not seen within the idle timeout. Returns how many were removed."""
        cutoff = self._clock() - self.idle_timeout
        with self._mu:
            stale = [addr for addr, state in self._clients.items() if state.last_seen < cutoff]
            for addr in stale:
                del self._clients[addr]
        if stale:
            logger.debug("rate limiter evicted %d idle clients", len(stale))
        return len(stale)

    async def run_sweeper(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    def start(self) -> None:
        if self._sweeper is None:
            self._sweeper = asyncio.get_running_loop().create_task(self.run_sweeper())

    async def stop(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        with self._mu:
            self._clients.clear()
