"""
Rate Limiter

Window-based limiter guarding calls to the points sink.

MECHANISM OF ACTION:
-------------------
1.  **Windows**:
    Time is cut into cycles of `refresh_period`. At the start of every cycle the
    permit count is reset to `limit_for_period`. Unused permits do not carry
    over, so no window ever admits more than `limit_for_period` calls.

2.  **Reservation**:
    A caller that finds no free permit computes how long it would have to wait
    for a permit in a future window, counting the callers already waiting
    ahead of it (the permit count goes negative while permits are reserved).
    - Wait <= timeout: the permit is reserved and the caller sleeps.
    - Wait >  timeout: the caller is refused with `RateLimitedError` and
      nothing is reserved.
    Reservations are made in arrival order, which makes waiters FIFO.

The bookkeeping runs under a lock and never awaits; only the reserved sleep
suspends the caller, so a waiting limiter never blocks the event loop.
"""

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from typing import Any

from cart.core.config.constants import RATE_LIMITER_NAME, Stage
from cart.core.config.settings import Settings
from cart.core.exceptions import RateLimitedError
from cart.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)


class RateLimiter:
    """
    Process-wide limiter: at most `limit_for_period` permits per `refresh_period`.

    Usage:
        limiter = RateLimiter("points-sink-rl", limit_for_period=10,
                              refresh_period=1.0, timeout=0.025)
        await limiter.acquire()   # raises RateLimitedError when refused
    """

    def __init__(
        self,
        name: str,
        limit_for_period: int = 10,
        refresh_period: float = 1.0,
        timeout: float = 0.025,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if limit_for_period <= 0:
            raise ValueError("limit_for_period must be positive")
        if refresh_period <= 0:
            raise ValueError("refresh_period must be positive")

        self.name = name
        self._limit = limit_for_period
        self._period = refresh_period
        self._timeout = timeout
        self._clock = clock
        self._sleep = sleep

        self._lock = threading.Lock()
        self._cycle_start = clock()
        self._permits = limit_for_period
        self._rejected = 0

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RateLimiter":
        rl = settings.rate_limiter
        return cls(
            RATE_LIMITER_NAME,
            limit_for_period=rl.RL_LIMIT_FOR_PERIOD,
            refresh_period=rl.RL_REFRESH_PERIOD,
            timeout=rl.RL_TIMEOUT,
            **kwargs,
        )

    @property
    def limit_for_period(self) -> int:
        return self._limit

    @property
    def refresh_period(self) -> float:
        return self._period

    @property
    def timeout(self) -> float:
        return self._timeout

    def _refresh(self, now: float) -> None:
        """Advance to the cycle containing `now`, resetting permits."""
        elapsed_cycles = int((now - self._cycle_start) // self._period)
        if elapsed_cycles > 0:
            self._cycle_start += elapsed_cycles * self._period
            self._permits = min(self._permits + elapsed_cycles * self._limit, self._limit)

    def _wait_for_permit(self, now: float) -> float:
        if self._permits > 0:
            return 0.0
        until_next_cycle = self._cycle_start + self._period - now
        # Every `limit` reservations ahead of us push us one more cycle out
        full_cycles = (-self._permits) // self._limit
        return until_next_cycle + full_cycles * self._period

    def reserve(self) -> float:
        """
        Reserve a permit and return how long the caller must wait for it.

        Raises:
            RateLimitedError: if the permit cannot be had within the timeout
        """
        with self._lock:
            now = self._clock()
            self._refresh(now)
            wait = self._wait_for_permit(now)
            if wait > self._timeout:
                self._rejected += 1
                log_stage(
                    logger,
                    Stage.RATE_LIMITER,
                    "rate_limiter_rejected",
                    level="warning",
                    rate_limiter=self.name,
                    wait_required=round(wait, 4),
                    timeout=self._timeout,
                )
                raise RateLimitedError(
                    message=f"Rate limiter '{self.name}' does not permit further calls",
                    details={
                        "rate_limiter": self.name,
                        "limit_for_period": self._limit,
                        "wait_required": round(wait, 4),
                        "timeout": self._timeout,
                    },
                )
            self._permits -= 1
            return wait

    async def acquire(self) -> None:
        """
        Acquire one permit, waiting up to `timeout` for the next window.

        Raises:
            RateLimitedError: if refused
        """
        wait = self.reserve()
        if wait > 0:
            log_stage(
                logger,
                Stage.RATE_LIMITER,
                "rate_limiter_waiting",
                level="debug",
                rate_limiter=self.name,
                wait_seconds=round(wait, 4),
            )
            await self._sleep(wait)

    def metrics(self) -> dict[str, Any]:
        """Snapshot of the limiter state."""
        with self._lock:
            self._refresh(self._clock())
            return {
                "name": self.name,
                "available_permissions": max(self._permits, 0),
                "number_of_waiting_calls": max(-self._permits, 0),
                "rejected_calls": self._rejected,
                "limit_for_period": self._limit,
                "refresh_period": self._period,
                "timeout": self._timeout,
            }
