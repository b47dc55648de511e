"""
Retry with Exponential Backoff (Tenacity)

Attempt n+1 waits `initial_delay * 2 ** (n - 1)` seconds, capped at
`max_delay`, plus an optional random jitter.

Only failures that a later attempt can fix are retried:
- DownstreamServerError (5xx)
- DownstreamTransportError (connect failure, timeout)

RateLimitedError and CircuitBreakerOpenError are local, terminal decisions
and DownstreamClientError will not change on repeat, so none of them are
retried.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from cart.core.config.constants import Stage
from cart.core.config.settings import Settings
from cart.core.exceptions import DownstreamServerError, DownstreamTransportError
from cart.core.logging.logger import get_logger, log_stage

RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    DownstreamServerError,
    DownstreamTransportError,
)

logger = get_logger(__name__)


def log_retry_scheduled(retry_state: RetryCallState) -> None:
    """Tenacity before_sleep hook: one structured line per scheduled retry."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    log_stage(
        logger,
        Stage.RETRY,
        "retry_scheduled",
        level="warning",
        attempt=retry_state.attempt_number,
        delay=round(retry_state.next_action.sleep, 4) if retry_state.next_action else None,
        error_type=type(exc).__name__ if exc else None,
        error=str(exc) if exc else None,
    )


class RetryPolicy:
    """
    Factory for per-call tenacity retry controllers.

    A fresh AsyncRetrying is built for every call so concurrent orders never
    share retry state.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: float = 0.0,
        retry_exceptions: tuple[type[BaseException], ...] = RETRYABLE_EXCEPTIONS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")

        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.retry_exceptions = retry_exceptions
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RetryPolicy":
        retry = settings.retry
        return cls(
            max_attempts=retry.RETRY_MAX_ATTEMPTS if retry.RETRY_ENABLED else 1,
            initial_delay=retry.RETRY_INITIAL_DELAY,
            max_delay=retry.RETRY_MAX_DELAY,
            jitter=retry.RETRY_JITTER,
            **kwargs,
        )

    def backoff(self, attempt_number: int) -> float:
        """Delay (without jitter) before the attempt following `attempt_number`."""
        return min(self.initial_delay * 2 ** (attempt_number - 1), self.max_delay)

    def _build(self) -> AsyncRetrying:
        wait = wait_exponential(multiplier=self.initial_delay, exp_base=2, max=self.max_delay)
        if self.jitter > 0:
            wait = wait + wait_random(0, self.jitter)

        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait,
            retry=retry_if_exception_type(self.retry_exceptions),
            before_sleep=log_retry_scheduled,
            sleep=self._sleep,
            reraise=True,
        )

    async def call(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Run `func`, retrying retryable failures; re-raises the last error."""
        return await self._build()(func, *args, **kwargs)
