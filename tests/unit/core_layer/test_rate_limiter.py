"""
Unit Tests for RateLimiter

Tests window accounting, permit reservation with bounded waits, FIFO order
of waiters and rejection bookkeeping. Time is driven by a FakeClock.
"""

from unittest.mock import AsyncMock

import pytest

from cart.core.config.constants import Stage
from cart.core.exceptions import RateLimitedError
from cart.core.resilience import rate_limiter as rate_limiter_module
from cart.core.resilience.rate_limiter import RateLimiter


@pytest.fixture
def make_limiter(clock, recording_sleep):
    def _make(limit=2, period=1.0, timeout=0.0):
        return RateLimiter(
            "test-rl",
            limit_for_period=limit,
            refresh_period=period,
            timeout=timeout,
            clock=clock,
            sleep=recording_sleep,
        )

    return _make


@pytest.mark.unit
class TestRateLimiterWindows:
    @pytest.mark.asyncio
    async def test_admits_up_to_limit_then_rejects(self, make_limiter):
        limiter = make_limiter(limit=2)

        await limiter.acquire()
        await limiter.acquire()
        with pytest.raises(RateLimitedError) as exc_info:
            await limiter.acquire()

        assert exc_info.value.details["rate_limiter"] == "test-rl"
        assert limiter.metrics()["rejected_calls"] == 1

    @pytest.mark.asyncio
    async def test_permits_reset_at_next_window(self, make_limiter, clock):
        limiter = make_limiter(limit=2)
        await limiter.acquire()
        await limiter.acquire()

        clock.advance(1.0)

        await limiter.acquire()
        assert limiter.metrics()["available_permissions"] == 1

    @pytest.mark.asyncio
    async def test_unused_permits_do_not_accumulate(self, make_limiter, clock):
        limiter = make_limiter(limit=3)

        clock.advance(10.0)

        assert limiter.metrics()["available_permissions"] == 3

    def test_no_window_admits_more_than_limit(self, make_limiter, clock):
        limiter = make_limiter(limit=10)

        for window in range(3):
            admitted = 0
            for _ in range(25):
                try:
                    limiter.reserve()
                    admitted += 1
                except RateLimitedError:
                    pass
            assert admitted == 10, f"window {window}"
            clock.advance(1.0)

    def test_rejection_reserves_nothing(self, make_limiter):
        limiter = make_limiter(limit=1)
        limiter.reserve()

        for _ in range(5):
            with pytest.raises(RateLimitedError):
                limiter.reserve()

        stats = limiter.metrics()
        assert stats["number_of_waiting_calls"] == 0
        assert stats["rejected_calls"] == 5


@pytest.mark.unit
class TestRateLimiterWaiting:
    @pytest.mark.asyncio
    async def test_waits_for_next_window_within_timeout(self, make_limiter, clock, recording_sleep):
        limiter = make_limiter(limit=1, period=1.0, timeout=1.0)
        clock.advance(0.5)

        await limiter.acquire()
        await limiter.acquire()

        assert recording_sleep.delays == [pytest.approx(0.5)]

    def test_waiters_are_served_in_arrival_order(self, make_limiter):
        limiter = make_limiter(limit=1, period=1.0, timeout=5.0)

        waits = [limiter.reserve() for _ in range(4)]

        assert waits == [0.0, pytest.approx(1.0), pytest.approx(2.0), pytest.approx(3.0)]
        assert limiter.metrics()["number_of_waiting_calls"] == 3

    def test_reserved_permits_are_consumed_from_future_windows(self, make_limiter, clock):
        limiter = make_limiter(limit=1, period=1.0, timeout=5.0)
        limiter.reserve()
        limiter.reserve()  # reserves the permit of the second window

        clock.advance(1.0)

        # The second window's permit is already taken
        assert limiter.reserve() == pytest.approx(1.0)

    def test_wait_beyond_timeout_is_rejected(self, make_limiter):
        limiter = make_limiter(limit=1, period=1.0, timeout=0.025)
        limiter.reserve()

        with pytest.raises(RateLimitedError) as exc_info:
            limiter.reserve()

        assert exc_info.value.details["wait_required"] == pytest.approx(1.0)


@pytest.mark.unit
class TestRateLimiterConfiguration:
    def test_from_settings(self, settings):
        limiter = RateLimiter.from_settings(settings)

        assert limiter.name == "points-sink-rl"
        assert limiter.limit_for_period == settings.RL_LIMIT_FOR_PERIOD
        assert limiter.refresh_period == settings.RL_REFRESH_PERIOD
        assert limiter.timeout == settings.RL_TIMEOUT

    @pytest.mark.parametrize("limit, period", [(0, 1.0), (1, 0.0)])
    def test_rejects_invalid_configuration(self, limit, period):
        with pytest.raises(ValueError):
            RateLimiter("bad", limit_for_period=limit, refresh_period=period)


@pytest.mark.unit
class TestRateLimiterLogging:
    @pytest.mark.asyncio
    async def test_waits_and_rejections_are_logged_with_stage(self, clock, monkeypatch):
        entries = []
        monkeypatch.setattr(
            rate_limiter_module,
            "log_stage",
            lambda logger, stage, message, **kwargs: entries.append((stage, message)),
        )
        # Sleeping does not advance the clock, so the reservation stays pending
        limiter = RateLimiter(
            "test-rl", limit_for_period=1, refresh_period=1.0, timeout=1.0, clock=clock, sleep=AsyncMock()
        )

        await limiter.acquire()
        await limiter.acquire()
        with pytest.raises(RateLimitedError):
            await limiter.acquire()

        assert entries == [
            (Stage.RATE_LIMITER, "rate_limiter_waiting"),
            (Stage.RATE_LIMITER, "rate_limiter_rejected"),
        ]
