"""
Outbound Points Pipeline

Composition for one order, from the order outward:

    1. persist          OrderStore.save(order)               (may raise PersistenceError)
    2. build payload    {username, amount = quantity}
    3. POST             PointsSinkClient.post_points
    4. swallow          terminal failures logged, None returned
    5. retry            RetryPolicy around each guarded attempt
    6. rate limiter     one permit per attempt
    7. circuit breaker  admission checked before the rate limiter

A guarded attempt is: breaker admission -> limiter permit -> POST -> breaker
records the outcome. The breaker goes first because it is the cheapest check
and must reject before a permit is consumed; the limiter must admit before
any network I/O. Retry sits outside the gates so every retry goes through
both of them and consumes its own permit.

Only persistence can fail an order. `send` never raises for downstream
reasons: circuit open, rate limited, exhausted retries, client errors and
anything unexpected end as a single log line and a None result.
"""

import asyncio

from cart.core.config.constants import (
    CIRCUIT_BREAKER_NAME,
    RATE_LIMITER_NAME,
    Stage,
    SyncOutcome,
)
from cart.core.exceptions import (
    CircuitBreakerOpenError,
    DownstreamClientError,
    DownstreamServerError,
    DownstreamTransportError,
    RateLimitedError,
)
from cart.core.logging.logger import get_logger, log_stage
from cart.core.resilience import CircuitBreaker, RateLimiter, RetryPolicy
from cart.infrastructure.database.order_store import OrderStore
from cart.infrastructure.monitoring.metrics_collector import get_metrics_collector
from cart.orders.models import Order, PointsPayload
from cart.orders.points_sink import PointsSinkClient

logger = get_logger(__name__)


class OutboundPipeline:
    """
    Persists orders and forwards their loyalty points under the resilience gates.

    Either gate may be None (deployment variants without a limiter or a
    breaker). Without a retry policy a single attempt is made.
    """

    def __init__(
        self,
        order_store: OrderStore,
        sink: PointsSinkClient,
        circuit_breaker: CircuitBreaker | None = None,
        rate_limiter: RateLimiter | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        self._order_store = order_store
        self._sink = sink
        self.circuit_breaker = circuit_breaker
        self.rate_limiter = rate_limiter
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=1)
        self._metrics = get_metrics_collector()

    # ------------------------------------------------------------------
    # Step 1
    # ------------------------------------------------------------------

    async def persist(self, order: Order) -> Order:
        """Save the order; PersistenceError propagates to the caller."""
        saved = await self._order_store.save(order)
        self._metrics.record_order_persisted()
        log_stage(
            logger,
            Stage.PERSIST_ORDER,
            "order_persisted",
            order_id=saved.id,
            coffee=saved.coffee,
            username=saved.username,
            quantity=saved.quantity,
        )
        return saved

    # ------------------------------------------------------------------
    # Steps 2-7
    # ------------------------------------------------------------------

    async def send(self, order: Order) -> str | None:
        """
        Notify the points sink for a persisted order.

        Returns:
            The sink's response body, or None when the notification was
            dropped. Never raises for downstream reasons.
        """
        payload = PointsPayload.from_order(order)
        log_stage(logger, Stage.BUILD_PAYLOAD, "points_payload_built", order_id=order.id, amount=payload.amount)

        try:
            body = await self.retry_policy.call(self._guarded_attempt, payload, order.id)
        except CircuitBreakerOpenError as e:
            return self._swallow(order, SyncOutcome.CIRCUIT_OPEN, e, level="warning")
        except RateLimitedError as e:
            self._metrics.record_rate_limit_rejection(RATE_LIMITER_NAME)
            return self._swallow(order, SyncOutcome.RATE_LIMITED, e, level="warning")
        except DownstreamServerError as e:
            return self._swallow(order, SyncOutcome.SERVER_ERROR, e)
        except DownstreamTransportError as e:
            return self._swallow(order, SyncOutcome.TRANSPORT_ERROR, e)
        except DownstreamClientError as e:
            return self._swallow(order, SyncOutcome.CLIENT_ERROR, e)
        except Exception as e:
            return self._swallow(order, SyncOutcome.UNEXPECTED_ERROR, e, exc_info=True)

        self._metrics.record_points_sync(SyncOutcome.DELIVERED.value)
        log_stage(logger, Stage.POINTS_POST, "points_delivered", order_id=order.id, username=order.username)
        return body

    async def _guarded_attempt(self, payload: PointsPayload, order_id: int | None) -> str:
        breaker = self.circuit_breaker
        permission = None

        if breaker is not None:
            permission = breaker.acquire_permission()

        if self.rate_limiter is not None:
            try:
                await self.rate_limiter.acquire()
            except BaseException:
                if breaker is not None:
                    breaker.release_permission(permission)
                raise

        log_stage(logger, Stage.POINTS_POST, "points_sink_call", level="debug", order_id=order_id)
        try:
            body = await self._sink.post_points(payload)
        except asyncio.CancelledError:
            if breaker is not None:
                breaker.release_permission(permission)
            raise
        except Exception as e:
            if breaker is not None:
                breaker.on_error(e, permission)
            raise

        if breaker is not None:
            breaker.on_success(permission)
        return body

    def _swallow(
        self,
        order: Order,
        outcome: SyncOutcome,
        exc: Exception,
        level: str = "error",
        exc_info: bool = False,
    ) -> None:
        self._metrics.record_points_sync(outcome.value)
        details = getattr(exc, "details", {})
        log_stage(
            logger,
            Stage.ERROR_SWALLOW,
            "points_sync_dropped",
            level=level,
            order_id=order.id,
            outcome=outcome.value,
            error_type=type(exc).__name__,
            error=str(exc),
            status_code=details.get("status_code"),
            circuit_breaker=CIRCUIT_BREAKER_NAME if outcome == SyncOutcome.CIRCUIT_OPEN else None,
            exc_info=exc_info,
        )
        return None
