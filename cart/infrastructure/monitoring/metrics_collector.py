#!/usr/bin/env python3
"""
Metrics Collector with Prometheus Integration

Counters and gauges for the cart service:
- Orders persisted
- Points notification outcomes and sink responses
- Circuit breaker state and rate limiter rejections
- Menu refreshes and menu size
"""


from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from cart.core.logging.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

ORDERS_PERSISTED = Counter(
    'cart_orders_persisted_total',
    'Orders written to cafe_orders',
)

POINTS_SYNC = Counter(
    'cart_points_sync_total',
    'Terminal outcome of points notifications',
    ['outcome']
)

POINTS_SINK_RESPONSES = Counter(
    'cart_points_sink_responses_total',
    'Points sink responses by status class',
    ['status_class']  # 2xx, 4xx, 5xx, transport
)

POINTS_SINK_LATENCY = Histogram(
    'cart_points_sink_latency_seconds',
    'Points sink call latency',
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

CIRCUIT_BREAKER_STATE = Gauge(
    'cart_circuit_breaker_state',
    'Circuit breaker state (0=closed, 1=half_open, 2=open)',
    ['name']
)

RATE_LIMIT_REJECTIONS = Counter(
    'cart_rate_limit_rejections_total',
    'Outbound calls refused by the rate limiter',
    ['name']
)

MENU_REFRESHES = Counter(
    'cart_menu_refresh_total',
    'Menu refresh attempts by result',
    ['result']  # installed, config_missing, failed
)

MENU_SIZE = Gauge(
    'cart_menu_size',
    'Number of coffees in the published menu'
)

UNHANDLED_ERRORS = Counter(
    'cart_unhandled_errors_total',
    'Exceptions that reached the error handling middleware',
    ['error_type']
)


class MetricsCollector:
    """
    Centralized metrics collector.

    Usage:
        metrics = get_metrics_collector()
        metrics.record_points_sync("delivered")
        output = metrics.get_prometheus_metrics()
    """

    def record_order_persisted(self) -> None:
        ORDERS_PERSISTED.inc()

    def record_points_sync(self, outcome: str) -> None:
        POINTS_SYNC.labels(outcome=outcome).inc()

    def record_sink_response(self, status_code: int | None, duration_seconds: float) -> None:
        """Record a sink response; `status_code=None` means no response arrived."""
        status_class = "transport" if status_code is None else f"{status_code // 100}xx"
        POINTS_SINK_RESPONSES.labels(status_class=status_class).inc()
        POINTS_SINK_LATENCY.observe(duration_seconds)

    def set_circuit_state(self, name: str, state: str) -> None:
        state_value = {"closed": 0, "half_open": 1, "open": 2}.get(state, 0)
        CIRCUIT_BREAKER_STATE.labels(name=name).set(state_value)

    def record_rate_limit_rejection(self, name: str) -> None:
        RATE_LIMIT_REJECTIONS.labels(name=name).inc()

    def record_menu_refresh(self, result: str) -> None:
        MENU_REFRESHES.labels(result=result).inc()

    def set_menu_size(self, size: int) -> None:
        MENU_SIZE.set(size)

    def record_unhandled_error(self, error_type: str) -> None:
        UNHANDLED_ERRORS.labels(error_type=error_type).inc()

    # =========================================================================
    # Export
    # =========================================================================

    def get_prometheus_metrics(self) -> bytes:
        """Prometheus text format metrics."""
        return generate_latest(REGISTRY)

    def get_content_type(self) -> str:
        return CONTENT_TYPE_LATEST


# Global metrics collector
_metrics: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
        logger.info("metrics_collector_initialized")
    return _metrics
