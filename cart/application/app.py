#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Configures the cart service: lifespan wiring of the order pipeline and the
menu, middleware, exception handlers and routes.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cart.application.api.middleware.error_handler import ErrorHandlingMiddleware
from cart.application.api.middleware.request_id import RequestIdMiddleware
from cart.application.api.routes.admin import router as admin_router
from cart.application.api.routes.cart import router as cart_router
from cart.application.api.routes.health import router as health_router
from cart.application.services.order_service import OrderService
from cart.core.config.constants import HEADER_REQUEST_ID
from cart.core.config.settings import Settings, get_settings
from cart.core.events import RefreshEvent, RefreshEventBus
from cart.core.exceptions import CartBaseError, PersistenceError
from cart.core.logging.logger import get_logger, get_request_id, setup_logging
from cart.core.resilience import CircuitBreaker, RateLimiter, RetryPolicy
from cart.core.tasks import BackgroundTaskRegistry
from cart.infrastructure.database.coffee_store import CoffeeStore
from cart.infrastructure.database.engine import Database
from cart.infrastructure.database.order_store import OrderStore
from cart.infrastructure.monitoring.metrics_collector import get_metrics_collector
from cart.menu.refresh_coordinator import RefreshCoordinator
from cart.menu.state import MenuState
from cart.orders.outbound_pipeline import OutboundPipeline
from cart.orders.points_sink import PointsSinkClient

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).

    Startup builds every singleton, stores it on `app.state`, and publishes
    APPLICATION_READY last so the first menu is installed from fully wired
    components. Shutdown drains background work before closing the HTTP
    client and the database engine.
    """
    settings: Settings = app.state.settings

    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting Cart Service",
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
    )

    database = Database.from_settings(settings)
    http_client = httpx.AsyncClient(
        timeout=settings.cart.POINTS_SINK_TIMEOUT,
        transport=app.state.http_transport,
    )
    tasks = BackgroundTaskRegistry()

    try:
        await database.create_schema()
        logger.info("Database ready", url=database.url)

        metrics = get_metrics_collector()

        circuit_breaker = None
        if settings.circuit_breaker.CB_ENABLED:
            circuit_breaker = CircuitBreaker.from_settings(settings)
            circuit_breaker.add_state_listener(
                lambda name, _from, to: metrics.set_circuit_state(name, to.value)
            )
            metrics.set_circuit_state(circuit_breaker.name, circuit_breaker.state.value)

        rate_limiter = RateLimiter.from_settings(settings) if settings.rate_limiter.RL_ENABLED else None

        pipeline = OutboundPipeline(
            order_store=OrderStore(database.engine),
            sink=PointsSinkClient(http_client, settings.cart.CART_POINTS_SINK_URL),
            circuit_breaker=circuit_breaker,
            rate_limiter=rate_limiter,
            retry_policy=RetryPolicy.from_settings(settings),
        )
        logger.info(
            "Outbound pipeline ready",
            circuit_breaker=circuit_breaker is not None,
            rate_limiter=rate_limiter is not None,
            retry_max_attempts=pipeline.retry_policy.max_attempts,
        )

        menu_state = MenuState()
        event_bus = RefreshEventBus()
        coordinator = RefreshCoordinator(
            menu_state,
            config_source=lambda: app.state.settings.CART_COFFEES,
            coffee_store=CoffeeStore(database.engine) if settings.cart.MENU_PERSISTENCE_ENABLED else None,
            tasks=tasks,
        )
        coordinator.register(event_bus)

        app.state.database = database
        app.state.tasks = tasks
        app.state.pipeline = pipeline
        app.state.order_service = OrderService(
            pipeline, tasks, await_points_sync=settings.cart.AWAIT_POINTS_SYNC
        )
        app.state.menu_state = menu_state
        app.state.event_bus = event_bus

        await event_bus.publish(RefreshEvent.APPLICATION_READY)
        logger.info("Application startup complete", coffees=menu_state.names())

        yield

    finally:
        logger.info("Shutting down application")

        await tasks.drain(timeout=settings.app.SHUTDOWN_DRAIN_TIMEOUT)
        await http_client.aclose()
        await database.dispose()

        logger.info("Application shutdown complete")


# ============================================================================
# Exception Handlers
# ============================================================================


async def persistence_exception_handler(request: Request, exc: PersistenceError):
    """Order could not be stored: the one failure a client ever sees."""
    logger.error("Persistence failure", error=exc.message, details=exc.details)
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
        headers={HEADER_REQUEST_ID: exc.request_id or get_request_id() or ""},
    )


async def cart_exception_handler(request: Request, exc: CartBaseError):
    logger.error(f"Cart exception: {exc.message}", error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
        headers={HEADER_REQUEST_ID: exc.request_id or get_request_id() or ""},
    )


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    settings: Settings | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to start from; defaults to the settings
                  singleton. POST /admin/refresh replaces it with a fresh
                  read of the environment.
        http_transport: Transport for the points sink client (tests pass an
                        httpx.MockTransport)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Coffee cart: menu, orders and loyalty points forwarding",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.http_transport = http_transport

    # Last added runs first: request id is bound before errors are logged
    app.add_middleware(
        ErrorHandlingMiddleware,
        include_traceback=(settings.app.ENVIRONMENT == "development"),
    )
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(PersistenceError, persistence_exception_handler)
    app.add_exception_handler(CartBaseError, cart_exception_handler)

    base_path = settings.app.API_BASE_PATH
    app.include_router(cart_router, prefix=base_path)
    app.include_router(admin_router, prefix=base_path)
    app.include_router(health_router, prefix=base_path)

    return app


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "cart.application.app:create_app",
        factory=True,
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )
