"""
Admin Routes
============

Operational endpoints:

- POST /admin/refresh      reload settings from the environment and publish
                           CONFIG_REFRESHED; returns the resulting menu
- GET  /admin/resilience   circuit breaker and rate limiter state
- POST /admin/circuit-breaker/reset
                           force the points sink circuit CLOSED
- GET  /admin/metrics      Prometheus text exposition
"""

from fastapi import APIRouter, HTTPException, Request, Response

from cart.application.api.dependencies import EventBusDep, MenuStateDep, PipelineDep, TasksDep
from cart.application.api.models.admin import RefreshResponse, ResilienceResponse
from cart.core.config.settings import reload_settings
from cart.core.events import RefreshEvent
from cart.core.logging.logger import get_logger
from cart.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_configuration(
    request: Request,
    event_bus: EventBusDep,
    menu_state: MenuStateDep,
):
    """
    Re-read configuration and notify refresh listeners.

    A missing coffee list leaves the current menu in place; the response
    then reports the unchanged menu and version.
    """
    request.app.state.settings = reload_settings()
    logger.info("configuration_reloaded")

    await event_bus.publish(RefreshEvent.CONFIG_REFRESHED)

    return RefreshResponse(menu_version=menu_state.version, coffees=menu_state.names())


@router.get("/resilience", response_model=ResilienceResponse)
async def get_resilience_state(pipeline: PipelineDep, tasks: TasksDep):
    """Snapshot of the outbound gates guarding the points sink."""
    breaker = pipeline.circuit_breaker
    limiter = pipeline.rate_limiter
    return ResilienceResponse(
        circuit_breaker=breaker.metrics() if breaker is not None else None,
        rate_limiter=limiter.metrics() if limiter is not None else None,
        retry_max_attempts=pipeline.retry_policy.max_attempts,
        pending_background_tasks=tasks.pending,
    )


@router.post("/circuit-breaker/reset", response_model=ResilienceResponse)
async def reset_circuit_breaker(pipeline: PipelineDep, tasks: TasksDep):
    """Close the points sink circuit and clear its window."""
    breaker = pipeline.circuit_breaker
    if breaker is None:
        raise HTTPException(status_code=404, detail="Circuit breaker is disabled")

    breaker.reset()
    logger.warning("circuit_breaker_reset", circuit_breaker=breaker.name)
    return await get_resilience_state(pipeline, tasks)


@router.get("/metrics")
async def get_prometheus_metrics():
    """Prometheus scrape endpoint."""
    metrics = get_metrics_collector()
    return Response(content=metrics.get_prometheus_metrics(), media_type=metrics.get_content_type())
